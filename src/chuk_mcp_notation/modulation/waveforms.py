"""
Waveforms - pure functions of phase.

Phase is the fractional position (0-1) within one cycle. Periodic shapes
wrap phases outside that range. ramp and curve take the phase across a
time range instead of a period.
"""

from __future__ import annotations

import math
import random


def cos(phase: float) -> float:
    """Cosine, 1 at phase 0."""
    return math.cos(2 * math.pi * phase)


def sin(phase: float) -> float:
    """Sine, 0 at phase 0."""
    return math.sin(2 * math.pi * phase)


def tri(phase: float) -> float:
    """Triangle: 0 -> 1 -> 0 -> -1 at quarter-cycle steps."""
    p = phase % 1
    if p < 0.25:
        return 4 * p
    if p < 0.75:
        return 2 - 4 * p
    return 4 * p - 4


def saw(phase: float) -> float:
    """Sawtooth rising from -1 to 1, 0 at phase 0, wrapping to -1 at half."""
    return 2 * ((phase + 0.5) % 1) - 1


def square(phase: float, pulse_width: float = 0.5) -> float:
    """+1 for the first pulse_width of the cycle, -1 for the rest."""
    return 1.0 if phase % 1 < pulse_width else -1.0


def ramp(phase: float, start: float, end: float, speed: float = 1.0) -> float:
    """Linear start to end, repeating speed times across the phase range."""
    return start + (end - start) * ((phase * speed) % 1)


def curve(phase: float, start: float, end: float, exponent: float) -> float:
    """Exponential start to end over one phase range, holding at end."""
    if phase >= 1:
        return end
    return start + (end - start) * max(phase, 0.0) ** exponent


def noise(rng: random.Random) -> float:
    """Uniform random value in [-1, 1]."""
    return rng.uniform(-1.0, 1.0)
