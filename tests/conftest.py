"""
Pytest configuration and shared fixtures.
"""

import random
import tempfile
from pathlib import Path

import pytest

from chuk_mcp_notation.models import NoteEvent


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so rand/noise/choose are repeatable."""
    return random.Random(42)


@pytest.fixture
def four_quarter_notes() -> list[NoteEvent]:
    """C3 D3 E3 F3 on the four beats of bar 1, velocity 100."""
    return [
        NoteEvent(pitch=pitch, start_time=float(index), duration=1.0, velocity=100)
        for index, pitch in enumerate((60, 62, 64, 65))
    ]
