"""
Constants and enums for the notation system.

No magic strings - use enums for constrained values.
"""

from enum import Enum

# MIDI domain
MIDI_MIN = 0
MIDI_MAX = 127

# bar|beat dialect defaults
DEFAULT_VELOCITY = 100
DEFAULT_VELOCITY_DEVIATION = 0
DEFAULT_DURATION = 1.0
DEFAULT_PROBABILITY = 1.0
DEFAULT_BEATS_PER_BAR = 4
DEFAULT_TIME_SIGNATURE = "4/4"

# Legacy flat-sequence dialect defaults
SEQUENCE_DEFAULT_VELOCITY = 70
SEQUENCE_DEFAULT_DURATION = 1.0

# Two time positions closer than this are the same position
TIME_EPSILON = 0.001

# Smallest duration a transform may leave on a note
MIN_NOTE_DURATION = 0.001


class Parameter(str, Enum):
    """Note parameters a modulation assignment can target."""

    VELOCITY = "velocity"
    TIMING = "timing"
    DURATION = "duration"
    PROBABILITY = "probability"


class Operator(str, Enum):
    """Assignment operators."""

    SET = "set"  # =
    ADD = "add"  # +=


class VariableNamespace(str, Enum):
    """Namespaces a variable reference may use."""

    NOTE = "note"
    AUDIO = "audio"


class DiagnosticKind(str, Enum):
    """Categories of non-fatal diagnostics."""

    ORPHAN_PITCHES = "orphan_pitches"
    EMPTY_TIME_POSITION = "empty_time_position"
    INEFFECTIVE_STATE = "ineffective_state"
    COPY = "copy"
    CLAMPED = "clamped"
    EVALUATION = "evaluation"


class ErrorMessages:
    """Error message templates."""

    PITCH_OUT_OF_RANGE = "MIDI pitch {pitch} ({name}) outside valid range 0-127"
    VELOCITY_OUT_OF_RANGE = "MIDI velocity {velocity} outside valid range 0-127"
    PROBABILITY_OUT_OF_RANGE = "Note probability {probability} outside valid range 0.0-1.0"
    BAR_TOO_SMALL = "Bar number must be 1 or greater, got: {bar}"
    BEAT_TOO_SMALL = "Beat must be 1 or greater, got: {beat}"
    DIVISION_BY_ZERO = "Invalid {kind} format: division by zero in \"{text}\""
    INVALID_FORMAT = "Invalid {kind} format: \"{text}\""
    NEGATIVE_DURATION = "Beats in duration must be 0 or greater, got: {beats}"
    NEGATIVE_BARS = "Bars in duration must be 0 or greater, got: {bars}"
    PIPE_IN_DURATION = (
        "Invalid duration format: \"{text}\". Use ':' for bar:beat format, not '|'"
    )
    PARTIAL_TIME_SIGNATURE = (
        "Time signature must be specified with both numerator and denominator"
    )
    DEPRECATED_COLON = (
        "The ':' assignment operator is deprecated, use '=' or '+=' instead"
    )
    INVALID_PITCH_RANGE = "Invalid pitch range {start}-{end}: start must not be above end"
    UNKNOWN_FUNCTION = "Unknown function: {name}()"
    UNKNOWN_VARIABLE = "Variable \"{namespace}.{name}\" is not available in this context"
    AUDIO_IN_NOTE_CONTEXT = "cannot use audio.{name} in MIDI note context"
    UNKNOWN_NODE = "Unknown expression node type: {node}"
    NON_POSITIVE_PERIOD = "Function {name}() period must be > 0, got {period}"
    NON_FINITE = "Function {name}() produced a non-finite result"


class DiagnosticMessages:
    """Diagnostic message templates."""

    ORPHAN_PITCHES = "{count} pitch(es) buffered but no time position to emit them"
    EMPTY_TIME_POSITION = "Time position {position} has no pitches"
    INEFFECTIVE_STATE = (
        "state change after pitch(es) but before time position won't affect this group"
    )
    COPY_SELF = "Cannot copy bar {bar} to itself, skipping"
    COPY_EMPTY = "Bar {bar} is empty, nothing to copy"
    COPY_NO_SOURCE = "Cannot copy to bar {bar}: there is no previous bar"
    CLAMPED = "{parameter} {value} clamped to {clamped} for note at {start}"
    EVALUATION_FAILED = "Failed to evaluate {parameter}: {error}"
    EVALUATION_FAILED_FOR_NOTE = "Failed to evaluate {parameter} for note at {start}: {error}"
