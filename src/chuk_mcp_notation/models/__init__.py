"""
Data models for notation input and output.

- NoteEvent: a timestamped note, the terminal output of every pipeline
- InterpretResult: notes plus non-fatal diagnostics
- Directive types: the token stream of the bar|beat parser
- TransformPreset: a named modulation text loaded from YAML
"""

from chuk_mcp_notation.models.directive import (
    ClearCopyBuffer,
    CopyRange,
    Directive,
    DurationState,
    Pitch,
    ProbabilityState,
    TimeList,
    TimePosition,
    VelocityRangeState,
    VelocityState,
)
from chuk_mcp_notation.models.note import InterpretResult, NoteEvent
from chuk_mcp_notation.models.preset import PresetMetadata, TransformPreset

__all__ = [
    # Note
    "NoteEvent",
    "InterpretResult",
    # Directive
    "Directive",
    "TimePosition",
    "TimeList",
    "VelocityState",
    "VelocityRangeState",
    "DurationState",
    "ProbabilityState",
    "Pitch",
    "CopyRange",
    "ClearCopyBuffer",
    # Preset
    "TransformPreset",
    "PresetMetadata",
]
