"""
Modulation expressions - parameter changes computed from musical time.

- parser: modulation text to Assignment ASTs
- waveforms / functions: the closed function library
- evaluator: ASTs evaluated at a position
- transform: assignments applied to note events
"""

from chuk_mcp_notation.modulation.ast import Assignment, PitchRange, TimeRange
from chuk_mcp_notation.modulation.evaluator import (
    EvaluationContext,
    EvaluationResult,
    ParameterValue,
    evaluate_expression,
    evaluate_modulation,
)
from chuk_mcp_notation.modulation.functions import FUNCTIONS
from chuk_mcp_notation.modulation.parser import ModulationParser, parse_modulation
from chuk_mcp_notation.modulation.transform import (
    TransformApplier,
    TransformResult,
    apply_transform,
)

__all__ = [
    # AST
    "Assignment",
    "PitchRange",
    "TimeRange",
    # Parsing
    "ModulationParser",
    "parse_modulation",
    # Evaluation
    "FUNCTIONS",
    "EvaluationContext",
    "EvaluationResult",
    "ParameterValue",
    "evaluate_expression",
    "evaluate_modulation",
    # Transforms
    "TransformApplier",
    "TransformResult",
    "apply_transform",
]
