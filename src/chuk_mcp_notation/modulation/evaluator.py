"""
Modulation evaluator - expression ASTs to numbers.

evaluate_expression walks one expression node. evaluate_modulation runs a
whole modulation text at a single position and folds the assignments into
one {parameter: (operator, value)} map.

Failure policy: an assignment that fails to evaluate is skipped with a
diagnostic and the remaining assignments still run.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field

from chuk_mcp_notation.constants import (
    DiagnosticKind,
    DiagnosticMessages,
    ErrorMessages,
    Operator,
    Parameter,
    VariableNamespace,
)
from chuk_mcp_notation.core.rhythm import TimeSignature
from chuk_mcp_notation.errors import Diagnostic, NotationError, SemanticError, report
from chuk_mcp_notation.modulation.ast import (
    Assignment,
    BinaryOp,
    ExpressionNode,
    FunctionCall,
    Literal,
    Period,
    PitchRange,
    Variable,
)
from chuk_mcp_notation.modulation.functions import FunctionScope, call_function
from chuk_mcp_notation.modulation.parser import parse_modulation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationContext:
    """
    Where and what an expression is evaluated against.

    position and clip_time_range are in musical beats from the clip start.
    audio_vars is only set for audio clips; note_vars holds note.* values.
    """

    position: float = 0.0
    time_signature: TimeSignature = TimeSignature.COMMON_TIME
    clip_time_range: tuple[float, float] | None = None
    note_vars: Mapping[str, float] | None = None
    audio_vars: Mapping[str, float] | None = None

    @property
    def bar_beat(self) -> tuple[int, float]:
        """1-based bar and beat of position."""
        beats_per_bar = self.time_signature.beats_per_bar
        return int(self.position // beats_per_bar) + 1, self.position % beats_per_bar + 1


@dataclass(frozen=True)
class ParameterValue:
    operator: Operator
    value: float

    def to_dict(self) -> dict[str, str | float]:
        return {"operator": self.operator.value, "value": self.value}


@dataclass
class EvaluationResult:
    """Per-parameter results of a modulation text plus diagnostics."""

    values: dict[Parameter, ParameterValue] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, dict[str, str | float]]:
        return {parameter.value: value.to_dict() for parameter, value in self.values.items()}


def evaluate_expression(
    node: ExpressionNode,
    context: EvaluationContext,
    rng: random.Random | None = None,
    time_range: tuple[float, float] | None = None,
) -> float:
    """
    Evaluate one expression node.

    Args:
        node: Expression to evaluate
        context: Position, time signature and variables
        rng: Random source for rand/noise/choose
        time_range: Range ramp/curve run over (defaults to the clip range)

    Returns:
        The numeric value

    Raises:
        SemanticError: Unknown function/variable/node or wrong arity
        RuntimeNumericError: Invalid waveform arguments
    """
    rng = rng or random.Random()
    scope_range = time_range if time_range is not None else context.clip_time_range

    def evaluate(current: ExpressionNode) -> float:
        if isinstance(current, Literal):
            return current.value
        if isinstance(current, BinaryOp):
            left = evaluate(current.left)
            right = evaluate(current.right)
            if current.op == "+":
                return left + right
            if current.op == "-":
                return left - right
            if current.op == "*":
                return left * right
            if current.op == "/":
                return left / right if right != 0 else 0.0
            raise SemanticError(f"Unknown operator: {current.op}")
        if isinstance(current, FunctionCall):
            scope = FunctionScope(
                position=context.position,
                beats_per_bar=context.time_signature.beats_per_bar,
                time_range=scope_range,
                rng=rng,
                evaluate=evaluate,
            )
            return call_function(current.name, current.args, scope)
        if isinstance(current, Variable):
            return _lookup(current, context)
        if isinstance(current, Period):
            return current.to_beats(context.time_signature.beats_per_bar)
        raise SemanticError(ErrorMessages.UNKNOWN_NODE.format(node=type(current).__name__))

    return evaluate(node)


def _lookup(variable: Variable, context: EvaluationContext) -> float:
    if variable.namespace is VariableNamespace.AUDIO:
        if context.audio_vars is None:
            raise SemanticError(ErrorMessages.AUDIO_IN_NOTE_CONTEXT.format(name=variable.name))
        values = context.audio_vars
    else:
        values = context.note_vars or {}

    if variable.name not in values:
        raise SemanticError(
            ErrorMessages.UNKNOWN_VARIABLE.format(namespace=variable.namespace.value, name=variable.name)
        )
    return float(values[variable.name])


def active_time_range(
    assignment: Assignment,
    context: EvaluationContext,
) -> tuple[bool, tuple[float, float] | None]:
    """
    Check an assignment's time range against the context position.

    Returns:
        (applies, range ramp/curve should run over)
    """
    if assignment.time_range is None:
        return True, context.clip_time_range
    bar, beat = context.bar_beat
    if not assignment.time_range.contains(bar, beat):
        return False, None
    return True, assignment.time_range.to_beats(context.time_signature.beats_per_bar)


def combine(previous: ParameterValue | None, operator: Operator, value: float) -> ParameterValue:
    """Fold a later assignment into an earlier one for the same parameter."""
    if previous is None or operator is Operator.SET:
        return ParameterValue(operator, value)
    return ParameterValue(previous.operator, previous.value + value)


def evaluate_modulation(
    text: str,
    context: EvaluationContext,
    rng: random.Random | None = None,
) -> EvaluationResult:
    """
    Evaluate every assignment of a modulation text at one position.

    Assignments whose pitch range excludes note.pitch, or whose time range
    excludes the position, are skipped. Assignments to the same parameter
    apply in document order: '=' replaces, '+=' accumulates.

    Raises:
        NotationSyntaxError: If the text does not parse
    """
    rng = rng or random.Random()
    result = EvaluationResult()
    pitch = (context.note_vars or {}).get("pitch")
    pitch_range: PitchRange | None = None

    for assignment in parse_modulation(text):
        pitch_range = assignment.pitch_range or pitch_range
        if pitch_range is not None and pitch is not None and not pitch_range.contains(int(pitch)):
            continue

        applies, time_range = active_time_range(assignment, context)
        if not applies:
            continue

        try:
            value = evaluate_expression(assignment.expression, context, rng, time_range)
        except NotationError as e:
            result.diagnostics.append(
                report(
                    logger,
                    DiagnosticKind.EVALUATION,
                    DiagnosticMessages.EVALUATION_FAILED.format(
                        parameter=assignment.parameter.value, error=e
                    ),
                )
            )
            continue

        previous = result.values.get(assignment.parameter)
        result.values[assignment.parameter] = combine(previous, assignment.operator, value)

    return result
