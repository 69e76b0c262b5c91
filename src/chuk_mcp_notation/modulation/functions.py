"""
Function library for modulation expressions.

Functions receive unevaluated argument nodes so they can check arity
before evaluating anything, and so periodic functions can read a period
literal directly. Names are resolved here at evaluation time.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass

from chuk_mcp_notation.constants import ErrorMessages
from chuk_mcp_notation.errors import RuntimeNumericError, SemanticError
from chuk_mcp_notation.modulation import waveforms
from chuk_mcp_notation.modulation.ast import ExpressionNode, Period


@dataclass(frozen=True)
class FunctionScope:
    """What a function can see while it is evaluated."""

    position: float
    beats_per_bar: int
    time_range: tuple[float, float] | None
    rng: random.Random
    evaluate: Callable[[ExpressionNode], float]


Handler = Callable[[str, tuple[ExpressionNode, ...], FunctionScope], float]


def _require(name: str, args: tuple[ExpressionNode, ...], low: int, high: float, usage: str) -> None:
    if low <= len(args) <= high:
        return
    if low == high:
        count = f"exactly {low} argument{'s' if low != 1 else ''}"
    elif high == math.inf:
        count = f"at least {low} argument{'s' if low != 1 else ''}"
    else:
        count = f"{low} to {high} arguments"
    raise SemanticError(f"Function {name}() requires {count}: {usage}, got {len(args)}")


def _period(name: str, node: ExpressionNode, scope: FunctionScope) -> float:
    if isinstance(node, Period):
        period = node.to_beats(scope.beats_per_bar)
    else:
        period = scope.evaluate(node)
    if not period > 0:
        raise RuntimeNumericError(ErrorMessages.NON_POSITIVE_PERIOD.format(name=name, period=period))
    return period


def _phase(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    phase = (scope.position / _period(name, args[0], scope)) % 1
    if len(args) > 1:
        phase += scope.evaluate(args[1])
    return phase


def _periodic(shape: Callable[[float], float]) -> Handler:
    def handler(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
        _require(name, args, 1, 2, f"{name}(period, phase?)")
        return shape(_phase(name, args, scope))

    return handler


def _square(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 1, 3, "square(period, phase?, pulseWidth?)")
    phase = _phase(name, args[:2], scope)
    pulse_width = scope.evaluate(args[2]) if len(args) > 2 else 0.5
    return waveforms.square(phase, pulse_width)


def _range_phase(name: str, scope: FunctionScope) -> float:
    if scope.time_range is None:
        raise SemanticError(f"Function {name}() needs a time range or clip range to ramp over")
    start, end = scope.time_range
    span = end - start
    return (scope.position - start) / span if span > 0 else 0.0


def _ramp(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 2, 3, "ramp(start, end, speed?)")
    start = scope.evaluate(args[0])
    end = scope.evaluate(args[1])
    speed = scope.evaluate(args[2]) if len(args) > 2 else 1.0
    if speed <= 0:
        raise RuntimeNumericError(f"Function ramp() speed must be > 0, got {speed}")
    return waveforms.ramp(_range_phase(name, scope), start, end, speed)


def _curve(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 3, 3, "curve(start, end, exponent)")
    start, end, exponent = (scope.evaluate(arg) for arg in args)
    if exponent <= 0:
        raise RuntimeNumericError(f"Function curve() exponent must be > 0, got {exponent}")
    return waveforms.curve(_range_phase(name, scope), start, end, exponent)


def _rand(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 0, 2, "rand(), rand(max) or rand(min, max)")
    if not args:
        return scope.rng.uniform(-1.0, 1.0)
    if len(args) == 1:
        return scope.rng.uniform(0.0, scope.evaluate(args[0]))
    return scope.rng.uniform(scope.evaluate(args[0]), scope.evaluate(args[1]))


def _noise(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 0, 0, "noise()")
    return waveforms.noise(scope.rng)


def _choose(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 1, math.inf, "choose(value, ...)")
    if len(args) == 1:
        return scope.evaluate(args[0])
    return scope.evaluate(args[scope.rng.randrange(len(args))])


def _clamp(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 3, 3, "clamp(value, min, max)")
    value, low, high = (scope.evaluate(arg) for arg in args)
    low, high = min(low, high), max(low, high)
    return max(low, min(high, value))


def _binary(fn: Callable[[float, float], float], usage: str) -> Handler:
    def handler(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
        _require(name, args, 2, 2, usage)
        return fn(scope.evaluate(args[0]), scope.evaluate(args[1]))

    return handler


def _unary(fn: Callable[[float], float]) -> Handler:
    def handler(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
        _require(name, args, 1, 1, f"{name}(value)")
        try:
            return float(fn(scope.evaluate(args[0])))
        except (ValueError, OverflowError):
            raise RuntimeNumericError(ErrorMessages.NON_FINITE.format(name=name)) from None

    return handler


def _pow(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    _require(name, args, 2, 2, "pow(base, exponent)")
    base = scope.evaluate(args[0])
    exponent = scope.evaluate(args[1])
    try:
        result = math.pow(base, exponent)
    except (ValueError, OverflowError, ZeroDivisionError):
        raise RuntimeNumericError(ErrorMessages.NON_FINITE.format(name=name)) from None
    if not math.isfinite(result):
        raise RuntimeNumericError(ErrorMessages.NON_FINITE.format(name=name))
    return result


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


FUNCTIONS: dict[str, Handler] = {
    "cos": _periodic(waveforms.cos),
    "sin": _periodic(waveforms.sin),
    "tri": _periodic(waveforms.tri),
    "saw": _periodic(waveforms.saw),
    "square": _square,
    "ramp": _ramp,
    "curve": _curve,
    "rand": _rand,
    "noise": _noise,
    "choose": _choose,
    "clamp": _clamp,
    "min": _binary(min, "min(a, b)"),
    "max": _binary(max, "max(a, b)"),
    "pow": _pow,
    "floor": _unary(math.floor),
    "ceil": _unary(math.ceil),
    "abs": _unary(abs),
    "round": _unary(_round_half_up),
}


def call_function(name: str, args: tuple[ExpressionNode, ...], scope: FunctionScope) -> float:
    """
    Call a named function.

    Raises:
        SemanticError: Unknown name or wrong arity
        RuntimeNumericError: Invalid period/argument or non-finite result
    """
    handler = FUNCTIONS.get(name)
    if handler is None:
        raise SemanticError(ErrorMessages.UNKNOWN_FUNCTION.format(name=name))
    return handler(name, args, scope)
