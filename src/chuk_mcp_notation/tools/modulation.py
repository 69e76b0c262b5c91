"""
Modulation tools - MCP tools for evaluating and applying modulation text.

A modulation is one assignment per line, e.g. "velocity += 20 * cos(1:0t)".
Evaluation returns parameter deltas at one position; applying a transform
rewrites a list of notes.
"""

from __future__ import annotations

import json
import logging
import random
from typing import TYPE_CHECKING, Any

from chuk_mcp_notation.core import TimeSignature
from chuk_mcp_notation.errors import NotationSyntaxError
from chuk_mcp_notation.models import NoteEvent
from chuk_mcp_notation.modulation import EvaluationContext, TransformApplier, evaluate_modulation

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_modulation_tools(mcp: ChukMCPServer) -> dict[str, Any]:
    """
    Register modulation tools with the MCP server.

    Args:
        mcp: The MCP server instance

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def notation_evaluate_modulation(
        modulation: str,
        position: float = 0.0,
        time_signature: str = "4/4",
        clip_start: float | None = None,
        clip_end: float | None = None,
        note: dict[str, float] | None = None,
        audio: dict[str, float] | None = None,
        seed: int | None = None,
    ) -> str:
        """
        Evaluate modulation text at one position.

        Args:
            modulation: Modulation text, one assignment per line
            position: Position in beats from the clip start
            time_signature: Time signature like "4/4"
            clip_start: Clip range start in beats (needed by ramp/curve)
            clip_end: Clip range end in beats
            note: Values for note.* variables (pitch, velocity, ...)
            audio: Values for audio.* variables; marks an audio clip context
            seed: Seed for rand/noise/choose

        Returns:
            JSON string with {parameter: {operator, value}} and warnings

        Example:
            notation_evaluate_modulation(modulation="velocity = ramp(0, 1)", position=2,
                                         clip_start=0, clip_end=4)
        """
        try:
            clip_range = None
            if clip_start is not None and clip_end is not None:
                clip_range = (clip_start, clip_end)

            context = EvaluationContext(
                position=position,
                time_signature=TimeSignature.parse(time_signature),
                clip_time_range=clip_range,
                note_vars=note,
                audio_vars=audio,
            )
            result = evaluate_modulation(modulation, context, random.Random(seed))

            return json.dumps(
                {
                    "status": "success",
                    "values": result.to_dict(),
                    "warnings": [d.message for d in result.diagnostics],
                }
            )
        except NotationSyntaxError as e:
            logger.warning(f"Rejected modulation: {e}")
            return json.dumps({"status": "error", "message": str(e), "location": e.to_dict()})
        except Exception as e:
            logger.exception("Failed to evaluate modulation")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_evaluate_modulation"] = notation_evaluate_modulation

    @mcp.tool  # type: ignore[arg-type]
    async def notation_apply_transform(
        notes: list[dict[str, Any]],
        transform: str,
        time_signature: str = "4/4",
        seed: int | None = None,
    ) -> str:
        """
        Apply a transform to notes.

        Each line may be scoped by pitch and time range, e.g.
        "C1-C2 1|1-2|4 velocity += 10". note.* variables are bound per note.
        Notes whose velocity drops below 1 are removed.

        Args:
            notes: Note dicts with pitch, start_time, duration, velocity
            transform: Modulation text
            time_signature: Time signature like "4/4"
            seed: Seed for rand/noise/choose

        Returns:
            JSON string with transformed notes and warnings

        Example:
            notation_apply_transform(notes=[...], transform="velocity += rand(-8, 8)", seed=1)
        """
        try:
            events = [NoteEvent.model_validate(n) for n in notes]
            applier = TransformApplier(rng=random.Random(seed))
            result = applier.apply(events, transform, TimeSignature.parse(time_signature))

            return json.dumps(
                {
                    "status": "success",
                    "notes": [n.to_dict() for n in result.notes],
                    "count": len(result.notes),
                    "removed": len(events) - len(result.notes),
                    "warnings": result.warnings(),
                }
            )
        except NotationSyntaxError as e:
            logger.warning(f"Rejected transform: {e}")
            return json.dumps({"status": "error", "message": str(e), "location": e.to_dict()})
        except Exception as e:
            logger.exception("Failed to apply transform")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_apply_transform"] = notation_apply_transform

    return tools
