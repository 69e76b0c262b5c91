"""
Notation tools - MCP tools for turning notation text into notes and back.

Tools for the bar|beat dialect, the legacy flat-sequence dialect, and
formatting note events back into bar|beat text.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_notation.core import TimeSignature
from chuk_mcp_notation.errors import NotationSyntaxError
from chuk_mcp_notation.models import NoteEvent
from chuk_mcp_notation.notation import format_notation, interpret_barbeat, parse_sequence

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_notation_tools(mcp: ChukMCPServer) -> dict[str, Any]:
    """
    Register notation tools with the MCP server.

    Args:
        mcp: The MCP server instance

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def notation_parse_barbeat(notation: str, time_signature: str = "4/4") -> str:
        """
        Parse bar|beat notation into note events.

        Pitches are buffered until a time position emits them. State
        (v velocity, t duration, p probability) persists until changed.

        Args:
            notation: bar|beat text, e.g. "v100 t0.5 C3 E3 G3 1|1 |3"
            time_signature: Time signature like "4/4" or "6/8"

        Returns:
            JSON string with notes (times in quarter-note beats) and warnings

        Example:
            notation_parse_barbeat(notation="C1 1|1,2,3,4 @2=1")
        """
        try:
            signature = TimeSignature.parse(time_signature)
            result = interpret_barbeat(notation, signature)

            return json.dumps(
                {
                    "status": "success",
                    "time_signature": str(signature),
                    "notes": [note.to_dict() for note in result.notes],
                    "count": len(result.notes),
                    "warnings": result.warnings(),
                }
            )
        except NotationSyntaxError as e:
            logger.warning(f"Rejected bar|beat notation: {e}")
            return json.dumps({"status": "error", "message": str(e), "location": e.to_dict()})
        except Exception as e:
            logger.exception("Failed to parse bar|beat notation")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_parse_barbeat"] = notation_parse_barbeat

    @mcp.tool  # type: ignore[arg-type]
    async def notation_parse_sequence(notation: str) -> str:
        """
        Parse the flat-sequence dialect into note events.

        Notes play one after another. Modifiers: v velocity, n duration,
        t time until the next element. Chords in [], rests R, repeats *k,
        voices separated by ';'.

        Args:
            notation: Sequence text, e.g. "C3v90 [E3 G3]n2 R (C4 D4)*2"

        Returns:
            JSON string with notes

        Example:
            notation_parse_sequence(notation="C3 E3 G3; C2n3")
        """
        try:
            notes = parse_sequence(notation)

            return json.dumps(
                {
                    "status": "success",
                    "notes": [note.to_dict() for note in notes],
                    "count": len(notes),
                }
            )
        except NotationSyntaxError as e:
            logger.warning(f"Rejected sequence notation: {e}")
            return json.dumps({"status": "error", "message": str(e), "location": e.to_dict()})
        except Exception as e:
            logger.exception("Failed to parse sequence notation")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_parse_sequence"] = notation_parse_sequence

    @mcp.tool  # type: ignore[arg-type]
    async def notation_format(notes: list[dict[str, Any]], time_signature: str = "4/4") -> str:
        """
        Format note events as bar|beat notation.

        Args:
            notes: Note dicts with pitch, start_time, duration, velocity
                (optional velocity_deviation, probability)
            time_signature: Time signature like "4/4"

        Returns:
            JSON string with the notation text

        Example:
            notation_format(notes=[{"pitch": 60, "start_time": 0, "duration": 1, "velocity": 100}])
        """
        try:
            events = [NoteEvent.model_validate(note) for note in notes]
            text = format_notation(events, TimeSignature.parse(time_signature))

            return json.dumps({"status": "success", "notation": text, "count": len(events)})
        except Exception as e:
            logger.exception("Failed to format notes")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_format"] = notation_format

    return tools
