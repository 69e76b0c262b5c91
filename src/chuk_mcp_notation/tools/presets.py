"""
Preset tools - MCP tools for transform preset discovery and use.

Tools for listing presets, describing them, applying them to notes,
and copying library presets into the project for customization.
"""

from __future__ import annotations

import json
import logging
import random
from typing import TYPE_CHECKING, Any

from chuk_mcp_notation.core import TimeSignature
from chuk_mcp_notation.models import NoteEvent
from chuk_mcp_notation.modulation import TransformApplier
from chuk_mcp_notation.presets import PresetLoader

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_preset_tools(mcp: ChukMCPServer, preset_loader: PresetLoader) -> dict[str, Any]:
    """
    Register preset tools with the MCP server.

    Args:
        mcp: The MCP server instance
        preset_loader: The preset loader

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def notation_list_presets(tag: str | None = None) -> str:
        """
        List available transform presets.

        Args:
            tag: Only list presets with this tag (e.g. "velocity")

        Returns:
            JSON string with list of preset summaries

        Example:
            notation_list_presets(tag="timing")
        """
        try:
            presets = preset_loader.list_presets(tag)

            return json.dumps(
                {
                    "status": "success",
                    "presets": [p.model_dump() for p in presets],
                    "count": len(presets),
                }
            )
        except Exception as e:
            logger.exception("Failed to list presets")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_list_presets"] = notation_list_presets

    @mcp.tool  # type: ignore[arg-type]
    async def notation_describe_preset(name: str) -> str:
        """
        Get a preset including its transform text.

        Args:
            name: Preset name

        Returns:
            JSON string with preset details

        Example:
            notation_describe_preset(name="humanize")
        """
        try:
            preset = preset_loader.get_preset(name)
            if preset is None:
                return json.dumps({"status": "error", "message": f"Preset not found: {name}"})

            return json.dumps({"status": "success", "preset": preset.model_dump()})
        except Exception as e:
            logger.exception(f"Failed to describe preset {name}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_describe_preset"] = notation_describe_preset

    @mcp.tool  # type: ignore[arg-type]
    async def notation_apply_preset(
        name: str,
        notes: list[dict[str, Any]],
        time_signature: str | None = None,
        seed: int | None = None,
    ) -> str:
        """
        Apply a preset's transform to notes.

        Args:
            name: Preset name
            notes: Note dicts with pitch, start_time, duration, velocity
            time_signature: Overrides the preset's time signature
            seed: Seed for rand/noise/choose

        Returns:
            JSON string with transformed notes and warnings

        Example:
            notation_apply_preset(name="humanize", notes=[...], seed=7)
        """
        try:
            preset = preset_loader.get_preset(name)
            if preset is None:
                return json.dumps({"status": "error", "message": f"Preset not found: {name}"})

            events = [NoteEvent.model_validate(n) for n in notes]
            signature = TimeSignature.parse(time_signature or preset.time_signature)
            result = TransformApplier(rng=random.Random(seed)).apply(
                events, preset.transform, signature
            )

            return json.dumps(
                {
                    "status": "success",
                    "preset": preset.name,
                    "notes": [n.to_dict() for n in result.notes],
                    "count": len(result.notes),
                    "warnings": result.warnings(),
                }
            )
        except Exception as e:
            logger.exception(f"Failed to apply preset {name}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_apply_preset"] = notation_apply_preset

    @mcp.tool  # type: ignore[arg-type]
    async def notation_copy_preset_to_project(name: str) -> str:
        """
        Copy a library preset into the project for customization.

        Args:
            name: Preset name

        Returns:
            JSON string with the path of the copied file

        Example:
            notation_copy_preset_to_project(name="swing-feel")
        """
        try:
            path = preset_loader.copy_to_project(name)
            if path is None:
                return json.dumps({"status": "error", "message": f"Preset not found: {name}"})

            return json.dumps(
                {
                    "status": "success",
                    "message": f"Copied preset {name} to project",
                    "path": str(path),
                }
            )
        except Exception as e:
            logger.exception(f"Failed to copy preset {name}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["notation_copy_preset_to_project"] = notation_copy_preset_to_project

    return tools
