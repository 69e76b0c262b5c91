#!/usr/bin/env python3
"""
Async Notation MCP Server using chuk-mcp-server

This server provides MCP tools for compact music notations. Notation text
becomes timestamped note events; modulation text turns into parameter
changes over musical time.

The server provides tools for:
- Parsing bar|beat notation and the flat-sequence dialect into notes
- Formatting notes back into bar|beat notation
- Evaluating modulation expressions and applying transforms to notes
- Transform preset discovery and customization
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_notation.presets import PresetLoader
from chuk_mcp_notation.tools import (
    register_modulation_tools,
    register_notation_tools,
    register_preset_tools,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-notation")

# Paths - project presets default to ./presets
BASE_PATH = Path.cwd()
PRESETS_DIR = Path(os.environ.get("CHUK_NOTATION_PRESETS_DIR", BASE_PATH / "presets"))
PRESETS_LIBRARY_PATH = Path(__file__).parent / "presets" / "library"

preset_loader = PresetLoader(
    library_path=PRESETS_LIBRARY_PATH,
    project_path=PRESETS_DIR,
)

# Register all tools
notation_tools = register_notation_tools(mcp)
modulation_tools = register_modulation_tools(mcp)
preset_tools = register_preset_tools(mcp, preset_loader)

# Export tool functions for direct access
notation_parse_barbeat = notation_tools["notation_parse_barbeat"]
notation_parse_sequence = notation_tools["notation_parse_sequence"]
notation_format = notation_tools["notation_format"]

notation_evaluate_modulation = modulation_tools["notation_evaluate_modulation"]
notation_apply_transform = modulation_tools["notation_apply_transform"]

notation_list_presets = preset_tools["notation_list_presets"]
notation_describe_preset = preset_tools["notation_describe_preset"]
notation_apply_preset = preset_tools["notation_apply_preset"]
notation_copy_preset_to_project = preset_tools["notation_copy_preset_to_project"]

logger.info("CHUK Notation MCP Server initialized")
logger.info(f"  Preset library: {PRESETS_LIBRARY_PATH}")
logger.info(f"  Project presets: {PRESETS_DIR}")
