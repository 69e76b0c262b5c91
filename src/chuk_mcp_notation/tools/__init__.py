"""
MCP tool implementations.

Tools are organized by domain:
- notation - bar|beat and sequence parsing, formatting
- modulation - modulation evaluation and transforms
- presets - transform preset discovery and application
"""

from chuk_mcp_notation.tools.modulation import register_modulation_tools
from chuk_mcp_notation.tools.notation import register_notation_tools
from chuk_mcp_notation.tools.presets import register_preset_tools

__all__ = [
    "register_modulation_tools",
    "register_notation_tools",
    "register_preset_tools",
]
