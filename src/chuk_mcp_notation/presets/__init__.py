"""
Transform presets - named modulation texts kept in YAML.

A preset is a reusable transform like "humanize" or "swing-feel".
The library ships with the package; projects can copy and override them.
"""

from chuk_mcp_notation.presets.loader import PresetLoader

__all__ = [
    "PresetLoader",
]
