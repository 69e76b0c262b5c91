"""
Transform preset models - named, reusable modulation texts.

Presets are YAML files:

    name: humanize
    description: Small random velocity and timing drift
    tags: [humanize, velocity, timing]
    transform: |
      velocity += rand(-8, 8)
      timing += rand(-0.02, 0.02)
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from chuk_mcp_notation.constants import DEFAULT_TIME_SIGNATURE


class TransformPreset(BaseModel):
    """A named modulation text."""

    name: str = Field(description="Preset identifier")
    description: str = Field(default="", description="What the preset does")
    transform: str = Field(description="Modulation text applied to notes")
    tags: list[str] = Field(default_factory=list, description="Search tags")
    time_signature: str = Field(
        default=DEFAULT_TIME_SIGNATURE,
        description="Time signature the periods in the transform assume",
    )

    model_config = {"frozen": True}


class PresetMetadata(BaseModel):
    """Lightweight metadata for listing presets."""

    name: str
    description: str
    tags: list[str]

    model_config = {"frozen": True}

    @classmethod
    def from_preset(cls, preset: TransformPreset) -> PresetMetadata:
        """Create metadata from a preset."""
        return cls(name=preset.name, description=preset.description, tags=list(preset.tags))
