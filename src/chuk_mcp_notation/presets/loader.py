"""
Preset loader - discovers and loads transform presets.

Presets can come from:
1. Built-in library (shipped with package)
2. Project presets (user's project/presets directory)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chuk_mcp_notation.constants import DEFAULT_TIME_SIGNATURE
from chuk_mcp_notation.errors import NotationError
from chuk_mcp_notation.models.preset import PresetMetadata, TransformPreset
from chuk_mcp_notation.modulation.parser import parse_modulation

logger = logging.getLogger(__name__)


class PresetLoader:
    """
    Discovers and loads transform presets.

    Presets are loaded from YAML files in the library and project directories.
    Project presets override library presets with the same name. A file whose
    transform does not parse is skipped with a warning.
    """

    def __init__(
        self,
        library_path: Path | None = None,
        project_path: Path | None = None,
    ):
        """
        Initialize the preset loader.

        Args:
            library_path: Path to built-in preset library
            project_path: Path to project presets directory
        """
        self.library_path = library_path or (Path(__file__).parent / "library")
        self.project_path = project_path
        self._cache: dict[str, TransformPreset] = {}

    def list_presets(self, tag: str | None = None) -> list[PresetMetadata]:
        """
        List all available presets.

        Args:
            tag: Only list presets carrying this tag

        Returns:
            Presets from library and project, project taking precedence
        """
        presets: dict[str, PresetMetadata] = {}

        for directory in (self.library_path, self.project_path):
            if directory is None or not directory.exists():
                continue
            for path in sorted(directory.glob("*.yaml")):
                preset = self._load_preset_file(path)
                if preset:
                    presets[preset.name] = PresetMetadata.from_preset(preset)

        listed = sorted(presets.values(), key=lambda p: p.name)
        if tag:
            listed = [p for p in listed if tag in p.tags]
        return listed

    def get_preset(self, name: str) -> TransformPreset | None:
        """
        Get a preset by name.

        Project presets take precedence over library presets.

        Args:
            name: Preset name

        Returns:
            TransformPreset if found, None otherwise
        """
        if name in self._cache:
            return self._cache[name]

        for directory in (self.project_path, self.library_path):
            if directory is None:
                continue
            path = directory / f"{name}.yaml"
            if path.exists():
                preset = self._load_preset_file(path)
                if preset:
                    self._cache[name] = preset
                    return preset

        return None

    def copy_to_project(self, name: str) -> Path | None:
        """
        Copy a library preset to the project for customization.

        Args:
            name: Preset name

        Returns:
            Path to copied file, or None if not found

        Raises:
            ValueError: If no project path is configured or the preset
                already exists in the project
        """
        if not self.project_path:
            raise ValueError("No project path configured")

        library_file = self.library_path / f"{name}.yaml"
        if not library_file.exists():
            return None

        self.project_path.mkdir(parents=True, exist_ok=True)

        dest_file = self.project_path / f"{name}.yaml"
        if dest_file.exists():
            raise ValueError(f"Preset already exists in project: {name}")

        dest_file.write_text(library_file.read_text())
        self._cache.pop(name, None)
        logger.info(f"Copied preset {name} to {dest_file}")

        return dest_file

    def _load_preset_file(self, path: Path) -> TransformPreset | None:
        """Load a preset from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
            return self._parse_preset(data, path)
        except (OSError, yaml.YAMLError, ValidationError, NotationError, AttributeError, TypeError) as e:
            logger.warning(f"Skipping preset file {path}: {e}")
            return None

    def _parse_preset(self, data: dict[str, Any], path: Path) -> TransformPreset:
        """Parse a preset from YAML data and check its transform parses."""
        preset = TransformPreset(
            name=data.get("name", path.stem),
            description=data.get("description", ""),
            transform=data.get("transform", ""),
            tags=data.get("tags", []),
            time_signature=str(data.get("time_signature", DEFAULT_TIME_SIGNATURE)),
        )
        parse_modulation(preset.transform)
        return preset
