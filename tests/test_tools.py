"""
Tests for MCP tools.

Tests the MCP tool implementations for notation parsing, formatting,
modulation and presets.
"""

import json
from pathlib import Path

import pytest

from chuk_mcp_notation.presets import PresetLoader
from chuk_mcp_notation.tools import (
    register_modulation_tools,
    register_notation_tools,
    register_preset_tools,
)


# Mock MCP server for testing tools
class MockMCPServer:
    """Mock MCP server that just stores registered tools."""

    def __init__(self, name: str):
        self.name = name
        self.tools: dict = {}

    def tool(self, func):
        """Decorator to register a tool."""
        self.tools[func.__name__] = func
        return func


@pytest.fixture
def library_path():
    """Path to preset library."""
    return Path(__file__).parent.parent / "src" / "chuk_mcp_notation" / "presets" / "library"


@pytest.fixture
def notes() -> list[dict]:
    """Four quarter notes as tool input."""
    return [
        {"pitch": pitch, "start_time": float(i), "duration": 1.0, "velocity": 100}
        for i, pitch in enumerate([60, 62, 64, 65])
    ]


class TestNotationTools:
    """Tests for notation tools."""

    @pytest.mark.asyncio
    async def test_registration(self) -> None:
        """Tools are registered on the server."""
        mcp = MockMCPServer("test")
        tools = register_notation_tools(mcp)
        assert set(tools) == {"notation_parse_barbeat", "notation_parse_sequence", "notation_format"}
        assert set(mcp.tools) == set(tools)

    @pytest.mark.asyncio
    async def test_parse_barbeat(self) -> None:
        """Parse a beat list."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_barbeat"](notation="v90 C1 1|1,2,3,4")
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["count"] == 4
        assert data["time_signature"] == "4/4"
        assert [n["start_time"] for n in data["notes"]] == [0.0, 1.0, 2.0, 3.0]
        assert data["notes"][0]["velocity"] == 90

    @pytest.mark.asyncio
    async def test_parse_barbeat_warnings(self) -> None:
        """Diagnostics come back as warnings."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_barbeat"](notation="C1 1|1,3 2|1")
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["warnings"] == ["Time position 2|1 has no pitches"]

    @pytest.mark.asyncio
    async def test_parse_barbeat_six_eight(self) -> None:
        """Times are returned in quarter notes."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_barbeat"](notation="C3 2|1", time_signature="6/8")
        data = json.loads(result)
        assert data["time_signature"] == "6/8"
        assert data["notes"][0]["start_time"] == 3.0

    @pytest.mark.asyncio
    async def test_parse_barbeat_error_location(self) -> None:
        """Syntax errors carry their location."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_barbeat"](notation="C3 C9")
        data = json.loads(result)
        assert data["status"] == "error"
        assert data["location"]["offset"] == 3
        assert data["location"]["line"] == 1

    @pytest.mark.asyncio
    async def test_parse_barbeat_bad_time_signature(self) -> None:
        """Invalid time signatures are errors without a location."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_barbeat"](notation="C3 1|1", time_signature="four")
        data = json.loads(result)
        assert data["status"] == "error"
        assert "location" not in data

    @pytest.mark.asyncio
    async def test_parse_sequence(self) -> None:
        """Sequence notes follow each other."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_sequence"](notation="C3 D3 E3")
        data = json.loads(result)
        assert data["status"] == "success"
        assert [(n["pitch"], n["start_time"]) for n in data["notes"]] == [(60, 0.0), (62, 1.0), (64, 2.0)]

    @pytest.mark.asyncio
    async def test_parse_sequence_error(self) -> None:
        """Sequence errors carry their location."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_parse_sequence"](notation="C3 C9")
        data = json.loads(result)
        assert data["status"] == "error"
        assert "location" in data

    @pytest.mark.asyncio
    async def test_format(self, notes: list[dict]) -> None:
        """Format notes as bar|beat text."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_format"](notes=notes[:2])
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["notation"] == "C3 1|1 D3 1|2"
        assert data["count"] == 2

    @pytest.mark.asyncio
    async def test_format_invalid_note(self) -> None:
        """Invalid note dicts are rejected."""
        tools = register_notation_tools(MockMCPServer("test"))

        result = await tools["notation_format"](notes=[{"pitch": 200, "start_time": 0, "duration": 1, "velocity": 100}])
        data = json.loads(result)
        assert data["status"] == "error"


class TestModulationTools:
    """Tests for modulation tools."""

    @pytest.mark.asyncio
    async def test_evaluate(self) -> None:
        """Evaluate a modulation at a position."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_evaluate_modulation"](
            modulation="velocity = ramp(0, 1)", position=2, clip_start=0, clip_end=4
        )
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["values"] == {"velocity": {"operator": "set", "value": 0.5}}
        assert data["warnings"] == []

    @pytest.mark.asyncio
    async def test_evaluate_with_note_variables(self) -> None:
        """note.* values are bound from the note argument."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_evaluate_modulation"](
            modulation="C3 velocity += note.velocity / 10", note={"pitch": 60, "velocity": 90}
        )
        data = json.loads(result)
        assert data["values"]["velocity"] == {"operator": "add", "value": 9.0}

    @pytest.mark.asyncio
    async def test_evaluate_reports_failures(self) -> None:
        """A failing assignment becomes a warning."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_evaluate_modulation"](modulation="velocity = ramp(0, 1)\ntiming = 0.1")
        data = json.loads(result)
        assert data["status"] == "success"
        assert list(data["values"]) == ["timing"]
        assert len(data["warnings"]) == 1

    @pytest.mark.asyncio
    async def test_evaluate_seeded(self) -> None:
        """A seed makes random functions repeatable."""
        tools = register_modulation_tools(MockMCPServer("test"))

        first = await tools["notation_evaluate_modulation"](modulation="velocity += rand(-10, 10)", seed=4)
        second = await tools["notation_evaluate_modulation"](modulation="velocity += rand(-10, 10)", seed=4)
        assert first == second

    @pytest.mark.asyncio
    async def test_evaluate_syntax_error(self) -> None:
        """Syntax errors carry their location."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_evaluate_modulation"](modulation="velocity: 10")
        data = json.loads(result)
        assert data["status"] == "error"
        assert "deprecated" in data["message"]
        assert data["location"]["line"] == 1

    @pytest.mark.asyncio
    async def test_apply_transform(self, notes: list[dict]) -> None:
        """Transform notes and count removals."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_apply_transform"](notes=notes, transform="velocity += 10\nC3 velocity = 0")
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["count"] == 3
        assert data["removed"] == 1
        assert [n["velocity"] for n in data["notes"]] == [110, 110, 110]

    @pytest.mark.asyncio
    async def test_apply_transform_clamp_warning(self, notes: list[dict]) -> None:
        """Clamped values are reported."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_apply_transform"](notes=notes[:1], transform="velocity += 50")
        data = json.loads(result)
        assert data["notes"][0]["velocity"] == 127
        assert data["warnings"] == ["velocity 150 clamped to 127 for note at 0.0"]

    @pytest.mark.asyncio
    async def test_apply_transform_error(self, notes: list[dict]) -> None:
        """Unknown parameters are rejected."""
        tools = register_modulation_tools(MockMCPServer("test"))

        result = await tools["notation_apply_transform"](notes=notes, transform="pan = 1")
        data = json.loads(result)
        assert data["status"] == "error"
        assert "pan" in data["message"]


class TestPresetTools:
    """Tests for preset tools."""

    @pytest.mark.asyncio
    async def test_list_presets(self, temp_dir: Path, library_path: Path) -> None:
        """List library presets."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        result = await tools["notation_list_presets"]()
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["count"] >= 5
        assert "humanize" in [p["name"] for p in data["presets"]]

    @pytest.mark.asyncio
    async def test_list_presets_by_tag(self, temp_dir: Path, library_path: Path) -> None:
        """Tags narrow the list."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        data = json.loads(await tools["notation_list_presets"](tag="timing"))
        assert {p["name"] for p in data["presets"]} == {"humanize", "swing-feel"}

    @pytest.mark.asyncio
    async def test_describe_preset(self, temp_dir: Path, library_path: Path) -> None:
        """Describe returns the transform text."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        data = json.loads(await tools["notation_describe_preset"](name="crescendo"))
        assert data["status"] == "success"
        assert data["preset"]["transform"].strip() == "velocity = curve(40, 120, 2)"

    @pytest.mark.asyncio
    async def test_describe_missing(self, temp_dir: Path, library_path: Path) -> None:
        """Unknown preset names are errors."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        data = json.loads(await tools["notation_describe_preset"](name="nonexistent"))
        assert data["status"] == "error"
        assert data["message"] == "Preset not found: nonexistent"

    @pytest.mark.asyncio
    async def test_apply_preset(self, temp_dir: Path, library_path: Path, notes: list[dict]) -> None:
        """Crescendo rises over the notes."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        data = json.loads(await tools["notation_apply_preset"](name="crescendo", notes=notes))
        assert data["status"] == "success"
        assert data["preset"] == "crescendo"
        velocities = [n["velocity"] for n in data["notes"]]
        assert velocities[0] == 40
        assert velocities == sorted(velocities)

    @pytest.mark.asyncio
    async def test_apply_preset_seeded(self, temp_dir: Path, library_path: Path, notes: list[dict]) -> None:
        """Seeded humanize is repeatable."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        first = await tools["notation_apply_preset"](name="humanize", notes=notes, seed=11)
        second = await tools["notation_apply_preset"](name="humanize", notes=notes, seed=11)
        assert json.loads(first)["status"] == "success"
        assert first == second

    @pytest.mark.asyncio
    async def test_apply_missing_preset(self, temp_dir: Path, library_path: Path, notes: list[dict]) -> None:
        """Unknown preset names are errors."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir)
        tools = register_preset_tools(MockMCPServer("test"), loader)

        data = json.loads(await tools["notation_apply_preset"](name="nonexistent", notes=notes))
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_copy_preset_to_project(self, temp_dir: Path, library_path: Path) -> None:
        """Copy a preset, then fail on the second copy."""
        loader = PresetLoader(library_path=library_path, project_path=temp_dir / "presets")
        tools = register_preset_tools(MockMCPServer("test"), loader)

        data = json.loads(await tools["notation_copy_preset_to_project"](name="swing-feel"))
        assert data["status"] == "success"
        assert Path(data["path"]).exists()

        data = json.loads(await tools["notation_copy_preset_to_project"](name="swing-feel"))
        assert data["status"] == "error"
        assert "already exists" in data["message"]
