"""
Tests for the server command line.
"""

from chuk_mcp_notation.server import build_parser


class TestCommandLine:
    """Tests for build_parser."""

    def test_defaults(self) -> None:
        """stdio on port 8000 with the default preset directory."""
        args = build_parser().parse_args([])
        assert args.transport == "stdio"
        assert args.port == 8000
        assert args.presets_dir is None
        assert args.debug is False

    def test_http_with_presets(self) -> None:
        """All options parse."""
        args = build_parser().parse_args(
            ["--transport", "http", "--port", "9000", "--presets-dir", "my-presets", "--debug"]
        )
        assert (args.transport, args.port, args.presets_dir, args.debug) == ("http", 9000, "my-presets", True)
