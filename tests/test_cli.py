"""
Tests for the dominant-colours command line.
"""

import json

import pytest

from dominant_colours.cli import build_parser, main
from dominant_colours.config import config


class TestArgParsing:
    """Test argument parsing and defaults"""

    def test_defaults(self):
        args = build_parser().parse_args(["test.jpg"])

        assert args.filename == "test.jpg"
        assert args.colours == config.DEFAULT_K
        assert args.format == "text"
        assert not args.swatch
        assert args.output == "swatch.svg"

    def test_short_and_long_options(self):
        parser = build_parser()

        assert parser.parse_args(["-c", "8", "test.jpg"]).colours == 8
        assert parser.parse_args(["-f", "json", "test.jpg"]).format == "json"
        assert parser.parse_args(["--format", "json", "test.jpg"]).format == "json"

        args = parser.parse_args(["--swatch", "-o", "custom.svg", "test.jpg"])
        assert args.swatch
        assert args.output == "custom.svg"

    def test_zero_colours_is_a_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["-c", "0", "test.jpg"])

        assert exc_info.value.code == 2

    def test_unknown_format_is_a_usage_error(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-f", "xml", "test.jpg"])

    def test_log_level_is_case_insensitive(self):
        assert build_parser().parse_args(["--log-level", "debug", "test.jpg"]).log_level == "DEBUG"

    def test_unknown_log_level_is_a_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--log-level", "foo", "test.jpg"])

        assert exc_info.value.code == 2

    def test_colours_above_limit_is_a_usage_error(self, banded_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(banded_path), "-c", str(config.MAX_K + 1)])

        assert exc_info.value.code == 2


class TestMain:
    """Test end-to-end CLI runs"""

    def test_text_output(self, banded_path, capsys):
        exit_code = main([str(banded_path), "-c", "3"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert out.splitlines() == [
            "Dominant colours (sorted by prevalence):",
            "RGB: (255, 0, 0) - 50.0% of image",
            "RGB: (0, 255, 0) - 30.0% of image",
            "RGB: (0, 0, 255) - 20.0% of image",
        ]

    def test_json_output(self, banded_path, capsys):
        exit_code = main([str(banded_path), "-c", "3", "-f", "json"])

        parsed = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert [c["hex"] for c in parsed["colours"]] == ["#ff0000", "#00ff00", "#0000ff"]
        assert parsed["colours"][0]["percentage"] == pytest.approx(50.0)

    def test_swatch_is_written(self, banded_path, tmp_path, capsys):
        output = tmp_path / "out.svg"

        exit_code = main([str(banded_path), "-c", "3", "--swatch", "-o", str(output)])

        assert exit_code == 0
        content = output.read_text(encoding="utf-8")
        assert "rgb(255, 0, 0)" in content
        assert "50.0%" in content

    def test_missing_file(self, tmp_path, capsys):
        exit_code = main([str(tmp_path / "non_existent.jpg")])

        assert exit_code == 1
        assert "Error:" in capsys.readouterr().err

    def test_degenerate_policy_flag(self, tmp_path, solid_png, capsys):
        path = tmp_path / "solid.png"
        path.write_bytes(solid_png)

        assert main([str(path), "-c", "3", "--degenerate-policy", "raise"]) == 1
        capsys.readouterr()

        assert main([str(path), "-c", "3", "--degenerate-policy", "reduce"]) == 0
        assert "RGB: (12, 34, 56) - 100.0% of image" in capsys.readouterr().out
