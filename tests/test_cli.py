"""Tests for CLI interface."""
import json

import pytest

from lutpack.cli import create_parser, main
from lutpack.sink import load_packed_image


@pytest.fixture(autouse=True)
def _isolated(isolated_config):
    """CLI commands read ~/.lutpack and ./.lutpack.yaml; keep them empty."""
    return isolated_config


class TestArgumentParsing:
    """Test CLI argument parsing."""

    def test_decode_command(self):
        args = create_parser().parse_args([
            'decode', 'grade.cube',
            '--output', 'grade.png',
            '--quantization', 'truncate',
            '--max-lut-size', '64',
        ])

        assert args.command == 'decode'
        assert args.input == 'grade.cube'
        assert args.output == 'grade.png'
        assert args.quantization == 'truncate'
        assert args.max_lut_size == 64
        assert args.degenerate_domain is None

    def test_logging_flags(self):
        args = create_parser().parse_args(['--log-level', 'debug', '--log-format', 'json', 'info', 'a.3dl'])

        assert args.log_level == 'DEBUG'
        assert args.log_format == 'json'

    def test_invalid_quantization(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['decode', 'a.cube', '--quantization', 'round'])


class TestDecodeCommand:
    """Test the decode command."""

    def test_writes_png_next_to_input(self, identity_cube_2, capsys):
        assert main(['decode', str(identity_cube_2)]) == 0

        output = identity_cube_2.with_suffix('.png')
        assert load_packed_image(output).shape == (2, 8)
        assert "Wrote 2x8" in capsys.readouterr().out

    def test_explicit_output(self, sample_3dl, tmp_path):
        output = tmp_path / "out" / "sample.png"

        assert main(['decode', str(sample_3dl), '-o', str(output)]) == 0
        assert load_packed_image(output).get_texel(0, 4) == (255, 255, 255)

    def test_unsupported_format(self, write_lut, capsys):
        path = write_lut("grade.txt", "LUT_3D_SIZE 2\n")

        assert main(['decode', str(path)]) == 1
        assert "Unsupported LUT format" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(['decode', str(tmp_path / "missing.cube")]) == 1
        assert "Failed to read" in capsys.readouterr().out

    def test_no_size_declaration(self, write_lut, capsys):
        path = write_lut("empty.cube", "# nothing here\n")

        assert main(['decode', str(path)]) == 1
        assert not path.with_suffix('.png').exists()

    def test_partial_result_warns(self, write_lut, capsys):
        path = write_lut("twice.cube", "LUT_3D_SIZE 2\n1 1 1\nLUT_3D_SIZE 2\n")

        assert main(['decode', str(path)]) == 0
        assert "stopped early" in capsys.readouterr().out

    def test_degenerate_domain_flag(self, write_lut):
        path = write_lut("flat.cube", "LUT_3D_SIZE 2\nDOMAIN_MAX 0 1 1\n1 1 1\n")

        assert main(['decode', str(path)]) == 1
        assert main(['decode', str(path), '--degenerate-domain', 'zero']) == 0
        assert load_packed_image(path.with_suffix('.png')).get_texel(0, 0) == (0, 255, 255)

    def test_unwritable_output(self, identity_cube_2, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        assert main(['decode', str(identity_cube_2), '-o', str(blocker / "out.png")]) == 1
        assert "Failed to write" in capsys.readouterr().out

    def test_project_config_is_used(self, write_lut, tmp_path):
        (tmp_path / ".lutpack.yaml").write_text("decoder:\n  max_lut_size: 2\n", encoding="utf-8")
        path = write_lut("three.cube", "LUT_3D_SIZE 3\n")

        assert main(['decode', str(path)]) == 1


class TestInfoCommand:
    """Test the info command."""

    def test_text_output(self, identity_cube_2, capsys):
        assert main(['info', str(identity_cube_2)]) == 0

        out = capsys.readouterr().out
        assert "Format:        cube" in out
        assert "Rows written:  8/8" in out

    def test_json_output(self, write_lut, capsys):
        path = write_lut("early.cube", "0 0 0\nLUT_3D_SIZE 2\n1 1 1\n")

        assert main(['info', str(path), '--json', '--verbose']) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["size"] == 2
        assert data["height"] == 4
        assert data["rows_written"] == 1
        assert data["complete"] is False
        assert data["issues"] == {"premature_data_row": 1}
        assert data["issue_details"][0]["line_number"] == 1


class TestLoggingSetup:
    """Test that logging follows config files and flags."""

    def test_default_level_hides_info(self, identity_cube_2, capsys):
        assert main(['info', str(identity_cube_2)]) == 0
        assert "lutSize: 2" not in capsys.readouterr().err

    def test_config_file_level(self, identity_cube_2, tmp_path, capsys):
        (tmp_path / ".lutpack.yaml").write_text("logging:\n  log_level: INFO\n", encoding="utf-8")

        assert main(['info', str(identity_cube_2)]) == 0
        assert "lutSize: 2" in capsys.readouterr().err

    def test_flag_overrides_config_file(self, identity_cube_2, tmp_path, capsys):
        (tmp_path / ".lutpack.yaml").write_text("logging:\n  log_level: INFO\n", encoding="utf-8")

        assert main(['--log-level', 'error', 'info', str(identity_cube_2)]) == 0
        assert "lutSize: 2" not in capsys.readouterr().err

    def test_config_file_format_and_component_levels(self, identity_cube_2, tmp_path, capsys):
        (tmp_path / ".lutpack.yaml").write_text(
            "logging:\n"
            "  log_level: WARNING\n"
            "  log_format: json\n"
            "  component_levels:\n"
            "    decoders: INFO\n",
            encoding="utf-8",
        )

        assert main(['info', str(identity_cube_2)]) == 0

        entries = [json.loads(line) for line in capsys.readouterr().err.splitlines()]
        assert {"component": "base", "level": "INFO"}.items() <= entries[0].items()
        assert any(entry["message"] == "lutSize: 2" for entry in entries)

    def test_invalid_logging_section_is_reported(self, identity_cube_2, tmp_path, capsys):
        (tmp_path / ".lutpack.yaml").write_text("logging:\n  log_level: LOUD\n", encoding="utf-8")

        assert main(['info', str(identity_cube_2)]) == 1
        assert "logging.log_level" in capsys.readouterr().out


class TestConfigCommand:
    """Test the config command."""

    def test_init_then_show(self, isolated_config, capsys):
        assert main(['config', 'init']) == 0
        assert (isolated_config / ".lutpack" / "config.yaml").exists()

        assert main(['config', 'show', '--flat']) == 0
        assert "decoder.max_lut_size=256" in capsys.readouterr().out

    def test_init_twice_fails(self):
        assert main(['config', 'init', '--target', 'project']) == 0
        assert main(['config', 'init', '--target', 'project']) == 1

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: lutpack" in capsys.readouterr().out
