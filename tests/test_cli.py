"""Tests for the tes3-validator command line."""

import logging
from pathlib import Path

import orjson
import pytest
from click.testing import CliRunner

from conftest import write_plugin
from tes3_validator.__main__ import main

KEY = {"type": "MiscItem", "id": "Key_Test", "name": "Test Key", "mesh": "key.nif"}


def cell(name, references):
    return {"type": "Cell", "id": name, "name": name, "data": {"flags": 1, "grid": [0, 0]}, "references": references}


def placed(record_id, refr_index, translation=(10.0, 20.0, 30.0)):
    return {"id": record_id, "mast_index": 0, "refr_index": refr_index, "translation": list(translation), "rotation": [0.0, 0.0, 0.0]}


@pytest.fixture(autouse=True)
def restore_logging():
    """Keep handlers bound to the runner's streams from outliving a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestCoreRun:
    """Test single plugin runs."""

    def test_duplicate_reported(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that findings are printed and the run succeeds."""
        path = write_plugin(tmp_path / "Mod.esp.json", [
            KEY,
            cell("Vault", [placed("Key_Test", 1), placed("Key_Test", 2)]),
        ])
        result = runner.invoke(main, ["TR", str(path), "--settings-file", str(settings_file)])

        assert result.exit_code == 0
        assert (
            "Cell Vault contains duplicate reference Key_Test at position [10, 20, 30] [10, 20, 30]"
            in result.stdout
        )

    def test_mode_is_case_insensitive(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test lowercase mode names."""
        path = write_plugin(tmp_path / "Mod.esp.json", [KEY])
        result = runner.invoke(main, ["vanilla", str(path), "--settings-file", str(settings_file)])
        assert result.exit_code == 0

    def test_unknown_mode(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that click rejects unknown modes."""
        path = write_plugin(tmp_path / "Mod.esp.json", [KEY])
        result = runner.invoke(main, ["XX", str(path), "--settings-file", str(settings_file)])
        assert result.exit_code == 2

    def test_unreadable_plugin(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that a plugin that is not decoder JSON fails the run."""
        path = tmp_path / "Mod.esp.json"
        path.write_text("not json")
        result = runner.invoke(main, ["TR", str(path), "--settings-file", str(settings_file)])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_several_files_need_extended(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that masters are only accepted in multi-file runs."""
        master = write_plugin(tmp_path / "Base.esm.json", [KEY])
        path = write_plugin(tmp_path / "Mod.esp.json", [KEY])
        result = runner.invoke(main, ["TR", str(master), str(path), "--settings-file", str(settings_file)])
        assert result.exit_code == 1
        assert "--extended" in result.output

    def test_invalid_configuration(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that an invalid stored configuration aborts the run."""
        settings_file.write_text("[default]\napp\\version=0.1.0\nvalidation\\min_inhabitants=-4\n")
        path = write_plugin(tmp_path / "Mod.esp.json", [KEY])
        result = runner.invoke(main, ["TR", str(path), "--settings-file", str(settings_file)])
        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output


class TestExtendedRun:
    """Test runs against masters."""

    def test_missing_object(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that objects defined in a master are found."""
        master = write_plugin(tmp_path / "Base.esm.json", [KEY])
        path = write_plugin(tmp_path / "Mod.esp.json", [
            cell("Vault", [placed("key_test", 1), placed("ghost", 2, (0.0, 0.0, 0.0))]),
        ])
        result = runner.invoke(main, [
            "TR", str(master), str(path),
            "--extended", "--disable-master-loading",
            "--settings-file", str(settings_file),
        ])

        assert result.exit_code == 0
        assert "Cell Vault references missing object ghost" in result.stdout
        assert "missing object key_test" not in result.stdout


class TestFixOutOfBounds:
    """Test the relocation command."""

    def test_writes_output(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that the edited plugin is written."""
        exterior = {"type": "Cell", "id": "", "data": {"flags": 0, "grid": [0, 0]}, "references": [
            placed("rock", 1, (8192.0 + 10.0, 10.0, 0.0)),
        ]}
        neighbour = {"type": "Cell", "id": "", "data": {"flags": 0, "grid": [1, 0]}, "references": []}
        path = write_plugin(tmp_path / "Mod.esp.json", [exterior, neighbour])
        output = tmp_path / "fixed.json"

        result = runner.invoke(main, [
            "TR", str(path), "--fix-out-of-bounds", str(output), "--settings-file", str(settings_file),
        ])

        assert result.exit_code == 0
        assert "Moving rock (0, 1) from (0, 0) to (1, 0)" in result.stdout
        cells = orjson.loads(output.read_bytes())
        assert cells[0]["references"] == []
        assert [reference["id"] for reference in cells[1]["references"]] == ["rock"]

    def test_not_with_extended(self, runner: CliRunner, tmp_path: Path, settings_file: Path) -> None:
        """Test that relocation is a separate run."""
        path = write_plugin(tmp_path / "Mod.esp.json", [KEY])
        result = runner.invoke(main, [
            "TR", str(path), "--extended", "--fix-out-of-bounds", str(tmp_path / "out.json"),
            "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 1
