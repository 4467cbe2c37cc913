"""Tests for NPC script conventions."""

import re
from importlib import resources
from typing import List

from conftest import info, npc, only, run, script, topic
from tes3_validator.context import Context, Mode
from tes3_validator.data import get_khajiit_script
from tes3_validator.validators.scripts import ScriptValidator, is_khajiit

STANDARD_LOCALS = ("short T_Local_NPC", "short NoLore", "short T_Local_TR")


def khajiit_check() -> List[str]:
    """Return the lines of the packaged khajiit check."""
    text = resources.files("tes3_validator.data").joinpath("khajiit.mwscript").read_text(encoding="utf-8")
    return text.strip().splitlines()


class TestNpcScripts:
    """Test the locals NPC scripts must declare."""

    def test_khajiit_without_local(self, reporter) -> None:
        """Test exactly one message about T_Local_Khajiit for a khajiit NPC."""
        records = [
            script("npc_script", *STANDARD_LOCALS),
            npc("cat", race="Khajiit", script="npc_script"),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))

        assert only(reporter.lines, "T_Local_Khajiit") == [
            "Npc cat uses script npc_script which does not define T_Local_Khajiit"
        ]
        assert reporter.lines == [
            "Npc cat uses script npc_script which does not define T_Local_Khajiit"
        ]

    def test_missing_locals(self, reporter) -> None:
        """Test that every missing local is reported."""
        records = [script("bare"), npc("guy", script="Bare")]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == [
            "Npc guy uses script bare which does not define T_Local_NPC",
            "Npc guy uses script bare which does not define NoLore",
            "Npc guy uses script bare which does not define any province specific local variables",
        ]

    def test_several_project_locals(self, reporter) -> None:
        """Test that scripts declaring several project locals are reported."""
        records = [
            script("mixed", *STANDARD_LOCALS, "short T_Local_PC"),
            npc("guy", script="mixed"),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == [
            "Npc guy uses script mixed which defines T_Local_TR, T_Local_PC"
        ]

    def test_unknown_and_missing_script(self, reporter) -> None:
        """Test NPCs with unknown or no scripts."""
        records = [
            npc("a", script="nowhere"),
            npc("b", script="T_ScNpc_Generic"),
            npc("c"),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == [
            "Npc a uses unknown script nowhere",
            "Npc c does not have a script",
        ]

    def test_skipped_in_vanilla(self, reporter) -> None:
        """Test that vanilla mode does not check scripts."""
        run([npc("c")], ScriptValidator(reporter, Context(mode=Mode.VANILLA)), mode=Mode.VANILLA)
        assert reporter.lines == []


class TestKhajiitCheck:
    """Test the standard khajiit race check."""

    def test_standard_check(self, reporter) -> None:
        """Test that the packaged check is accepted."""
        records = [
            script("cat_script", *STANDARD_LOCALS, "short T_Local_Khajiit", *khajiit_check()),
            npc("cat", race="Khajiit", script="cat_script"),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == []

    def test_unexpected_value(self, reporter) -> None:
        """Test that setting T_Local_Khajiit to something other than 1 is reported."""
        records = [
            script("cat_script", *STANDARD_LOCALS, "short T_Local_Khajiit", "set T_Local_Khajiit to 2"),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == [
            "Script cat_script contains unexpected line set T_Local_Khajiit to 2",
            "Script cat_script contains non-standard khajiit check",
        ]

    def test_unused_by_khajiit(self, reporter) -> None:
        """Test that khajiit scripts used only by other races are reported."""
        records = [
            script("cat_script", *STANDARD_LOCALS, "short T_Local_Khajiit", "set T_Local_Khajiit to 1"),
            npc("elf", race="Dark Elf", script="cat_script"),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == [
            "Script cat_script defines T_Local_Khajiit but is not used by any khajiit"
        ]

    def test_pattern_allows_comments(self) -> None:
        """Test that the packaged pattern tolerates comment lines."""
        pattern = re.compile(get_khajiit_script(), re.IGNORECASE)
        lines = khajiit_check()
        lines.insert(2, "; which race")
        assert pattern.search("\n".join(lines))

    def test_khajiit_races(self) -> None:
        """Test khajiit race detection."""
        assert is_khajiit("Khajiit")
        assert is_khajiit("T_Els_Suthay")
        assert not is_khajiit("Argonian")


class TestScriptLines:
    """Test per-line and per-script conventions."""

    def test_position(self, reporter) -> None:
        """Test that Position is reported in scripts and dialogue."""
        records = [
            script("mover", "player->Position 0 0 0 0"),
            topic("greeting"),
            info("42", script_text="Position 1 2 3 4"),
            script("fine", "player->PositionCell 0 0 0 0 \"Balmora\""),
        ]
        run(records, ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == [
            "Script mover uses Position instead of PositionCell",
            "Info 42 in topic greeting uses Position instead of PositionCell",
        ]

    def test_returning_function_as_variable(self, reporter) -> None:
        """Test that variables named after returning functions are reported."""
        run([script("bad", "short GetPos")], ScriptValidator(reporter, Context(mode=Mode.TR)))
        assert reporter.lines == ["Script bad contains line short GetPos"]
