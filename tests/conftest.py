"""Shared record builders and run helpers for tes3-validator tests."""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple, cast

import orjson
import pytest

from tes3_validator.context import Context, Mode
from tes3_validator.diagnostics import Reporter
from tes3_validator.handlers import Handler, HandlerRegistry
from tes3_validator.plugins.loaders import PluginFile
from tes3_validator.plugins.models import (
    Actor,
    Cell,
    Dialogue,
    DialogueInfo,
    LeveledList,
    Record,
    Script,
    record_from_dict,
)
from tes3_validator.traversal import Traversal, validate


def make(record_type: str, record_id: str = "", **fields: Any) -> Record:
    """Build a typed record from decoder-style JSON fields."""
    data: Dict[str, Any] = {"type": record_type, "id": record_id}
    data.update(fields)
    return record_from_dict(data)


def npc(record_id: str, **fields: Any) -> Actor:
    fields.setdefault("script", "")
    return cast(Actor, make("Npc", record_id, **fields))


def creature(record_id: str, **fields: Any) -> Actor:
    return cast(Actor, make("Creature", record_id, **fields))


def ref(
    record_id: str,
    translation: Sequence[float] = (0.0, 0.0, 0.0),
    refr_index: int = 1,
    **fields: Any,
) -> Dict[str, Any]:
    """Decoder-style cell reference."""
    data: Dict[str, Any] = {
        "id": record_id,
        "mast_index": 0,
        "refr_index": refr_index,
        "translation": list(translation),
        "rotation": [0.0, 0.0, 0.0],
    }
    data.update(fields)
    return data


def interior(name: str, references: Iterable[Dict[str, Any]] = (), flags: str = "IS_INTERIOR") -> Cell:
    return cast(Cell, make(
        "Cell",
        name,
        name=name,
        data={"flags": flags, "grid": [0, 0]},
        references=list(references),
    ))


def exterior(grid: Tuple[int, int], references: Iterable[Dict[str, Any]] = (), name: str = "") -> Cell:
    return cast(Cell, make(
        "Cell",
        name,
        name=name,
        data={"flags": 0, "grid": list(grid)},
        references=list(references),
    ))


def script(record_id: str, *lines: str) -> Script:
    """Build a script whose body is the given lines between Begin and End."""
    text = "\n".join([f"Begin {record_id}", *lines, "End"]) + "\n"
    return cast(Script, make("Script", record_id, text=text))


def topic(record_id: str, journal: bool = False) -> Dialogue:
    return cast(Dialogue, make("Dialogue", record_id, dialogue_type="Journal" if journal else "Topic"))


def info(record_id: str, **fields: Any) -> DialogueInfo:
    return cast(DialogueInfo, make("DialogueInfo", record_id, **fields))


def leveled_creature(record_id: str, entries: Sequence[Tuple[str, int]], all_levels: bool = False) -> LeveledList:
    return cast(LeveledList, make(
        "LeveledCreature",
        record_id,
        creatures=[list(entry) for entry in entries],
        leveled_creature_flags=1 if all_levels else 0,
    ))


def plugin(records: Iterable[Record], name: str = "test.esp") -> PluginFile:
    return PluginFile(Path(name), list(records))


def run(
    records: Iterable[Record],
    *handlers: Handler,
    mode: Mode = Mode.TR,
    masters: Sequence[Iterable[Record]] = (),
) -> Traversal:
    """Run the given handlers over masters and a plugin built from records."""
    context = Context(mode=mode)
    registry = HandlerRegistry(list(handlers))
    master_files = [plugin(m, name=f"master{i}.esm") for i, m in enumerate(masters)]
    return validate(plugin(records), context, registry, masters=master_files)


def write_plugin(path: Path, objects: List[Dict[str, Any]]) -> Path:
    """Write decoder-style JSON to a file and return its path."""
    path.write_bytes(orjson.dumps(objects))
    return path


@pytest.fixture
def reporter() -> Reporter:
    return Reporter()


@pytest.fixture
def context() -> Context:
    return Context(mode=Mode.TR)


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Path of an INI settings file private to one test."""
    return tmp_path / "settings.ini"


def only(lines: Sequence[str], needle: str) -> List[str]:
    return [line for line in lines if needle in line]

