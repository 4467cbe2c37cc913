"""
Static lookup tables shipped with the validator.

Tables are read once through importlib.resources and cached. Keys are
lowercase ids unless stated otherwise. A table that cannot be parsed raises
DataError, which aborts the run before any record is checked.
"""

import re
from functools import lru_cache
from importlib import resources as importlib_resources
from typing import Any, Dict, FrozenSet, List, cast

import orjson


class DataError(Exception):
    """Raised when a packaged data table is missing or malformed."""
    pass


def _read_bytes(name: str) -> bytes:
    try:
        return importlib_resources.files(__name__).joinpath(name).read_bytes()
    except (FileNotFoundError, OSError) as e:
        raise DataError(f"Missing data table {name}: {e}") from e


def _read_json(name: str) -> Any:
    try:
        return orjson.loads(_read_bytes(name))
    except orjson.JSONDecodeError as e:
        raise DataError(f"Malformed data table {name}: {e}") from e


def _read_lines(name: str) -> List[str]:
    text = _read_bytes(name).decode("utf-8")
    return [line.strip() for line in text.splitlines() if line.strip()]


@lru_cache(maxsize=1)
def get_project_data() -> List[Dict[str, Any]]:
    """Return project definitions: name, id prefix and optional local variable."""
    data = _read_json("projects.json")
    if not isinstance(data, list):
        raise DataError("projects.json must contain a list")
    projects: List[Dict[str, Any]] = []
    for entry in cast(List[Any], data):
        if not isinstance(entry, dict) or not isinstance(entry.get("prefix"), str):
            raise DataError(f"Invalid project definition: {entry!r}")
        projects.append(cast(Dict[str, Any], entry))
    return projects


@lru_cache(maxsize=1)
def get_bodypart_data() -> Dict[str, Any]:
    """Return the raw body-part rule definitions (parsed by validators.bodyparts)."""
    data = _read_json("bodyparts.json")
    if not isinstance(data, dict):
        raise DataError("bodyparts.json must contain an object")
    return cast(Dict[str, Any], data)


@lru_cache(maxsize=1)
def get_travel_classes() -> FrozenSet[str]:
    """Return the classes expected to offer travel services."""
    data = _read_json("travel.json")
    if not isinstance(data, list):
        raise DataError("travel.json must contain a list")
    return frozenset(str(value).lower() for value in cast(List[Any], data))


@lru_cache(maxsize=1)
def get_uniques() -> FrozenSet[str]:
    """Return ids of unique items and NPCs."""
    return frozenset(line.lower() for line in _read_lines("uniques.txt"))


@lru_cache(maxsize=1)
def get_broken_data() -> Dict[str, str]:
    """Return broken reference ids mapped to their replacement (may be empty)."""
    data = _read_json("broken.json")
    if not isinstance(data, dict):
        raise DataError("broken.json must contain an object")
    return {
        str(key).lower(): str(value or "")
        for key, value in cast(Dict[str, Any], data).items()
    }


@lru_cache(maxsize=1)
def get_deprecated_ids() -> FrozenSet[str]:
    """Return ids that are known to be deprecated regardless of loaded files."""
    return frozenset(line.lower() for line in _read_lines("deprecated.txt"))


@lru_cache(maxsize=1)
def get_joined_commands() -> str:
    """Return returning script functions joined into a regex alternation."""
    words = _read_bytes("mwscript_returning.txt").decode("utf-8").split()
    if not words:
        raise DataError("mwscript_returning.txt is empty")
    return "|".join(re.escape(word) for word in words)


@lru_cache(maxsize=1)
def get_khajiit_script() -> str:
    """Return a pattern matching the standard khajiit race check.

    Line breaks may be separated by comment-only lines and any run of
    spaces may be any whitespace.
    """
    text = _read_bytes("khajiit.mwscript").decode("utf-8").strip()
    text = text.replace("(", r"\(").replace(")", r"\)")
    text = re.sub(r"\s*\n\s*", lambda _: r"\s*((;.*)?\n)+\s*", text)
    return re.sub(r"[ \t]+", lambda _: r"\s+", text)
