"""
Data models for decoded TES3 plugin records.

Records arrive from an external decoder as JSON objects tagged with a
"type" key. Each kind the validators inspect gets a small dataclass with
the fields they need; everything else stays available through ``raw`` so a
file can be written back without losing data.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, cast

# Width of an exterior cell in world units
CELL_SIZE = 8192

# Object flags shared by every record kind
FLAG_DELETED = 0x20
FLAG_PERSISTENT = 0x400

OBJECT_FLAGS = {
    "DELETED": FLAG_DELETED,
    "PERSISTENT": FLAG_PERSISTENT,
    "IGNORED": 0x1000,
    "BLOCKED": 0x2000,
}

CELL_FLAGS = {
    "IS_INTERIOR": 0x1,
    "HAS_WATER": 0x2,
    "RESTING_IS_ILLEGAL": 0x4,
    "BEHAVES_LIKE_EXTERIOR": 0x80,
}

NPC_FLAGS = {
    "FEMALE": 0x1,
    "ESSENTIAL": 0x2,
    "RESPAWN": 0x4,
    "IS_BASE": 0x8,
    "AUTO_CALCULATE": 0x10,
}

Vector3 = Tuple[float, float, float]


class RecordType(Enum):
    """Closed set of record kinds found in a plugin file."""

    ACTIVATOR = "Activator"
    ALCHEMY = "Alchemy"
    APPARATUS = "Apparatus"
    ARMOR = "Armor"
    BIRTHSIGN = "Birthsign"
    BODYPART = "Bodypart"
    BOOK = "Book"
    CELL = "Cell"
    CLASS = "Class"
    CLOTHING = "Clothing"
    CONTAINER = "Container"
    CREATURE = "Creature"
    DIALOGUE = "Dialogue"
    DIALOGUE_INFO = "DialogueInfo"
    DOOR = "Door"
    ENCHANTING = "Enchanting"
    FACTION = "Faction"
    GAME_SETTING = "GameSetting"
    GLOBAL_VARIABLE = "GlobalVariable"
    HEADER = "Header"
    INGREDIENT = "Ingredient"
    LANDSCAPE = "Landscape"
    LANDSCAPE_TEXTURE = "LandscapeTexture"
    LEVELED_CREATURE = "LeveledCreature"
    LEVELED_ITEM = "LeveledItem"
    LIGHT = "Light"
    LOCKPICK = "Lockpick"
    MAGIC_EFFECT = "MagicEffect"
    MISC_ITEM = "MiscItem"
    NPC = "Npc"
    PATH_GRID = "PathGrid"
    PROBE = "Probe"
    RACE = "Race"
    REGION = "Region"
    REPAIR_ITEM = "RepairItem"
    SCRIPT = "Script"
    SKILL = "Skill"
    SOUND = "Sound"
    SOUND_GEN = "SoundGen"
    SPELL = "Spell"
    START_SCRIPT = "StartScript"
    STATIC = "Static"
    WEAPON = "Weapon"


# Alternative spellings emitted by some converters
TYPE_ALIASES = {
    "Info": RecordType.DIALOGUE_INFO,
    "LevelledCreature": RecordType.LEVELED_CREATURE,
    "LevelledItem": RecordType.LEVELED_ITEM,
    "Pathgrid": RecordType.PATH_GRID,
}


# =============================================================================
# Field helpers
# =============================================================================

def parse_flags(value: Any, names: Mapping[str, int]) -> int:
    """Convert a flag field to an integer mask.

    Converters write flags either as a number or as a string of names
    joined with ``|``. Unknown names are ignored.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        mask = 0
        for part in value.replace(",", "|").split("|"):
            name = part.strip().upper()
            if name:
                mask |= names.get(name, 0)
        return mask
    if isinstance(value, list):
        mask = 0
        for item in cast(List[Any], value):
            mask |= parse_flags(item, names)
        return mask
    return 0


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _vector(value: Any) -> Vector3:
    if isinstance(value, (list, tuple)):
        coords = [float(v) for v in cast(List[Any], value)[:3]]
        coords.extend([0.0] * (3 - len(coords)))
        return (coords[0], coords[1], coords[2])
    return (0.0, 0.0, 0.0)


def _dict(value: Any) -> Dict[str, Any]:
    return cast(Dict[str, Any], value) if isinstance(value, dict) else {}


def get_cell_grid(x: float, y: float) -> Tuple[int, int]:
    """Return the exterior grid coordinates containing a world position."""
    return (math.floor(x / CELL_SIZE), math.floor(y / CELL_SIZE))


# =============================================================================
# Records
# =============================================================================

@dataclass
class Record:
    """A decoded game object.

    Only fields that several record kinds share live here; an absent field
    is stored as an empty string.
    """
    type: RecordType
    id: str = ""
    flags: int = 0
    name: str = ""
    mesh: str = ""
    script: str = ""
    enchanting: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def type_name(self) -> str:
        return self.type.value

    @property
    def lower_id(self) -> str:
        return self.id.lower()

    @property
    def deleted(self) -> bool:
        return bool(self.flags & FLAG_DELETED)

    @property
    def persistent(self) -> bool:
        return bool(self.flags & FLAG_PERSISTENT)

    @classmethod
    def _common(cls, record_type: RecordType, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "type": record_type,
            "id": _str(data.get("id")),
            "flags": parse_flags(data.get("flags"), OBJECT_FLAGS),
            "name": _str(data.get("name")),
            "mesh": _str(data.get("mesh")),
            "script": _str(data.get("script")),
            "enchanting": _str(data.get("enchanting")),
            "raw": data,
        }

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Record":
        return cls(**cls._common(record_type, data))


@dataclass
class InventoryEntry:
    count: int
    id: str


def _inventory(value: Any) -> List[InventoryEntry]:
    entries: List[InventoryEntry] = []
    if isinstance(value, list):
        for item in cast(List[Any], value):
            if isinstance(item, (list, tuple)) and len(item) >= 2:
                pair = cast(List[Any], item)
                entries.append(InventoryEntry(_int(pair[0]), _str(pair[1])))
    return entries


@dataclass
class TravelDestination:
    """A travel service target; ``cell`` is set for interior destinations."""
    translation: Vector3
    rotation: Vector3 = (0.0, 0.0, 0.0)
    cell: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TravelDestination":
        return cls(
            translation=_vector(data.get("translation")),
            rotation=_vector(data.get("rotation")),
            cell=_opt_str(data.get("cell")) or None,
        )


@dataclass
class Container(Record):
    inventory: List[InventoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Container":
        return cls(
            **cls._common(record_type, data),
            inventory=_inventory(data.get("inventory")),
        )


@dataclass
class Actor(Container):
    """An NPC or a creature."""
    travel_destinations: List[TravelDestination] = field(default_factory=list)
    class_id: Optional[str] = None
    faction: Optional[str] = None
    race: str = ""
    head: str = ""
    hair: str = ""
    npc_flags: int = 0
    health: Optional[int] = None
    fight: int = 0
    alarm: int = 0
    services: int = 0

    @property
    def is_npc(self) -> bool:
        return self.type == RecordType.NPC

    @property
    def is_dead(self) -> bool:
        return self.health == 0

    @property
    def female(self) -> bool:
        return bool(self.npc_flags & NPC_FLAGS["FEMALE"])

    @property
    def autocalc(self) -> bool:
        return bool(self.npc_flags & NPC_FLAGS["AUTO_CALCULATE"])

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Actor":
        stats = _dict(data.get("data"))
        if record_type == RecordType.NPC:
            health_source = _dict(stats.get("stats"))
        else:
            health_source = stats
        health = health_source.get("health")
        ai_data = _dict(data.get("ai_data"))
        destinations = [
            TravelDestination.from_dict(cast(Dict[str, Any], d))
            for d in cast(List[Any], data.get("travel_destinations") or [])
            if isinstance(d, dict)
        ]
        return cls(
            **cls._common(record_type, data),
            inventory=_inventory(data.get("inventory")),
            travel_destinations=destinations,
            class_id=_opt_str(data.get("class")) if record_type == RecordType.NPC else None,
            faction=_opt_str(data.get("faction")) if record_type == RecordType.NPC else None,
            race=_str(data.get("race")),
            head=_str(data.get("head")),
            hair=_str(data.get("hair")),
            npc_flags=parse_flags(data.get("npc_flags"), NPC_FLAGS),
            health=_int(health) if health is not None else None,
            fight=_int(ai_data.get("fight")),
            alarm=_int(ai_data.get("alarm")),
            services=_int(ai_data.get("services")),
        )


@dataclass
class Reference:
    """One placed instance of a record inside a cell."""
    id: str
    mast_index: int = 0
    refr_index: int = 0
    translation: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: Optional[float] = None
    deleted: bool = False
    owner: Optional[str] = None
    owner_faction: Optional[str] = None
    soul: Optional[str] = None
    moved_cell: Optional[Tuple[int, int]] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def key(self) -> Tuple[int, int]:
        return (self.mast_index, self.refr_index)

    @property
    def lower_id(self) -> str:
        return self.id.lower()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reference":
        scale = data.get("scale")
        moved = data.get("moved_cell")
        moved_cell = None
        if isinstance(moved, (list, tuple)) and len(moved) >= 2:
            moved_pair = cast(List[Any], moved)
            moved_cell = (_int(moved_pair[0]), _int(moved_pair[1]))
        return cls(
            id=_str(data.get("id")),
            mast_index=_int(data.get("mast_index")),
            refr_index=_int(data.get("refr_index")),
            translation=_vector(data.get("translation")),
            rotation=_vector(data.get("rotation")),
            scale=float(scale) if isinstance(scale, (int, float)) else None,
            deleted=bool(data.get("deleted")),
            owner=_opt_str(data.get("owner")),
            owner_faction=_opt_str(data.get("owner_faction")),
            soul=_opt_str(data.get("soul")),
            moved_cell=moved_cell,
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the raw reference with the edited placement applied."""
        data = dict(self.raw)
        data["id"] = self.id
        data["translation"] = list(self.translation)
        data["rotation"] = list(self.rotation)
        return data


@dataclass
class Cell(Record):
    cell_flags: int = 0
    grid: Tuple[int, int] = (0, 0)
    region: str = ""
    references: List[Reference] = field(default_factory=list)

    @property
    def is_interior(self) -> bool:
        return bool(self.cell_flags & CELL_FLAGS["IS_INTERIOR"])

    @property
    def is_exterior(self) -> bool:
        return not self.is_interior

    @property
    def resting_is_illegal(self) -> bool:
        return bool(self.cell_flags & CELL_FLAGS["RESTING_IS_ILLEGAL"])

    @property
    def display_name(self) -> str:
        return get_cell_name(self)

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Cell":
        common = cls._common(record_type, data)
        if not common["id"]:
            common["id"] = common["name"]
        cell_data = _dict(data.get("data"))
        grid = cell_data.get("grid")
        grid_pair = (0, 0)
        if isinstance(grid, (list, tuple)) and len(grid) >= 2:
            coords = cast(List[Any], grid)
            grid_pair = (_int(coords[0]), _int(coords[1]))
        references = [
            Reference.from_dict(cast(Dict[str, Any], r))
            for r in cast(List[Any], data.get("references") or [])
            if isinstance(r, dict)
        ]
        return cls(
            **common,
            cell_flags=parse_flags(cell_data.get("flags"), CELL_FLAGS),
            grid=grid_pair,
            region=_str(data.get("region")),
            references=references,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data["references"] = [reference.to_dict() for reference in self.references]
        return data


def get_cell_name(cell: Cell) -> str:
    """Return a readable cell name; exterior cells include their grid."""
    if cell.is_interior:
        return cell.id
    name = cell.id or cell.region
    x, y = cell.grid
    if not name:
        return f"{x},{y}"
    return f"{name} {x},{y}"


@dataclass
class LeveledEntry:
    id: str
    level: int


# Bit meaning "calculate from all levels <= PC's level" per list kind
ALL_LEVELS_FLAG = {
    RecordType.LEVELED_CREATURE: 0x1,
    RecordType.LEVELED_ITEM: 0x2,
}


@dataclass
class LeveledList(Record):
    entries: List[LeveledEntry] = field(default_factory=list)
    all_levels: bool = False
    chance_none: int = 0

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "LeveledList":
        if record_type == RecordType.LEVELED_CREATURE:
            raw_entries = data.get("creatures")
            raw_flags = data.get("leveled_creature_flags", data.get("list_flags"))
        else:
            raw_entries = data.get("items")
            raw_flags = data.get("leveled_item_flags", data.get("list_flags"))
        entries: List[LeveledEntry] = []
        for item in cast(List[Any], raw_entries or []):
            if isinstance(item, (list, tuple)) and len(item) >= 2:
                pair = cast(List[Any], item)
                entries.append(LeveledEntry(_str(pair[0]), _int(pair[1])))
        if isinstance(raw_flags, str):
            all_levels = "ALL_LEVELS" in raw_flags.upper()
        else:
            all_levels = bool(_int(raw_flags) & ALL_LEVELS_FLAG[record_type])
        return cls(
            **cls._common(record_type, data),
            entries=entries,
            all_levels=all_levels,
            chance_none=_int(data.get("chance_none")),
        )


@dataclass
class Dialogue(Record):
    dialogue_type: str = "Topic"

    @property
    def is_journal(self) -> bool:
        return self.dialogue_type.lower() == "journal"

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Dialogue":
        dialogue_type = data.get("dialogue_type")
        if not isinstance(dialogue_type, str):
            dialogue_type = _str(_dict(data.get("data")).get("dialogue_type")) or "Topic"
        return cls(**cls._common(record_type, data), dialogue_type=dialogue_type)


@dataclass
class InfoFilter:
    id: str
    function: str = ""


@dataclass
class DialogueInfo(Record):
    speaker_id: Optional[str] = None
    speaker_race: Optional[str] = None
    speaker_class: Optional[str] = None
    speaker_faction: Optional[str] = None
    speaker_cell: Optional[str] = None
    text: str = ""
    script_text: str = ""
    quest_state: Optional[str] = None
    disposition: int = 0
    filters: List[InfoFilter] = field(default_factory=list)

    @property
    def journal_index(self) -> int:
        """Journal responses store their index in the disposition field."""
        return self.disposition

    @property
    def is_quest_name(self) -> bool:
        return (self.quest_state or "").lower() == "name"

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "DialogueInfo":
        info_data = _dict(data.get("data"))
        filters = [
            InfoFilter(
                _str(cast(Dict[str, Any], f).get("id")),
                _str(cast(Dict[str, Any], f).get("function")),
            )
            for f in cast(List[Any], data.get("filters") or [])
            if isinstance(f, dict)
        ]
        return cls(
            **cls._common(record_type, data),
            speaker_id=_opt_str(data.get("speaker_id")),
            speaker_race=_opt_str(data.get("speaker_race")),
            speaker_class=_opt_str(data.get("speaker_class")),
            speaker_faction=_opt_str(data.get("speaker_faction")),
            speaker_cell=_opt_str(data.get("speaker_cell")),
            text=_str(data.get("text")),
            script_text=_str(data.get("script_text")),
            quest_state=_opt_str(data.get("quest_state")),
            disposition=_int(info_data.get("disposition", data.get("disposition"))),
            filters=filters,
        )


@dataclass
class Script(Record):
    text: str = ""

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Script":
        return cls(**cls._common(record_type, data), text=_str(data.get("text")))


@dataclass
class PathGrid(Record):
    cell: str = ""

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "PathGrid":
        return cls(**cls._common(record_type, data), cell=_str(data.get("cell")))


@dataclass
class Header(Record):
    masters: List[Tuple[str, int]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, record_type: RecordType, data: Dict[str, Any]) -> "Header":
        masters: List[Tuple[str, int]] = []
        for item in cast(List[Any], data.get("masters") or []):
            if isinstance(item, (list, tuple)) and item:
                pair = cast(List[Any], item)
                masters.append((_str(pair[0]), _int(pair[1]) if len(pair) > 1 else 0))
        return cls(**cls._common(record_type, data), masters=masters)


RECORD_CLASSES: Dict[RecordType, Type[Record]] = {
    RecordType.CELL: Cell,
    RecordType.CONTAINER: Container,
    RecordType.CREATURE: Actor,
    RecordType.NPC: Actor,
    RecordType.DIALOGUE: Dialogue,
    RecordType.DIALOGUE_INFO: DialogueInfo,
    RecordType.HEADER: Header,
    RecordType.LEVELED_CREATURE: LeveledList,
    RecordType.LEVELED_ITEM: LeveledList,
    RecordType.PATH_GRID: PathGrid,
    RecordType.SCRIPT: Script,
}


def parse_record_type(value: Any) -> RecordType:
    """Resolve a converter's type tag; raises ValueError for unknown tags."""
    if not isinstance(value, str):
        raise ValueError(f"record has no type tag: {value!r}")
    if value in TYPE_ALIASES:
        return TYPE_ALIASES[value]
    return RecordType(value)


def record_from_dict(data: Dict[str, Any]) -> Record:
    """Build the typed record for one decoded JSON object."""
    record_type = parse_record_type(data.get("type"))
    record_class = RECORD_CLASSES.get(record_type, Record)
    return record_class.from_dict(record_type, data)
