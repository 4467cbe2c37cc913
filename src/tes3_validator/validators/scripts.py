"""
NPC script conventions.

NPC scripts are expected to declare a fixed set of local variables, khajiit
NPCs additionally need ``T_Local_Khajiit`` set by the standard race check.
Scripts must not declare variables named after functions that return a
value, and should use PositionCell rather than Position.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Pattern, Tuple

from ..context import Context, Mode
from ..data import get_joined_commands, get_khajiit_script
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Actor, Dialogue, DialogueInfo, Record, RecordType, Script

UNCHECKED_SCRIPT_PREFIX = "t_scnpc_"
KHAJIIT_RACE = "khajiit"
KHAJIIT_RACE_PREFIX = "t_els_"


def get_variable(name: str, types: str) -> Pattern[str]:
    """Compile a pattern matching a local variable declaration line."""
    return re.compile(rf"\n[\s,]*{types}[\s,]+({name})[\s,]*(;*.?)\n", re.IGNORECASE)


def is_khajiit(race: str) -> bool:
    race = race.lower()
    return race == KHAJIIT_RACE or race.startswith(KHAJIIT_RACE_PREFIX)


@dataclass
class ScriptInfo:
    id: str
    npc: bool
    khajiit: bool
    nolore: bool
    projects: List[str] = field(default_factory=list)
    used: bool = False
    used_by_khajiit: bool = False


class ScriptValidator(Handler):
    """Checks NPC scripts and a few script-wide conventions."""

    def __init__(self, reporter: Reporter, context: Context):
        super().__init__(reporter)
        self.scripts: Dict[str, ScriptInfo] = {}
        self.npcs: List[Actor] = []

        self.npc = get_variable("T_Local_NPC", "short")
        self.khajiit = get_variable("T_Local_Khajiit", "short")
        self.nolore = get_variable("NoLore", "short")
        self.commands = get_variable(get_joined_commands(), "(short|long|float)")
        self.khajiit_script = re.compile(get_khajiit_script(), re.IGNORECASE)
        self.projects: List[Tuple[str, Pattern[str]]] = [
            (project.local, get_variable(re.escape(project.local), "short"))
            for project in context.projects
            if project.local
        ]
        self.set_khajiit_neg1 = re.compile(
            r"\n\s*set\s+T_Local_Khajiit\s+to\s+-1\s*(;.*)?\n", re.IGNORECASE
        )
        self.set_khajiit_var = re.compile(
            r"\n\s*set\s+T_Local_Khajiit\s+to\s+([0-9-]+)\s*(;.*)?\n", re.IGNORECASE
        )
        self.position = re.compile(r"^([,\s]*|.*?->[,\s]*)position[,\s]+", re.IGNORECASE)

    def on_record(self, context: Context, record: Record) -> None:
        if context.mode == Mode.VANILLA:
            return
        if isinstance(record, Script):
            self._add_script(record)
        elif isinstance(record, Actor) and record.type == RecordType.NPC and not record.is_dead:
            self.npcs.append(record)

    def on_scriptline(self, context: Context, record: Record, code: str, comment: str, topic: Dialogue) -> None:
        if context.mode == Mode.VANILLA or not code or not self.position.match(code):
            return
        if isinstance(record, DialogueInfo):
            self.report(f"Info {record.id} in topic {topic.id} uses Position instead of PositionCell")
        elif isinstance(record, Script):
            self.report(f"Script {record.id} uses Position instead of PositionCell")

    def on_end(self, context: Context) -> None:
        if context.mode == Mode.VANILLA:
            return
        for npc in self.npcs:
            if npc.script:
                self.check_npc_script(npc)
            else:
                self.report(f"Npc {npc.id} does not have a script")
        if context.mode != Mode.TD:
            for script in self.scripts.values():
                if script.used and script.khajiit and not script.used_by_khajiit:
                    self.report(
                        f"Script {script.id} defines T_Local_Khajiit but is not used by any khajiit"
                    )

    def _add_script(self, record: Script) -> None:
        text = record.text
        info = ScriptInfo(
            id=record.id,
            npc=bool(self.npc.search(text)),
            khajiit=bool(self.khajiit.search(text)),
            nolore=bool(self.nolore.search(text)),
        )
        for local, pattern in self.projects:
            if pattern.search(text):
                info.projects.append(local)
        if info.khajiit and not self.has_correct_khajiit_check(record):
            self.report(f"Script {record.id} contains non-standard khajiit check")
        self.scripts[record.lower_id] = info
        match = self.commands.search(text)
        if match:
            self.report(f"Script {record.id} contains line {match.group(0).strip()}")

    def check_npc_script(self, npc: Actor) -> None:
        script_id = npc.script.lower()
        script = self.scripts.get(script_id)
        if script is None:
            if not script_id.startswith(UNCHECKED_SCRIPT_PREFIX):
                self.report(f"Npc {npc.id} uses unknown script {npc.script}")
            return
        script.used = True
        prefix = f"Npc {npc.id} uses script {script.id}"
        if not script.npc:
            self.report(f"{prefix} which does not define T_Local_NPC")
        if not script.nolore:
            self.report(f"{prefix} which does not define NoLore")
        if is_khajiit(npc.race):
            script.used_by_khajiit = True
            if not script.khajiit:
                self.report(f"{prefix} which does not define T_Local_Khajiit")
        if not script.projects:
            self.report(f"{prefix} which does not define any province specific local variables")
        elif len(script.projects) > 1:
            self.report(f"{prefix} which defines {', '.join(script.projects)}")

    def has_correct_khajiit_check(self, record: Script) -> bool:
        text = record.text
        if self.set_khajiit_neg1.search(text):
            return bool(self.khajiit_script.search(text))
        found = False
        for match in self.set_khajiit_var.finditer(text):
            if found:
                self.report(f"Script {record.id} sets T_Local_Khajiit multiple times")
                return False
            found = True
            if match.group(1) != "1":
                self.report(f"Script {record.id} contains unexpected line {match.group(0).strip()}")
                return False
        return found
