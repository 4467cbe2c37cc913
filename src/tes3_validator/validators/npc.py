"""NPC checks: body parts, crime reporting, khajiit animations and inventory."""

from ..context import Context, Mode
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Actor, InventoryEntry, Record, RecordType
from .bodyparts import BodyPartRules

BOUNTY_ALARM = 100
HOSTILE = 70
KHAJIIT_ANIMATIONS = ("t_els_ohmes-raht", "t_els_suthay")
KHAJIIT_F = "epos_kha_upr_anim_f.nif"
KHAJIIT_M = "epos_kha_upr_anim_m.nif"
SLAVE_BRACERS = ("slave_bracer_left", "slave_bracer_right")


class NpcValidator(Handler):
    """Checks NPC records against body-part rules and behaviour conventions."""

    def __init__(self, reporter: Reporter, rules: BodyPartRules):
        super().__init__(reporter)
        self.rules = rules
        self.slave_bracers: dict[str, int] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if not isinstance(record, Actor) or record.type != RecordType.NPC:
            return
        for message in self.rules.check(record):
            self.report(message)
        if context.mode == Mode.PT and record.autocalc:
            self.report(f"Npc {record.id} has auto calculated stats and spells")
        if not record.is_dead:
            if record.fight >= HOSTILE and record.alarm >= BOUNTY_ALARM:
                self.report(f"Npc {record.id} reports crimes despite having {record.fight} fight")
            if record.alarm < BOUNTY_ALARM and (record.class_id or "").lower() == "guard":
                self.report(f"Npc {record.id} does not report crimes despite being a guard")
        self._check_khajiit_animations(record)

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        if record.type != RecordType.NPC or entry.id.lower() not in SLAVE_BRACERS:
            return
        count = self.slave_bracers.get(record.lower_id, 0)
        if count > 1:
            return
        count += abs(entry.count)
        self.slave_bracers[record.lower_id] = count
        if count > 1:
            self.report(f"Npc {record.id} has multiple slave bracers")

    def _check_khajiit_animations(self, npc: Actor) -> None:
        mesh = npc.mesh.lower()
        if npc.race.lower() in KHAJIIT_ANIMATIONS:
            target = KHAJIIT_F if npc.female else KHAJIIT_M
            if mesh != target:
                self.report(f"Npc {npc.id} is not using animation {target}")
        elif mesh in (KHAJIIT_F, KHAJIIT_M):
            self.report(f"Npc {npc.id} has animation {npc.mesh}")
