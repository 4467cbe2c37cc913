"""
Body-part assignment rules.

Each head or hair model may carry a predicate over an NPC's class, faction
and id. Rules are read from the packaged ``bodyparts.json``:

    {
        "rulesets": {"name": [[{"faction": "Ashlanders"}], ...]},
        "head": [{"model": "...", "ruleset": "name", "rules": [[...]]}],
        "hair": [...]
    }

A rule is a string (case-insensitive equality), a list (all must hold) or
``{"not": rule}``. The inner lists of a rules array are alternatives; the
objects inside one alternative must all hold.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, cast

from ..data import DataError, get_bodypart_data
from ..plugins.models import Actor

logger = logging.getLogger(__name__)

HEAD = "head"
HAIR = "hair"
FIELDS = ("class", "faction", "id")


class Rule:
    """A predicate over one string value."""

    def test(self, value: str) -> bool:
        raise NotImplementedError


class Equals(Rule):
    def __init__(self, value: str):
        self.value = value.lower()

    def test(self, value: str) -> bool:
        return self.value == value.lower()


class AllOf(Rule):
    def __init__(self, rules: List[Rule]):
        self.rules = rules

    def test(self, value: str) -> bool:
        return all(rule.test(value) for rule in self.rules)


class Not(Rule):
    def __init__(self, rule: Rule):
        self.rule = rule

    def test(self, value: str) -> bool:
        return not self.rule.test(value)


class Predicate:
    """Something that can be tested against an NPC."""

    def test(self, npc: Actor) -> bool:
        raise NotImplementedError


class FieldRule(Predicate):
    """Applies a Rule to the NPC's class, faction or id."""

    def __init__(self, field_name: str, rule: Rule):
        self.field_name = field_name
        self.rule = rule

    def test(self, npc: Actor) -> bool:
        if self.field_name == "class":
            value = npc.class_id
        elif self.field_name == "faction":
            value = npc.faction
        else:
            value = npc.id
        # A missing field passes; an empty one is tested like any other value
        if value is None:
            return True
        return self.rule.test(value)


class FieldRules(Predicate):
    """All field rules must hold."""

    def __init__(self, rules: List[FieldRule]):
        self.rules = rules

    def test(self, npc: Actor) -> bool:
        return all(rule.test(npc) for rule in self.rules)


class SomeRules(Predicate):
    """At least one set of field rules must hold."""

    def __init__(self, rules: List[FieldRules]):
        self.rules = rules

    def test(self, npc: Actor) -> bool:
        return any(rule.test(npc) for rule in self.rules)


class AllRules(Predicate):
    """Every sub-predicate must hold; an empty list always holds."""

    def __init__(self, rules: Optional[List[Predicate]] = None):
        self.rules: List[Predicate] = rules or []

    def test(self, npc: Actor) -> bool:
        return all(rule.test(npc) for rule in self.rules)


@dataclass
class UniqueParts:
    head: Optional[str] = None
    hair: Optional[str] = None


def parse_rule(value: Any) -> Rule:
    """Parse a rule from its JSON form.

    Raises:
        DataError: If the value is not a string, list or ``{"not": ...}``
    """
    if isinstance(value, str):
        return Equals(value)
    if isinstance(value, list):
        return AllOf([parse_rule(item) for item in cast(List[Any], value)])
    if isinstance(value, dict) and set(cast(Dict[str, Any], value)) == {"not"}:
        return Not(parse_rule(cast(Dict[str, Any], value)["not"]))
    raise DataError(f"Invalid body part rule: {value!r}")


class BodyPartRules:
    """Parsed body-part predicates plus the unique assignments they imply."""

    def __init__(self):
        self.heads: Dict[str, AllRules] = {}
        self.hairs: Dict[str, AllRules] = {}
        self.uniques: Dict[str, UniqueParts] = {}
        self.rulesets: Dict[str, SomeRules] = {}

    @classmethod
    def from_data(cls, data: Optional[Dict[str, Any]] = None) -> "BodyPartRules":
        """Build the rules from a definitions mapping (the packaged one by default).

        Raises:
            DataError: If the definitions are malformed or name an unknown ruleset
        """
        if data is None:
            data = get_bodypart_data()
        rules = cls()
        rulesets = data.get("rulesets") or {}
        if not isinstance(rulesets, dict):
            raise DataError("Body part rulesets must be an object")
        for name, values in cast(Dict[str, Any], rulesets).items():
            rules.rulesets[name] = rules._parse_rules(values)
        rules._parse_part(data.get(HEAD) or [], HEAD)
        rules._parse_part(data.get(HAIR) or [], HAIR)
        logger.debug(
            f"Loaded {len(rules.heads)} head rules, {len(rules.hairs)} hair rules, "
            f"{len(rules.uniques)} unique NPCs"
        )
        return rules

    def _parse_field_rules(self, value: Any) -> List[FieldRule]:
        if not isinstance(value, list):
            raise DataError(f"Field rules must be a list: {value!r}")
        field_rules: List[FieldRule] = []
        for item in cast(List[Any], value):
            if not isinstance(item, dict):
                raise DataError(f"Invalid field rule: {item!r}")
            for field_name, rule in cast(Dict[str, Any], item).items():
                if field_name not in FIELDS:
                    raise DataError(f"Unknown body part rule field {field_name}")
                field_rules.append(FieldRule(field_name, parse_rule(rule)))
        return field_rules

    def _parse_rules(
        self,
        values: Any,
        part: Optional[str] = None,
        model: Optional[str] = None,
    ) -> SomeRules:
        if not isinstance(values, list):
            raise DataError(f"Body part rules must be a list: {values!r}")
        alternatives: List[FieldRules] = []
        for value in cast(List[Any], values):
            field_rules = self._parse_field_rules(value)
            if part is not None and model is not None:
                self._register_unique(field_rules, part, model)
            if field_rules:
                alternatives.append(FieldRules(field_rules))
        return SomeRules(alternatives)

    def _register_unique(self, field_rules: Sequence[FieldRule], part: str, model: str) -> None:
        """Bind a literal id to a model; the first binding per slot wins."""
        for field_rule in field_rules:
            if field_rule.field_name != "id":
                continue
            if isinstance(field_rule.rule, Equals):
                unique = self.uniques.setdefault(field_rule.rule.value, UniqueParts())
                if part == HEAD and unique.head is None:
                    unique.head = model
                elif part == HAIR and unique.hair is None:
                    unique.hair = model
            break

    def _parse_part(self, definitions: Any, part: str) -> None:
        if not isinstance(definitions, list):
            raise DataError(f"Body part {part} definitions must be a list")
        target = self.heads if part == HEAD else self.hairs
        for definition in cast(List[Any], definitions):
            if not isinstance(definition, dict) or not isinstance(definition.get("model"), str):
                raise DataError(f"Invalid {part} definition: {definition!r}")
            entry = cast(Dict[str, Any], definition)
            model = cast(str, entry["model"]).lower()
            predicate = AllRules()
            if entry.get("rules") is not None:
                predicate.rules.append(self._parse_rules(entry["rules"], part, model))
            ruleset = entry.get("ruleset")
            if ruleset is not None:
                if ruleset not in self.rulesets:
                    raise DataError(f"Unknown body part ruleset {ruleset} for {part} {model}")
                predicate.rules.append(self.rulesets[ruleset])
            target[model] = predicate

    def check(self, npc: Actor) -> List[str]:
        """Return the body-part violations of an NPC."""
        messages: List[str] = []
        for part, model, rules in ((HAIR, npc.hair, self.hairs), (HEAD, npc.head, self.heads)):
            predicate = rules.get(model.lower())
            if predicate is not None and not predicate.test(npc):
                messages.append(f"Npc {npc.id} is using {part} {model}")
        unique = self.uniques.get(npc.lower_id)
        if unique is not None:
            for part, actual, expected in ((HAIR, npc.hair, unique.hair), (HEAD, npc.head, unique.head)):
                if expected is not None and expected != actual.lower():
                    messages.append(f"Npc {npc.id} is not using unique {part} {expected}")
        return messages

    def unique_heads(self) -> FrozenSet[str]:
        """Return lowercase ids of NPCs bound to a unique head."""
        return frozenset(npc_id for npc_id, unique in self.uniques.items() if unique.head is not None)
