"""
Single-plugin validators.

Each module holds one Handler subclass (plus, for body parts, the rule
engine it evaluates). They are registered by ``handlers.build_registry``.
"""

from .bodyparts import BodyPartRules
from .corpse import CorpseValidator
from .duplicates import DuplicateRefValidator
from .leveled import LeveledValidator
from .npc import NpcValidator
from .orphans import OrphanValidator
from .persistent import PersistentValidator
from .references import ReferenceValidator
from .scripts import ScriptValidator
from .travel import TravelValidator
from .uniques import UniquesValidator

__all__ = [
    "BodyPartRules",
    "CorpseValidator",
    "DuplicateRefValidator",
    "LeveledValidator",
    "NpcValidator",
    "OrphanValidator",
    "PersistentValidator",
    "ReferenceValidator",
    "ScriptValidator",
    "TravelValidator",
    "UniquesValidator",
]
