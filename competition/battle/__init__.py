"""
Battle module - turn-based monster competitions.

Provides:
- Stat model (elements, stages, conditions, protection)
- Monster templates and per-match battle copies
- Effects and actions (closed effect union)
- Damage model
- Effect pipeline (commit / execute)
- Roster and turn scheduler
- Narration events
"""

from competition.battle.stats import (
    Element,
    Stat,
    StatusCondition,
    ProtectionKind,
    StageChange,
    StatBlock,
    stage_factor,
    effective_stat,
)
from competition.battle.effects import (
    Action,
    Count,
    Effect,
    EffectTarget,
    StrengthMode,
    Damage,
    Heal,
    InflictStatusCondition,
    InflictStatChange,
    Protect,
    Continue,
    Repeat,
    targets_self,
)
from competition.battle.monster import MonsterTemplate, BattleMonster
from competition.battle.damage import DamageRoll, element_factor, base_damage
from competition.battle.events import BattleEvent
from competition.battle.pipeline import EffectPipeline, ActionPlan
from competition.battle.roster import Roster
from competition.battle.system import TurnScheduler, BattlePhase, BattleCommand

__all__ = [
    # Stats
    "Element",
    "Stat",
    "StatusCondition",
    "ProtectionKind",
    "StageChange",
    "StatBlock",
    "stage_factor",
    "effective_stat",
    # Effects
    "Action",
    "Count",
    "Effect",
    "EffectTarget",
    "StrengthMode",
    "Damage",
    "Heal",
    "InflictStatusCondition",
    "InflictStatChange",
    "Protect",
    "Continue",
    "Repeat",
    "targets_self",
    # Monsters
    "MonsterTemplate",
    "BattleMonster",
    # Damage
    "DamageRoll",
    "element_factor",
    "base_damage",
    # Events
    "BattleEvent",
    # Pipeline
    "EffectPipeline",
    "ActionPlan",
    # System
    "Roster",
    "TurnScheduler",
    "BattlePhase",
    "BattleCommand",
]
