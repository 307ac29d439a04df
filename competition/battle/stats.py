"""
Stat model - elements, stats, stages, status conditions, protection.

Effective stat = base x stage factor x condition multiplier, floored at 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

MIN_STAGE = -5
MAX_STAGE = 5
CONDITION_MULTIPLIER = 0.75
MIN_EFFECTIVE_STAT = 1.0


class Element(Enum):
    """Elemental affinity of monsters and actions."""
    WATER = "WATER"
    FIRE = "FIRE"
    EARTH = "EARTH"
    NORMAL = "NORMAL"


class Stat(Enum):
    """Stats that carry a stage counter."""
    ATK = "ATK"
    DEF = "DEF"
    SPD = "SPD"
    PRC = "PRC"
    AGL = "AGL"

    @property
    def stage_base(self) -> int:
        """The k in the stage factor formula."""
        return 3 if self in (Stat.PRC, Stat.AGL) else 2


class StatusCondition(Enum):
    """At most one condition is active on a monster at a time."""
    WET = "WET"
    BURN = "BURN"
    QUICKSAND = "QUICKSAND"
    SLEEP = "SLEEP"

    @property
    def weakened_stat(self) -> Optional[Stat]:
        """Stat multiplied by 0.75 while the condition lasts."""
        return _WEAKENED_STATS.get(self)


_WEAKENED_STATS = {
    StatusCondition.BURN: Stat.ATK,
    StatusCondition.WET: Stat.DEF,
    StatusCondition.QUICKSAND: Stat.SPD,
}


class ProtectionKind(Enum):
    """What a monster is currently shielded against."""
    NONE = "none"
    DAMAGE = "health"
    STATS = "stats"


class StageChange(Enum):
    """Outcome of a stage change request."""
    ROSE = "rose"
    DECREASED = "decreased"
    UNCHANGED = "unchanged"
    BLOCKED = "blocked"


def stage_factor(stat: Stat, stage: int) -> float:
    """
    Multiplier for a stage.

    Args:
        stat: The stat, selects k (2 for ATK/DEF/SPD, 3 for PRC/AGL)
        stage: Stage in [-5, 5]

    Returns:
        (k + stage) / k for non-negative stages, k / (k - stage) otherwise
    """
    k = stat.stage_base
    if stage >= 0:
        return (k + stage) / k
    return k / (k - stage)


def clamp_stage(stage: int) -> int:
    return max(MIN_STAGE, min(MAX_STAGE, stage))


def effective_stat(
    base: int,
    stat: Stat,
    stage: int,
    condition: Optional[StatusCondition] = None,
) -> float:
    """Base stat after stage factor and condition multiplier, floored at 1."""
    value = base * stage_factor(stat, stage)
    if condition is not None and condition.weakened_stat is stat:
        value *= CONDITION_MULTIPLIER
    return max(MIN_EFFECTIVE_STAT, value)


@dataclass(frozen=True)
class StatBlock:
    """Immutable base stats of a monster."""
    hp: int
    atk: int
    defense: int
    spd: int
    prc: int = 1
    agl: int = 1

    def base(self, stat: Stat) -> int:
        """Get the base value of a staged stat."""
        if stat is Stat.ATK:
            return self.atk
        if stat is Stat.DEF:
            return self.defense
        if stat is Stat.SPD:
            return self.spd
        if stat is Stat.PRC:
            return self.prc
        return self.agl
