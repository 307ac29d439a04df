"""
Narration events published by the battle engine.

Payload keys per event:
    COMPETITION_STARTED     monsters
    ACTION_REQUESTED        monster
    TURN_STARTED            monster
    CONDITION_*             monster, condition
    ACTION_USED/FAILED      monster, action
    ACTION_PASSED           monster
    EFFECTIVENESS           factor
    CRITICAL_HIT            -
    DAMAGE_DEALT            monster, amount, source ("action" | "burn")
    DAMAGE_BLOCKED          monster
    HEALED                  monster, amount
    FAINTED                 monster
    PROTECTION_STARTED      monster, kind
    PROTECTION_FADED        monster
    STAT_ROSE/DECREASED     monster, stat
    STAT_CHANGE_BLOCKED     monster
    WINNER                  monster
    DRAW                    -
"""

from enum import Enum, auto


class BattleEvent(Enum):
    """Everything observable that happens in a competition."""
    # Match
    COMPETITION_STARTED = auto()
    ACTION_REQUESTED = auto()
    WINNER = auto()
    DRAW = auto()

    # Turn
    TURN_STARTED = auto()
    CONDITION_STARTED = auto()
    CONDITION_ONGOING = auto()
    CONDITION_ENDED = auto()
    ACTION_USED = auto()
    ACTION_FAILED = auto()
    ACTION_PASSED = auto()

    # Effects
    EFFECTIVENESS = auto()
    CRITICAL_HIT = auto()
    DAMAGE_DEALT = auto()
    DAMAGE_BLOCKED = auto()
    HEALED = auto()
    FAINTED = auto()
    PROTECTION_STARTED = auto()
    PROTECTION_FADED = auto()
    STAT_ROSE = auto()
    STAT_DECREASED = auto()
    STAT_CHANGE_BLOCKED = auto()


DAMAGE_SOURCE_ACTION = "action"
DAMAGE_SOURCE_BURN = "burn"
