"""
Text views of templates and of the running competition.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from competition.battle.effects import Continue, Effect, Repeat
from competition.battle.monster import BattleMonster, MonsterTemplate
from competition.battle.roster import Roster
from competition.battle.stats import Stat
from competition.battle.system import TurnScheduler

HEALTH_BAR_LENGTH = 20
HEALTH_FILLED = "X"
HEALTH_EMPTY = "_"
NO_DAMAGE = "--"
NO_ACTIVE_COMPETITION = "Error, no active competition. Try 'show monsters' to see all available monsters."


def health_bar(monster: BattleMonster) -> str:
    """``[XXXX____]`` with ceil(20 x hp / base hp) filled cells."""
    filled = 0
    if monster.is_alive:
        filled = math.ceil(HEALTH_BAR_LENGTH * monster.current_hp / monster.base_hp)
    return "[" + HEALTH_FILLED * filled + HEALTH_EMPTY * (HEALTH_BAR_LENGTH - filled) + "]"


class StatusBoard:
    """
    Read-only status view of the current competition.

    Handed to the debug oracle so it can answer ``show`` while a prompt
    is pending. The shell points it at the current roster and scheduler.
    """

    def __init__(self):
        self.roster: Optional[Roster] = None
        self.scheduler: Optional[TurnScheduler] = None

    def status_lines(self) -> list[str]:
        if self.roster is None or not self.roster.monsters:
            return [NO_ACTIVE_COMPETITION]

        # While turns resolve nobody is choosing, the first monster is marked
        current = self.scheduler.current_monster if self.scheduler is not None else None
        if current is None:
            current = self.roster.monsters[0]

        lines = []
        for number, monster in enumerate(self.roster.monsters, start=1):
            marker = "*" if monster is current else ""
            if monster.is_fainted:
                state = "FAINTED"
            elif monster.condition is None:
                state = "OK"
            else:
                state = monster.condition.value
            lines.append(f"{health_bar(monster)} {number} {marker}{monster.name} ({state})")
        return lines


def monster_lines(templates: Iterable[MonsterTemplate]) -> list[str]:
    return [
        f"{t.name}: ELEMENT {t.element.value}, HP {t.hp}, ATK {t.atk}, DEF {t.defense}, SPD {t.spd}"
        for t in templates
    ]


def _hit_rate(effect: Effect) -> int:
    # Repeat blocks report their first inner effect
    if isinstance(effect, Repeat):
        return effect.effects[0].hit_rate
    return effect.hit_rate


def action_lines(monster: BattleMonster) -> list[str]:
    """``ACTIONS OF X`` followed by one summary line per action."""
    lines = [f"ACTIONS OF {monster.name}"]
    for action in monster.actions:
        first = action.effects[0]
        damage = action.first_damage

        if isinstance(first, Continue):
            hit_rate = first.hit_rate
        elif damage is not None:
            hit_rate = damage.hit_rate
        else:
            hit_rate = _hit_rate(first)

        strength = NO_DAMAGE if damage is None else f"{damage.mode.prefix}{damage.value}"
        lines.append(f"{action.name}: ELEMENT {action.element.value}, Damage {strength}, HitRate {hit_rate}")
    return lines


def stats_lines(monster: BattleMonster) -> list[str]:
    """``STATS OF X`` followed by hp and the staged stats."""
    parts = [f"HP {monster.current_hp}/{monster.base_hp}"]
    for stat in Stat:
        text = f"{stat.value} {monster.stats.base(stat)}"
        stage = monster.stage(stat)
        if stage != 0:
            text += f"({stage:+d})"
        parts.append(text)
    return [f"STATS OF {monster.name}", ", ".join(parts)]
