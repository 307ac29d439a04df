"""
Roster - the monsters of one running match.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional

from competition.battle.monster import BattleMonster, MonsterTemplate
from competition.battle.stats import Stat

MIN_PARTICIPANTS = 2


class Roster:
    """
    Ordered battle copies of the participating monsters.

    Templates entered more than once get numbered names (``name#1``,
    ``name#2``) in roster order so every participant is addressable.
    """

    def __init__(self, templates: Iterable[MonsterTemplate]):
        templates = list(templates)
        totals = Counter(template.name for template in templates)
        seen: Counter[str] = Counter()

        self.monsters: list[BattleMonster] = []
        for template in templates:
            if totals[template.name] > 1:
                seen[template.name] += 1
                self.monsters.append(template.spawn(f"{template.name}#{seen[template.name]}"))
            else:
                self.monsters.append(template.spawn())

        self.ended = False

    def __len__(self) -> int:
        return len(self.monsters)

    def __iter__(self):
        return iter(self.monsters)

    def alive(self) -> list[BattleMonster]:
        """Monsters still in the fight, in roster order."""
        return [monster for monster in self.monsters if monster.is_alive]

    @property
    def alive_count(self) -> int:
        return len(self.alive())

    def find(self, name: str) -> Optional[BattleMonster]:
        for monster in self.monsters:
            if monster.name == name:
                return monster
        return None

    def speed_order(self) -> list[BattleMonster]:
        """Alive monsters by effective speed, fastest first; ties keep roster order."""
        return sorted(self.alive(), key=lambda m: m.effective(Stat.SPD), reverse=True)

    def default_target(self, chooser: BattleMonster) -> Optional[BattleMonster]:
        """First alive monster in roster order other than the chooser."""
        for monster in self.monsters:
            if monster is not chooser and monster.is_alive:
                return monster
        return None

    def check_end(self) -> bool:
        """Mark the match ended once fewer than two monsters stand."""
        if self.alive_count < MIN_PARTICIPANTS:
            self.ended = True
        return self.ended

    @property
    def winner(self) -> Optional[BattleMonster]:
        """The sole survivor of an ended match, if there is one."""
        if not self.ended:
            return None
        alive = self.alive()
        return alive[0] if len(alive) == 1 else None
