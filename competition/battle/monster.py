"""
Monsters - immutable templates and their per-match battle copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from pydantic import Field, InstanceOf

from engine.core.template import Template
from competition.battle.effects import Action
from competition.battle.stats import (
    Element,
    ProtectionKind,
    Stat,
    StatBlock,
    StageChange,
    StatusCondition,
    clamp_stage,
    effective_stat,
)

MAX_ACTIONS = 4


class MonsterTemplate(Template):
    """
    A monster as defined in the configuration.

    Never used in battle directly: ``spawn`` creates the mutable copy a
    match works on.
    """

    _type_name: ClassVar[str] = "monster"

    name: str = Field(min_length=1)
    element: Element
    hp: int = Field(ge=1)
    atk: int = Field(ge=1)
    defense: int = Field(ge=1)
    spd: int = Field(ge=1)
    prc: int = Field(default=1, ge=1)
    agl: int = Field(default=1, ge=1)
    actions: tuple[InstanceOf[Action], ...] = Field(min_length=1, max_length=MAX_ACTIONS)

    @property
    def stats(self) -> StatBlock:
        return StatBlock(
            hp=self.hp,
            atk=self.atk,
            defense=self.defense,
            spd=self.spd,
            prc=self.prc,
            agl=self.agl,
        )

    def find_action(self, name: str) -> Optional[Action]:
        for action in self.actions:
            if action.name == name:
                return action
        return None

    def spawn(self, name: Optional[str] = None) -> BattleMonster:
        """Create a fresh battle copy, optionally under another name."""
        return BattleMonster(
            name=name or self.name,
            element=self.element,
            stats=self.stats,
            actions=self.actions,
            template_name=self.name,
        )


@dataclass
class BattleMonster:
    """
    A monster taking part in one match.

    Holds all mutable battle state: hp, stages, condition, protection.
    Mutators report what happened and leave narration to the caller.
    """
    name: str
    element: Element
    stats: StatBlock
    actions: tuple[Action, ...]
    template_name: str = ""

    current_hp: int = -1
    stages: dict[Stat, int] = field(default_factory=lambda: {stat: 0 for stat in Stat})
    condition: Optional[StatusCondition] = None
    protection: ProtectionKind = ProtectionKind.NONE
    protection_rounds: int = 0

    def __post_init__(self):
        if self.current_hp < 0:
            self.current_hp = self.stats.hp

    @property
    def base_hp(self) -> int:
        return self.stats.hp

    @property
    def is_fainted(self) -> bool:
        return self.current_hp <= 0

    @property
    def is_alive(self) -> bool:
        return not self.is_fainted

    @property
    def is_protected_against_damage(self) -> bool:
        return self.protection is ProtectionKind.DAMAGE

    @property
    def is_protected_against_stat_loss(self) -> bool:
        return self.protection is ProtectionKind.STATS

    def stage(self, stat: Stat) -> int:
        return self.stages[stat]

    def effective(self, stat: Stat) -> float:
        """Effective value of a staged stat (never below 1)."""
        return effective_stat(self.stats.base(stat), stat, self.stages[stat], self.condition)

    def find_action(self, name: str) -> Optional[Action]:
        for action in self.actions:
            if action.name == name:
                return action
        return None

    def take_damage(self, amount: int) -> int:
        """
        Reduce hp, never below 0.

        Returns:
            The hp actually lost
        """
        lost = min(self.current_hp, max(0, amount))
        self.current_hp -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Restore hp, capped at base hp. Returns the hp actually gained."""
        gained = min(self.base_hp - self.current_hp, max(0, amount))
        self.current_hp += gained
        return gained

    def change_stage(self, stat: Stat, delta: int) -> StageChange:
        """
        Apply a signed stage delta.

        Decreases are blocked while protected against stat changes.
        The stage is clamped to [-5, 5]; if the clamp swallows the whole
        change the result is UNCHANGED.
        """
        if delta < 0 and self.is_protected_against_stat_loss:
            return StageChange.BLOCKED

        old = self.stages[stat]
        new = clamp_stage(old + delta)
        self.stages[stat] = new
        if new > old:
            return StageChange.ROSE
        if new < old:
            return StageChange.DECREASED
        return StageChange.UNCHANGED

    def inflict(self, condition: StatusCondition) -> bool:
        """Set a condition unless one is already active. Returns True if set."""
        if self.condition is not None:
            return False
        self.condition = condition
        return True

    def clear_condition(self) -> None:
        self.condition = None

    def protect(self, kind: ProtectionKind, rounds: int) -> None:
        """Replace any current protection."""
        self.protection = kind
        self.protection_rounds = rounds if kind is not ProtectionKind.NONE else 0

    def tick_protection(self) -> bool:
        """
        Count down protection by one round.

        Returns:
            True if protection ran out with this tick
        """
        if self.protection_rounds > 0:
            self.protection_rounds -= 1
        if self.protection_rounds == 0 and self.protection is not ProtectionKind.NONE:
            self.protection = ProtectionKind.NONE
            return True
        return False
