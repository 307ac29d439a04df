"""
Effect pipeline - executes actions effect by effect.

Executing an action is a two-phase protocol:

1. ``commit(action)`` draws every random choice that has to be fixed
   before the action is announced (repeat counts) and returns an
   immutable ActionPlan.
2. ``execute(plan, user, target)`` applies the effects in declaration
   order, reusing the committed choices.

The plan is discarded afterwards, so the next use of the same action
draws fresh counts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from engine.core.events import EventBus
from engine.core.errors import BattleStateError
from engine.core.randomness import RandomSource
from competition.battle import damage
from competition.battle.effects import (
    Action,
    Continue,
    Damage,
    Effect,
    EffectTarget,
    Heal,
    InflictStatChange,
    InflictStatusCondition,
    Protect,
    Repeat,
    StrengthMode,
    targets_self,
)
from competition.battle.events import BattleEvent, DAMAGE_SOURCE_ACTION
from competition.battle.monster import BattleMonster
from competition.battle.stats import Element, StageChange

logger = logging.getLogger(__name__)

CONTEXT_ATTACK_HIT = "attack hit"
CONTEXT_HEAL = "heal effect"
CONTEXT_STATUS = "inflict status"
CONTEXT_STAT_CHANGE = "stat change"
CONTEXT_PROTECTION = "protection effect"
CONTEXT_PROTECT_ROUNDS = "protect rounds"
CONTEXT_CONTINUE = "continue"
CONTEXT_REPEAT_COUNT = "repeat count"


@dataclass(frozen=True)
class ActionPlan:
    """
    Random choices committed for one use of an action.

    Attributes:
        action: The action being used
        repeat_counts: Effect index -> number of iterations, one entry
            per Repeat in the action
    """
    action: Action
    repeat_counts: Mapping[int, int] = field(default_factory=dict)

    def repeat_count(self, index: int) -> int:
        try:
            return self.repeat_counts[index]
        except KeyError:
            raise BattleStateError(
                f"no repeat count committed for effect {index} of {self.action.name}"
            ) from None


class EffectPipeline:
    """
    Applies effects to battle monsters.

    Every outcome worth telling is published on the event bus; the
    pipeline itself never prints.
    """

    def __init__(self, rng: RandomSource, events: EventBus):
        self.rng = rng
        self.events = events

    # Phase 1

    def commit(self, action: Action) -> ActionPlan:
        """Draw the repeat counts of an action."""
        counts: dict[int, int] = {}
        for index, effect in enumerate(action.effects):
            if isinstance(effect, Repeat):
                count = effect.count
                if count.is_fixed:
                    counts[index] = count.low
                else:
                    counts[index] = self.rng.int_in_range(CONTEXT_REPEAT_COUNT, count.low, count.high)
                logger.debug(f"{action.name}: repeat block {index} runs {counts[index]} times")
        return ActionPlan(action=action, repeat_counts=MappingProxyType(counts))

    # Phase 2

    def execute(
        self,
        plan: ActionPlan,
        user: BattleMonster,
        target: Optional[BattleMonster],
    ) -> bool:
        """
        Apply a committed action.

        Args:
            plan: The committed action
            user: The acting monster
            target: The chosen opponent, if any

        Returns:
            False if the action failed as a whole (its first effect
            failed), True otherwise
        """
        action = plan.action
        opponent_gone = target is None or target.is_fainted

        if action.is_self_only and opponent_gone:
            for index, effect in enumerate(action.effects):
                self._apply(plan, index, effect, user, user)
                if user.is_fainted:
                    break
            return True

        if not self._apply_to_pair(plan, 0, action.effects[0], user, target):
            return False

        for index, effect in enumerate(action.effects[1:], start=1):
            if user.is_fainted:
                break
            self._apply_to_pair(plan, index, effect, user, target)
        return True

    def deal_damage(self, monster: BattleMonster, amount: int, source: str) -> None:
        """Apply damage and narrate it, including a faint."""
        was_alive = monster.is_alive
        monster.take_damage(amount)
        self.events.publish(BattleEvent.DAMAGE_DEALT, monster=monster, amount=amount, source=source)
        if was_alive and monster.is_fainted:
            self.events.publish(BattleEvent.FAINTED, monster=monster)

    def _apply_to_pair(
        self,
        plan: ActionPlan,
        index: int,
        effect: Effect,
        user: BattleMonster,
        target: Optional[BattleMonster],
    ) -> bool:
        # Once the opponent is gone only effects on the user still apply
        if target is None or target.is_fainted:
            if targets_self(effect):
                return self._apply(plan, index, effect, user, user)
            return False
        return self._apply(plan, index, effect, user, target)

    def _apply(
        self,
        plan: ActionPlan,
        index: int,
        effect: Effect,
        user: BattleMonster,
        target: BattleMonster,
    ) -> bool:
        if user.is_fainted or target.is_fainted:
            return False

        element = plan.action.element
        match effect:
            case Damage():
                return self._damage(effect, element, user, target)
            case Heal():
                return self._heal(effect, element, user, target)
            case InflictStatusCondition():
                return self._inflict_status(effect, user, target)
            case InflictStatChange():
                return self._inflict_stat_change(effect, user, target)
            case Protect():
                return self._protect(effect, user)
            case Continue():
                return self.rng.check_probability(CONTEXT_CONTINUE, effect.hit_rate)
            case Repeat():
                return self._repeat(plan, plan.repeat_count(index), effect, user, target)
        raise TypeError(f"unknown effect {effect!r}")

    def _damage(self, effect: Damage, element: Element, user: BattleMonster, target: BattleMonster) -> bool:
        self_targeted = effect.target is EffectTarget.USER
        chance = damage.hit_chance(effect.hit_rate, user, None if self_targeted else target)
        if not self.rng.check_probability(CONTEXT_ATTACK_HIT, chance):
            return False

        receiver = user if self_targeted else target
        if receiver.is_protected_against_damage:
            self.events.publish(BattleEvent.DAMAGE_BLOCKED, monster=receiver)
            return True

        # The formula always measures against the chosen target
        roll = damage.roll_magnitude(effect.mode, effect.value, user, target, element, self.rng)
        self._publish_roll(roll)
        self.deal_damage(receiver, roll.amount, DAMAGE_SOURCE_ACTION)
        return True

    def _heal(self, effect: Heal, element: Element, user: BattleMonster, target: BattleMonster) -> bool:
        if not self.rng.check_probability(CONTEXT_HEAL, effect.hit_rate):
            return False

        receiver = user if effect.target is EffectTarget.USER else target
        if effect.mode is StrengthMode.BASE:
            roll = damage.roll_base_damage(effect.value, user, target, element, self.rng)
            self._publish_roll(roll)
            amount = roll.amount
        elif effect.mode is StrengthMode.REL:
            amount = damage.relative_amount(effect.value, receiver)
        else:
            amount = effect.value

        receiver.heal(amount)
        self.events.publish(BattleEvent.HEALED, monster=receiver, amount=amount)
        return True

    def _inflict_status(self, effect: InflictStatusCondition, user: BattleMonster, target: BattleMonster) -> bool:
        if not self.rng.check_probability(CONTEXT_STATUS, effect.hit_rate):
            return False

        receiver = user if effect.target is EffectTarget.USER else target
        if receiver.inflict(effect.condition):
            self.events.publish(BattleEvent.CONDITION_STARTED, monster=receiver, condition=effect.condition)
        return True

    def _inflict_stat_change(self, effect: InflictStatChange, user: BattleMonster, target: BattleMonster) -> bool:
        if not self.rng.check_probability(CONTEXT_STAT_CHANGE, effect.hit_rate):
            return False

        receiver = user if effect.target is EffectTarget.USER else target
        result = receiver.change_stage(effect.stat, effect.delta)
        if result is StageChange.ROSE:
            self.events.publish(BattleEvent.STAT_ROSE, monster=receiver, stat=effect.stat)
        elif result is StageChange.DECREASED:
            self.events.publish(BattleEvent.STAT_DECREASED, monster=receiver, stat=effect.stat)
        elif result is StageChange.BLOCKED:
            self.events.publish(BattleEvent.STAT_CHANGE_BLOCKED, monster=receiver)
        return True

    def _protect(self, effect: Protect, user: BattleMonster) -> bool:
        if not self.rng.check_probability(CONTEXT_PROTECTION, effect.hit_rate):
            return False

        duration = effect.duration
        if duration.is_fixed:
            rounds = duration.low
        else:
            rounds = self.rng.int_in_range(CONTEXT_PROTECT_ROUNDS, duration.low, duration.high)
        user.protect(effect.kind, rounds)
        self.events.publish(BattleEvent.PROTECTION_STARTED, monster=user, kind=effect.kind)
        return True

    def _repeat(
        self,
        plan: ActionPlan,
        count: int,
        effect: Repeat,
        user: BattleMonster,
        target: BattleMonster,
    ) -> bool:
        """
        Run a repeat block ``count`` times.

        Fails only if the first iteration had no successful sub-effect.
        Stops as soon as either monster faints.
        """
        any_iteration_succeeded = False
        for iteration in range(count):
            if user.is_fainted or target.is_fainted:
                break

            succeeded = False
            for sub in effect.effects:
                succeeded = self._apply(plan, -1, sub, user, target) or succeeded
                if user.is_fainted or target.is_fainted:
                    return any_iteration_succeeded or succeeded

            if iteration == 0 and not succeeded:
                return False
            any_iteration_succeeded = any_iteration_succeeded or succeeded
        return any_iteration_succeeded

    def _publish_roll(self, roll: damage.DamageRoll) -> None:
        if roll.effectiveness != damage.NEUTRAL_FACTOR:
            self.events.publish(BattleEvent.EFFECTIVENESS, factor=roll.effectiveness)
        if roll.critical:
            self.events.publish(BattleEvent.CRITICAL_HIT)
