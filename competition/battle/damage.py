"""
Damage model - pure functions for hit chances and damage/heal magnitudes.

    damage = ceil(base x element x ATK/DEF x crit x same element x random / 3)

Randomness (critical hit, random factor) is drawn from the RandomSource
passed in, so results are reproducible with a seeded or stubbed source.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from engine.core.randomness import RandomSource
from competition.battle.effects import StrengthMode
from competition.battle.monster import BattleMonster
from competition.battle.stats import Element, Stat

ADVANTAGE_FACTOR = 2.0
DISADVANTAGE_FACTOR = 0.5
NEUTRAL_FACTOR = 1.0
CRITICAL_FACTOR = 2.0
SAME_ELEMENT_FACTOR = 1.5
RANDOM_FACTOR_MIN = 0.85
RANDOM_FACTOR_MAX = 1.0
NORMALIZATION_DIVISOR = 3

CONTEXT_CRITICAL = "critical hit"
CONTEXT_RANDOM = "damage random"

# attacking element -> element it is strong against
_STRONG_AGAINST = {
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.WATER,
}


@dataclass(frozen=True)
class DamageRoll:
    """Result of a magnitude computation, with what narration needs."""
    amount: int
    effectiveness: float = NEUTRAL_FACTOR
    critical: bool = False


def element_factor(action_element: Element, target_element: Element) -> float:
    """2.0 for an advantage pairing, 0.5 for the reverse, else 1.0."""
    if _STRONG_AGAINST.get(action_element) is target_element:
        return ADVANTAGE_FACTOR
    if _STRONG_AGAINST.get(target_element) is action_element:
        return DISADVANTAGE_FACTOR
    return NEUTRAL_FACTOR


def critical_chance(attacker: BattleMonster, target: BattleMonster) -> int:
    """Crit chance in percent: 100 x 10^(-SPD target / SPD attacker)."""
    exponent = -target.effective(Stat.SPD) / attacker.effective(Stat.SPD)
    return int(100 * math.pow(10, exponent))


def same_element_factor(attacker: BattleMonster, action_element: Element) -> float:
    return SAME_ELEMENT_FACTOR if attacker.element is action_element else NEUTRAL_FACTOR


def hit_chance(base_rate: int, attacker: BattleMonster, target: Optional[BattleMonster]) -> int:
    """
    Final hit chance of a damage effect, in whole percent.

    Args:
        base_rate: Declared hit rate
        attacker: The monster using the effect
        target: The opponent for opponent-targeted damage, None when
            the user damages itself

    Returns:
        base x PRC/AGL (or base x PRC when self-targeted), clamped to
        [0, 100] and truncated
    """
    rate = min(100.0, max(0.0, float(base_rate)))
    precision = attacker.effective(Stat.PRC)
    if target is None:
        rate *= precision
    else:
        agility = target.effective(Stat.AGL)
        rate *= precision / agility if agility > 0 else precision
    return int(min(100.0, max(0.0, rate)))


def base_damage(
    base: int,
    element: float,
    attack: float,
    defense: float,
    critical: float,
    same_element: float,
    random_factor: float,
) -> int:
    """The damage formula itself, with every factor given."""
    total = base * element * (attack / defense) * critical * same_element * random_factor
    return math.ceil(total / NORMALIZATION_DIVISOR)


def relative_amount(percent: int, reference: BattleMonster) -> int:
    """ceil(base hp x percent / 100)."""
    return math.ceil(reference.base_hp * percent / 100)


def roll_base_damage(
    base: int,
    attacker: BattleMonster,
    target: BattleMonster,
    action_element: Element,
    rng: RandomSource,
) -> DamageRoll:
    """Run the full formula, drawing crit and random factor from ``rng``."""
    effectiveness = element_factor(action_element, target.element)
    critical = rng.check_probability(CONTEXT_CRITICAL, critical_chance(attacker, target))
    random_factor = rng.double_in_range(CONTEXT_RANDOM, RANDOM_FACTOR_MIN, RANDOM_FACTOR_MAX)

    amount = base_damage(
        base,
        effectiveness,
        attacker.effective(Stat.ATK),
        target.effective(Stat.DEF),
        CRITICAL_FACTOR if critical else NEUTRAL_FACTOR,
        same_element_factor(attacker, action_element),
        random_factor,
    )
    return DamageRoll(amount=amount, effectiveness=effectiveness, critical=critical)


def roll_magnitude(
    mode: StrengthMode,
    value: int,
    attacker: BattleMonster,
    target: BattleMonster,
    action_element: Element,
    rng: RandomSource,
) -> DamageRoll:
    """Magnitude for any strength mode; only BASE touches randomness."""
    if mode is StrengthMode.REL:
        return DamageRoll(amount=relative_amount(value, target))
    if mode is StrengthMode.ABS:
        return DamageRoll(amount=value)
    return roll_base_damage(value, attacker, target, action_element, rng)
