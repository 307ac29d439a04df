import pytest
from competition.battle import damage
from competition.battle.effects import StrengthMode
from competition.battle.stats import Element, Stat


def test_element_factors():
    assert damage.element_factor(Element.WATER, Element.FIRE) == 2.0
    assert damage.element_factor(Element.FIRE, Element.EARTH) == 2.0
    assert damage.element_factor(Element.EARTH, Element.WATER) == 2.0
    assert damage.element_factor(Element.FIRE, Element.WATER) == 0.5
    assert damage.element_factor(Element.NORMAL, Element.FIRE) == 1.0
    assert damage.element_factor(Element.WATER, Element.NORMAL) == 1.0
    assert damage.element_factor(Element.WATER, Element.WATER) == 1.0

def test_base_damage_formula():
    # 50 x 2 x 1 x 2 x 1.5 x 1 / 3
    assert damage.base_damage(50, 2.0, 10, 10, 2.0, 1.5, 1.0) == 100
    # Rounded up
    assert damage.base_damage(10, 1.0, 10, 10, 1.0, 1.0, 0.85) == 3

def test_full_roll_is_deterministic(templates, rng):
    attacker = templates["Blub"].spawn()
    target = templates["Flamo"].spawn()
    rng.script("critical hit", True)

    roll = damage.roll_base_damage(50, attacker, target, Element.WATER, rng)

    assert roll.amount == 100
    assert roll.critical
    assert roll.effectiveness == 2.0
    # Crit is drawn before the random factor
    assert rng.contexts() == ["critical hit", "damage random"]

def test_non_critical_roll_with_attack_advantage(make_template, rng):
    attacker = make_template("Strong", Element.WATER, atk=20).spawn()
    target = make_template("Flamo", Element.FIRE, defense=10).spawn()
    rng.script("critical hit", False)
    rng.script_double("damage random", 1.0)

    roll = damage.roll_base_damage(50, attacker, target, Element.WATER, rng)

    assert roll.amount == 100
    assert not roll.critical

def test_critical_chance(templates):
    slow = templates["Blub"].spawn()
    fast = templates["Flamo"].spawn()

    # 100 x 10^(-20/10) and 100 x 10^(-10/20)
    assert damage.critical_chance(slow, fast) == 1
    assert damage.critical_chance(fast, slow) == 31

def test_hit_chance_uses_precision_and_agility(templates):
    attacker = templates["Blub"].spawn()
    target = templates["Flamo"].spawn()

    assert damage.hit_chance(90, attacker, target) == 90
    attacker.change_stage(Stat.PRC, 3)
    assert damage.hit_chance(40, attacker, target) == 80
    assert damage.hit_chance(90, attacker, target) == 100
    target.change_stage(Stat.AGL, 3)
    assert damage.hit_chance(40, attacker, target) == 40
    # Self damage only looks at precision
    assert damage.hit_chance(40, attacker, None) == 80

def test_relative_and_absolute_magnitudes(templates, rng):
    attacker = templates["Blub"].spawn()
    target = templates["Normo"].spawn()

    rel = damage.roll_magnitude(StrengthMode.REL, 25, attacker, target, Element.NORMAL, rng)
    absolute = damage.roll_magnitude(StrengthMode.ABS, 7, attacker, target, Element.NORMAL, rng)

    assert rel.amount == 10
    assert absolute.amount == 7
    assert not rel.critical and rel.effectiveness == 1.0
    # Neither draws randomness
    assert rng.calls == []
