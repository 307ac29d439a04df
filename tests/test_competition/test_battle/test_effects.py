import pytest
from engine.core.errors import ConfigError, InvalidEffectError
from competition.battle.effects import (
    Action,
    Continue,
    Count,
    Damage,
    EffectTarget,
    Heal,
    InflictStatChange,
    Protect,
    Repeat,
    StrengthMode,
    iter_effects,
    targets_self,
)
from competition.battle.monster import MonsterTemplate
from competition.battle.stats import Element, ProtectionKind, Stat


def hit(target=EffectTarget.TARGET, value=10):
    return Damage(target, StrengthMode.ABS, value, 100)


def test_action_needs_effects():
    with pytest.raises(InvalidEffectError):
        Action("Nothing", Element.NORMAL, ())

def test_hit_rate_bounds():
    with pytest.raises(InvalidEffectError):
        Continue(101)
    with pytest.raises(InvalidEffectError):
        Damage(EffectTarget.TARGET, StrengthMode.BASE, 10, -1)
    assert Continue(0).hit_rate == 0

def test_negative_strength_rejected():
    with pytest.raises(InvalidEffectError):
        Heal(EffectTarget.USER, StrengthMode.ABS, -5, 100)

def test_count_validation():
    assert Count.fixed(3).is_fixed
    assert str(Count(1, 3)) == "random 1 3"
    with pytest.raises(InvalidEffectError):
        Count(0, 2)
    with pytest.raises(InvalidEffectError):
        Count(4, 2)

def test_protect_needs_a_kind():
    with pytest.raises(InvalidEffectError):
        Protect(ProtectionKind.NONE, Count.fixed(1), 100)

def test_repeat_rejects_nesting_and_empty_blocks():
    inner = Repeat(Count.fixed(2), (hit(),))
    with pytest.raises(InvalidEffectError):
        Repeat(Count.fixed(2), (inner,))
    with pytest.raises(InvalidEffectError):
        Repeat(Count.fixed(2), ())

def test_invalid_effect_error_is_config_error():
    assert issubclass(InvalidEffectError, ConfigError)

def test_effects_are_immutable():
    effect = hit()
    with pytest.raises(AttributeError):
        effect.value = 99

def test_targets_self():
    assert targets_self(hit(EffectTarget.USER))
    assert not targets_self(hit())
    assert targets_self(Protect(ProtectionKind.STATS, Count.fixed(1), 100))
    assert targets_self(Continue(50))
    assert targets_self(Repeat(Count.fixed(2), (InflictStatChange(EffectTarget.USER, Stat.ATK, 1, 100),)))
    assert not targets_self(Repeat(Count.fixed(2), (hit(EffectTarget.USER), hit())))

def test_action_helpers():
    action = Action("Combo", Element.FIRE, (
        Continue(80),
        Repeat(Count(1, 3), (hit(value=7),)),
    ))

    assert not action.is_self_only
    assert action.first_damage.value == 7
    assert [type(effect) for effect in iter_effects(action.effects)] == [Continue, Damage]


# Templates

def test_template_limits(actions):
    four = [actions[name] for name in ("Tackle", "Shield", "Rest", "Focus")]
    template = MonsterTemplate.create(
        name="Blub", element=Element.WATER, hp=10, atk=1, defense=1, spd=1, actions=four,
    )
    assert template.prc == 1 and template.agl == 1

    with pytest.raises(ConfigError):
        MonsterTemplate.create(
            name="Blub", element=Element.WATER, hp=10, atk=1, defense=1, spd=1,
            actions=four + [actions["Ember"]],
        )
    with pytest.raises(ConfigError):
        MonsterTemplate.create(name="Blub", element=Element.WATER, hp=0, atk=1, defense=1, spd=1, actions=four)
    with pytest.raises(ConfigError):
        MonsterTemplate.create(name="Blub", element=Element.WATER, hp=10, atk=1, defense=1, spd=1, actions=[])

def test_template_find_action(templates):
    assert templates["Blub"].find_action("Shield").name == "Shield"
    assert templates["Blub"].find_action("Ember") is None
