import pytest
from competition.battle.stats import (
    Stat,
    StatusCondition,
    ProtectionKind,
    StageChange,
    StatBlock,
    stage_factor,
    effective_stat,
    clamp_stage,
)


@pytest.mark.parametrize("stage, expected", [
    (0, 1.0),
    (1, 1.5),
    (5, 3.5),
    (-1, 2 / 3),
    (-5, 2 / 7),
])
def test_stage_factor_core_stats(stage, expected):
    assert stage_factor(Stat.ATK, stage) == pytest.approx(expected)

def test_stage_factor_precision_uses_base_three():
    assert stage_factor(Stat.PRC, 3) == pytest.approx(2.0)
    assert stage_factor(Stat.AGL, -3) == pytest.approx(0.5)

def test_effective_stat_never_below_one():
    for stat in Stat:
        for stage in range(-5, 6):
            for base in (1, 2, 7, 100):
                assert effective_stat(base, stat, stage) >= 1.0

def test_condition_weakens_one_stat():
    assert effective_stat(100, Stat.ATK, 0, StatusCondition.BURN) == pytest.approx(75)
    assert effective_stat(100, Stat.DEF, 0, StatusCondition.WET) == pytest.approx(75)
    assert effective_stat(100, Stat.SPD, 0, StatusCondition.QUICKSAND) == pytest.approx(75)
    # Sleep weakens nothing and burn leaves defense alone
    assert effective_stat(100, Stat.ATK, 0, StatusCondition.SLEEP) == 100
    assert effective_stat(100, Stat.DEF, 0, StatusCondition.BURN) == 100

def test_clamp_stage():
    assert clamp_stage(7) == 5
    assert clamp_stage(-9) == -5
    assert clamp_stage(2) == 2

def test_stat_block_lookup():
    block = StatBlock(hp=50, atk=11, defense=12, spd=13)

    assert block.base(Stat.ATK) == 11
    assert block.base(Stat.DEF) == 12
    assert block.base(Stat.SPD) == 13
    assert block.base(Stat.PRC) == 1
    assert block.base(Stat.AGL) == 1


# Battle monster state

@pytest.fixture
def blub(templates):
    return templates["Blub"].spawn()

def test_spawn_starts_fresh(blub, templates):
    assert blub.current_hp == 100
    assert blub.template_name == "Blub"
    assert all(stage == 0 for stage in blub.stages.values())
    assert blub.condition is None
    assert blub.protection is ProtectionKind.NONE
    # Templates are never touched by battle copies
    blub.take_damage(30)
    assert templates["Blub"].spawn().current_hp == 100

def test_spawn_with_other_name(templates):
    clone = templates["Blub"].spawn("Blub#2")
    assert clone.name == "Blub#2"
    assert clone.template_name == "Blub"

def test_damage_and_heal_are_bounded(blub):
    assert blub.take_damage(30) == 30
    assert blub.heal(100) == 30
    assert blub.current_hp == 100

    assert blub.take_damage(500) == 100
    assert blub.current_hp == 0
    assert blub.is_fainted

def test_stage_changes_report_outcome(blub):
    assert blub.change_stage(Stat.ATK, 2) is StageChange.ROSE
    assert blub.change_stage(Stat.ATK, 10) is StageChange.ROSE
    assert blub.stage(Stat.ATK) == 5
    assert blub.change_stage(Stat.ATK, 1) is StageChange.UNCHANGED
    assert blub.change_stage(Stat.DEF, -1) is StageChange.DECREASED

def test_stat_protection_blocks_only_decreases(blub):
    blub.protect(ProtectionKind.STATS, 2)

    assert blub.change_stage(Stat.DEF, -1) is StageChange.BLOCKED
    assert blub.stage(Stat.DEF) == 0
    assert blub.change_stage(Stat.DEF, 1) is StageChange.ROSE

def test_only_one_condition_at_a_time(blub):
    assert blub.inflict(StatusCondition.WET)
    assert not blub.inflict(StatusCondition.BURN)
    assert blub.condition is StatusCondition.WET

    blub.clear_condition()
    assert blub.inflict(StatusCondition.BURN)

def test_protection_counts_down(blub):
    blub.protect(ProtectionKind.DAMAGE, 2)

    assert not blub.tick_protection()
    assert blub.is_protected_against_damage
    assert blub.tick_protection()
    assert not blub.is_protected_against_damage
    # Nothing left to fade
    assert not blub.tick_protection()
