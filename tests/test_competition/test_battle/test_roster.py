from competition.battle.roster import Roster
from competition.battle.stats import Stat, StatusCondition


def test_duplicate_templates_get_numbered_names(templates):
    roster = Roster([templates["Blub"], templates["Rocky"], templates["Blub"]])

    assert [monster.name for monster in roster] == ["Blub#1", "Rocky", "Blub#2"]
    assert roster.find("Blub#2") is roster.monsters[2]
    assert roster.find("Blub") is None

def test_clones_are_independent(templates):
    roster = Roster([templates["Blub"], templates["Blub"]])
    roster.monsters[0].take_damage(50)

    assert roster.monsters[1].current_hp == 100

def test_speed_order_is_stable(templates, make_template):
    twin = make_template("Twin", spd=10)
    roster = Roster([templates["Rocky"], templates["Blub"], twin, templates["Flamo"]])

    assert [m.name for m in roster.speed_order()] == ["Flamo", "Blub", "Twin", "Rocky"]

def test_speed_order_uses_effective_speed(templates):
    roster = Roster([templates["Blub"], templates["Rocky"]])
    roster.find("Blub").inflict(StatusCondition.QUICKSAND)
    roster.find("Rocky").change_stage(Stat.SPD, 1)

    # 10 x 0.75 ties with 5 x 1.5, roster order wins
    assert [m.name for m in roster.speed_order()] == ["Blub", "Rocky"]
    roster.find("Rocky").change_stage(Stat.SPD, 1)
    assert [m.name for m in roster.speed_order()] == ["Rocky", "Blub"]

def test_speed_order_skips_fainted(templates):
    roster = Roster([templates["Blub"], templates["Flamo"], templates["Rocky"]])
    roster.find("Flamo").take_damage(1000)

    assert [m.name for m in roster.speed_order()] == ["Blub", "Rocky"]

def test_default_target(templates):
    roster = Roster([templates["Blub"], templates["Flamo"], templates["Rocky"]])
    blub, flamo, rocky = roster.monsters

    assert roster.default_target(blub) is flamo
    assert roster.default_target(flamo) is blub
    flamo.take_damage(1000)
    assert roster.default_target(blub) is rocky

def test_check_end(templates):
    roster = Roster([templates["Blub"], templates["Flamo"]])

    assert not roster.check_end()
    assert roster.winner is None

    roster.find("Flamo").take_damage(1000)
    assert roster.check_end()
    assert roster.winner is roster.find("Blub")

def test_draw_has_no_winner(templates):
    roster = Roster([templates["Blub"], templates["Flamo"]])
    for monster in roster:
        monster.take_damage(1000)

    assert roster.check_end()
    assert roster.winner is None
