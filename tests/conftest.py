import os
import sys
import pytest

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

from engine.core.events import EngineEvent
from engine.core.randomness import RandomSource
from competition.battle.effects import (
    Action,
    Count,
    Damage,
    EffectTarget,
    Heal,
    InflictStatChange,
    InflictStatusCondition,
    Protect,
    Repeat,
    StrengthMode,
)
from competition.battle.events import BattleEvent
from competition.battle.monster import MonsterTemplate
from competition.battle.stats import Element, ProtectionKind, Stat, StatusCondition


class ScriptedRandomSource(RandomSource):
    """
    Deterministic random source for tests.

    Decisions are taken from per-context queues. Once a queue is empty
    the context default applies: critical hits and condition endings do
    not happen, every other check succeeds. Doubles default to the upper
    bound, integers to the lower bound.
    """

    DEFAULT_FALSE = ("critical hit", "condition end")

    def __init__(self):
        self.decisions: dict[str, list[bool]] = {}
        self.doubles: dict[str, list[float]] = {}
        self.ints: dict[str, list[int]] = {}
        self.calls: list[tuple[str, object]] = []

    def script(self, context, *outcomes):
        self.decisions.setdefault(context, []).extend(outcomes)

    def script_int(self, context, *values):
        self.ints.setdefault(context, []).extend(values)

    def script_double(self, context, *values):
        self.doubles.setdefault(context, []).extend(values)

    def contexts(self):
        return [context for context, _ in self.calls]

    def _decide(self, context, percent, clamped):
        self.calls.append((context, percent))
        queue = self.decisions.get(context)
        if queue:
            return queue.pop(0)
        return context not in self.DEFAULT_FALSE

    def _sample_double(self, context, low, high):
        self.calls.append((context, (low, high)))
        queue = self.doubles.get(context)
        return queue.pop(0) if queue else high

    def _sample_int(self, context, low, high):
        self.calls.append((context, (low, high)))
        queue = self.ints.get(context)
        return queue.pop(0) if queue else low


class EventRecorder:
    """Collects every battle and engine event published on a bus."""

    def __init__(self, bus):
        self.events = []
        bus.subscribe_all(BattleEvent, self.events.append, weak=False)
        bus.subscribe_all(EngineEvent, self.events.append, weak=False)

    def types(self):
        return [event.type for event in self.events]

    def of(self, event_type):
        return [event for event in self.events if event.type is event_type]

    def clear(self):
        self.events.clear()


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def rng():
    """Scripted random source; hits land, crits and condition endings don't."""
    return ScriptedRandomSource()


@pytest.fixture
def recorder(event_bus):
    return EventRecorder(event_bus)


@pytest.fixture
def actions():
    """A small set of actions covering every effect kind."""
    return {
        "Tackle": Action("Tackle", Element.NORMAL, (
            Damage(EffectTarget.TARGET, StrengthMode.ABS, 10, 100),
        )),
        "WaterBlast": Action("WaterBlast", Element.WATER, (
            Damage(EffectTarget.TARGET, StrengthMode.BASE, 50, 100),
        )),
        "Ember": Action("Ember", Element.FIRE, (
            Damage(EffectTarget.TARGET, StrengthMode.ABS, 5, 100),
            InflictStatusCondition(EffectTarget.TARGET, StatusCondition.BURN, 100),
        )),
        "Lullaby": Action("Lullaby", Element.NORMAL, (
            InflictStatusCondition(EffectTarget.TARGET, StatusCondition.SLEEP, 100),
        )),
        "Shield": Action("Shield", Element.NORMAL, (
            Protect(ProtectionKind.DAMAGE, Count.fixed(2), 100),
        )),
        "Rest": Action("Rest", Element.NORMAL, (
            Heal(EffectTarget.USER, StrengthMode.REL, 50, 100),
        )),
        "Focus": Action("Focus", Element.NORMAL, (
            InflictStatChange(EffectTarget.USER, Stat.ATK, 1, 100),
        )),
        "Explode": Action("Explode", Element.FIRE, (
            Damage(EffectTarget.USER, StrengthMode.ABS, 1000, 100),
        )),
        "Flurry": Action("Flurry", Element.NORMAL, (
            Repeat(Count.fixed(2), (
                Damage(EffectTarget.TARGET, StrengthMode.ABS, 1, 100),
                Damage(EffectTarget.TARGET, StrengthMode.ABS, 1, 100),
            )),
        )),
    }


@pytest.fixture
def make_template(actions):
    """Factory for monster templates using the shared actions."""
    def factory(name, element=Element.NORMAL, hp=100, atk=10, defense=10, spd=10, moves=("Tackle",)):
        return MonsterTemplate.create(
            name=name,
            element=element,
            hp=hp,
            atk=atk,
            defense=defense,
            spd=spd,
            actions=[actions[move] for move in moves],
        )
    return factory


@pytest.fixture
def templates(make_template):
    """Four monsters, one per element, with distinct speeds."""
    return {
        "Blub": make_template("Blub", Element.WATER, spd=10,
                              moves=("WaterBlast", "Tackle", "Shield", "Rest")),
        "Flamo": make_template("Flamo", Element.FIRE, spd=20,
                               moves=("Ember", "Tackle", "Explode", "Lullaby")),
        "Rocky": make_template("Rocky", Element.EARTH, spd=5, moves=("Tackle", "Focus")),
        "Normo": make_template("Normo", Element.NORMAL, hp=40, spd=1, moves=("Tackle", "Flurry")),
    }
