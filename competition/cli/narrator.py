"""
Console narrator - turns battle events into text lines.
"""

from __future__ import annotations

from typing import Callable

from engine.core.events import Event, EventBus
from competition.battle.events import BattleEvent, DAMAGE_SOURCE_BURN
from competition.battle.stats import ProtectionKind, StatusCondition

# condition -> (start, ongoing, end) message templates
CONDITION_MESSAGES: dict[StatusCondition, tuple[str, str, str]] = {
    StatusCondition.WET: (
        "{name} becomes soaking wet!",
        "{name} is soaking wet!",
        "{name} dried up!",
    ),
    StatusCondition.BURN: (
        "{name} caught on fire!",
        "{name} is burning!",
        "{name}'s burning has faded!",
    ),
    StatusCondition.QUICKSAND: (
        "{name} gets caught by quicksand!",
        "{name} is caught in quicksand!",
        "{name} escaped the quicksand!",
    ),
    StatusCondition.SLEEP: (
        "{name} falls asleep!",
        "{name} is asleep!",
        "{name} woke up!",
    ),
}


class ConsoleNarrator:
    """
    Writes one or more lines for every battle event.

    The narrator subscribes itself on construction; keep a reference to
    it for as long as narration is wanted (the bus holds it weakly).
    """

    def __init__(self, events: EventBus, writer: Callable[[str], None] = print):
        self._writer = writer
        events.subscribe_all(BattleEvent, self.on_event)

    def on_event(self, event: Event) -> None:
        for line in self.render(event):
            self._writer(line)

    def render(self, event: Event) -> list[str]:
        """Text for an event; empty if the event is silent."""
        monster = event.get("monster")
        name = monster.name if monster is not None else ""

        match event.type:
            case BattleEvent.COMPETITION_STARTED:
                return [f"The {len(event['monsters'])} monsters enter the competition!"]
            case BattleEvent.ACTION_REQUESTED:
                return [f"What should {name} do?"]
            case BattleEvent.TURN_STARTED:
                return ["", f"It's {name}'s turn."]
            case BattleEvent.CONDITION_STARTED:
                return [CONDITION_MESSAGES[event["condition"]][0].format(name=name)]
            case BattleEvent.CONDITION_ONGOING:
                return [CONDITION_MESSAGES[event["condition"]][1].format(name=name)]
            case BattleEvent.CONDITION_ENDED:
                return [CONDITION_MESSAGES[event["condition"]][2].format(name=name)]
            case BattleEvent.ACTION_USED:
                return [f"{name} uses {event['action'].name}!"]
            case BattleEvent.ACTION_FAILED:
                return ["The action failed..."]
            case BattleEvent.ACTION_PASSED:
                return [f"{name} passes!"]
            case BattleEvent.EFFECTIVENESS:
                if event["factor"] > 1:
                    return ["It is very effective!"]
                return ["It is not very effective..."]
            case BattleEvent.CRITICAL_HIT:
                return ["Critical hit!"]
            case BattleEvent.DAMAGE_DEALT:
                if event["source"] == DAMAGE_SOURCE_BURN:
                    return [f"{name} takes {event['amount']} damage from burning!"]
                return [f"{name} takes {event['amount']} damage!"]
            case BattleEvent.DAMAGE_BLOCKED:
                return [f"{name} is protected and takes no damage!"]
            case BattleEvent.HEALED:
                return [f"{name} gains back {event['amount']} health!"]
            case BattleEvent.FAINTED:
                return [f"{name} faints!"]
            case BattleEvent.PROTECTION_STARTED:
                if event["kind"] is ProtectionKind.DAMAGE:
                    return [f"{name} is now protected against damage!"]
                return [f"{name} is now protected against status changes!"]
            case BattleEvent.PROTECTION_FADED:
                return [f"{name}'s protection fades away..."]
            case BattleEvent.STAT_ROSE:
                return [f"{name}'s {event['stat'].value} rises!"]
            case BattleEvent.STAT_DECREASED:
                return [f"{name}'s {event['stat'].value} decreases..."]
            case BattleEvent.STAT_CHANGE_BLOCKED:
                return [f"{name} is protected and is unaffected!"]
            case BattleEvent.WINNER:
                return [f"{name} has no opponents left and wins the competition!"]
            case BattleEvent.DRAW:
                return ["All monsters have fainted. The competition ends without a winner!"]
        return []
