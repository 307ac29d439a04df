"""
Battle system - round/phase state machine of a competition.

    CHECK_END -> COLLECT_ACTIONS -> RESOLVE -> CHECK_END ... -> TERMINATED

Choices are collected from the outside one monster at a time, in roster
order. When the last alive monster has chosen, the round resolves
synchronously in speed order.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from engine.core.events import EventBus
from engine.core.errors import BattleStateError
from engine.core.randomness import RandomSource
from competition.battle.effects import Action
from competition.battle.events import BattleEvent, DAMAGE_SOURCE_BURN
from competition.battle.monster import BattleMonster
from competition.battle.pipeline import EffectPipeline
from competition.battle.roster import Roster
from competition.battle.stats import StatusCondition

logger = logging.getLogger(__name__)

CONDITION_END_CHANCE = 33
BURN_DAMAGE_PERCENT = 10
CONTEXT_CONDITION_END = "condition end"


class BattlePhase(Enum):
    """State of the competition."""
    CHECK_END = auto()
    COLLECT_ACTIONS = auto()
    RESOLVE = auto()
    TERMINATED = auto()


@dataclass
class BattleCommand:
    """A monster's choice for the current round. No action means pass."""
    monster: BattleMonster
    action: Optional[Action] = None
    target: Optional[BattleMonster] = None

    @property
    def is_pass(self) -> bool:
        return self.action is None


class TurnScheduler:
    """
    Drives a competition round by round.

    Usage:
        scheduler = TurnScheduler(roster, rng, events)
        scheduler.start()
        while not scheduler.is_terminated:
            scheduler.choose_action("Tackle")   # or scheduler.choose_pass()
    """

    def __init__(
        self,
        roster: Roster,
        rng: RandomSource,
        events: EventBus,
        pipeline: Optional[EffectPipeline] = None,
    ):
        self.roster = roster
        self.rng = rng
        self.events = events
        self.pipeline = pipeline or EffectPipeline(rng, events)

        self.phase = BattlePhase.CHECK_END
        self.round_number = 0
        self._commands: list[BattleCommand] = []
        self._current_index = 0

    @property
    def is_terminated(self) -> bool:
        return self.phase is BattlePhase.TERMINATED

    @property
    def current_monster(self) -> Optional[BattleMonster]:
        """The monster whose choice is awaited, if any."""
        if self.phase is not BattlePhase.COLLECT_ACTIONS:
            return None
        return self.roster.monsters[self._current_index]

    def start(self) -> None:
        """Announce the competition and open the first round."""
        self.events.publish(BattleEvent.COMPETITION_STARTED, monsters=list(self.roster))
        logger.info(f"Competition started with {len(self.roster)} monsters")
        self._begin_round()

    # Action collection

    def choose_action(self, action: Action | str, target: Optional[BattleMonster] = None) -> None:
        """
        Record the current monster's action.

        Args:
            action: An action the monster knows, or its name
            target: The opponent; may be None for self-only actions

        Raises:
            BattleStateError: If no choice is awaited, the monster does not
                know the action, or it targets itself
        """
        monster = self._require_chooser()
        known = monster.find_action(action if isinstance(action, str) else action.name)
        if known is None:
            name = action if isinstance(action, str) else action.name
            raise BattleStateError(f"{monster.name} does not know the action {name}.")
        if target is monster:
            raise BattleStateError(f"{monster.name} cannot target itself.")
        self._record(BattleCommand(monster=monster, action=known, target=target))

    def choose_pass(self) -> None:
        """Record that the current monster passes this round."""
        monster = self._require_chooser()
        self._record(BattleCommand(monster=monster))

    def _require_chooser(self) -> BattleMonster:
        monster = self.current_monster
        if monster is None:
            raise BattleStateError("no monster is currently selecting an action.")
        return monster

    def _record(self, command: BattleCommand) -> None:
        self._commands.append(command)
        next_index = self._next_alive_index(self._current_index + 1)
        if next_index is None:
            self._resolve()
            return
        self._current_index = next_index
        self.events.publish(BattleEvent.ACTION_REQUESTED, monster=self.current_monster)

    def _next_alive_index(self, start: int) -> Optional[int]:
        for index in range(start, len(self.roster.monsters)):
            if self.roster.monsters[index].is_alive:
                return index
        return None

    # Round lifecycle

    def _begin_round(self) -> None:
        self.phase = BattlePhase.CHECK_END
        if self._check_end():
            return

        self.round_number += 1
        self._commands = []
        first = self._next_alive_index(0)
        self._current_index = first
        self.phase = BattlePhase.COLLECT_ACTIONS
        logger.debug(f"Round {self.round_number}: collecting actions")
        self.events.publish(BattleEvent.ACTION_REQUESTED, monster=self.current_monster)

    def _check_end(self) -> bool:
        """Terminate and announce the outcome once fewer than two monsters stand."""
        already_ended = self.roster.ended
        if not self.roster.check_end():
            return False

        if not already_ended:
            self._announce_outcome()
        self.phase = BattlePhase.TERMINATED
        return True

    def _announce_outcome(self) -> None:
        winner = self.roster.winner
        if winner is not None:
            self.events.publish(BattleEvent.WINNER, monster=winner)
            logger.info(f"Competition won by {winner.name}")
        else:
            self.events.publish(BattleEvent.DRAW)
            logger.info("Competition ended without a winner")

    def _resolve(self) -> None:
        self.phase = BattlePhase.RESOLVE
        logger.debug(f"Round {self.round_number}: resolving")
        choices = {id(command.monster): command for command in self._commands}

        for monster in self.roster.speed_order():
            if monster.is_fainted:
                continue
            command = choices.get(id(monster), BattleCommand(monster=monster))
            self._resolve_turn(command)

        # Announce before the protection sweep so fade notices come last
        newly_ended = not self.roster.ended and self.roster.check_end()
        if newly_ended:
            self._announce_outcome()

        for monster in self.roster.alive():
            if monster.tick_protection():
                self.events.publish(BattleEvent.PROTECTION_FADED, monster=monster)

        self._begin_round()

    def _resolve_turn(self, command: BattleCommand) -> None:
        monster = command.monster
        self.events.publish(BattleEvent.TURN_STARTED, monster=monster)
        condition = self._process_condition(monster)

        plan = None
        if command.is_pass:
            self.events.publish(BattleEvent.ACTION_PASSED, monster=monster)
        else:
            plan = self.pipeline.commit(command.action)
            self.events.publish(BattleEvent.ACTION_USED, monster=monster, action=command.action)

        if condition is StatusCondition.SLEEP:
            return

        if plan is not None and not self.pipeline.execute(plan, monster, command.target):
            self.events.publish(BattleEvent.ACTION_FAILED, monster=monster, action=command.action)

        if condition is StatusCondition.BURN:
            self._apply_burn(monster)

    def _process_condition(self, monster: BattleMonster) -> Optional[StatusCondition]:
        """
        Give an active condition its chance to end.

        Returns:
            The condition still active for this turn, or None
        """
        condition = monster.condition
        if condition is None:
            return None

        if self.rng.check_probability(CONTEXT_CONDITION_END, CONDITION_END_CHANCE):
            monster.clear_condition()
            self.events.publish(BattleEvent.CONDITION_ENDED, monster=monster, condition=condition)
            return None

        self.events.publish(BattleEvent.CONDITION_ONGOING, monster=monster, condition=condition)
        return condition

    def _apply_burn(self, monster: BattleMonster) -> None:
        # Applies even if the monster fainted from its own action this turn
        if monster.is_protected_against_damage:
            self.events.publish(BattleEvent.DAMAGE_BLOCKED, monster=monster)
            return
        amount = math.ceil(monster.base_hp * BURN_DAMAGE_PERCENT / 100)
        self.pipeline.deal_damage(monster, amount, DAMAGE_SOURCE_BURN)
