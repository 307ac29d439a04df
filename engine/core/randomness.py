"""
Controlled randomness.

Every random decision the battle engine makes goes through a
RandomSource and carries a short context label ("attack hit",
"repeat count", ...). Two backends exist:

- SeededRandomSource: real chance, reproducible when seeded.
- OracleRandomSource: asks a human for every decision, one line of
  input per query. Used for debugging and for steering a match.

Bad inputs from the engine itself (a probability above 100, a range
whose bounds are swapped) never abort a match: they are repaired and a
warning is logged.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Callable, Optional, Protocol

from engine.core.events import EngineEvent, EventBus

logger = logging.getLogger(__name__)

MIN_PERCENT = 0
MAX_PERCENT = 100


class BattleSnapshot(Protocol):
    """Read-only view of the running battle, rendered on demand."""

    def status_lines(self) -> list[str]:
        ...


class RandomSource(ABC):
    """
    Interface for all random decisions.

    Subclasses implement the raw draws; this base class owns argument
    repair so that every backend treats bad inputs identically.
    """

    @property
    def shutdown_requested(self) -> bool:
        """True once the backend was told to stop (oracle only)."""
        return False

    def check_probability(self, context: str, percent: float) -> bool:
        """
        Decide whether an event with the given chance happens.

        Args:
            context: What the decision is for
            percent: Chance in percent, expected within [0, 100]

        Returns:
            True if the event happens
        """
        clamped = min(MAX_PERCENT, max(MIN_PERCENT, percent))
        if clamped != percent:
            logger.warning(f"Probability {percent} for '{context}' out of range, clamped to {clamped}")
        outcome = self._decide(context, int(clamped), clamped != percent)
        logger.debug(f"{context}: {clamped}% -> {outcome}")
        return outcome

    def double_in_range(self, context: str, low: float, high: float) -> float:
        """Draw a real number from [low, high]."""
        if low >= high:
            logger.warning(f"Degenerate range [{low}, {high}] for '{context}'")
            if low == high:
                return low
            low, high = high, low
        value = self._sample_double(context, low, high)
        logger.debug(f"{context}: [{low}, {high}] -> {value}")
        return value

    def int_in_range(self, context: str, low: int, high: int) -> int:
        """Draw an integer from [low, high], both inclusive."""
        if low > high:
            logger.warning(f"Degenerate range [{low}, {high}] for '{context}'")
            low, high = high, low
        value = self._sample_int(context, low, high)
        logger.debug(f"{context}: [{low}, {high}] -> {value}")
        return value

    @abstractmethod
    def _decide(self, context: str, percent: int, clamped: bool) -> bool:
        ...

    @abstractmethod
    def _sample_double(self, context: str, low: float, high: float) -> float:
        ...

    @abstractmethod
    def _sample_int(self, context: str, low: int, high: int) -> int:
        ...


class SeededRandomSource(RandomSource):
    """
    Pseudo random backend.

    With a seed the whole match is reproducible; without one the
    generator is seeded from system entropy.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)
        if seed is None:
            logger.debug("Random source seeded from system entropy")
        else:
            logger.debug(f"Random source seeded with {seed}")

    def _decide(self, context: str, percent: int, clamped: bool) -> bool:
        roll = self._rng.random() * MAX_PERCENT
        return roll <= percent

    def _sample_double(self, context: str, low: float, high: float) -> float:
        return low + self._rng.random() * (high - low)

    def _sample_int(self, context: str, low: int, high: int) -> int:
        return self._rng.randint(low, high)


class OracleRandomSource(RandomSource):
    """
    Interactive backend: every decision is typed in by a human.

    While a prompt is pending the user may type ``show`` to see the
    battle status (the prompt is then repeated) or ``quit`` to stop.
    Quitting answers the pending query and all later ones with a default
    (False, or the lower bound) and publishes SHUTDOWN_REQUESTED.
    """

    QUIT_TOKEN = "quit"
    SHOW_TOKEN = "show"

    PROMPT_YES_NO = "Decide {context}: yes or no? (y/n)"
    PROMPT_YES_NO_CLAMPED = "Decide {context} (clamped to {percent}%): yes or no? (y/n)"
    PROMPT_DOUBLE = "Decide {context}: a number between {low:.2f} and {high:.2f}?"
    PROMPT_INT = "Decide {context}: an integer between {low} and {high}?"

    ERROR_YES_NO = "Error, enter y or n."
    ERROR_DOUBLE = "Error, not a valid double."
    ERROR_INT = "Error, not a valid integer."
    ERROR_RANGE = "Error, out of range."
    ERROR_COMMAND = "Error, commands are not allowed during debug input."

    def __init__(
        self,
        reader: Callable[[], str] = input,
        writer: Callable[[str], None] = print,
        snapshot: Optional[BattleSnapshot] = None,
        events: Optional[EventBus] = None,
    ):
        self._reader = reader
        self._writer = writer
        self._snapshot = snapshot
        self._events = events
        self._shutdown = False

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown

    def _decide(self, context: str, percent: int, clamped: bool) -> bool:
        if clamped:
            prompt = self.PROMPT_YES_NO_CLAMPED.format(context=context, percent=percent)
        else:
            prompt = self.PROMPT_YES_NO.format(context=context)

        while True:
            answer = self._ask(prompt)
            if answer is None:
                return False
            answer = answer.lower()
            if answer == "y":
                return True
            if answer == "n":
                return False
            self._writer(self.ERROR_YES_NO)

    def _sample_double(self, context: str, low: float, high: float) -> float:
        prompt = self.PROMPT_DOUBLE.format(context=context, low=low, high=high)
        while True:
            answer = self._ask(prompt)
            if answer is None:
                return low
            try:
                value = float(answer)
            except ValueError:
                self._writer(self.ERROR_DOUBLE)
                continue
            if low <= value <= high:
                return value
            self._writer(self.ERROR_RANGE)

    def _sample_int(self, context: str, low: int, high: int) -> int:
        prompt = self.PROMPT_INT.format(context=context, low=low, high=high)
        while True:
            answer = self._ask(prompt)
            if answer is None:
                return low
            try:
                value = int(answer)
            except ValueError:
                self._writer(self.ERROR_INT)
                continue
            if low <= value <= high:
                return value
            self._writer(self.ERROR_RANGE)

    def _ask(self, prompt: str) -> Optional[str]:
        """
        Show a prompt and read one answer.

        Returns:
            The stripped answer, or None once shutdown was requested
        """
        while not self._shutdown:
            self._writer(prompt)
            try:
                line = self._reader().strip()
            except EOFError:
                self._request_shutdown()
                break

            keyword = line.lower()
            if keyword == self.QUIT_TOKEN:
                self._request_shutdown()
                break
            if keyword == self.SHOW_TOKEN:
                self._show_snapshot()
                continue
            if keyword.startswith(self.SHOW_TOKEN + " "):
                self._writer(self.ERROR_COMMAND)
                continue
            return line
        return None

    def _show_snapshot(self) -> None:
        if self._snapshot is None:
            return
        for line in self._snapshot.status_lines():
            self._writer(line)

    def _request_shutdown(self) -> None:
        logger.info("Shutdown requested during debug input")
        self._shutdown = True
        if self._events is not None:
            self._events.publish(EngineEvent.SHUTDOWN_REQUESTED)
