"""
Exception hierarchy shared by the engine and the competition layer.
"""

from __future__ import annotations

from typing import Optional


class CompetitionError(Exception):
    """Base class for all domain errors."""


class ConfigError(CompetitionError):
    """
    Invalid configuration data.

    Raised while loading templates, before any match can start. When the
    offending input came from a text file, ``line`` holds the 1-based
    line number.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return f"Error, {self.message}"
        return f"Error on line {self.line}: {self.message}"

    def at_line(self, line: int) -> ConfigError:
        """Return a copy of this error pinned to a line (keeps the subclass)."""
        if self.line is not None:
            return self
        return type(self)(self.message, line)


class InvalidEffectError(ConfigError):
    """An effect or action violates a construction-time invariant."""


class CommandError(CompetitionError):
    """Rejected shell input. The message is shown to the user verbatim."""

    def __str__(self) -> str:
        return f"Error, {self.args[0]}" if self.args else "Error"


class BattleStateError(CompetitionError):
    """The battle engine was driven in a way its current state forbids."""
