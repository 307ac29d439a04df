"""
Console front end.

Exports:
- CommandShell, CompetitionConfig: Command interpreter and runtime options
- ConsoleNarrator: Battle event narration
- StatusBoard: Status view shared with the debug oracle
"""

from competition.cli.narrator import ConsoleNarrator
from competition.cli.views import StatusBoard
from competition.cli.shell import CommandShell, CompetitionConfig

__all__ = [
    "CommandShell",
    "CompetitionConfig",
    "ConsoleNarrator",
    "StatusBoard",
]
