"""
Command shell - line oriented front end of a competition.

Reads commands until ``quit`` or end of input:

    load <path> [<seed>|debug]
    competition <monster1> <monster2> ...
    action <actionName> [<targetMonsterName>]
    pass
    show [status|monsters|actions|stats]
    quit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from engine.core.errors import BattleStateError, CommandError, CompetitionError
from engine.core.events import EngineEvent, Event, EventBus
from engine.core.randomness import OracleRandomSource, RandomSource, SeededRandomSource
from competition.battle.effects import Action
from competition.battle.monster import BattleMonster
from competition.battle.roster import MIN_PARTICIPANTS, Roster
from competition.battle.system import TurnScheduler
from competition.cli.narrator import ConsoleNarrator
from competition.cli.views import StatusBoard, action_lines, monster_lines, stats_lines
from competition.data.database import MonsterDatabase

logger = logging.getLogger(__name__)

DEBUG_OPTION = "debug"


@dataclass
class CompetitionConfig:
    """Runtime options chosen together with a configuration file."""
    seed: Optional[int] = None
    debug: bool = False

    @classmethod
    def from_option(cls, option: Optional[str]) -> CompetitionConfig:
        """
        Parse the optional ``<seed>|debug`` argument.

        Raises:
            CommandError: If the option is neither an integer nor ``debug``
        """
        if option is None:
            return cls()
        if option == DEBUG_OPTION:
            return cls(debug=True)
        try:
            return cls(seed=int(option))
        except ValueError:
            raise CommandError(f"invalid seed: {option}") from None

    def create_random_source(
        self,
        reader: Callable[[], str],
        writer: Callable[[str], None],
        board: StatusBoard,
        events: EventBus,
    ) -> RandomSource:
        if self.debug:
            return OracleRandomSource(reader, writer, snapshot=board, events=events)
        return SeededRandomSource(self.seed)


class CommandShell:
    """
    Interprets shell commands against the database and the running match.

    Rejected commands print an ``Error, ...`` line and leave all state as
    it was. The debug oracle shares the shell's reader, so a ``quit``
    typed at a random prompt stops the shell as well.
    """

    def __init__(
        self,
        reader: Callable[[], str] = input,
        writer: Callable[[str], None] = print,
    ):
        self._reader = reader
        self._writer = writer

        self.events = EventBus()
        self.database = MonsterDatabase()
        self.board = StatusBoard()
        self.narrator = ConsoleNarrator(self.events, writer)
        self.config = CompetitionConfig()
        self.rng: RandomSource = SeededRandomSource()
        self.scheduler: Optional[TurnScheduler] = None
        self.running = True

        self._commands: dict[str, Callable[[list[str]], None]] = {
            "load": self._cmd_load,
            "competition": self._cmd_competition,
            "action": self._cmd_action,
            "pass": self._cmd_pass,
            "show": self._cmd_show,
            "quit": self._cmd_quit,
        }
        self._views: dict[str, Callable[[], list[str]]] = {
            "status": self._status_lines,
            "monsters": lambda: monster_lines(self.database.monsters.values()),
            "actions": lambda: action_lines(self._chooser()),
            "stats": lambda: stats_lines(self._chooser()),
        }

        self.events.subscribe(EngineEvent.SHUTDOWN_REQUESTED, self._on_shutdown)

    def run(self) -> None:
        """Read and execute commands until quit or end of input."""
        while self.running:
            try:
                line = self._reader()
            except EOFError:
                break
            self.execute(line)
        logger.debug("Shell stopped")

    def execute(self, line: str) -> None:
        """Execute a single command line, printing any error."""
        tokens = line.split()
        if not tokens:
            return

        try:
            command = self._commands.get(tokens[0])
            if command is None:
                raise CommandError(f"unknown command: {tokens[0]}")
            command(tokens[1:])
        except BattleStateError as e:
            self._writer(f"Error, {e}")
        except CompetitionError as e:
            self._writer(str(e))

        if self.rng.shutdown_requested:
            self.running = False

    def load(self, path: str, config: CompetitionConfig) -> None:
        """
        Echo and load a configuration file, then switch to its options.

        Raises:
            CommandError: If the file cannot be read
            ConfigError: If the file is malformed
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise CommandError(f"failed to load file {path}: {e.strerror or e}") from e

        for line in content.splitlines():
            self._writer(line)

        try:
            self.database.load(path)
        except OSError as e:
            raise CommandError(f"failed to load file {path}: {e.strerror or e}") from e

        self._writer(f"Loaded {len(self.database.actions)} actions, {len(self.database.monsters)} monsters.")
        self._end_competition()
        self.config = config
        self.rng = config.create_random_source(self._reader, self._writer, self.board, self.events)
        self.events.publish(EngineEvent.CONFIG_LOADED, source=self.database.source)

    # Commands

    def _cmd_load(self, args: list[str]) -> None:
        if not 1 <= len(args) <= 2:
            raise CommandError("usage: load <path> [<seed>|debug]")
        config = CompetitionConfig.from_option(args[1] if len(args) == 2 else None)
        self.load(args[0], config)

    def _cmd_competition(self, args: list[str]) -> None:
        if len(args) < MIN_PARTICIPANTS:
            raise CommandError("usage: competition <monster1> <monster2> ...")

        templates = []
        for name in args:
            template = self.database.get_monster(name)
            if template is None:
                raise CommandError(f"unknown monster: {name}")
            templates.append(template)

        self._end_competition()
        roster = Roster(templates)
        self.scheduler = TurnScheduler(roster, self.rng, self.events)
        self.board.roster = roster
        self.board.scheduler = self.scheduler
        self.scheduler.start()

    def _cmd_action(self, args: list[str]) -> None:
        monster = self._chooser()
        if not 1 <= len(args) <= 2:
            raise CommandError("usage: action <actionName> [<targetMonsterName>]")

        action = monster.find_action(args[0])
        if action is None:
            raise CommandError(f"{monster.name} does not know the action {args[0]}.")

        target = self._resolve_target(monster, action, args[1] if len(args) == 2 else None)
        self.scheduler.choose_action(action, target)

    def _cmd_pass(self, args: list[str]) -> None:
        if args:
            raise CommandError("the 'pass' command does not accept any arguments.")
        self._chooser()
        self.scheduler.choose_pass()

    def _cmd_show(self, args: list[str]) -> None:
        view = self._views.get(args[0] if args else "status")
        if view is None or len(args) > 1:
            raise CommandError(f"unknown show command: {' '.join(args)}")
        for line in view():
            self._writer(line)

    def _cmd_quit(self, args: list[str]) -> None:
        if args:
            raise CommandError("the 'quit' command does not accept any arguments.")
        self.running = False

    # Helpers

    def _chooser(self) -> BattleMonster:
        monster = self.scheduler.current_monster if self.scheduler is not None else None
        if monster is None:
            raise CommandError("no monster is currently selecting an action.")
        return monster

    def _status_lines(self) -> list[str]:
        self._chooser()
        return self.board.status_lines()

    def _resolve_target(
        self,
        monster: BattleMonster,
        action: Action,
        name: Optional[str],
    ) -> Optional[BattleMonster]:
        roster = self.scheduler.roster
        if name is not None:
            target = roster.find(name)
            if target is None:
                raise CommandError(f"unknown target monster: {name}")
            if target is monster:
                raise CommandError(f"{monster.name} cannot target itself.")
            if target.is_fainted:
                raise CommandError(f"{target.name} has already fainted.")
            return target

        if roster.alive_count > MIN_PARTICIPANTS:
            if action.is_self_only:
                return None
            raise CommandError("no valid target for the action.")
        return roster.default_target(monster)

    def _end_competition(self) -> None:
        if self.scheduler is None:
            return
        self.scheduler = None
        self.board.roster = None
        self.board.scheduler = None
        self.events.publish(EngineEvent.COMPETITION_RESET)

    def _on_shutdown(self, event: Event) -> None:
        self.running = False
