"""
Config parser - reads the competition text format.

```
action Splash WATER
damage target base 40 90
repeat random 1 3
inflictStatChange target SPD -1 50
end repeat
end action

monster Blub WATER 100 12 10 8 Splash
```

Actions come first, then monsters. Inside an action block each line is
one effect; ``repeat <count>`` ... ``end repeat`` groups effects (no
nesting). Counts are an integer or ``random <min> <max>``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, TypeVar

from engine.core.errors import ConfigError
from competition.battle.effects import (
    Action,
    BasicEffect,
    Continue,
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
from competition.battle.monster import MAX_ACTIONS, MonsterTemplate
from competition.battle.stats import Element, ProtectionKind, Stat, StatusCondition

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

RANDOM_KEYWORD = "random"


@dataclass
class ParsedConfig:
    """Everything a configuration defines."""
    actions: list[Action] = field(default_factory=list)
    monsters: list[MonsterTemplate] = field(default_factory=list)
    source: str = "parsed"


@dataclass
class _OpenAction:
    name: str
    element: Element
    line: int
    effects: list = field(default_factory=list)


@dataclass
class _OpenRepeat:
    count: Count
    line: int
    effects: list[BasicEffect] = field(default_factory=list)


@contextmanager
def _located(line: int) -> Iterator[None]:
    """Attach a line number to config errors raised inside the block."""
    try:
        yield
    except ConfigError as e:
        if e.line is not None:
            raise
        raise e.at_line(line) from e


class ConfigParser:
    """
    Parses competition configurations from the text format.
    """

    def parse_file(self, path: str | Path) -> ParsedConfig:
        """Parse a configuration file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        config = self.parse_string(content)
        config.source = str(path)
        return config

    def parse_string(self, content: str) -> ParsedConfig:
        """Parse a configuration string."""
        config = ParsedConfig()
        actions_by_name: dict[str, Action] = {}
        current_action: Optional[_OpenAction] = None
        current_repeat: Optional[_OpenRepeat] = None

        for number, raw in enumerate(content.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue
            tokens = line.split()

            with _located(number):
                if current_action is None:
                    if tokens[0] == "action":
                        if config.monsters:
                            raise ConfigError("actions should be declared before monsters!")
                        current_action = self._open_action(tokens, number)
                    elif tokens[0] == "monster":
                        config.monsters.append(self._parse_monster(tokens, actions_by_name, config.monsters))
                    else:
                        raise ConfigError(f"Unrecognized line: {line}")
                    continue

                if line == "end action":
                    if current_repeat is not None:
                        raise ConfigError(f"'repeat' block at line {current_repeat.line} has no 'end repeat'")
                    action = self._close_action(current_action)
                    if action.name in actions_by_name:
                        raise ConfigError(f"duplicate action: {action.name}")
                    actions_by_name[action.name] = action
                    config.actions.append(action)
                    current_action = None
                elif tokens[0] == "repeat":
                    if current_repeat is not None:
                        raise ConfigError("nested repeats are not allowed")
                    if len(tokens) < 2:
                        raise ConfigError("'repeat' requires at least one parameter: repeat <count>")
                    count, _ = self._parse_count(tokens, 1)
                    current_repeat = _OpenRepeat(count=count, line=number)
                elif line == "end repeat":
                    if current_repeat is None:
                        raise ConfigError("'end repeat' without 'repeat'")
                    current_action.effects.append(Repeat(current_repeat.count, tuple(current_repeat.effects)))
                    current_repeat = None
                else:
                    effect = self._parse_effect(tokens)
                    if current_repeat is not None:
                        current_repeat.effects.append(effect)
                    else:
                        current_action.effects.append(effect)

        if current_repeat is not None:
            raise ConfigError("'repeat' block has no 'end repeat'", current_repeat.line)
        if current_action is not None:
            raise ConfigError(f"action {current_action.name} has no 'end action'", current_action.line)

        logger.debug(f"Parsed {len(config.actions)} actions, {len(config.monsters)} monsters")
        return config

    # Blocks

    def _open_action(self, tokens: list[str], number: int) -> _OpenAction:
        if len(tokens) != 3:
            raise ConfigError("action line must be: action <name> <ELEMENT>")
        return _OpenAction(name=tokens[1], element=self._parse_enum(Element, tokens[2], "element"), line=number)

    def _close_action(self, block: _OpenAction) -> Action:
        with _located(block.line):
            return Action(name=block.name, element=block.element, effects=tuple(block.effects))

    def _parse_monster(
        self,
        tokens: list[str],
        actions: dict[str, Action],
        monsters: list[MonsterTemplate],
    ) -> MonsterTemplate:
        if len(tokens) < 8:
            raise ConfigError("Monster line must have at least 8 tokens (including 1..4 action names).")
        action_names = tokens[7:]
        if len(action_names) > MAX_ACTIONS:
            raise ConfigError(f"Monster must list 1..{MAX_ACTIONS} action names, found: {len(action_names)}")

        name = tokens[1]
        if any(monster.name == name for monster in monsters):
            raise ConfigError(f"duplicate monster: {name}")

        known = []
        for action_name in action_names:
            if action_name not in actions:
                raise ConfigError(f"monster references unknown action: {action_name}")
            known.append(actions[action_name])

        return MonsterTemplate.create(
            name=name,
            element=self._parse_enum(Element, tokens[2], "element"),
            hp=self._parse_int(tokens[3]),
            atk=self._parse_int(tokens[4]),
            defense=self._parse_int(tokens[5]),
            spd=self._parse_int(tokens[6]),
            actions=known,
        )

    # Effects

    def _parse_effect(self, tokens: list[str]) -> BasicEffect:
        kind = tokens[0]
        if kind == "damage":
            self._expect(tokens, 5, "damage <target> <strength_type> <strength_val> <hitRate>")
            return Damage(
                target=self._parse_enum(EffectTarget, tokens[1], "target"),
                mode=self._parse_enum(StrengthMode, tokens[2], "strength type"),
                value=self._parse_int(tokens[3]),
                hit_rate=self._parse_int(tokens[4]),
            )
        if kind == "heal":
            self._expect(tokens, 5, "heal <target> <strength_type> <strength_val> <hitRate>")
            return Heal(
                target=self._parse_enum(EffectTarget, tokens[1], "target"),
                mode=self._parse_enum(StrengthMode, tokens[2], "strength type"),
                value=self._parse_int(tokens[3]),
                hit_rate=self._parse_int(tokens[4]),
            )
        if kind == "inflictStatusCondition":
            self._expect(tokens, 4, "inflictStatusCondition <target> <STATUS> <hitRate>")
            return InflictStatusCondition(
                target=self._parse_enum(EffectTarget, tokens[1], "target"),
                condition=self._parse_enum(StatusCondition, tokens[2], "status condition"),
                hit_rate=self._parse_int(tokens[3]),
            )
        if kind == "inflictStatChange":
            self._expect(tokens, 5, "inflictStatChange <target> <STAT> <change> <hitRate>")
            return InflictStatChange(
                target=self._parse_enum(EffectTarget, tokens[1], "target"),
                stat=self._parse_enum(Stat, tokens[2].upper(), "stat type"),
                delta=self._parse_int(tokens[3]),
                hit_rate=self._parse_int(tokens[4]),
            )
        if kind == "protectStat":
            if len(tokens) < 4:
                raise ConfigError("'protectStat' requires: protectStat <health|stats> <count> <hitRate>")
            protection = self._parse_enum(ProtectionKind, tokens[1], "protection")
            duration, consumed = self._parse_count(tokens, 2)
            rest = tokens[2 + consumed:]
            if len(rest) != 1:
                raise ConfigError("'protectStat' needs exactly one hitRate after the count")
            return Protect(kind=protection, duration=duration, hit_rate=self._parse_int(rest[0]))
        if kind == "continue":
            self._expect(tokens, 2, "continue <hitRate>")
            return Continue(hit_rate=self._parse_int(tokens[1]))

        raise ConfigError(f"unknown effect type: {kind}")

    # Tokens

    def _expect(self, tokens: list[str], count: int, usage: str) -> None:
        if len(tokens) != count:
            raise ConfigError(f"'{tokens[0]}' requires {count - 1} parameters: {usage}")

    def _parse_int(self, token: str) -> int:
        try:
            return int(token)
        except ValueError:
            raise ConfigError(f"invalid integer: {token}") from None

    def _parse_enum(self, enum_type: type[E], token: str, what: str) -> E:
        try:
            return enum_type(token)
        except ValueError:
            raise ConfigError(f"invalid {what}: {token}") from None

    def _parse_count(self, tokens: list[str], start: int) -> tuple[Count, int]:
        """
        Parse ``<n>`` or ``random <min> <max>`` starting at ``start``.

        Returns:
            The count and the number of tokens it used
        """
        if tokens[start] == RANDOM_KEYWORD:
            if start + 2 >= len(tokens):
                raise ConfigError("'random' requires two more integers: 'random <min> <max>'")
            low = self._parse_int(tokens[start + 1])
            high = self._parse_int(tokens[start + 2])
            return Count(low, high), 3
        return Count.fixed(self._parse_int(tokens[start])), 1
