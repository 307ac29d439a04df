"""
Monster database.

Holds the action and monster templates of the loaded configuration.
Two file formats are understood:

- the competition text format (any extension), see ``parser.py``
- JSON (``.json``), validated against ``schemas/competition.schema.json``
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema

from engine.core.errors import ConfigError
from competition.battle.effects import (
    Action,
    BasicEffect,
    Continue,
    Count,
    Damage,
    Effect,
    EffectTarget,
    Heal,
    InflictStatChange,
    InflictStatusCondition,
    Protect,
    Repeat,
    StrengthMode,
)
from competition.battle.monster import MonsterTemplate
from competition.battle.stats import Element, ProtectionKind, Stat, StatusCondition
from competition.data.parser import ConfigParser, ParsedConfig

SCHEMA_DIR = Path(__file__).parent / "schemas"
SCHEMA_NAME = "competition.schema.json"


class MonsterDatabase:
    """
    Central storage for loaded templates.

    A failed load leaves the previously loaded data untouched.
    """

    def __init__(self, schema_dir: Path | str = SCHEMA_DIR):
        self._schema_dir = Path(schema_dir)
        self._schema: Optional[dict[str, Any]] = None

        self.actions: dict[str, Action] = {}
        self.monsters: dict[str, MonsterTemplate] = {}
        self.source: Optional[str] = None

        self.logger = logging.getLogger(__name__)

    @property
    def is_loaded(self) -> bool:
        return self.source is not None

    def load(self, path: Path | str) -> ParsedConfig:
        """
        Load a configuration file, replacing the current templates.

        Raises:
            ConfigError: If the file is malformed
            OSError: If the file cannot be read
        """
        path = Path(path)
        if path.suffix.lower() == ".json":
            config = self._load_json(path)
        else:
            config = ConfigParser().parse_file(path)

        self._replace(config)
        self.logger.info(f"Loaded {len(self.actions)} actions, {len(self.monsters)} monsters.")
        return config

    def load_string(self, content: str) -> ParsedConfig:
        """Load a configuration given in the text format."""
        config = ConfigParser().parse_string(content)
        self._replace(config)
        return config

    def get_monster(self, name: str) -> Optional[MonsterTemplate]:
        return self.monsters.get(name)

    def get_action(self, name: str) -> Optional[Action]:
        return self.actions.get(name)

    def _replace(self, config: ParsedConfig) -> None:
        self.actions = {action.name: action for action in config.actions}
        self.monsters = {monster.name: monster for monster in config.monsters}
        self.source = config.source

    # JSON

    def _load_schema(self) -> dict[str, Any]:
        if self._schema is None:
            with open(self._schema_dir / SCHEMA_NAME, 'r', encoding='utf-8') as f:
                self._schema = json.load(f)
        return self._schema

    def _load_json(self, path: Path) -> ParsedConfig:
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"invalid JSON in {path}: {e.msg}", e.lineno) from e

        try:
            jsonschema.validate(instance=data, schema=self._load_schema())
        except jsonschema.ValidationError as e:
            location = "/".join(str(part) for part in e.absolute_path) or "document"
            raise ConfigError(f"validation error in {path} at {location}: {e.message}") from e

        return self._build_config(data, str(path))

    def _build_config(self, data: dict[str, Any], source: str) -> ParsedConfig:
        config = ParsedConfig(source=source)
        actions: dict[str, Action] = {}

        for entry in data["actions"]:
            action = Action(
                name=entry["name"],
                element=Element(entry["element"]),
                effects=tuple(self._build_effect(effect) for effect in entry["effects"]),
            )
            if action.name in actions:
                raise ConfigError(f"duplicate action: {action.name}")
            actions[action.name] = action
            config.actions.append(action)

        for entry in data["monsters"]:
            if any(monster.name == entry["name"] for monster in config.monsters):
                raise ConfigError(f"duplicate monster: {entry['name']}")
            unknown = [name for name in entry["actions"] if name not in actions]
            if unknown:
                raise ConfigError(f"monster references unknown action: {unknown[0]}")
            config.monsters.append(MonsterTemplate.create(
                name=entry["name"],
                element=Element(entry["element"]),
                hp=entry["hp"],
                atk=entry["atk"],
                defense=entry["def"],
                spd=entry["spd"],
                prc=entry.get("prc", 1),
                agl=entry.get("agl", 1),
                actions=[actions[name] for name in entry["actions"]],
            ))

        return config

    def _build_effect(self, data: dict[str, Any]) -> Effect:
        kind = data["type"]
        if kind == "repeat":
            return Repeat(
                count=self._build_count(data["count"]),
                effects=tuple(self._build_basic_effect(sub) for sub in data["effects"]),
            )
        return self._build_basic_effect(data)

    def _build_basic_effect(self, data: dict[str, Any]) -> BasicEffect:
        kind = data["type"]
        if kind in ("damage", "heal"):
            effect_type = Damage if kind == "damage" else Heal
            return effect_type(
                target=EffectTarget(data["target"]),
                mode=StrengthMode(data["strength"]["mode"]),
                value=data["strength"]["value"],
                hit_rate=data["hitRate"],
            )
        if kind == "inflictStatusCondition":
            return InflictStatusCondition(
                target=EffectTarget(data["target"]),
                condition=StatusCondition(data["condition"]),
                hit_rate=data["hitRate"],
            )
        if kind == "inflictStatChange":
            return InflictStatChange(
                target=EffectTarget(data["target"]),
                stat=Stat(data["stat"]),
                delta=data["change"],
                hit_rate=data["hitRate"],
            )
        if kind == "protectStat":
            return Protect(
                kind=ProtectionKind(data["protects"]),
                duration=self._build_count(data["count"]),
                hit_rate=data["hitRate"],
            )
        if kind == "continue":
            return Continue(hit_rate=data["hitRate"])
        raise ConfigError(f"unknown effect type: {kind}")

    def _build_count(self, data: int | dict[str, int]) -> Count:
        if isinstance(data, int):
            return Count.fixed(data)
        return Count(data["min"], data["max"])
