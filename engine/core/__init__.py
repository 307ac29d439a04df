"""
Core engine module.

Exports:
- EventBus, Event, EngineEvent: Event system
- Template: Validated immutable template base
- RandomSource, SeededRandomSource, OracleRandomSource: Randomness backends
- CompetitionError and subclasses: Error hierarchy
"""

from engine.core.events import EventBus, Event, EngineEvent
from engine.core.template import Template
from engine.core.randomness import (
    BattleSnapshot,
    RandomSource,
    SeededRandomSource,
    OracleRandomSource,
)
from engine.core.errors import (
    CompetitionError,
    ConfigError,
    InvalidEffectError,
    CommandError,
    BattleStateError,
)

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    # Templates
    "Template",
    # Randomness
    "BattleSnapshot",
    "RandomSource",
    "SeededRandomSource",
    "OracleRandomSource",
    # Errors
    "CompetitionError",
    "ConfigError",
    "InvalidEffectError",
    "CommandError",
    "BattleStateError",
]
