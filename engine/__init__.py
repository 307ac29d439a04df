"""
Competition engine core.

Game-agnostic building blocks the battle layer is written against.

Quick Start:
    from engine.core import EventBus, SeededRandomSource

    events = EventBus()
    rng = SeededRandomSource(seed=42)
    if rng.check_probability("attack hit", 90):
        ...
"""

__version__ = "0.1.0"

from engine.core import (
    EventBus,
    Event,
    EngineEvent,
    Template,
    RandomSource,
    SeededRandomSource,
    OracleRandomSource,
    CompetitionError,
    ConfigError,
)

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    # Templates
    "Template",
    # Randomness
    "RandomSource",
    "SeededRandomSource",
    "OracleRandomSource",
    # Errors
    "CompetitionError",
    "ConfigError",
]
