"""
Effects and actions.

An action is a named, elemental, non-empty sequence of effects. The
effect set is closed: every variant is a frozen dataclass listed in the
``Effect`` union, and code that interprets effects dispatches with an
exhaustive ``match``.

All invariants are checked when an effect is built, so a loaded action
is always executable:
- hit rates are within [0, 100]
- counts and durations are >= 1 with min <= max
- a Repeat never contains another Repeat
- an action has at least one effect
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union

from engine.core.errors import InvalidEffectError
from competition.battle.stats import Element, ProtectionKind, Stat, StatusCondition

MIN_HIT_RATE = 0
MAX_HIT_RATE = 100


class EffectTarget(Enum):
    """Who an effect lands on."""
    USER = "user"
    TARGET = "target"


class StrengthMode(Enum):
    """How the magnitude of a damage or heal effect is determined."""
    BASE = "base"
    REL = "rel"
    ABS = "abs"

    @property
    def prefix(self) -> str:
        """Short prefix used when listing actions (b50, r10, a5)."""
        return self.value[0]


def _check_hit_rate(hit_rate: int) -> None:
    if not MIN_HIT_RATE <= hit_rate <= MAX_HIT_RATE:
        raise InvalidEffectError(
            f"hit rate {hit_rate} must be between {MIN_HIT_RATE} and {MAX_HIT_RATE}"
        )


@dataclass(frozen=True)
class Count:
    """A fixed count, or a closed range sampled once when used."""
    low: int
    high: int

    def __post_init__(self):
        if self.low < 1:
            raise InvalidEffectError(f"count {self.low} must be at least 1")
        if self.low > self.high:
            raise InvalidEffectError(f"random minimum {self.low} is greater than max {self.high}")

    @classmethod
    def fixed(cls, value: int) -> Count:
        return cls(value, value)

    @property
    def is_fixed(self) -> bool:
        return self.low == self.high

    def __str__(self) -> str:
        if self.is_fixed:
            return str(self.low)
        return f"random {self.low} {self.high}"


@dataclass(frozen=True)
class Damage:
    """Deal damage to the user or the target."""
    target: EffectTarget
    mode: StrengthMode
    value: int
    hit_rate: int

    def __post_init__(self):
        if self.value < 0:
            raise InvalidEffectError(f"damage strength {self.value} must not be negative")
        _check_hit_rate(self.hit_rate)


@dataclass(frozen=True)
class Heal:
    """Restore health of the user or the target."""
    target: EffectTarget
    mode: StrengthMode
    value: int
    hit_rate: int

    def __post_init__(self):
        if self.value < 0:
            raise InvalidEffectError(f"heal strength {self.value} must not be negative")
        _check_hit_rate(self.hit_rate)


@dataclass(frozen=True)
class InflictStatusCondition:
    target: EffectTarget
    condition: StatusCondition
    hit_rate: int

    def __post_init__(self):
        _check_hit_rate(self.hit_rate)


@dataclass(frozen=True)
class InflictStatChange:
    target: EffectTarget
    stat: Stat
    delta: int
    hit_rate: int

    def __post_init__(self):
        _check_hit_rate(self.hit_rate)


@dataclass(frozen=True)
class Protect:
    """Shield the user against damage or stat decreases for some rounds."""
    kind: ProtectionKind
    duration: Count
    hit_rate: int

    def __post_init__(self):
        if self.kind is ProtectionKind.NONE:
            raise InvalidEffectError("protection must target 'health' or 'stats'")
        _check_hit_rate(self.hit_rate)


@dataclass(frozen=True)
class Continue:
    """A pure hit check. Gates the rest of an action when placed first."""
    hit_rate: int

    def __post_init__(self):
        _check_hit_rate(self.hit_rate)


@dataclass(frozen=True)
class Repeat:
    """Run a block of effects a number of times."""
    count: Count
    effects: tuple[BasicEffect, ...]

    def __post_init__(self):
        effects = tuple(self.effects)
        object.__setattr__(self, "effects", effects)
        if not effects:
            raise InvalidEffectError("repeat block must contain at least one effect")
        for effect in effects:
            if isinstance(effect, Repeat):
                raise InvalidEffectError("nested repeats are not allowed")
            if not isinstance(effect, BASIC_EFFECT_TYPES):
                raise InvalidEffectError(f"not an effect: {effect!r}")


BasicEffect = Union[Damage, Heal, InflictStatusCondition, InflictStatChange, Protect, Continue]
Effect = Union[BasicEffect, Repeat]

BASIC_EFFECT_TYPES = (Damage, Heal, InflictStatusCondition, InflictStatChange, Protect, Continue)
EFFECT_TYPES = BASIC_EFFECT_TYPES + (Repeat,)


def targets_self(effect: Effect) -> bool:
    """True if the effect never touches anyone but its user."""
    match effect:
        case Damage(target=target) | Heal(target=target):
            return target is EffectTarget.USER
        case InflictStatusCondition(target=target) | InflictStatChange(target=target):
            return target is EffectTarget.USER
        case Protect() | Continue():
            return True
        case Repeat(effects=effects):
            return all(targets_self(sub) for sub in effects)


def iter_effects(effects: tuple[Effect, ...]) -> Iterator[BasicEffect]:
    """Walk effects in declaration order, descending into repeat blocks."""
    for effect in effects:
        if isinstance(effect, Repeat):
            yield from effect.effects
        else:
            yield effect


@dataclass(frozen=True)
class Action:
    """An immutable action template."""
    name: str
    element: Element
    effects: tuple[Effect, ...]

    def __post_init__(self):
        effects = tuple(self.effects)
        object.__setattr__(self, "effects", effects)
        if not effects:
            raise InvalidEffectError(f"action {self.name} has no effects")
        for effect in effects:
            if not isinstance(effect, EFFECT_TYPES):
                raise InvalidEffectError(f"not an effect: {effect!r}")

    @property
    def is_self_only(self) -> bool:
        """True if every effect targets the user."""
        return all(targets_self(effect) for effect in self.effects)

    @property
    def first_damage(self) -> Damage | None:
        """First damage effect, looking inside repeat blocks."""
        for effect in iter_effects(self.effects):
            if isinstance(effect, Damage):
                return effect
        return None
