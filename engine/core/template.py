"""
Template base class for immutable, validated game data.

Templates are pure data loaded once from configuration. They are frozen
after construction: battles never mutate a template, they work on
per-match copies instead.

Usage:
    class MonsterTemplate(Template):
        name: str
        hp: int = Field(ge=1)

    template = MonsterTemplate.create(line=12, name="Blub", hp=20)
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from engine.core.errors import ConfigError

T = TypeVar("T", bound="Template")


class Template(BaseModel):
    """
    Base class for all templates.

    Pydantic gives us validation, defaults and a readable error report;
    ``create`` turns that report into a ConfigError.
    """

    model_config = ConfigDict(
        # Allow references to plain Python objects (actions, effects)
        arbitrary_types_allowed=True,
        # Templates never change once loaded
        frozen=True,
        extra='forbid',
    )

    # Human readable kind used in error messages
    _type_name: ClassVar[str] = ""

    @classmethod
    def get_type_name(cls) -> str:
        """Get the template kind used in error messages."""
        return cls._type_name or cls.__name__

    @classmethod
    def create(cls: type[T], line: Optional[int] = None, **data: Any) -> T:
        """
        Validate and build a template.

        Args:
            line: Source line of the definition, if it came from a file
            **data: Field values

        Raises:
            ConfigError: If any field fails validation
        """
        try:
            return cls(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"invalid {cls.get_type_name()}: {problems}", line) from e
