"""Pydantic models for filter configuration and filter input."""

import re
from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import InvalidSpec

FIELD_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
FIELD_NAME_MAX_LENGTH = 32

NO_NAME_LABEL = "No name"


class MatchMode(str, Enum):
    SINGLE = "single"
    ANY_OF = "any_of"


class EmptyPolicy(str, Enum):
    """What a handler does when it receives no term ids."""

    MATCH_ALL = "match_all"
    MATCH_NONE = "match_none"
    ERROR = "error"


class HandlerKind(str, Enum):
    ARGUMENT = "argument"
    FILTER = "filter"


def reference_table_name(field_name: str) -> str:
    return f"media__{field_name}"


def reference_column_name(field_name: str) -> str:
    return f"{field_name}_target_id"


class FilterConfig(BaseModel):
    """Validated configuration of one media taxonomy depth filter."""

    id: str = Field(..., description="Unique filter identifier")
    handler: HandlerKind = Field(default=HandlerKind.FILTER, description="argument or filter")
    reference_field: str = Field(..., description="Machine name of the media field referencing a taxonomy")
    depth: int = Field(default=0, description="Hierarchy levels to walk; positive=children, negative=parents")
    allow_multiple_values: bool = Field(default=False, description="Accept 1+2+3 style arguments")
    empty_policy: EmptyPolicy = Field(default=EmptyPolicy.MATCH_ALL, description="Behavior with zero term ids")

    @field_validator("reference_field")
    @classmethod
    def _check_reference_field(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reference_field is required")
        if len(value) > FIELD_NAME_MAX_LENGTH:
            raise ValueError(f"reference_field longer than {FIELD_NAME_MAX_LENGTH} characters: {value}")
        if not FIELD_NAME_PATTERN.match(value):
            raise ValueError(f"reference_field is not a machine name: {value}")
        return value

    @field_validator("depth", mode="before")
    @classmethod
    def _check_depth(cls, value):
        # bool is an int subclass; "true" is never a depth
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"depth must be an integer, got {value!r}")
        return value

    @property
    def reference_table(self) -> str:
        return reference_table_name(self.reference_field)

    @property
    def reference_column(self) -> str:
        return reference_column_name(self.reference_field)

    @classmethod
    def parse(cls, data: dict) -> "FilterConfig":
        """Validate a raw config dict, raising InvalidSpec on any problem."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidSpec(f"Invalid filter config {data.get('id', '<unnamed>')!r}: {e}") from e


class FilterSpec(BaseModel):
    """Term ids, depth and match mode for one evaluation."""

    target_terms: Tuple[int, ...]
    depth: int = 0
    match_mode: MatchMode = MatchMode.SINGLE

    @field_validator("target_terms")
    @classmethod
    def _check_targets(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if not value:
            raise ValueError("at least one target term is required")
        # sorted + deduplicated so equal specs compose equal SQL
        return tuple(sorted(set(value)))

    @model_validator(mode="after")
    def _derive_match_mode(self) -> "FilterSpec":
        # several targets are always OR'd; SINGLE only ever names one term
        self.match_mode = MatchMode.SINGLE if len(self.target_terms) == 1 else MatchMode.ANY_OF
        return self

    @classmethod
    def build(cls, target_terms, depth: int = 0) -> "FilterSpec":
        try:
            return cls(target_terms=tuple(target_terms), depth=depth)
        except ValidationError as e:
            raise InvalidSpec(str(e)) from e

    @property
    def operator(self) -> str:
        return "=" if self.match_mode == MatchMode.SINGLE else "IN"


class BrokenArgument(BaseModel):
    """A raw contextual argument split into term ids."""

    value: List[int] = Field(default_factory=list)
    operator: str = "or"

    @property
    def is_invalid(self) -> bool:
        return self.value == [-1]
