"""Configuration system: turning YAML into validated Python objects.

Pipeline manifests and build options are validated into Pydantic models.
Everything parsed here is frozen: once a manifest is loaded nothing in the
compiler mutates it, so the same object can be compiled repeatedly (or
from several threads) without surprises.
"""
from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict


def _check_non_negative(value: int) -> int:
    if value < 0:
        raise ValueError(f"Validation failed: {value!r} < 0")
    return value


def _check_positive(value: int) -> int:
    if value <= 0:
        raise ValueError(f"Validation failed: {value!r} <= 0")
    return value


class Config(BaseModel):
    """Base class for all configuration objects.

    Frozen and strict about unknown keys, so a typo in a manifest is an
    error instead of a silently ignored field.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")


# Type aliases for validated primitives; use these in config models
Binding = Annotated[int, AfterValidator(_check_non_negative)]
PositiveInt = Annotated[int, AfterValidator(_check_positive)]
# Intermediate textures are r, rg or rgba; there is no 3-channel storage format.
ComponentCount = Literal[1, 2, 4]
