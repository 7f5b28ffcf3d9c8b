"""Exact rational scale factors.

Every texture in a pipeline is sized relative to the pipeline input. Scale
factors are kept as integer fractions so dimension reasoning never drifts
the way floats would.

Equality is deliberately strict: `2/1` and `4/2` compare unequal. The
physical texture allocator relies on this when deciding which textures
may share a GPU slot, and compiled pipelines depend on that decision
staying stable.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, TypeAlias

from pydantic import PlainSerializer, PlainValidator

from anime4k_build.errors import ScaleFactorParseError, ScaleFactorParseReason


@dataclass(frozen=True, slots=True)
class RationalScale:
    """A scale factor `numerator/denominator` relative to the pipeline input."""

    numerator: int
    denominator: int = 1

    def __post_init__(self) -> None:
        if self.numerator < 0:
            raise ValueError(f"numerator must be non-negative, got {self.numerator}")
        if self.denominator <= 0:
            raise ValueError(f"denominator must be positive, got {self.denominator}")

    @classmethod
    def parse(cls, text: str) -> "RationalScale":
        """Parse `"n"` or `"n/d"`."""
        text = text.strip()
        if "/" in text:
            parts = text.split("/")
            if len(parts) != 2:
                raise ScaleFactorParseError(text, ScaleFactorParseReason.INVALID_FORMAT)
            numerator = _parse_uint(parts[0], text, ScaleFactorParseReason.INVALID_NUMERATOR)
            denominator = _parse_uint(
                parts[1], text, ScaleFactorParseReason.INVALID_DENOMINATOR
            )
            if denominator == 0:
                raise ScaleFactorParseError(text, ScaleFactorParseReason.ZERO_DENOMINATOR)
            return cls(numerator, denominator)
        return cls(_parse_uint(text, text, ScaleFactorParseReason.INVALID_NUMERATOR), 1)

    @classmethod
    def coerce(cls, value: object) -> "RationalScale":
        """Accept a RationalScale, a non-negative int, or fraction text."""
        match value:
            case RationalScale():
                return value
            case bool():
                raise ScaleFactorParseError(repr(value), ScaleFactorParseReason.INVALID_FORMAT)
            case int() if value >= 0:
                return cls(value, 1)
            case str():
                return cls.parse(value)
            case _:
                raise ScaleFactorParseError(repr(value), ScaleFactorParseReason.INVALID_FORMAT)

    def to_float(self) -> float:
        return self.numerator / self.denominator

    def is_unity(self) -> bool:
        return self.numerator == self.denominator

    def is_upscale(self) -> bool:
        return self.numerator > self.denominator

    def is_downscale(self) -> bool:
        return self.numerator < self.denominator

    def apply(self, size: int) -> int:
        """Scale an input dimension, rounding down."""
        return size * self.numerator // self.denominator

    def to_dict(self) -> dict[str, int]:
        return {"numerator": self.numerator, "denominator": self.denominator}

    def __str__(self) -> str:
        if self.denominator == 1:
            return str(self.numerator)
        return f"{self.numerator}/{self.denominator}"


def _parse_uint(part: str, text: str, reason: ScaleFactorParseReason) -> int:
    if not part.isascii() or not part.isdigit():
        raise ScaleFactorParseError(text, reason)
    return int(part)


UNITY = RationalScale(1, 1)

ScaleFactorPair: TypeAlias = tuple[RationalScale, RationalScale]
UNITY_PAIR: ScaleFactorPair = (UNITY, UNITY)

# Field type for pydantic models: validates from "n"/"n/d" text, dumps back to text.
ScaleFactorField = Annotated[
    RationalScale,
    PlainValidator(RationalScale.coerce),
    PlainSerializer(str, return_type=str),
]
