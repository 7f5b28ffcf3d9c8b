"""Typed compile errors.

Every failure the compiler can report is one of these classes. They carry
the context needed to find the problem (pass index, texture id, binding,
offending line) as attributes, so callers can react to the kind of error
instead of parsing messages.

Configuration-shaped problems (bad syntax, bad references, bad structure)
also subclass ValueError, matching how the rest of the codebase reports
bad input.
"""
from __future__ import annotations

import enum


class CompileError(Exception):
    """Base class for everything the pipeline compiler raises."""


# ─────────────────────────────────────────────────────────────────────────────
# Parse errors
# ─────────────────────────────────────────────────────────────────────────────


class ScaleFactorParseReason(str, enum.Enum):
    """Why a scale factor string was rejected."""

    INVALID_FORMAT = "Invalid scale factor format"
    INVALID_NUMERATOR = "Invalid numerator"
    INVALID_DENOMINATOR = "Invalid denominator"
    ZERO_DENOMINATOR = "Denominator cannot be zero"


class ScaleFactorParseError(CompileError, ValueError):
    """A scale factor was not of the form `n` or `n/d` with d > 0."""

    def __init__(self, text: str, reason: ScaleFactorParseReason) -> None:
        self.text = text
        self.reason = reason
        super().__init__(
            f"{reason.value}: {text!r}. "
            "Fix: write scale factors as an integer ('2') or a fraction ('1/2')."
        )


class HookParseError(CompileError, ValueError):
    """A hook-format block has a missing, malformed or unsupported directive."""

    def __init__(
        self,
        message: str,
        *,
        hook_index: int | None = None,
        hook_name: str | None = None,
        line: str | None = None,
    ) -> None:
        self.hook_index = hook_index
        self.hook_name = hook_name
        self.line = line
        where = []
        if hook_index is not None:
            where.append(f"hook {hook_index}")
        if hook_name:
            where.append(f"'{hook_name}'")
        prefix = f"{' '.join(where)}: " if where else ""
        suffix = f" (line: {line!r})" if line is not None else ""
        super().__init__(f"{prefix}{message}{suffix}")


class ManifestParseError(CompileError, ValueError):
    """A pipeline manifest could not be decoded into pass specifications."""


# ─────────────────────────────────────────────────────────────────────────────
# Reference errors
# ─────────────────────────────────────────────────────────────────────────────


class UnknownTextureError(CompileError, ValueError):
    """A texture name was referenced before anything defined it."""

    def __init__(self, texture: str, *, context: str) -> None:
        self.texture = texture
        self.context = context
        super().__init__(
            f"{context}: unknown texture '{texture}'. "
            "Fix: reference only SOURCE or textures produced by an earlier pass."
        )


# ─────────────────────────────────────────────────────────────────────────────
# Validation errors
# ─────────────────────────────────────────────────────────────────────────────


class PipelineValidationError(CompileError, ValueError):
    """Base class for structural problems in a pass list."""

    pass_index: int | None = None


class EmptyIdError(PipelineValidationError):
    def __init__(self) -> None:
        super().__init__("Pipeline ID cannot be empty")


class EmptyNameError(PipelineValidationError):
    def __init__(self) -> None:
        super().__init__("Pipeline name cannot be empty")


class NoPassesError(PipelineValidationError):
    def __init__(self) -> None:
        super().__init__("Pipeline must have at least one pass")


class PassMissingInputsError(PipelineValidationError):
    def __init__(self, pass_index: int) -> None:
        self.pass_index = pass_index
        super().__init__(f"Pass {pass_index} is missing inputs")


class PassMissingOutputsError(PipelineValidationError):
    def __init__(self, pass_index: int) -> None:
        self.pass_index = pass_index
        super().__init__(f"Pass {pass_index} is missing outputs")


class DuplicateBindingError(PipelineValidationError):
    def __init__(self, pass_index: int, binding: int) -> None:
        self.pass_index = pass_index
        self.binding = binding
        super().__init__(f"Duplicate binding {binding} in pass {pass_index}")


class ResultNotInLastPassError(PipelineValidationError):
    def __init__(self, pass_index: int) -> None:
        self.pass_index = pass_index
        super().__init__(
            f"RESULT output found in pass {pass_index} but must only be in the last pass"
        )


class TextureOverwrittenError(PipelineValidationError):
    def __init__(self, pass_index: int, texture: str) -> None:
        self.pass_index = pass_index
        self.texture = texture
        super().__init__(f"Texture '{texture}' is being overwritten in pass {pass_index}")


class InputTextureNotFoundError(PipelineValidationError):
    def __init__(self, pass_index: int, texture: str) -> None:
        self.pass_index = pass_index
        self.texture = texture
        super().__init__(
            f"Input texture '{texture}' in pass {pass_index} was not created by any "
            "previous pass or is not SOURCE"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Translation errors
# ─────────────────────────────────────────────────────────────────────────────


class TranslationError(CompileError, ValueError):
    """A convolution hook body could not be translated to WGSL."""

    def __init__(self, message: str, *, hook_name: str, line: str | None = None) -> None:
        self.hook_name = hook_name
        self.line = line
        suffix = f": {line}" if line is not None else ""
        super().__init__(f"{message} in {hook_name} shader code{suffix}")


# ─────────────────────────────────────────────────────────────────────────────
# I/O errors
# ─────────────────────────────────────────────────────────────────────────────


class ShaderLoadError(CompileError):
    """The injected shader loader failed for one pass."""

    def __init__(self, *, pass_index: int, pass_id: str, filename: str, cause: OSError) -> None:
        self.pass_index = pass_index
        self.pass_id = pass_id
        self.filename = filename
        self.cause = cause
        super().__init__(
            f"Failed to load shader '{filename}' for pass {pass_index} ('{pass_id}'): {cause}"
        )
