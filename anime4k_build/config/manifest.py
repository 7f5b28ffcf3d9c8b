"""Manifest: the declarative pass-list description of a shader pipeline.

A manifest names the shader file of every pass, which logical textures it
reads and writes, at which binding slots, and how large each output is
relative to the pipeline input. It's loaded from YAML (or JSON) and is the
common currency of the compiler: hook-format sources are converted into
the same models before compilation.
"""
from __future__ import annotations

import enum
import json
from pathlib import Path

import yaml
from pydantic import ValidationError, field_validator

from anime4k_build.config import Binding, ComponentCount, Config
from anime4k_build.config.scale import ScaleFactorField, ScaleFactorPair
from anime4k_build.errors import ManifestParseError

SOURCE_TEXTURE = "SOURCE"
RESULT_TEXTURE = "RESULT"


class SamplerFilterMode(str, enum.Enum):
    """Texture sampling filter modes.

    NEAREST: sharp, pixelated lookups
    LINEAR: bilinear interpolation
    """

    NEAREST = "nearest"
    LINEAR = "linear"


class TextureBinding(Config):
    """A logical texture read by a pass at a binding slot."""

    id: str
    binding: Binding


class TextureOutput(Config):
    """A logical texture written by a pass.

    `scale_factor` is `[width, height]`, each written as "n" or "n/d".
    """

    id: str
    binding: Binding
    components: ComponentCount
    scale_factor: tuple[ScaleFactorField, ScaleFactorField]

    @property
    def scale(self) -> ScaleFactorPair:
        return (self.scale_factor[0], self.scale_factor[1])


class SamplerBinding(Config):
    """A sampler bound at a slot; linear filtering unless stated otherwise."""

    binding: Binding
    filter_mode: SamplerFilterMode = SamplerFilterMode.LINEAR


class PassSpec(Config):
    """A single shader pass in the pipeline."""

    id: str
    file: str
    inputs: list[TextureBinding]
    outputs: list[TextureOutput]
    samplers: list[SamplerBinding] = []

    def bindings(self) -> list[int]:
        """All binding slots used by this pass, inputs first."""
        return (
            [t.binding for t in self.inputs]
            + [t.binding for t in self.outputs]
            + [s.binding for s in self.samplers]
        )


class PipelineManifest(Config):
    """A complete pass-list pipeline description.

    Structural rules (RESULT placement, no overwrites, inputs defined before
    use) are not enforced here; that's the compiler's Validator.
    """

    id: str
    name: str
    description: str | None = None
    passes: list[PassSpec]

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @classmethod
    def from_payload(cls, payload: object) -> "PipelineManifest":
        """Validate an already-decoded manifest document."""
        if payload is None:
            raise ManifestParseError("Manifest payload is empty.")
        if not isinstance(payload, dict):
            raise ManifestParseError(
                f"Manifest payload must be a dict, got {type(payload)!r}"
            )
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise ManifestParseError(f"Invalid pipeline manifest: {e}") from e

    @classmethod
    def from_yaml(cls, text: str) -> "PipelineManifest":
        try:
            payload = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ManifestParseError(f"Manifest is not valid YAML: {e}") from e
        return cls.from_payload(payload)

    @classmethod
    def from_json(cls, text: str) -> "PipelineManifest":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestParseError(f"Manifest is not valid JSON: {e}") from e
        return cls.from_payload(payload)

    @classmethod
    def from_path(cls, path: Path) -> "PipelineManifest":
        """Load a manifest from a JSON or YAML file."""
        text = path.read_text(encoding="utf-8")
        match path.suffix.lower():
            case ".json":
                return cls.from_json(text)
            case ".yml" | ".yaml":
                return cls.from_yaml(text)
            case s:
                raise ManifestParseError(f"Unsupported format '{s}'")
