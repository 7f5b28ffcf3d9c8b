"""Compiled pipelines: the compiler's output.

A CompiledPipeline is static data for an execution runtime. It lists the
physical textures to create (sized by applying each scale factor to the
runtime's input size), and one compute dispatch per pass with every
binding already resolved to a physical texture id and the shader text
embedded. Logical ids stay on each binding for diagnostics and so the
runtime can find the RESULT output.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from anime4k_build.compiler.allocate import PhysicalTexture
from anime4k_build.config.manifest import RESULT_TEXTURE, SamplerBinding, SamplerFilterMode
from anime4k_build.config.scale import ScaleFactorPair


@dataclass(frozen=True, slots=True)
class PhysicalTextureBinding:
    """A pass binding resolved to the physical texture backing it."""

    logical_id: str
    physical_id: int
    binding: int
    components: int
    scale_factor: ScaleFactorPair

    def to_dict(self) -> dict[str, object]:
        return {
            "logical_id": self.logical_id,
            "physical_id": self.physical_id,
            "binding": self.binding,
            "components": self.components,
            "scale_factor": [s.to_dict() for s in self.scale_factor],
        }


@dataclass(frozen=True, slots=True)
class CompiledPass:
    """One compute dispatch.

    compute_scale_factors: dispatch size relative to the input, taken from
    the first output.
    """

    id: str
    shader: str
    compute_scale_factors: tuple[float, float]
    input_textures: tuple[PhysicalTextureBinding, ...]
    output_textures: tuple[PhysicalTextureBinding, ...]
    samplers: tuple[SamplerBinding, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "shader": self.shader,
            "compute_scale_factors": list(self.compute_scale_factors),
            "input_textures": [t.to_dict() for t in self.input_textures],
            "output_textures": [t.to_dict() for t in self.output_textures],
            "samplers": [s.model_dump(mode="json") for s in self.samplers],
        }


@dataclass(frozen=True, slots=True)
class CompiledPipeline:
    """A fully resolved pipeline, ready to hand to a GPU runtime."""

    id: str
    name: str
    description: str | None
    physical_textures: tuple[PhysicalTexture, ...]
    passes: tuple[CompiledPass, ...]
    required_samplers: tuple[SamplerFilterMode, ...]

    def source_texture_id(self) -> int | None:
        """Physical id of the pipeline input."""
        for texture in self.physical_textures:
            if texture.is_source:
                return texture.id
        return None

    def result_output(self) -> PhysicalTextureBinding | None:
        """The RESULT output binding of the last pass."""
        if not self.passes:
            return None
        for output in self.passes[-1].output_textures:
            if output.logical_id == RESULT_TEXTURE:
                return output
        return None

    def result_texture_id(self) -> int | None:
        output = self.result_output()
        return output.physical_id if output is not None else None

    def final_scale_factor(self) -> ScaleFactorPair | None:
        """Size of the result relative to the input, e.g. (2, 2) for a 2x upscaler."""
        output = self.result_output()
        return output.scale_factor if output is not None else None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "physical_textures": [t.to_dict() for t in self.physical_textures],
            "passes": [p.to_dict() for p in self.passes],
            "required_samplers": [m.value for m in self.required_samplers],
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, path: Path) -> None:
        """Write the pipeline as JSON, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n", encoding="utf-8")
