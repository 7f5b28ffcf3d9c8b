"""Plan printer: human-readable view of a compiled pipeline.

After compilation, you may want to check which logical textures ended up
sharing memory and what each dispatch binds. The planner renders the
compiled pipeline as indented text, one line per texture and binding.
"""
from __future__ import annotations

from typing import Iterable

from anime4k_build.compiler.allocate import PhysicalTexture
from anime4k_build.compiler.pipeline import (
    CompiledPass,
    CompiledPipeline,
    PhysicalTextureBinding,
)
from anime4k_build.config.manifest import SOURCE_TEXTURE
from anime4k_build.config.scale import ScaleFactorPair


class Planner:
    """Renders execution plans from compiled pipelines."""

    def format(self, pipeline: CompiledPipeline) -> str:
        """Render a human-readable plan for a compiled pipeline."""
        out: list[str] = []
        out.append(f"pipeline.id={pipeline.id}")
        out.append(f"pipeline.name={pipeline.name}")
        if pipeline.description:
            out.append(f"pipeline.description={pipeline.description}")
        samplers = ",".join(m.value for m in pipeline.required_samplers) or "-"
        out.append(f"pipeline.samplers={samplers}")
        out.append("textures:")
        for texture in pipeline.physical_textures:
            out.extend(self.format_texture(texture, indent=2))
        out.append("passes:")
        for i, compiled in enumerate(pipeline.passes):
            out.extend(self.format_pass(compiled, indent=2, path=f"passes[{i}]"))
        return "\n".join(out)

    def format_scale(self, scale: ScaleFactorPair) -> str:
        return f"{scale[0]}x{scale[1]}"

    def format_physical_id(self, texture_id: int, is_source: bool) -> str:
        return "SOURCE" if is_source else f"#{texture_id}"

    def format_texture(self, texture: PhysicalTexture, *, indent: int) -> Iterable[str]:
        pad = " " * indent
        yield (
            f"{pad}- texture={self.format_physical_id(texture.id, texture.is_source)} "
            f"components={texture.components} "
            f"scale={self.format_scale(texture.scale_factor)}"
        )

    def format_pass(self, compiled: CompiledPass, *, indent: int, path: str) -> Iterable[str]:
        """Format a pass header followed by its bindings."""
        pad = " " * indent
        sx, sy = compiled.compute_scale_factors
        yield f"{pad}- pass={compiled.id} dispatch={sx:g}x{sy:g} path={path}"
        for binding in compiled.input_textures:
            yield from self.format_binding("in", binding, indent=indent + 2)
        for binding in compiled.output_textures:
            yield from self.format_binding("out", binding, indent=indent + 2)
        for sampler in compiled.samplers:
            yield f"{pad}  - sampler @{sampler.binding} filter={sampler.filter_mode.value}"

    def format_binding(
        self, direction: str, binding: PhysicalTextureBinding, *, indent: int
    ) -> Iterable[str]:
        pad = " " * indent
        physical = self.format_physical_id(
            binding.physical_id, binding.logical_id == SOURCE_TEXTURE
        )
        yield (
            f"{pad}- {direction} @{binding.binding} {binding.logical_id} -> {physical} "
            f"components={binding.components} "
            f"scale={self.format_scale(binding.scale_factor)}"
        )
