"""Compiler: turns a pass-list manifest into a compiled pipeline.

A manifest talks about logical textures by name. The runtime wants
physical texture ids, resolved bindings and the shader source of every
pass, with as few GPU textures as possible.

Pipeline stages:
1. Validate: structural and referential checks on the pass list
2. Analyze: compute the live range of every logical texture
3. Allocate: pack logical textures into reusable physical slots
4. Build: resolve every binding and load every shader
5. Plan (optional): render a human-readable view for debugging
"""
from __future__ import annotations

import logging
from typing import Callable

from anime4k_build.compiler.allocate import (
    SOURCE_TEXTURE_ID,
    Allocation,
    PhysicalAllocator,
    PhysicalTexture,
)
from anime4k_build.compiler.lifetime import LifetimeAnalyzer, TextureLifetime
from anime4k_build.compiler.pipeline import (
    CompiledPass,
    CompiledPipeline,
    PhysicalTextureBinding,
)
from anime4k_build.compiler.plan import Planner
from anime4k_build.compiler.validate import Validator
from anime4k_build.config.manifest import (
    SOURCE_TEXTURE,
    PassSpec,
    PipelineManifest,
    SamplerFilterMode,
)
from anime4k_build.config.scale import UNITY_PAIR, ScaleFactorPair
from anime4k_build.errors import ShaderLoadError, UnknownTextureError

__all__ = [
    "SOURCE_TEXTURE_ID",
    "Allocation",
    "CompiledPass",
    "CompiledPipeline",
    "Compiler",
    "LifetimeAnalyzer",
    "PhysicalAllocator",
    "PhysicalTexture",
    "PhysicalTextureBinding",
    "Planner",
    "ShaderLoader",
    "TextureLifetime",
    "Validator",
]

logger = logging.getLogger(__name__)

# Maps a pass's `file` to shader source; raises OSError when it can't.
ShaderLoader = Callable[[str], str]


class Compiler:
    """Runs the full compilation pipeline on manifests.

    The compiler holds no state between calls; one instance can compile
    any number of manifests.
    """

    validator: Validator
    analyzer: LifetimeAnalyzer
    allocator: PhysicalAllocator
    planner: Planner

    def __init__(self) -> None:
        self.validator = Validator()
        self.analyzer = LifetimeAnalyzer()
        self.allocator = PhysicalAllocator()
        self.planner = Planner()

    def compile(self, manifest: PipelineManifest, load_shader: ShaderLoader) -> CompiledPipeline:
        """Run the full pipeline: validate → analyze → allocate → build.

        Args:
            manifest: The pipeline to compile. It is not modified.
            load_shader: Called once per pass, in pass order, with the
                pass's `file`.

        Returns:
            The compiled pipeline.

        Raises:
            PipelineValidationError: If the pass list is malformed.
            UnknownTextureError: If a binding can't be resolved.
            ShaderLoadError: If the loader fails for a pass.
        """
        self.validator.validate_manifest(manifest)
        lifetimes = self.analyzer.analyze(manifest.passes)
        allocation = self.allocator.allocate(lifetimes)
        logger.debug(
            "%s: %d logical textures in %d physical textures",
            manifest.id,
            len(lifetimes),
            len(allocation.textures) - 1,
        )

        passes = [
            self.compile_pass(manifest.passes, i, allocation, load_shader)
            for i in range(len(manifest.passes))
        ]

        return CompiledPipeline(
            id=manifest.id,
            name=manifest.name,
            description=manifest.description,
            physical_textures=allocation.textures,
            passes=tuple(passes),
            required_samplers=self.required_samplers(manifest.passes),
        )

    def compile_pass(
        self,
        passes: list[PassSpec],
        index: int,
        allocation: Allocation,
        load_shader: ShaderLoader,
    ) -> CompiledPass:
        spec = passes[index]

        inputs = []
        for binding in spec.inputs:
            components, scale_factor = self.input_shape(passes, index, binding.id)
            inputs.append(
                PhysicalTextureBinding(
                    logical_id=binding.id,
                    physical_id=self.physical_id(allocation, binding.id, index),
                    binding=binding.binding,
                    components=components,
                    scale_factor=scale_factor,
                )
            )

        outputs = [
            PhysicalTextureBinding(
                logical_id=output.id,
                physical_id=self.physical_id(allocation, output.id, index),
                binding=output.binding,
                components=output.components,
                scale_factor=output.scale,
            )
            for output in spec.outputs
        ]

        try:
            shader = load_shader(spec.file)
        except OSError as e:
            raise ShaderLoadError(
                pass_index=index, pass_id=spec.id, filename=spec.file, cause=e
            ) from e

        width, height = spec.outputs[0].scale
        return CompiledPass(
            id=spec.id,
            shader=shader,
            compute_scale_factors=(width.to_float(), height.to_float()),
            input_textures=tuple(inputs),
            output_textures=tuple(outputs),
            samplers=tuple(spec.samplers),
        )

    def input_shape(
        self, passes: list[PassSpec], index: int, texture: str
    ) -> tuple[int, ScaleFactorPair]:
        """Components and scale of `texture` as written by its producer."""
        if texture == SOURCE_TEXTURE:
            return 4, UNITY_PAIR
        for spec in reversed(passes[:index]):
            for output in spec.outputs:
                if output.id == texture:
                    return output.components, output.scale
        raise UnknownTextureError(texture, context=f"Pass {index} input")

    def physical_id(self, allocation: Allocation, texture: str, index: int) -> int:
        physical_id = allocation.physical_id(texture)
        if physical_id is None:
            raise UnknownTextureError(texture, context=f"Pass {index}")
        return physical_id

    def required_samplers(self, passes: list[PassSpec]) -> tuple[SamplerFilterMode, ...]:
        """Distinct filter modes in first-use order."""
        modes: dict[SamplerFilterMode, None] = {}
        for spec in passes:
            for sampler in spec.samplers:
                modes.setdefault(sampler.filter_mode, None)
        return tuple(modes)
