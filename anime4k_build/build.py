"""Build entry points: source files in, compiled pipelines out.

Two notations compile to the same CompiledPipeline:
- hook-format GLSL (the CNN/GAN shaders): every hook is parsed, translated
  and turned into one manifest pass whose shader text is held in memory
- pass-list manifests (the auxiliary shaders): shader files are read
  relative to the manifest

Both optionally minify shader text before it is embedded.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from anime4k_build.compiler import Compiler, CompiledPipeline
from anime4k_build.config.build import BuildConfig
from anime4k_build.config.manifest import (
    PassSpec,
    PipelineManifest,
    SamplerBinding,
    SamplerFilterMode,
    TextureBinding,
    TextureOutput,
)
from anime4k_build.config.scale import RationalScale
from anime4k_build.errors import ShaderLoadError
from anime4k_build.hook.parse import HookParser, StageKind, new_scale_factor_map, split_hooks
from anime4k_build.hook.translate import HookTranslator, StageShader
from anime4k_build.minify import minify_wgsl

logger = logging.getLogger(__name__)

# Reads a depth-to-space helper shader by file name; raises OSError when missing.
HelperLoader = Callable[[str], str]


def directory_loader(directory: Path) -> Callable[[str], str]:
    """Loader reading shader files relative to `directory`."""

    def load(filename: str) -> str:
        return (directory / filename).read_text(encoding="utf-8")

    return load


def stage_to_pass(stage: StageShader, *, index: int, file: str) -> PassSpec:
    """Describe a translated stage as a manifest pass.

    Hook stages always write 4 components at an integer scale of the input.
    """
    scale = RationalScale(stage.scale_factor)
    samplers = []
    if stage.sampler is not None:
        samplers.append(SamplerBinding(binding=stage.sampler, filter_mode=SamplerFilterMode.LINEAR))
    return PassSpec(
        id=f"Pass {index + 1}",
        file=file,
        inputs=[TextureBinding(id=texture, binding=slot) for slot, texture in stage.inputs],
        outputs=[
            TextureOutput(
                id=stage.output[1],
                binding=stage.output[0],
                components=4,
                scale_factor=(scale, scale),
            )
        ],
        samplers=samplers,
    )


def hook_source_to_manifest(
    source: str,
    load_helper: HelperLoader,
    config: BuildConfig | None = None,
) -> tuple[PipelineManifest, dict[str, str]]:
    """Convert hook-format source into a manifest plus its shader files.

    Convolution stages get generated files named `pass_{i}.wgsl`;
    depth-to-space stages reference their helper shader by name, loaded
    once through `load_helper`.
    """
    config = config or BuildConfig()
    parser = HookParser()
    translator = HookTranslator(workgroup_size=config.workgroup_size)

    files: dict[str, str] = {}
    passes: list[PassSpec] = []
    scale_map = new_scale_factor_map()
    for index, block in enumerate(split_hooks(source)):
        hook = parser.parse_hook(block, scale_map, index=index)
        stage = translator.translate(hook, scale_map)

        match stage.kind:
            case StageKind.CONV:
                filename = f"pass_{index}.wgsl"
                code = stage.code or ""
            case StageKind.DEPTH_TO_SPACE:
                filename = stage.helper_filename()
                try:
                    code = load_helper(filename)
                except OSError as e:
                    raise ShaderLoadError(
                        pass_index=index, pass_id=f"Pass {index + 1}", filename=filename, cause=e
                    ) from e

        files[filename] = minify_wgsl(code) if config.minify else code
        passes.append(stage_to_pass(stage, index=index, file=filename))
        logger.debug("hook %d %r -> %s", index, hook.name, filename)

    manifest = PipelineManifest(
        id=config.pipeline_id,
        name=config.pipeline_name,
        passes=passes,
    )
    return manifest, files


def hook_source_to_pipeline(
    source: str,
    load_helper: HelperLoader,
    config: BuildConfig | None = None,
) -> CompiledPipeline:
    """Compile hook-format source into a pipeline."""
    manifest, files = hook_source_to_manifest(source, load_helper, config)

    def load_shader(filename: str) -> str:
        try:
            return files[filename]
        except KeyError:
            raise FileNotFoundError(f"File not found: {filename}") from None

    return Compiler().compile(manifest, load_shader)


def hook_file_to_pipeline(path: Path, config: BuildConfig) -> CompiledPipeline:
    """Compile a hook-format GLSL file, reading helpers from `config.helpers_dir`."""
    if config.helpers_dir is None:
        raise ValueError(
            f"Converting {path} needs the depth-to-space helper shaders. "
            "Fix: pass --helpers DIR pointing at the directory holding depth_to_space_*.wgsl."
        )
    source = Path(path).read_text(encoding="utf-8")
    return hook_source_to_pipeline(source, directory_loader(config.helpers_dir), config)


def manifest_file_to_pipeline(path: Path, config: BuildConfig | None = None) -> CompiledPipeline:
    """Compile a YAML/JSON manifest, reading shaders relative to its directory."""
    config = config or BuildConfig()
    path = Path(path)
    manifest = PipelineManifest.from_path(path)
    read = directory_loader(path.parent)

    def load_shader(filename: str) -> str:
        code = read(filename)
        return minify_wgsl(code) if config.minify else code

    return Compiler().compile(manifest, load_shader)
