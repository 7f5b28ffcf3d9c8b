"""Build options shared by the CLI and the library entry points."""
from __future__ import annotations

from pathlib import Path

from anime4k_build.config import Config, PositiveInt


class BuildConfig(Config):
    """How sources are turned into compiled pipelines.

    minify: run compiled shaders through the WGSL minifier
    helpers_dir: directory with the pre-authored depth-to-space shaders
    workgroup_size: compute workgroup size of translated convolution stages
    pipeline_id / pipeline_name: identity given to pipelines built from hook sources
    """

    minify: bool = False
    helpers_dir: Path | None = None
    workgroup_size: tuple[PositiveInt, PositiveInt] = (8, 8)
    pipeline_id: str = "anime4k_cnn"
    pipeline_name: str = "Anime4K CNN"
