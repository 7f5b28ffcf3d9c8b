"""Predefined pipelines: the named shader sets shipped with the project.

Auxiliary pipelines (deblur, denoise, line effects, classic upscalers) are
pass-list manifests. CNN/GAN pipelines are the upstream hook-format GLSL
files, converted on the fly. Paths are relative to the project root.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from anime4k_build.build import hook_file_to_pipeline, manifest_file_to_pipeline
from anime4k_build.config.build import BuildConfig
from anime4k_build.console import logger
from anime4k_build.errors import CompileError

PREDEFINED_PIPELINES_AUX: list[tuple[str, str]] = [
    # Image processing utilities
    ("CLAMP_HIGHLIGHTS", "wgsl/auxiliary/clamp_highlights_manifest.yaml"),
    # Deblur
    ("DEBLUR_DOG", "wgsl/auxiliary/deblur_dog_manifest.yaml"),
    ("DEBLUR_ORIGINAL", "wgsl/auxiliary/deblur_original_manifest.yaml"),
    # Denoise
    ("DENOISE_BILATERAL_MEAN", "wgsl/auxiliary/denoise_bilateral_mean_manifest.yaml"),
    ("DENOISE_BILATERAL_MEDIAN", "wgsl/auxiliary/denoise_bilateral_median_manifest.yaml"),
    ("DENOISE_BILATERAL_MODE", "wgsl/auxiliary/denoise_bilateral_mode_manifest.yaml"),
    # Line effects
    ("EFFECTS_DARKEN_HQ", "wgsl/auxiliary/effects_darken_manifest_hq.yaml"),
    ("EFFECTS_DARKEN_FAST", "wgsl/auxiliary/effects_darken_manifest_fast.yaml"),
    ("EFFECTS_DARKEN_VERYFAST", "wgsl/auxiliary/effects_darken_manifest_veryfast.yaml"),
    ("EFFECTS_THIN_HQ", "wgsl/auxiliary/effects_thin_manifest_hq.yaml"),
    ("EFFECTS_THIN_FAST", "wgsl/auxiliary/effects_thin_manifest_fast.yaml"),
    ("EFFECTS_THIN_VERYFAST", "wgsl/auxiliary/effects_thin_manifest_veryfast.yaml"),
    # Non-CNN upscalers
    ("UPSCALE_DOG_X2", "wgsl/auxiliary/upscale_dog_x2_manifest.yaml"),
    ("UPSCALE_ORIGINAL_X2", "wgsl/auxiliary/upscale_original_x2_manifest.yaml"),
]

PREDEFINED_PIPELINES_CNN: list[tuple[str, str]] = [
    ("RESTORE_CNN_S", "anime4k-glsl/Restore/Anime4K_Restore_CNN_S.glsl"),
    ("RESTORE_CNN_M", "anime4k-glsl/Restore/Anime4K_Restore_CNN_M.glsl"),
    ("RESTORE_CNN_L", "anime4k-glsl/Restore/Anime4K_Restore_CNN_L.glsl"),
    ("RESTORE_CNN_VL", "anime4k-glsl/Restore/Anime4K_Restore_CNN_VL.glsl"),
    ("RESTORE_CNN_UL", "anime4k-glsl/Restore/Anime4K_Restore_CNN_UL.glsl"),
    ("RESTORE_GAN_UL", "anime4k-glsl/Restore/Anime4K_Restore_GAN_UL.glsl"),
    ("RESTORE_GAN_UUL", "anime4k-glsl/Restore/Anime4K_Restore_GAN_UUL.glsl"),
    ("RESTORE_SOFT_CNN_S", "anime4k-glsl/Restore/Anime4K_Restore_CNN_Soft_S.glsl"),
    ("RESTORE_SOFT_CNN_M", "anime4k-glsl/Restore/Anime4K_Restore_CNN_Soft_M.glsl"),
    ("RESTORE_SOFT_CNN_L", "anime4k-glsl/Restore/Anime4K_Restore_CNN_Soft_L.glsl"),
    ("RESTORE_SOFT_CNN_VL", "anime4k-glsl/Restore/Anime4K_Restore_CNN_Soft_VL.glsl"),
    ("RESTORE_SOFT_CNN_UL", "anime4k-glsl/Restore/Anime4K_Restore_CNN_Soft_UL.glsl"),
    ("UPSCALE_CNN_X2_S", "anime4k-glsl/Upscale/Anime4K_Upscale_CNN_x2_S.glsl"),
    ("UPSCALE_CNN_X2_M", "anime4k-glsl/Upscale/Anime4K_Upscale_CNN_x2_M.glsl"),
    ("UPSCALE_CNN_X2_L", "anime4k-glsl/Upscale/Anime4K_Upscale_CNN_x2_L.glsl"),
    ("UPSCALE_CNN_X2_VL", "anime4k-glsl/Upscale/Anime4K_Upscale_CNN_x2_VL.glsl"),
    ("UPSCALE_CNN_X2_UL", "anime4k-glsl/Upscale/Anime4K_Upscale_CNN_x2_UL.glsl"),
    ("UPSCALE_GAN_X2_S", "anime4k-glsl/Upscale/Anime4K_Upscale_GAN_x2_S.glsl"),
    ("UPSCALE_GAN_X2_M", "anime4k-glsl/Upscale/Anime4K_Upscale_GAN_x2_M.glsl"),
    ("UPSCALE_GAN_X3_L", "anime4k-glsl/Upscale/Anime4K_Upscale_GAN_x3_L.glsl"),
    ("UPSCALE_GAN_X3_VL", "anime4k-glsl/Upscale/Anime4K_Upscale_GAN_x3_VL.glsl"),
    ("UPSCALE_GAN_X4_UL", "anime4k-glsl/Upscale/Anime4K_Upscale_GAN_x4_UL.glsl"),
    ("UPSCALE_GAN_X4_UUL", "anime4k-glsl/Upscale/Anime4K_Upscale_GAN_x4_UUL.glsl"),
    ("UPSCALE_DENOISE_CNN_X2_S", "anime4k-glsl/Upscale+Denoise/Anime4K_Upscale_Denoise_CNN_x2_S.glsl"),
    ("UPSCALE_DENOISE_CNN_X2_M", "anime4k-glsl/Upscale+Denoise/Anime4K_Upscale_Denoise_CNN_x2_M.glsl"),
    ("UPSCALE_DENOISE_CNN_X2_L", "anime4k-glsl/Upscale+Denoise/Anime4K_Upscale_Denoise_CNN_x2_L.glsl"),
    ("UPSCALE_DENOISE_CNN_X2_VL", "anime4k-glsl/Upscale+Denoise/Anime4K_Upscale_Denoise_CNN_x2_VL.glsl"),
    ("UPSCALE_DENOISE_CNN_X2_UL", "anime4k-glsl/Upscale+Denoise/Anime4K_Upscale_Denoise_CNN_x2_UL.glsl"),
    ("UPSCALE_3DCG_CNN_X2_US", "anime4k-glsl/Upscale/Anime4K_3DGraphics_Upscale_x2_US.glsl"),
    ("UPSCALE_3DCG_AA_CNN_X2_US", "anime4k-glsl/Upscale/Anime4K_3DGraphics_AA_Upscale_x2_US.glsl"),
]

HELPERS_DIR = Path("wgsl") / "helpers"


def load_auxiliary_pipelines(project_root: Path, config: BuildConfig) -> dict[str, dict[str, Any]]:
    """Compile every auxiliary manifest; failures are reported and skipped."""
    pipelines: dict[str, dict[str, Any]] = {}
    for i, (name, path) in enumerate(PREDEFINED_PIPELINES_AUX, start=1):
        logger.step(i, len(PREDEFINED_PIPELINES_AUX), f"{name} ({path})")
        try:
            pipeline = manifest_file_to_pipeline(project_root / path, config)
        except (CompileError, OSError) as e:
            logger.warning(f"Failed to load auxiliary pipeline '{name}': {e}")
            continue
        pipelines[name] = {"type": "aux", **pipeline.to_dict()}
    return pipelines


def load_cnn_pipelines(project_root: Path, config: BuildConfig) -> dict[str, dict[str, Any]]:
    """Convert and compile every CNN/GAN hook file; failures are reported and skipped."""
    pipelines: dict[str, dict[str, Any]] = {}
    for i, (name, path) in enumerate(PREDEFINED_PIPELINES_CNN, start=1):
        logger.step(i, len(PREDEFINED_PIPELINES_CNN), f"{name} ({path})")
        try:
            pipeline = hook_file_to_pipeline(project_root / path, config)
        except (CompileError, OSError) as e:
            logger.warning(f"Failed to load CNN/GAN pipeline '{name}': {e}")
            continue
        pipelines[name] = {"type": "cnn", **pipeline.to_dict()}
    return pipelines


def load_predefined_pipelines(project_root: Path, *, minify: bool = False) -> dict[str, dict[str, Any]]:
    """Compile all predefined pipelines into `name -> {"type": ..., **pipeline}`.

    The CNN/GAN set needs the depth-to-space helpers under `wgsl/helpers`;
    without them only the auxiliary set is built.
    """
    project_root = Path(project_root)
    if not project_root.exists():
        raise FileNotFoundError(f"Project root '{project_root}' does not exist")

    logger.subheader("Auxiliary pipelines")
    pipelines = load_auxiliary_pipelines(project_root, BuildConfig(minify=minify))
    logger.info(f"Found {len(pipelines)} auxiliary pipelines")

    helpers_dir = project_root / HELPERS_DIR
    if helpers_dir.exists():
        logger.subheader("CNN/GAN pipelines")
        cnn = load_cnn_pipelines(project_root, BuildConfig(minify=minify, helpers_dir=helpers_dir))
        logger.info(f"Found {len(cnn)} CNN/GAN pipelines")
        pipelines.update(cnn)
    else:
        logger.warning(f"Helpers directory not found at {helpers_dir}")

    return pipelines


def dump_predefined_pipelines(
    project_root: Path, output_file: Path, *, minify: bool = False
) -> dict[str, dict[str, Any]]:
    """Compile all predefined pipelines and write them to one JSON file."""
    pipelines = load_predefined_pipelines(project_root, minify=minify)
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(json.dumps(pipelines, indent=2), encoding="utf-8")
    logger.success(f"Wrote {len(pipelines)} pipelines to '{output_file}'")
    return pipelines
