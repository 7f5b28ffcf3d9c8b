"""Hook-format front end: mpv GLSL hooks into manifest passes.

Stages:
1. Parse: split the blob per `//!DESC` and resolve directives
2. Translate: turn convolution bodies into WGSL, key depth-to-space stages
   to their helper shaders
"""
from __future__ import annotations

from anime4k_build.hook.parse import (
    HookParser,
    ParsedHook,
    ScaleFactorMap,
    StageKind,
    new_scale_factor_map,
    split_hooks,
)
from anime4k_build.hook.translate import HookTranslator, StageShader

__all__ = [
    "HookParser",
    "HookTranslator",
    "ParsedHook",
    "ScaleFactorMap",
    "StageKind",
    "StageShader",
    "new_scale_factor_map",
    "split_hooks",
]
