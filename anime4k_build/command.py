"""Typed CLI command payloads.

Each command type represents a distinct user intent. The CLI parses arguments
into these typed objects, which are then dispatched to the appropriate handler.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from anime4k_build.config.build import BuildConfig


@dataclass(frozen=True, slots=True)
class CompileCommand:
    """Request to compile a pass-list manifest.

    Without an output path the pipeline is only compiled and summarized,
    which is how manifests are checked.
    """

    manifest: Path
    config: BuildConfig
    print_plan: bool = False
    output: Path | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class ConvertCommand:
    """Request to convert a hook-format GLSL file and compile it."""

    hook_file: Path
    config: BuildConfig
    print_plan: bool = False
    output: Path | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class DumpCommand:
    """Request to compile every predefined pipeline into one JSON file."""

    project_root: Path
    output: Path
    minify: bool = False
    verbose: bool = False


Command = CompileCommand | ConvertCommand | DumpCommand
