"""Command-line interface for anime4k-build.

Commands:
- compile: Manifest → validated, allocated pipeline (optionally written as JSON)
- convert: Hook-format GLSL → WGSL stages → compiled pipeline
- dump: Every predefined pipeline into one JSON file
"""
from __future__ import annotations

import argparse
from pathlib import Path

from anime4k_build.build import hook_file_to_pipeline, manifest_file_to_pipeline
from anime4k_build.command import Command, CompileCommand, ConvertCommand, DumpCommand
from anime4k_build.compiler import CompiledPipeline, Planner
from anime4k_build.config.build import BuildConfig
from anime4k_build.console import logger
from anime4k_build.errors import CompileError
from anime4k_build.predefined import dump_predefined_pipelines


class _Args(argparse.Namespace):
    """Typed namespace for CLI arguments."""

    command: str | None = None
    verbose: bool = False
    minify: bool = False
    print_plan: bool = False
    output: Path | None = None

    # compile
    manifest: Path | None = None

    # convert
    hook_file: Path | None = None
    helpers: Path | None = None

    # dump
    project_root: Path | None = None
    output_file: Path | None = None


class CLI(argparse.ArgumentParser):
    """Subcommand-based interface over the build entry points."""

    def __init__(self) -> None:
        super().__init__(
            prog="anime4k-build",
            description="Compile Anime4K shader pipelines into executable form.",
        )

        _ = self.add_argument(
            "--version",
            action="version",
            version="%(prog)s 0.1.0",
            help="Show the version and exit.",
        )
        _ = self.add_argument(
            "--verbose",
            action="store_true",
            default=False,
            help="Show debug output from the parser, translator and allocator.",
        )

        subparsers = self.add_subparsers(
            dest="command",
            parser_class=argparse.ArgumentParser,
        )

        # Compile command
        compile_parser = subparsers.add_parser(
            "compile",
            help="Compile a pass-list manifest (validate → allocate → load shaders).",
        )
        _ = compile_parser.add_argument(
            "manifest",
            type=Path,
            help="Manifest path (.json, .yml, or .yaml).",
        )
        self._add_output_arguments(compile_parser)

        # Convert command
        convert_parser = subparsers.add_parser(
            "convert",
            help="Convert a hook-format GLSL file into a compiled pipeline.",
        )
        _ = convert_parser.add_argument(
            "hook_file",
            type=Path,
            help="GLSL file holding //!DESC hooks.",
        )
        _ = convert_parser.add_argument(
            "--helpers",
            type=Path,
            required=True,
            help="Directory with the depth_to_space_*.wgsl helper shaders.",
        )
        self._add_output_arguments(convert_parser)

        # Dump command
        dump_parser = subparsers.add_parser(
            "dump",
            help="Compile every predefined pipeline into a single JSON file.",
        )
        _ = dump_parser.add_argument(
            "project_root",
            type=Path,
            help="Project root holding wgsl/ and anime4k-glsl/.",
        )
        _ = dump_parser.add_argument(
            "output_file",
            type=Path,
            help="JSON file to write.",
        )
        _ = dump_parser.add_argument(
            "--minify",
            action="store_true",
            default=False,
            help="Minify shader code before embedding it.",
        )

    def _add_output_arguments(self, parser: argparse.ArgumentParser) -> None:
        _ = parser.add_argument(
            "--minify",
            action="store_true",
            default=False,
            help="Minify shader code before embedding it.",
        )
        _ = parser.add_argument(
            "--print-plan",
            action="store_true",
            default=False,
            dest="print_plan",
            help="Print the textures and bindings of the compiled pipeline.",
        )
        _ = parser.add_argument(
            "--output",
            "-o",
            type=Path,
            default=None,
            help="Write the compiled pipeline as JSON to this file.",
        )

    def parse_command(self, argv: list[str] | None = None) -> Command:
        """Parse CLI arguments into a typed command payload."""
        args = self.parse_args(argv, namespace=_Args())

        match args.command:
            case "compile":
                if args.manifest is None:
                    raise ValueError("compile requires a manifest path.")
                return CompileCommand(
                    manifest=args.manifest,
                    config=BuildConfig(minify=bool(args.minify)),
                    print_plan=bool(args.print_plan),
                    output=args.output,
                    verbose=bool(args.verbose),
                )
            case "convert":
                if args.hook_file is None:
                    raise ValueError("convert requires a hook file path.")
                return ConvertCommand(
                    hook_file=args.hook_file,
                    config=BuildConfig(minify=bool(args.minify), helpers_dir=args.helpers),
                    print_plan=bool(args.print_plan),
                    output=args.output,
                    verbose=bool(args.verbose),
                )
            case "dump":
                if args.project_root is None or args.output_file is None:
                    raise ValueError("dump requires a project root and an output file.")
                return DumpCommand(
                    project_root=args.project_root,
                    output=args.output_file,
                    minify=bool(args.minify),
                    verbose=bool(args.verbose),
                )
            case None:
                raise ValueError(
                    "No command given. Fix: run `anime4k-build compile MANIFEST`, "
                    "`anime4k-build convert HOOK_FILE --helpers DIR` or "
                    "`anime4k-build dump PROJECT_ROOT OUTPUT_FILE`."
                )
            case _:
                raise ValueError(f"Invalid command: {args.command}")


def report(pipeline: CompiledPipeline, *, print_plan: bool, output: Path | None) -> None:
    """Summarize a compiled pipeline and write it out if asked."""
    logger.pipeline_summary(pipeline)
    if print_plan:
        logger.texture_table(pipeline)
        logger.panel(Planner().format(pipeline), title="plan")
    if output is not None:
        pipeline.save(output)
        logger.artifacts_summary({"pipeline": output})


def execute(command: Command) -> int:
    """Run a parsed command. Errors propagate to the caller."""
    if command.verbose:
        logger.install_handler()

    match command:
        case CompileCommand() as cmd:
            logger.header("Compile", str(cmd.manifest))
            pipeline = manifest_file_to_pipeline(cmd.manifest, cmd.config)
            report(pipeline, print_plan=cmd.print_plan, output=cmd.output)
            logger.success("Manifest compiled successfully")
        case ConvertCommand() as cmd:
            logger.header("Convert", str(cmd.hook_file))
            pipeline = hook_file_to_pipeline(cmd.hook_file, cmd.config)
            report(pipeline, print_plan=cmd.print_plan, output=cmd.output)
            logger.success("Hook file converted successfully")
        case DumpCommand() as cmd:
            logger.header("Dump", str(cmd.project_root))
            dump_predefined_pipelines(cmd.project_root, cmd.output, minify=cmd.minify)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Returns exit code (0 for success, non-zero for failure).
    """
    cli = CLI()

    try:
        return execute(cli.parse_command(argv))
    except (CompileError, ValueError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1
