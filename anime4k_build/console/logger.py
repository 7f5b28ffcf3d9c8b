"""Rich-based logger with anime4k-build theming.

Building pipelines prints a little and fails loudly. This logger keeps
both readable with:
- Semantic colors (cyan=info, green=success, amber=warning, red=error)
- Structured output (tables, panels, key-value pairs)
- Pipeline-specific helpers for compiled pipeline summaries
- A bridge that routes library `logging` records through the same console
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

if TYPE_CHECKING:
    from anime4k_build.compiler.pipeline import CompiledPipeline


ANIME4K_THEME = Theme(
    {
        "info": "bold #7dcfff",  # Soft cyan - informational
        "success": "bold #9ece6a",  # Muted green - success
        "warning": "bold #e0af68",  # Warm amber - warnings
        "error": "bold #f7768e",  # Soft coral red - errors
        "highlight": "bold #bb9af7",  # Lavender purple - emphasis
        "muted": "dim #565f89",  # Slate gray - secondary info
        "metric": "#7aa2f7",  # Sky blue - counts/scales
        "path": "italic #73daca",  # Teal - file paths
        "step": "#ff9e64",  # Orange - step/progress indicators
    }
)


class Logger:
    """Unified logging interface with rich console output.

    Wraps Rich Console to provide semantic log levels and structured data
    display with consistent theming.
    """

    def __init__(self) -> None:
        self.console = Console(theme=ANIME4K_THEME)

    # ─────────────────────────────────────────────────────────────────────
    # Basic Logging
    # ─────────────────────────────────────────────────────────────────────

    def log(self, message: str) -> None:
        """Log a generic message."""
        self.console.print(message)

    def info(self, message: str) -> None:
        """Log an informational message (cyan ℹ)."""
        self.console.print(f"[info]ℹ[/info] {escape(message)}")

    def success(self, message: str) -> None:
        """Log a success message (green ✓)."""
        self.console.print(f"[success]✓[/success] {escape(message)}")

    def warning(self, message: str) -> None:
        """Log a warning message (amber ⚠)."""
        self.console.print(f"[warning]⚠[/warning] {escape(message)}")

    def error(self, message: str) -> None:
        """Log an error message (red ✗)."""
        self.console.print(f"[error]✗[/error] {escape(message)}")

    # ─────────────────────────────────────────────────────────────────────
    # Structured Output
    # ─────────────────────────────────────────────────────────────────────

    def header(self, title: str, subtitle: str | None = None) -> None:
        """Print a prominent section header."""
        header_text = Text()
        header_text.append("━" * 3 + " ", style="muted")
        header_text.append(title, style="highlight")
        if subtitle:
            header_text.append(f" • {subtitle}", style="muted")
        header_text.append(" " + "━" * 40, style="muted")
        self.console.print()
        self.console.print(header_text)
        self.console.print()

    def subheader(self, text: str) -> None:
        """Print a subtle subheader for subsections."""
        self.console.print(f"[muted]──[/muted] [highlight]{escape(text)}[/highlight]")

    def panel(self, content: str, title: str | None = None, style: str = "muted") -> None:
        """Display content verbatim in a bordered panel."""
        self.console.print(Panel(Text(content), title=title, border_style=style))

    def table(
        self,
        title: str | None = None,
        columns: list[str] | None = None,
        rows: list[list[str]] | None = None,
    ) -> Table:
        """Create and optionally populate a styled table.

        If columns and rows are provided, prints immediately. Otherwise
        returns the Table for manual population.
        """
        table = Table(
            title=title,
            title_style="highlight",
            header_style="info",
            border_style="muted",
            row_styles=["", "dim"],
        )

        if columns and rows:
            for col in columns:
                table.add_column(col)
            for row in rows:
                table.add_row(*row)
            self.console.print(table)

        return table

    def key_value(self, data: dict[str, Any], title: str | None = None) -> None:
        """Display key-value pairs in a clean format."""
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Key", style="muted")
        table.add_column("Value", style="metric")

        for key, value in data.items():
            table.add_row(f"{key}:", escape(str(value)))

        if title:
            self.subheader(title)
        self.console.print(table)

    def step(self, current: int, total: int | None = None, message: str = "") -> None:
        """Display a step indicator for multi-item operations."""
        if total:
            prefix = f"[step][{current}/{total}][/step]"
        else:
            prefix = f"[step][{current}][/step]"
        self.console.print(f"{prefix} {escape(message)}")

    def path(self, filepath: str, label: str = "") -> None:
        """Display a file path with optional label."""
        if label:
            self.console.print(f"  [muted]{label}:[/muted] [path]{escape(filepath)}[/path]")
        else:
            self.console.print(f"  [path]{escape(filepath)}[/path]")

    # ─────────────────────────────────────────────────────────────────────
    # Pipeline-Specific Helpers
    # ─────────────────────────────────────────────────────────────────────

    def pipeline_summary(self, pipeline: "CompiledPipeline") -> None:
        """Show what a compiled pipeline needs from the runtime."""
        final = pipeline.final_scale_factor()
        logical = sum(len(p.output_textures) for p in pipeline.passes)
        self.key_value(
            {
                "id": pipeline.id,
                "passes": len(pipeline.passes),
                "logical textures": logical,
                "physical textures": len(pipeline.physical_textures) - 1,
                "samplers": ", ".join(m.value for m in pipeline.required_samplers) or "none",
                "output scale": f"{final[0]}x{final[1]}" if final else "unknown",
            },
            title=pipeline.name,
        )

    def texture_table(self, pipeline: "CompiledPipeline") -> Table:
        """Print the physical textures of a pipeline, one row each."""
        rows = [
            [
                "SOURCE" if t.is_source else str(t.id),
                str(t.components),
                f"{t.scale_factor[0]}x{t.scale_factor[1]}",
            ]
            for t in pipeline.physical_textures
        ]
        return self.table(
            title="Physical textures",
            columns=["Texture", "Components", "Scale"],
            rows=rows,
        )

    def artifacts_summary(self, artifacts: dict[str, Any]) -> None:
        """Display a summary of written files."""
        self.console.print()
        self.success(f"Generated {len(artifacts)} artifacts:")
        for name, path in artifacts.items():
            self.console.print(
                f"    [muted]•[/muted] {escape(name)}: [path]{escape(str(path))}[/path]"
            )

    # ─────────────────────────────────────────────────────────────────────
    # Library Logging
    # ─────────────────────────────────────────────────────────────────────

    def install_handler(self, level: int = logging.DEBUG) -> RichHandler:
        """Route `anime4k_build.*` log records through this console.

        Library modules log diagnostics with the standard `logging` module;
        nothing is shown until a handler is installed (the CLI's --verbose).
        """
        handler = RichHandler(console=self.console, show_path=False, markup=False)
        package_logger = logging.getLogger("anime4k_build")
        package_logger.setLevel(level)
        package_logger.addHandler(handler)
        return handler


# ─────────────────────────────────────────────────────────────────────────────
# Module-Level Singleton
# ─────────────────────────────────────────────────────────────────────────────

_logger: Logger | None = None


def get_logger() -> Logger:
    """Get or create the singleton Logger instance.

    Using a singleton ensures consistent theming and avoids creating
    multiple Console instances.
    """
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger
