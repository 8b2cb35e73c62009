"""Output formatting for wharf CLI."""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape

from .models.validation import ValidationError


@dataclass
class OutputContext:
    """Context for output formatting."""

    console: Console
    json_mode: bool = False
    verbosity: int = 0

    def print(self, message: str, style: str | None = None) -> None:
        """Print message respecting output mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        """Print JSON data."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print error in appropriate format."""
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {escape(message)}[/red]", highlight=False)

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print success message in appropriate format."""
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{message}[/green]")

    def validation_errors(self, errors: list[ValidationError]) -> None:
        """Print every accumulated validation error in detection order."""
        if self.json_mode:
            self.print_json(
                {"error": "validation failed", "errors": [e.message for e in errors]}
            )
            return
        count = len(errors)
        noun = "error" if count == 1 else "errors"
        self.console.print(
            f"[red]Your package is not ready for publishing ({count} {noun}):[/red]\n"
        )
        for n, err in enumerate(errors, start=1):
            self.console.print(f"[bold red]{n}.[/bold red]", end=" ")
            self.console.print(err.message, markup=False, highlight=False)
            self.console.print()


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a default OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
