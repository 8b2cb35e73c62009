"""Init command implementation."""

import subprocess
from pathlib import Path

import typer

from ..config import write_config_template
from ..constants import CONFIG_FILENAME, COMPILER_VERSION_TIMEOUT
from ..output import get_output_context


def init(
    directory: Path = typer.Option(
        Path("."), "--dir", "-C", help="Package root to initialize", file_okay=False
    ),
    name: str | None = typer.Option(None, "--name", "-n", help="Package name"),
    compiler: str = typer.Option("purs", "--compiler", help="Compiler executable"),
) -> None:
    """Write a wharf.toml template and check the toolchain."""
    ctx = get_output_context()
    root = directory.resolve()
    config_path = root / CONFIG_FILENAME

    if config_path.exists():
        ctx.console.print(f"[yellow]Config already exists:[/yellow] {config_path}")
    else:
        write_config_template(root, name=name or root.name)
        ctx.console.print(f"[green]Created config template:[/green] {config_path}")

    tools = {
        "git": ["git", "--version"],
        compiler: [compiler, "--version"],
    }

    all_ok = True
    for tool, cmd in tools.items():
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=COMPILER_VERSION_TIMEOUT
            )
            if result.returncode == 0:
                ctx.console.print(f"[green]✓[/green] {tool} {result.stdout.strip()[:40]}")
            else:
                ctx.console.print(f"[red]✗[/red] {tool}: {result.stderr.strip()[:50]}")
                all_ok = False
        except FileNotFoundError:
            ctx.console.print(f"[red]✗[/red] {tool}: not found in PATH")
            all_ok = False
        except subprocess.TimeoutExpired:
            ctx.console.print(f"[yellow]?[/yellow] {tool}: timed out")

    if not all_ok:
        ctx.console.print("\n[yellow]Warning: Some tools are missing or not configured[/yellow]")
        raise typer.Exit(2)

    ctx.console.print("\n[bold green]Ready. Edit wharf.toml, then 'wharf publish'.[/bold green]")
