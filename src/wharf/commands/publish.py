"""Publish command implementation."""

from pathlib import Path

import typer

from ..config import ConfigError, load_config
from ..core.publish import publish as run_publish
from ..core.validation import PublishContext
from ..errors import ValidationFailed, WharfError
from ..models.job import LogLevel
from ..output import get_output_context
from ..services import Compiler, GitError, RegistryClient


def publish(
    directory: Path = typer.Option(
        Path("."), "--dir", "-C", help="Package root containing wharf.toml", file_okay=False
    ),
    offline: bool = typer.Option(
        False, "--offline", help="Refuse all network access (publishing will fail)"
    ),
) -> None:
    """Validate the package and publish it to the registry."""
    ctx = get_output_context()
    root = directory.resolve()

    try:
        config = load_config(root)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None

    registry = RegistryClient(
        config.registry.url,
        offline=offline or config.registry.offline,
        timeout=config.registry.timeout,
        max_attempts=config.registry.max_attempts,
    )
    context = PublishContext(
        root=root,
        config=config,
        compiler=Compiler(config.compiler.exec, cwd=root),
        registry=registry,
    )
    level = LogLevel.DEBUG if ctx.verbosity >= 1 else LogLevel.INFO

    try:
        with registry:
            outcome = run_publish(context, log_level=level)
    except ValidationFailed as e:
        ctx.validation_errors(e.errors)
        raise typer.Exit(1) from None
    except (WharfError, GitError) as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None

    candidate = outcome.validation.candidate
    data = {
        "name": candidate.name,
        "version": candidate.version,
        "tag": outcome.tag,
        "job_id": outcome.job.job_id,
    }
    if not outcome.success:
        ctx.error(
            f"The registry failed to publish {candidate.name}@{candidate.version}. "
            "See the job log above.",
            data,
        )
        raise typer.Exit(1)
    ctx.success(f"Published {candidate.name}@{candidate.version}.", data)
