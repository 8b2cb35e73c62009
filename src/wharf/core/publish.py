"""End-to-end publish: validate, tag, rebuild, submit, follow the job."""

import logging
from dataclasses import dataclass

from ..errors import AbortError
from ..models.job import LogLevel, PublishJob
from ..services import git
from ..services.compiler import BuildOptions, CompilerError
from .poller import JobPoller
from .submit import submit
from .validation import PublishContext, ValidationResult, validate

logger = logging.getLogger(__name__)


@dataclass
class PublishOutcome:
    """Result of a publish run that reached the registry."""

    validation: ValidationResult
    tag: str
    job: PublishJob

    @property
    def success(self) -> bool:
        return bool(self.job.success)


def rebuild_with_plan(ctx: PublishContext, build_plan: dict[str, str]) -> None:
    """Compile again against exactly the dependency versions in the build plan."""
    config = ctx.config
    globs = [
        config.dependency_glob(f"{name}-{version}")
        for name, version in sorted(build_plan.items())
    ]
    logger.info("Rebuilding against the resolved build plan...")
    try:
        ctx.compiler.build(
            [config.source_glob()],
            BuildOptions(dependency_globs=globs, extra_args=config.compiler.extra_args),
        )
    except CompilerError as e:
        raise AbortError(f"The package does not build with the resolved dependencies.\n{e}") from e


def publish(ctx: PublishContext, *, log_level: LogLevel = LogLevel.INFO) -> PublishOutcome:
    """Publish the package in ``ctx.root``.

    Nothing is pushed or submitted unless validation passes. After that the
    tag push, rebuild, submission and job polling run in that order, and
    any failure among them ends the run.

    Raises:
        ValidationFailed: With every problem found before the decision point
        AbortError, GitError, RegistryError: On fatal failures
    """
    result = validate(ctx)
    candidate = result.candidate
    logger.info("All checks passed for %s@%s.", candidate.name, candidate.version)

    tag = git.push_tag(candidate.version, cwd=ctx.root)
    rebuild_with_plan(ctx, result.build_plan)
    job_id = submit(ctx.registry, candidate, result.build_plan)

    poller = JobPoller(
        ctx.registry,
        job_id,
        level=log_level,
        max_polls=ctx.config.registry.max_polls or None,
    )
    job = poller.go()
    return PublishOutcome(validation=result, tag=tag, job=job)
