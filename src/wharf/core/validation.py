"""Pre-publish validation.

``validate`` runs every check in a fixed order. A check either returns a
(possibly empty) list of errors, which are concatenated in detection
order, or raises ``AbortError`` when continuing would be meaningless:

1. build the package
2. import analysis (sources only, tests excluded)
3. every dependency has a version range
4. solve the ranges into a build plan
5. a publish section exists
6. the publish section has a location
7. the location matches the registry's
8. every package in the build plan comes from the registry
9. the source directory holds valid modules
10. the package is not the reserved metadata package
11. the version was never published or unpublished
12. git: tree clean, expected tag checked out

Nothing here writes to the repository or the registry.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..config import WharfConfig
from ..errors import AbortError, RegistryError, ValidationFailed
from ..models.git import GitState
from ..models.manifest import PublishCandidate, expected_tag
from ..models.validation import ValidationError, bullets, indent
from ..services import git
from ..services.compiler import BuildOptions, Compiler, CompilerError
from ..services.registry import RegistryClient
from .import_graph import check_dependency_graph
from .manifest import assemble_candidate, is_metadata_package, validate_source_modules
from .metadata import check_history, check_location, fetch_metadata

logger = logging.getLogger(__name__)


@dataclass
class PublishContext:
    """Collaborators for one publish run."""

    root: Path
    config: WharfConfig
    compiler: Compiler
    registry: RegistryClient


@dataclass
class ValidationResult:
    """Everything the publish phase needs once validation passed."""

    candidate: PublishCandidate
    build_plan: dict[str, str]
    git_state: GitState


def build_package(ctx: PublishContext) -> str:
    """Compile the package and return the compiler version."""
    try:
        version = ctx.compiler.version()
        ctx.compiler.build(
            [ctx.config.source_glob()],
            BuildOptions(
                dependency_globs=[ctx.config.dependency_glob()],
                extra_args=ctx.config.compiler.extra_args,
            ),
        )
    except CompilerError as e:
        raise AbortError(f"The package does not compile, fix the build first.\n{e}") from e
    return version


def check_ranges(config: WharfConfig) -> list[ValidationError]:
    missing = [name for name, rng in config.package.dependencies.items() if not rng]
    if not missing:
        return []
    return [
        ValidationError.of(
            "All dependencies of a published package must have a version range. "
            "These packages are missing one:",
            bullets(missing),
            "Add a range to each of them in [package].dependencies, for example "
            f'{{ {missing[0]} = ">=1.0.0 <2.0.0" }}.',
        )
    ]


def solve(ctx: PublishContext, compiler_version: str) -> dict[str, str]:
    ranges = {name: rng for name, rng in ctx.config.package.dependencies.items() if rng}
    try:
        plan = ctx.registry.solve(ranges, compiler_version)
    except RegistryError as e:
        raise AbortError(f"Could not resolve the dependencies of this package:\n{e}") from e
    logger.debug("Build plan: %s", plan)
    return plan


def check_registry_sources(
    config: WharfConfig, build_plan: dict[str, str]
) -> list[ValidationError]:
    """Every package in the full build plan must come from the registry."""
    overrides = config.workspace.extra_packages
    offenders = [
        f"{name} ({overrides[name].describe()})"
        for name in sorted(build_plan)
        if name in overrides and not overrides[name].from_registry
    ]
    if not offenders:
        return []
    return [
        ValidationError.of(
            "All dependencies of a published package must come from the registry. "
            "These are overridden in [workspace.extra_packages]:",
            bullets(offenders),
        )
    ]


def check_sources(ctx: PublishContext) -> list[ValidationError]:
    src_dir = ctx.root / ctx.config.package.source
    detail = validate_source_modules(src_dir, ctx.config.compiler.extension)
    if detail is None:
        return []
    return [
        ValidationError.of("The package sources are not valid for publishing:", indent(detail))
    ]


def check_package(
    ctx: PublishContext,
    version: str,
    candidate: PublishCandidate | None,
    build_plan: dict[str, str],
) -> list[ValidationError]:
    """Checks 7-11.

    ``candidate`` is None when the publish section has no location; only
    the location comparison needs it, the other checks still run.
    """
    name = ctx.config.package.name
    location = candidate.location if candidate is not None else None
    try:
        metadata = fetch_metadata(ctx.registry, name, location)
    except RegistryError as e:
        raise AbortError(f"Could not fetch registry metadata:\n{e}") from e

    errors: list[ValidationError] = []
    if candidate is not None and metadata is not None:
        errors += check_location(candidate, metadata)
    errors += check_registry_sources(ctx.config, build_plan)
    errors += check_sources(ctx)
    if is_metadata_package(name):
        errors.append(
            ValidationError.of(
                f"The '{name}' package is reserved by the registry and cannot "
                "be published."
            )
        )
    if metadata is not None:
        errors += check_history(name, version, metadata)
    return errors


def check_git(root: Path, version: str | None) -> tuple[GitState, list[ValidationError]]:
    """Inspect the repository without changing it.

    The tag checks need the version being published and are skipped when
    it is unknown.

    Raises:
        AbortError: If git cannot be queried at all
    """
    tag = expected_tag(version) if version is not None else None
    try:
        status = git.query_tree_status(root)
    except git.GitError as e:
        raise AbortError(f"Could not verify whether the git tree is clean:\n{e}") from e

    state = GitState(clean=status.clean, dirty_paths=status.dirty_paths, expected_tag=tag)
    if not status.clean:
        return state, [
            ValidationError.of(
                "Your git tree is not clean. Commit or stash these files:",
                bullets(status.dirty_paths),
            )
        ]
    if tag is None:
        return state, []

    try:
        current = git.get_checked_out_tag(root)
        state.checked_out_tag = current
        if current is not None:
            if current == tag:
                return state, []
            return state, [
                ValidationError.of(
                    f"The checked-out tag ({current}) does not match the expected tag ({tag}).",
                    "Fix all other errors first, then check out the right commit and tag it:",
                    indent(f"git tag {tag}"),
                    "Do not push the tag yourself; it is pushed once the package passes "
                    "every check.",
                )
            ]
        state.tags = git.list_tags(root)
    except git.GitError as e:
        raise AbortError(f"Could not read git tags:\n{e}") from e

    if tag in state.tags:
        return state, [
            ValidationError.of(
                f"The tag {tag} exists but is not checked out. Check it out with:",
                indent(f"git checkout {tag}"),
            )
        ]
    return state, [
        ValidationError.of(
            "The package is ready to publish, but HEAD is not tagged. Tag it with:",
            indent(f"git tag {tag}"),
            "then run publish again. The tag is pushed for you once every check passes.",
        )
    ]


def validate(ctx: PublishContext) -> ValidationResult:
    """Run every pre-publish check in order.

    Returns:
        The manifest, build plan and git state when nothing is wrong

    Raises:
        AbortError: On the first fatal condition
        ValidationFailed: With every accumulated error, in detection order
    """
    config = ctx.config
    logger.info("Building %s...", config.package.name)
    compiler_version = build_package(ctx)

    errors = check_dependency_graph(config, ctx.compiler)
    errors += check_ranges(config)
    build_plan = solve(ctx, compiler_version)

    candidate: PublishCandidate | None = None
    publish = config.package.publish
    if publish is None:
        errors.append(
            ValidationError.of(
                "The package has no [package.publish] section, so it cannot be published.",
                "Add one with at least 'version', 'license' and 'location'.",
            )
        )
    else:
        if publish.location is None:
            errors.append(
                ValidationError.of(
                    "The [package.publish] section needs a 'location', for example",
                    indent('location = { githubOwner = "owner", githubRepo = "repo" }'),
                )
            )
        else:
            candidate = assemble_candidate(config, compiler_version)
        errors += check_package(ctx, publish.version, candidate, build_plan)

    git_state, git_errors = check_git(ctx.root, publish.version if publish else None)
    errors += git_errors

    if errors:
        raise ValidationFailed(errors)
    # No errors means the publish section and its location were present
    assert candidate is not None
    return ValidationResult(candidate=candidate, build_plan=build_plan, git_state=git_state)
