"""Dependency checks based on the compiler's module graph.

Modules are attributed to packages by path: anything under
``<packages_dir>/<name>-<version>/`` belongs to ``<name>``, anything else
in the graph belongs to the package being published.
"""

import logging
import re
from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, Field

from ..config import WharfConfig
from ..errors import AbortError
from ..models.validation import ValidationError, bullets
from ..services.compiler import Compiler, CompilerError

logger = logging.getLogger(__name__)

_VERSIONED_DIR = re.compile(r"^(?P<name>.+)-(?P<version>\d+\.\d+\.\d+(?:[-+][\w.+-]*)?)$")


class ModuleInfo(BaseModel):
    """One node of the module graph."""

    path: str
    depends: list[str] = Field(default_factory=list)


class ViolationKind(str, Enum):
    UNUSED = "unused"
    UNDECLARED = "undeclared"


class ImportViolation(BaseModel):
    """A mismatch between declared dependencies and actual imports."""

    kind: ViolationKind
    package: str
    # UNDECLARED only: importing module -> imported modules from this package
    imported_by: dict[str, list[str]] = Field(default_factory=dict)


def package_dir_name(dirname: str) -> str:
    """Package name of an installed ``<name>-<version>`` directory."""
    match = _VERSIONED_DIR.match(dirname)
    return match.group("name") if match else dirname


def owning_package(path: str, packages_dir: str) -> str | None:
    """Return the dependency owning ``path``, or None for the package's own modules."""
    parts = PurePosixPath(path.replace("\\", "/")).parts
    prefix = PurePosixPath(packages_dir).parts
    for i in range(len(parts) - len(prefix)):
        if parts[i : i + len(prefix)] == prefix:
            return package_dir_name(parts[i + len(prefix)])
    return None


def check_imports(
    graph: dict[str, ModuleInfo],
    declared: list[str],
    packages_dir: str,
) -> list[ImportViolation]:
    """Compare what the package's modules import with what it declares.

    Returns violations sorted by package name: unused declared
    dependencies first, then undeclared imports.
    """
    owners = {module: owning_package(info.path, packages_dir) for module, info in graph.items()}
    used: set[str] = set()
    undeclared: dict[str, dict[str, list[str]]] = {}

    for module, info in graph.items():
        if owners[module] is not None:
            continue
        for dep in info.depends:
            pkg = owners.get(dep)
            if pkg is None:
                continue
            used.add(pkg)
            if pkg not in declared:
                undeclared.setdefault(pkg, {}).setdefault(module, []).append(dep)

    violations = [
        ImportViolation(kind=ViolationKind.UNUSED, package=pkg)
        for pkg in sorted(declared)
        if pkg not in used
    ]
    violations.extend(
        ImportViolation(kind=ViolationKind.UNDECLARED, package=pkg, imported_by=imported_by)
        for pkg, imported_by in sorted(undeclared.items())
    )
    return violations


def violation_to_error(package: str, violation: ImportViolation) -> ValidationError:
    """Render one violation as an accumulated error."""
    if violation.kind is ViolationKind.UNUSED:
        return ValidationError.of(
            f"Package '{package}' declares a dependency it never imports: "
            f"{violation.package}",
            "Remove it from [package].dependencies in wharf.toml.",
        )
    lines = []
    for module, imports in sorted(violation.imported_by.items()):
        lines.append(f"{module} imports {', '.join(sorted(imports))}")
    return ValidationError.of(
        f"Package '{package}' imports modules from '{violation.package}', "
        "which is not a declared dependency:",
        bullets(lines),
        "Add it to [package].dependencies in wharf.toml, or remove the imports.",
    )


def check_dependency_graph(config: WharfConfig, compiler: Compiler) -> list[ValidationError]:
    """Run import analysis over sources (tests excluded) and report violations.

    Raises:
        AbortError: If the analysis itself cannot run
    """
    globs = [config.source_glob(), config.dependency_glob()]
    try:
        raw = compiler.graph(globs)
        graph = {module: ModuleInfo.model_validate(info) for module, info in raw.items()}
    except (CompilerError, ValueError) as e:
        raise AbortError(f"Could not analyse the module graph: {e}") from e

    violations = check_imports(
        graph, list(config.package.dependencies), config.workspace.packages_dir
    )
    logger.debug("Import analysis found %d violation(s)", len(violations))
    return [violation_to_error(config.package.name, v) for v in violations]
