"""Publish candidate assembly and source-tree checks."""

import re
from pathlib import Path

from ..config import WharfConfig
from ..constants import DISALLOWED_MODULE_PREFIXES, METADATA_PACKAGE_NAME
from ..models.manifest import PublishCandidate
from ..models.validation import bullets

_MODULE_HEADER = re.compile(r"^module\s+(?P<name>[^\s(]+)", re.MULTILINE)
_MODULE_NAME = re.compile(r"^[A-Z][A-Za-z0-9_']*(\.[A-Z][A-Za-z0-9_']*)*$")
_LINE_COMMENT = re.compile(r"--.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"\{-.*?-\}", re.DOTALL)


def assemble_candidate(config: WharfConfig, compiler_version: str) -> PublishCandidate:
    """Build the manifest for this run from configuration.

    Callers must check that the publish section and its location exist.
    Dependencies without a range are left out; they are reported by the
    range check before this point.
    """
    package = config.package
    publish = package.publish
    if publish is None or publish.location is None:
        raise ValueError("publish section with a location is required")
    return PublishCandidate(
        name=package.name,
        location=publish.location,
        version=publish.version,
        description=package.description,
        license=publish.license,
        dependencies={name: rng for name, rng in package.dependencies.items() if rng},
        compiler=compiler_version,
    )


def is_metadata_package(name: str) -> bool:
    """The registry's own metadata package can never be uploaded."""
    return name == METADATA_PACKAGE_NAME


def module_name(source: str) -> str | None:
    """Extract the declared module name from a source file, if any."""
    stripped = _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", source))
    match = _MODULE_HEADER.search(stripped)
    return match.group("name") if match else None


def validate_source_modules(src_dir: Path, extension: str) -> str | None:
    """Check the package's source directory.

    Returns:
        None if every module is acceptable, otherwise the text explaining
        what is wrong, ready to be embedded in an error.
    """
    files = sorted(src_dir.rglob(f"*{extension}")) if src_dir.is_dir() else []
    if not files:
        return (
            f"No {extension} files found in {src_dir}. "
            "All package sources must live in the source directory."
        )

    unparsable: list[str] = []
    illegal: list[str] = []
    disallowed: list[str] = []
    for path in files:
        rel = path.relative_to(src_dir).as_posix()
        try:
            name = module_name(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError):
            name = None
        if name is None:
            unparsable.append(rel)
        elif not _MODULE_NAME.match(name):
            illegal.append(f"{rel}: {name}")
        elif name.split(".")[0] in DISALLOWED_MODULE_PREFIXES:
            disallowed.append(f"{rel}: {name}")

    sections = []
    if unparsable:
        sections.append("These files have no readable module header:\n" + bullets(unparsable))
    if illegal:
        sections.append("These module names are not legal module names:\n" + bullets(illegal))
    if disallowed:
        prefixes = ", ".join(DISALLOWED_MODULE_PREFIXES)
        sections.append(
            f"These modules use a reserved namespace ({prefixes}):\n" + bullets(disallowed)
        )
    return "\n".join(sections) or None
