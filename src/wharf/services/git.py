"""Git operations for the publish pipeline.

Only ``push_tag`` changes repository state; everything else is a query.
"""

import logging
import subprocess
from pathlib import Path

from ..constants import GIT_PUSH_TIMEOUT, GIT_TIMEOUT
from ..models.git import TreeStatus
from ..models.manifest import expected_tag

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git command failed."""

    pass


def run_git(
    *args: str,
    cwd: Path | None = None,
    check: bool = True,
    timeout: int = GIT_TIMEOUT,
    strip: bool = True,
) -> str:
    """Run git command and return stdout.

    Args:
        *args: Arguments passed to git
        cwd: Working directory
        check: Raise GitError on non-zero exit
        timeout: Timeout in seconds
        strip: Strip surrounding whitespace from stdout

    Returns:
        Stdout, stripped unless strip=False

    Raises:
        GitError: If git is missing, times out, or fails with check=True
    """
    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise GitError("git executable not found in PATH") from None
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {timeout} seconds") from e
    if check and result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip() if strip else result.stdout


def get_repo_root(cwd: Path | None = None) -> Path:
    """Get git repository root directory."""
    try:
        return Path(run_git("rev-parse", "--show-toplevel", cwd=cwd))
    except GitError:
        raise GitError("Not a git repository") from None


def get_status_porcelain(cwd: Path | None = None) -> str:
    """Get git status in NUL-separated porcelain format.

    Not stripped: the first entry's status column may start with a space.
    """
    return run_git("status", "--porcelain", "-z", cwd=cwd, strip=False)


def query_tree_status(cwd: Path | None = None) -> TreeStatus:
    """Report whether the working tree is clean.

    Paths are reported exactly as stored, without git's quoting. A rename
    or copy is reported by its new path.

    Raises:
        GitError: Only when git itself cannot run or this is not a repository
    """
    raw = get_status_porcelain(cwd)
    paths = []
    entries = iter(raw.split("\0"))
    for entry in entries:
        if not entry:
            continue
        status, path = entry[:2], entry[3:]
        paths.append(path)
        if "R" in status or "C" in status:
            # -z puts the original path in its own entry
            next(entries, None)
    return TreeStatus(clean=not paths, dirty_paths=paths, raw=raw)

def get_checked_out_tag(cwd: Path | None = None) -> str | None:
    """Return the tag pointing exactly at HEAD, or None.

    Untagged and detached states are normal and yield None.
    """
    tag = run_git("describe", "--tags", "--exact-match", "HEAD", cwd=cwd, check=False)
    return tag or None


def list_tags(cwd: Path | None = None) -> list[str]:
    """List every tag in the repository."""
    output = run_git("tag", "--list", cwd=cwd)
    return [line for line in output.splitlines() if line]


def push_tag(version: str, cwd: Path | None = None, remote: str = "origin") -> str:
    """Create the release tag for ``version`` if needed and push it.

    Credentials are whatever git picks up from the environment
    (credential helper, GIT_ASKPASS, SSH agent).

    Returns:
        The pushed tag name

    Raises:
        GitError: If the tag cannot be created or the remote rejects the push
    """
    tag = expected_tag(version)
    if tag not in list_tags(cwd):
        logger.info("Creating tag %s", tag)
        run_git("tag", tag, cwd=cwd)
    logger.info("Pushing tag %s to %s", tag, remote)
    try:
        run_git("push", remote, tag, cwd=cwd, timeout=GIT_PUSH_TIMEOUT)
    except GitError as e:
        raise GitError(
            f"Could not push tag {tag} to '{remote}': {e}\n"
            "Check that the remote exists and that your git credentials allow pushing, "
            f"then retry or push it yourself with:\n  git push {remote} {tag}"
        ) from e
    return tag
