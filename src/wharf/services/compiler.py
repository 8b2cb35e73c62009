"""Compiler invocation for wharf.

The compiler is an external tool; wharf only needs to know whether a build
succeeded, which version is installed, and the module import graph it
reports.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from ..constants import COMPILER_TIMEOUT, COMPILER_VERSION_TIMEOUT

logger = logging.getLogger(__name__)


class CompilerError(Exception):
    """Compiler could not be run or reported a failure."""

    pass


@dataclass
class BuildOptions:
    """How to invoke a build."""

    dependency_globs: list[str] = field(default_factory=list)
    extra_args: list[str] = field(default_factory=list)
    json_errors: bool = False


class Compiler:
    """Thin wrapper over the compiler executable."""

    def __init__(self, exec_path: str, cwd: Path, timeout: int = COMPILER_TIMEOUT):
        self.exec_path = exec_path
        self.cwd = cwd
        self.timeout = timeout

    def _run(self, args: list[str], timeout: int) -> subprocess.CompletedProcess[str]:
        cmd = [self.exec_path, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            raise CompilerError(f"Compiler executable not found: {self.exec_path}") from None
        except subprocess.TimeoutExpired as e:
            raise CompilerError(f"Compiler timed out after {timeout} seconds") from e

    def version(self) -> str:
        """Return the installed compiler version, e.g. ``0.15.10``."""
        result = self._run(["--version"], COMPILER_VERSION_TIMEOUT)
        if result.returncode != 0:
            raise CompilerError(f"Could not get compiler version: {result.stderr.strip()}")
        # Some builds print "0.15.10 [development build; ...]"
        return result.stdout.strip().split(" ", 1)[0]

    def build(self, source_globs: list[str], options: BuildOptions | None = None) -> None:
        """Compile the given sources plus the selected dependencies.

        Raises:
            CompilerError: If the build fails, with the compiler output attached
        """
        options = options or BuildOptions()
        args = ["compile", *source_globs, *options.dependency_globs, *options.extra_args]
        if options.json_errors:
            args.append("--json-errors")
        result = self._run(args, self.timeout)
        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            raise CompilerError(f"Build failed (exit code {result.returncode}):\n{output}")
        logger.info("Build succeeded.")

    def graph(self, globs: list[str]) -> dict[str, dict]:
        """Return the module graph as ``{module: {"path": ..., "depends": [...]}}``.

        Raises:
            CompilerError: If the compiler fails or its output is not a graph
        """
        result = self._run(["graph", *globs], self.timeout)
        if result.returncode != 0:
            raise CompilerError(f"Could not compute module graph:\n{result.stderr.strip()}")
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise CompilerError(f"Could not parse module graph output: {e}") from e
        if not isinstance(data, dict):
            raise CompilerError("Could not parse module graph output: expected a JSON object")
        return data
