"""Shared test fixtures for wharf tests."""

import json
import os
import subprocess
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
from typer.testing import CliRunner

from wharf.config import WharfConfig
from wharf.services.compiler import Compiler
from wharf.services.registry import RegistryClient

REGISTRY_URL = "https://registry.test/api/v1"

SAMPLE_CONFIG = """[package]
name = "my-lib"
description = "A small library"
dependencies = [{ prelude = ">=6.0.0 <7.0.0" }, { console = ">=6.0.0 <7.0.0" }]

[package.publish]
version = "1.0.0"
license = "MIT"
location = { githubOwner = "me", githubRepo = "my-lib" }

[registry]
url = "https://registry.test/api/v1"
"""


def git(cwd: Path, *args: str) -> str:
    """Run a git command in a test repository."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


class FakeRegistry:
    """In-memory registry served through httpx.MockTransport.

    ``jobs`` holds the responses for successive job polls; the last one is
    repeated if polled again.
    """

    def __init__(self) -> None:
        self.metadata: dict[str, dict[str, Any]] = {}
        self.resolutions: dict[str, str] = {"prelude": "6.0.1", "console": "6.1.0"}
        self.solve_status = 200
        self.publish_status = 200
        self.publish_body: str = json.dumps({"jobId": "job-1"})
        self.jobs: list[dict[str, Any]] = [
            {"logs": [], "finishedAt": "2026-01-04T12:00:01.000Z", "success": True}
        ]
        self.requests: list[httpx.Request] = []
        self._polls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        if request.method == "GET" and path.startswith("/metadata/"):
            name = path.removeprefix("/metadata/")
            if name not in self.metadata:
                return httpx.Response(404, text="Not found")
            return httpx.Response(200, json=self.metadata[name])
        if request.method == "POST" and path == "/solve":
            if self.solve_status != 200:
                return httpx.Response(self.solve_status, text="Could not solve")
            return httpx.Response(200, json={"resolutions": self.resolutions})
        if request.method == "POST" and path == "/publish":
            return httpx.Response(self.publish_status, text=self.publish_body)
        if request.method == "GET" and path.startswith("/jobs/"):
            body = self.jobs[min(self._polls, len(self.jobs) - 1)]
            self._polls += 1
            return httpx.Response(200, json=body)
        return httpx.Response(404, text="Unknown endpoint")

    def paths(self, method: str | None = None) -> list[str]:
        return [
            r.url.path.removeprefix("/api/v1")
            for r in self.requests
            if method is None or r.method == method
        ]

    def client(self, **kwargs: Any) -> RegistryClient:
        return RegistryClient(
            REGISTRY_URL,
            client=httpx.Client(transport=httpx.MockTransport(self)),
            backoff_multiplier=0,
            **kwargs,
        )


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository.

    Initializes a git repo with user config and an initial commit.
    Changes cwd to the repo directory for the duration of the test.
    """
    git(tmp_path, "init")
    git(tmp_path, "config", "user.email", "test@test.com")
    git(tmp_path, "config", "user.name", "Test User")
    git(tmp_path, "config", "commit.gpgsign", "false")
    git(tmp_path, "config", "tag.gpgsign", "false")

    # Create initial commit
    (tmp_path / "README.md").write_text("# Test\n")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-m", "Initial commit")

    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)


@pytest.fixture
def package_repo(temp_git_repo: Path) -> Path:
    """A committed package with config and valid sources, tagged v1.0.0.

    Ignores installed dependency sources and compiler output, like a real
    package would.
    """
    (temp_git_repo / "wharf.toml").write_text(SAMPLE_CONFIG)
    src = temp_git_repo / "src" / "MyLib"
    src.mkdir(parents=True)
    (src / "Core.purs").write_text("module MyLib.Core where\n\nimport Prelude\n")
    (temp_git_repo / ".gitignore").write_text(".wharf/\noutput/\n")
    git(temp_git_repo, "add", ".")
    git(temp_git_repo, "commit", "-m", "Add package")
    git(temp_git_repo, "tag", "v1.0.0")
    return temp_git_repo


@pytest.fixture
def sample_config() -> WharfConfig:
    """Parsed SAMPLE_CONFIG."""
    import tomllib

    return WharfConfig.model_validate(tomllib.loads(SAMPLE_CONFIG))


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def fake_compiler() -> MagicMock:
    """Compiler double whose graph matches the sample config's imports."""
    compiler = MagicMock(spec=Compiler)
    compiler.version.return_value = "0.15.10"
    compiler.graph.return_value = {
        "MyLib.Core": {"path": "src/MyLib/Core.purs", "depends": ["Prelude", "Effect.Console"]},
        "Prelude": {"path": ".wharf/packages/prelude-6.0.1/src/Prelude.purs", "depends": []},
        "Effect.Console": {
            "path": ".wharf/packages/console-6.1.0/src/Effect/Console.purs",
            "depends": [],
        },
    }
    return compiler
