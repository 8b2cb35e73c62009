"""Tests for the pre-publish validation sequence."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from wharf.config import ExtraPackage, WharfConfig, load_config
from wharf.core.validation import PublishContext, ValidationResult, validate
from wharf.errors import AbortError, ValidationFailed
from wharf.services.compiler import CompilerError
from wharf.services.git import run_git

from conftest import FakeRegistry


@pytest.fixture
def ctx(
    package_repo: Path, fake_compiler: MagicMock, fake_registry: FakeRegistry
) -> PublishContext:
    return PublishContext(
        root=package_repo,
        config=load_config(package_repo),
        compiler=fake_compiler,
        registry=fake_registry.client(),
    )


def failures(ctx: PublishContext) -> list[str]:
    """Run validation expecting failure and return the messages."""
    with pytest.raises(ValidationFailed) as exc_info:
        validate(ctx)
    return [e.message for e in exc_info.value.errors]


def commit(root: Path, filename: str) -> None:
    (root / filename).write_text(filename)
    run_git("add", filename, cwd=root)
    run_git("commit", "-m", f"Add {filename}", cwd=root)


class TestSuccess:
    """A package with nothing wrong."""

    def test_returns_candidate_and_plan(self, ctx: PublishContext) -> None:
        result = validate(ctx)
        assert isinstance(result, ValidationResult)
        assert result.candidate.name == "my-lib"
        assert result.candidate.compiler == "0.15.10"
        assert result.build_plan == {"prelude": "6.0.1", "console": "6.1.0"}
        assert result.git_state.clean
        assert result.git_state.checked_out_tag == "v1.0.0"
        assert result.git_state.expected_tag == "v1.0.0"

    def test_does_not_mutate_anything(
        self, ctx: PublishContext, fake_registry: FakeRegistry, fake_compiler: MagicMock
    ) -> None:
        validate(ctx)
        assert fake_registry.paths() == ["/solve", "/metadata/my-lib"]
        assert fake_compiler.build.call_count == 1
        assert run_git("tag", "--list", cwd=ctx.root) == "v1.0.0"


class TestAccumulatedErrors:
    """Problems are collected and reported together."""

    def test_missing_ranges_are_one_error(self, ctx: PublishContext) -> None:
        ctx.config.package.dependencies.update({"alpha": None, "beta": None})
        messages = failures(ctx)
        range_errors = [m for m in messages if "version range" in m]
        assert len(range_errors) == 1
        assert "alpha" in range_errors[0]
        assert "beta" in range_errors[0]

    def test_ranged_dependencies_only_are_solved(
        self, ctx: PublishContext, fake_registry: FakeRegistry
    ) -> None:
        ctx.config.package.dependencies["alpha"] = None
        failures(ctx)
        solve_request = fake_registry.requests[0]
        assert b"alpha" not in solve_request.content

    def test_import_violations(self, ctx: PublishContext, fake_compiler: MagicMock) -> None:
        fake_compiler.graph.return_value["MyLib.Core"]["depends"] = ["Prelude"]
        messages = failures(ctx)
        assert len(messages) == 1
        assert "never imports: console" in messages[0]

    def test_dirty_tree(self, ctx: PublishContext) -> None:
        (ctx.root / "a.txt").write_text("a")
        (ctx.root / "b.txt").write_text("b")
        messages = failures(ctx)
        assert len(messages) == 1
        assert "not clean" in messages[0]
        assert "a.txt" in messages[0]
        assert "b.txt" in messages[0]

    def test_location_mismatch_does_not_stop_other_checks(
        self, ctx: PublishContext, fake_registry: FakeRegistry
    ) -> None:
        fake_registry.metadata["my-lib"] = {
            "location": {"githubOwner": "someone-else", "githubRepo": "my-lib"},
            "published": {
                "1.0.0": {"ref": "v1.0.0", "publishedTime": "2025-06-01T10:00:00.000Z"}
            },
        }
        (ctx.root / "stray.txt").write_text("x")
        messages = failures(ctx)
        assert len(messages) == 3
        location_errors = [m for m in messages if "location" in m]
        assert len(location_errors) == 1
        assert '{"githubOwner":"me","githubRepo":"my-lib"}' in location_errors[0]
        assert '{"githubOwner":"someone-else","githubRepo":"my-lib"}' in location_errors[0]
        assert "already been published" in messages[1]
        assert "stray.txt" in messages[2]

    def test_local_overrides_in_build_plan(self, ctx: PublishContext) -> None:
        ctx.config.workspace.extra_packages = {
            "console": ExtraPackage(path="../console"),
            "unrelated": ExtraPackage(git="https://example.org/unrelated.git"),
            "prelude": ExtraPackage(version="6.0.1"),
        }
        messages = failures(ctx)
        assert len(messages) == 1
        assert "come from the registry" in messages[0]
        assert "console (local path ../console)" in messages[0]
        assert "unrelated" not in messages[0]
        assert "prelude" not in messages[0]

    def test_invalid_sources(self, ctx: PublishContext) -> None:
        ctx.config.package.source = "lib"
        messages = failures(ctx)
        assert len(messages) == 1
        assert "No .purs files" in messages[0]

    def test_metadata_package_is_reserved(self, ctx: PublishContext) -> None:
        ctx.config.package.name = "metadata"
        messages = failures(ctx)
        assert any("reserved" in m for m in messages)

    def test_errors_keep_detection_order(
        self, ctx: PublishContext, fake_compiler: MagicMock, fake_registry: FakeRegistry
    ) -> None:
        fake_compiler.graph.return_value["MyLib.Core"]["depends"] = ["Prelude"]
        ctx.config.package.dependencies["alpha"] = None
        fake_compiler.graph.return_value["Alpha"] = {
            "path": ".wharf/packages/alpha-1.0.0/src/Alpha.purs",
            "depends": [],
        }
        fake_registry.metadata["my-lib"] = {
            "location": {"gitUrl": "https://example.org/my-lib.git"},
            "unpublished": {
                "1.0.0": {
                    "ref": "v1.0.0",
                    "reason": "oops",
                    "publishedTime": "2025-01-01T00:00:00.000Z",
                    "unpublishedTime": "2025-01-02T00:00:00.000Z",
                }
            },
        }
        (ctx.root / "dirty.txt").write_text("x")
        messages = failures(ctx)
        assert len(messages) == 6
        assert "never imports: alpha" in messages[0]
        assert "never imports: console" in messages[1]
        assert "version range" in messages[2]
        assert "location" in messages[3]
        assert "unpublished" in messages[4]
        assert "dirty.txt" in messages[5]


class TestPublishSection:
    """Missing publish configuration."""

    def test_missing_publish_section(
        self, ctx: PublishContext, fake_registry: FakeRegistry
    ) -> None:
        ctx.config.package.publish = None
        messages = failures(ctx)
        assert len(messages) == 1
        assert "[package.publish]" in messages[0]
        assert "/metadata/my-lib" not in fake_registry.paths()

    def test_git_tree_still_checked(self, ctx: PublishContext) -> None:
        ctx.config.package.publish = None
        (ctx.root / "dirty.txt").write_text("x")
        messages = failures(ctx)
        assert len(messages) == 2
        assert "dirty.txt" in messages[1]

    def test_missing_location(self, ctx: PublishContext, fake_registry: FakeRegistry) -> None:
        assert ctx.config.package.publish is not None
        ctx.config.package.publish.location = None
        messages = failures(ctx)
        assert len(messages) == 1
        assert "needs a 'location'" in messages[0]
        assert "/metadata/my-lib" in fake_registry.paths()

    def test_missing_location_skips_only_location_comparison(
        self, ctx: PublishContext, fake_registry: FakeRegistry
    ) -> None:
        """Sources, overrides and the reserved name are still checked."""
        assert ctx.config.package.publish is not None
        ctx.config.package.publish.location = None
        ctx.config.package.name = "metadata"
        ctx.config.package.source = "lib"
        ctx.config.workspace.extra_packages = {"console": ExtraPackage(path="../console")}
        messages = failures(ctx)
        assert len(messages) == 4
        assert "needs a 'location'" in messages[0]
        assert "come from the registry" in messages[1]
        assert "No .purs files" in messages[2]
        assert "reserved" in messages[3]
        assert not any("does not match" in m for m in messages)

    def test_missing_location_still_checks_history(
        self, ctx: PublishContext, fake_registry: FakeRegistry
    ) -> None:
        assert ctx.config.package.publish is not None
        ctx.config.package.publish.location = None
        fake_registry.metadata["my-lib"] = {
            "location": {"githubOwner": "someone-else", "githubRepo": "my-lib"},
            "published": {
                "1.0.0": {"ref": "v1.0.0", "publishedTime": "2025-06-01T10:00:00.000Z"}
            },
        }
        messages = failures(ctx)
        assert len(messages) == 2
        assert "needs a 'location'" in messages[0]
        assert "already been published" in messages[1]


class TestTagChecks:
    """Checked-out tag must be v<version>."""

    def test_other_tag_checked_out(self, ctx: PublishContext) -> None:
        commit(ctx.root, "next.txt")
        run_git("tag", "v0.9.0", cwd=ctx.root)
        messages = failures(ctx)
        assert len(messages) == 1
        assert "v0.9.0" in messages[0]
        assert "v1.0.0" in messages[0]

    def test_expected_tag_exists_elsewhere(self, ctx: PublishContext) -> None:
        commit(ctx.root, "next.txt")
        messages = failures(ctx)
        assert len(messages) == 1
        assert "git checkout v1.0.0" in messages[0]

    def test_no_tag_at_all(self, ctx: PublishContext) -> None:
        run_git("tag", "-d", "v1.0.0", cwd=ctx.root)
        messages = failures(ctx)
        assert len(messages) == 1
        assert "git tag v1.0.0" in messages[0]

    def test_dirty_tree_skips_tag_checks(self, ctx: PublishContext) -> None:
        run_git("tag", "-d", "v1.0.0", cwd=ctx.root)
        (ctx.root / "dirty.txt").write_text("x")
        messages = failures(ctx)
        assert len(messages) == 1
        assert "not clean" in messages[0]


class TestAbort:
    """Fatal conditions stop validation immediately."""

    def test_compile_failure(
        self, ctx: PublishContext, fake_compiler: MagicMock, fake_registry: FakeRegistry
    ) -> None:
        fake_compiler.build.side_effect = CompilerError("Build failed (exit code 1)")
        with pytest.raises(AbortError, match="does not compile"):
            validate(ctx)
        fake_compiler.graph.assert_not_called()
        assert fake_registry.requests == []

    def test_graph_failure(self, ctx: PublishContext, fake_compiler: MagicMock) -> None:
        fake_compiler.graph.side_effect = CompilerError("Could not compute module graph")
        with pytest.raises(AbortError, match="module graph"):
            validate(ctx)

    def test_solver_failure(self, ctx: PublishContext, fake_registry: FakeRegistry) -> None:
        fake_registry.solve_status = 400
        with pytest.raises(AbortError, match="resolve the dependencies"):
            validate(ctx)
        assert fake_registry.paths() == ["/solve"]

    def test_offline(self, ctx: PublishContext, fake_registry: FakeRegistry) -> None:
        ctx.registry = fake_registry.client(offline=True)
        with pytest.raises(AbortError, match="offline"):
            validate(ctx)
        assert fake_registry.requests == []

    def test_not_a_git_repository(
        self,
        tmp_path_factory: pytest.TempPathFactory,
        sample_config: WharfConfig,
        fake_compiler: MagicMock,
        fake_registry: FakeRegistry,
    ) -> None:
        root = tmp_path_factory.mktemp("not-a-repo")
        (root / "src").mkdir()
        (root / "src" / "Main.purs").write_text("module Main where\n")
        ctx = PublishContext(
            root=root,
            config=sample_config,
            compiler=fake_compiler,
            registry=fake_registry.client(),
        )
        with pytest.raises(AbortError, match="git tree is clean"):
            validate(ctx)
