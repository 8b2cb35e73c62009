"""External tool and service integrations for wharf.

This package provides interfaces to external tools and services:
- git: repository queries and the release tag push
- compiler: build and module-graph invocation
- registry: registry HTTP API with the shared retry policy
"""

from .compiler import BuildOptions, Compiler, CompilerError
from .git import (
    GitError,
    get_checked_out_tag,
    get_repo_root,
    get_status_porcelain,
    list_tags,
    push_tag,
    query_tree_status,
    run_git,
)
from .registry import RegistryClient

__all__ = [
    "BuildOptions",
    "Compiler",
    "CompilerError",
    "GitError",
    "RegistryClient",
    "get_checked_out_tag",
    "get_repo_root",
    "get_status_porcelain",
    "list_tags",
    "push_tag",
    "query_tree_status",
    "run_git",
]
