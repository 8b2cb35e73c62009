"""CLI command implementations for wharf.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .init import init
from .publish import publish

__all__ = ["init", "publish"]
