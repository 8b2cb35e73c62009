"""wharf: validate a package and publish it to the registry."""

__version__ = "0.1.0"
