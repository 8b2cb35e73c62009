"""Configuration management for wharf."""

import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .constants import CONFIG_FILENAME, REGISTRY_MAX_ATTEMPTS, REGISTRY_TIMEOUT
from .models.location import Location


class ConfigError(Exception):
    """Configuration file missing or invalid."""

    pass


class PublishConfig(BaseModel):
    """The ``[package.publish]`` section."""

    version: str = Field(description="Version to publish, without the leading 'v'")
    license: str = Field(description="SPDX license expression")
    location: Location | None = Field(default=None, description="Source location")

    @field_validator("version")
    @classmethod
    def _strip_v(cls, value: str) -> str:
        return value[1:] if value.startswith("v") else value


class PackageConfig(BaseModel):
    """The ``[package]`` section."""

    name: str
    description: str | None = None
    source: str = Field(default="src", description="Source directory")
    test: str = Field(default="test", description="Test directory, never analysed")
    dependencies: dict[str, str | None] = Field(
        default_factory=dict, description="Dependency name to range (None = no range)"
    )
    publish: PublishConfig | None = None

    @field_validator("dependencies", mode="before")
    @classmethod
    def _normalize_dependencies(cls, value: Any) -> Any:
        """Accept a table or a list of names and single-key tables."""
        if isinstance(value, list):
            deps: dict[str, str | None] = {}
            for item in value:
                if isinstance(item, str):
                    deps[item] = None
                elif isinstance(item, dict) and len(item) == 1:
                    deps.update(item)
                else:
                    raise ValueError(f"Invalid dependency entry: {item!r}")
            value = deps
        if isinstance(value, dict):
            return {name: (rng or None) for name, rng in value.items()}
        return value


class ExtraPackage(BaseModel):
    """Workspace override for a package, taking precedence over the registry."""

    path: str | None = None
    git: str | None = None
    ref: str | None = None
    version: str | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "ExtraPackage":
        sources = [s for s in (self.path, self.git, self.version) if s is not None]
        if len(sources) != 1:
            raise ValueError("extra package needs exactly one of 'path', 'git' or 'version'")
        return self

    @property
    def from_registry(self) -> bool:
        return self.version is not None

    def describe(self) -> str:
        if self.path is not None:
            return f"local path {self.path}"
        if self.git is not None:
            return f"git {self.git}" + (f"@{self.ref}" if self.ref else "")
        return f"registry version {self.version}"


class WorkspaceConfig(BaseModel):
    """The ``[workspace]`` section."""

    packages_dir: str = Field(
        default=".wharf/packages",
        description="Installed dependency sources, one '<name>-<version>' dir each",
    )
    extra_packages: dict[str, ExtraPackage] = Field(default_factory=dict)


class RegistryConfig(BaseModel):
    """The ``[registry]`` section."""

    url: str = "https://registry.purescript.org/api/v1"
    offline: bool = False
    timeout: float = REGISTRY_TIMEOUT
    max_attempts: int = Field(
        default=REGISTRY_MAX_ATTEMPTS, ge=1, description="Request attempts, the first included"
    )
    max_polls: int = Field(default=0, ge=0, description="Poll ceiling, 0 = unlimited")


class CompilerConfig(BaseModel):
    """The ``[compiler]`` section."""

    exec: str = "purs"
    extension: str = ".purs"
    extra_args: list[str] = Field(default_factory=list)


class WharfConfig(BaseModel):
    """Root configuration for wharf."""

    package: PackageConfig
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)

    def source_glob(self) -> str:
        """Glob of the package's own sources, tests excluded."""
        return f"{self.package.source}/**/*{self.compiler.extension}"

    def dependency_glob(self, dirname: str = "*") -> str:
        """Glob of installed dependency sources."""
        return f"{self.workspace.packages_dir}/{dirname}/src/**/*{self.compiler.extension}"


def load_config(root: Path) -> WharfConfig:
    """Load config from wharf.toml in the package root.

    Args:
        root: Package root directory

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or fails validation
    """
    config_path = root / CONFIG_FILENAME
    if not config_path.exists():
        raise ConfigError(f"No {CONFIG_FILENAME} found in {root}. Run 'wharf init' first.")
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e
    try:
        return WharfConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}:\n{e}") from e


def write_config_template(root: Path, name: str = "your-package") -> Path:
    """Write default wharf.toml template.

    Args:
        root: Package root directory
        name: Package name to put in the template

    Returns:
        Path to the written config file
    """
    config_path = root / CONFIG_FILENAME
    template = {
        "package": {
            "name": name,
            "source": "src",
            "test": "test",
            # Every dependency needs a range before it can be published
            "dependencies": {"prelude": ">=6.0.0 <7.0.0"},
            "publish": {
                "version": "0.1.0",
                "license": "MIT",
                "location": {"githubOwner": "your-user", "githubRepo": name},
            },
        },
        "workspace": {"packages_dir": ".wharf/packages"},
        "registry": {"url": RegistryConfig().url, "offline": False},
        "compiler": {"exec": "purs", "extension": ".purs"},
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
