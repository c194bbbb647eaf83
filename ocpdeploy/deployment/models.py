"""Value types describing what gets deployed."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from ocpdeploy.infra.constants import DEFAULT_CONSTANTS

from .errors import ConfigurationError

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]+")


@dataclass(frozen=True)
class Layer:
    """A server capability detected for the application."""

    name: str


@dataclass(frozen=True)
class AddOn:
    """A named extension within an add-on family."""

    family: str
    name: str


Capability = Layer | AddOn


def sanitize_resource_name(raw: str) -> str:
    """Turn an arbitrary string into a DNS-1123 label.

    Lowercases, replaces runs of invalid characters with '-', strips
    leading/trailing dashes and truncates to 63 characters.
    """
    name = _INVALID_NAME_CHARS.sub("-", raw.lower()).strip("-")
    return name[:63].rstrip("-")


@dataclass(frozen=True)
class ApplicationIdentity:
    """Identity of the deployed application.

    Attributes:
        name: Cluster resource name, stable across deploys
        artifact: Deployed artifact file name (e.g. "myapp.war")
        ha: Whether to run multiple replicas
    """

    name: str
    artifact: str
    ha: bool = False

    def __post_init__(self) -> None:
        if not DEFAULT_CONSTANTS.RESOURCE_NAME_PATTERN.match(self.name):
            raise ConfigurationError(
                f"Invalid application name: '{self.name}'",
                details="Names must be lowercase alphanumerics or '-', "
                "start and end with an alphanumeric and be at most 63 characters.",
            )

    @classmethod
    def from_artifact(cls, artifact: str, ha: bool = False) -> ApplicationIdentity:
        """Derive the identity from an artifact file name."""
        stem = PurePath(artifact).stem
        name = sanitize_resource_name(stem)
        if not name:
            raise ConfigurationError(
                f"Cannot derive an application name from '{artifact}'"
            )
        return cls(name=name, artifact=PurePath(artifact).name, ha=ha)

    @property
    def build_config_name(self) -> str:
        return f"{self.name}{DEFAULT_CONSTANTS.BUILD_CONFIG_SUFFIX}"

    @property
    def image(self) -> str:
        return f"{self.name}:{DEFAULT_CONSTANTS.IMAGE_TAG}"

    @property
    def serves_at_root(self) -> bool:
        return self.artifact == DEFAULT_CONSTANTS.ROOT_ARTIFACT


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything needed to deploy one application.

    Attributes:
        identity: Application identity
        output_dir: Build output directory, bundled for the image build
        layers: Layers detected for the application
        add_ons: Add-ons detected for the application
        env: Inputs handed to deployers (credentials, options)
        extra_env: Variables set on the application, overriding deployers
        disabled_deployers: Deployer names to run inert, or "ALL"
    """

    identity: ApplicationIdentity
    output_dir: Path
    layers: frozenset[Layer] = field(default_factory=frozenset)
    add_ons: frozenset[AddOn] = field(default_factory=frozenset)
    env: dict[str, str] = field(default_factory=dict)
    extra_env: dict[str, str] = field(default_factory=dict)
    disabled_deployers: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of a successful deployment."""

    url: str
    host: str
    environment: dict[str, str]
    build_name: str
