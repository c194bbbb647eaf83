"""Deployer plugin contract.

A deployer provisions, or documents, the backing service an application
needs for one kind of capability (a datastore, a broker, ...). It is matched
against the layers and add-ons detected for the application and returns the
environment variables the application needs to reach the service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ocpdeploy.deployment.reconciler import ClusterReconciler
    from ocpdeploy.infra.k8s.controller import ClusterController
    from ocpdeploy.utils.console_like import ConsoleLike


@dataclass(frozen=True)
class DeployerContext:
    """Everything an active deployer may use.

    Attributes:
        console: Output for user-facing notices
        reconciler: Applies (and persists) the deployer's own resources
        controller: Cluster controller for anything beyond create-or-update
        namespace: Target namespace
        output_dir: Build output directory
        host: Host of the application route
        app_name: Application name
        capability: Name of the layer or add-on that matched
        env: Deployer inputs supplied with the deployment request
    """

    console: ConsoleLike
    reconciler: ClusterReconciler
    controller: ClusterController
    namespace: str
    output_dir: Path
    host: str
    app_name: str
    capability: str
    env: Mapping[str, str] = field(default_factory=dict)


class Deployer(ABC):
    """Abstract base class for deployer plugins.

    Subclasses declare what they match through the class attributes and
    implement both the active and the inert variant.
    """

    name: ClassVar[str]
    supported_layers: ClassVar[frozenset[str]] = frozenset()
    supported_addon_family: ClassVar[str | None] = None
    supported_addons: ClassVar[frozenset[str]] = frozenset()

    @abstractmethod
    async def deploy(self, context: DeployerContext) -> dict[str, str]:
        """Provision the backing service.

        May apply cluster resources through `context.reconciler`.

        Returns:
            Environment variables the application needs
        """
        ...

    @abstractmethod
    def inert_deploy(
        self,
        host: str,
        app_name: str,
        capability: str,
        env: Mapping[str, str],
    ) -> dict[str, str]:
        """Report the environment variables `deploy` would set.

        Must not touch the cluster. Values the deployer cannot know without
        provisioning are returned as placeholders for the operator to fill in.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
