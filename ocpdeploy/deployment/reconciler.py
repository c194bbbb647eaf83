"""Apply resource definitions to the cluster and keep local copies.

Every applied definition is also written to the build output directory as
`<app>-<kind>.yaml`, both for audit and so it ships inside the build archive.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from ocpdeploy.infra.constants import DEFAULT_CONSTANTS
from ocpdeploy.infra.k8s.controller import ClusterController

from .errors import ClusterError, DeploymentError
from .resources import resource_filename


class ClusterReconciler:
    """Create-or-update resources within one deploy invocation.

    Attributes:
        controller: Cluster controller
        namespace: Target namespace
        output_dir: Directory receiving the YAML copies
        poll_interval: Seconds between readiness checks (controller default when None)
    """

    def __init__(
        self,
        controller: ClusterController,
        namespace: str,
        output_dir: Path,
        poll_interval: float | None = None,
    ) -> None:
        self.controller = controller
        self.namespace = namespace
        self.output_dir = output_dir
        self.poll_interval = poll_interval
        self._applied: set[tuple[str, str]] = set()

    @property
    def applied(self) -> frozenset[tuple[str, str]]:
        """(kind, name) pairs applied so far."""
        return frozenset(self._applied)

    async def apply(self, definition: dict[str, Any], app_name: str) -> dict[str, Any]:
        """Create or update a resource and persist its definition.

        Args:
            definition: Resource manifest
            app_name: Application name used for the local file name

        Returns:
            The resource as stored by the cluster

        Raises:
            DeploymentError: If the same (kind, name) was already applied
            ClusterError: If the cluster rejects the resource
        """
        kind = definition["kind"]
        name = definition["metadata"]["name"]
        key = (kind, name)
        if key in self._applied:
            raise DeploymentError(f"{kind} {name} was already applied in this deployment")

        applied = await self.controller.upsert_resource(definition, self.namespace)
        self._applied.add(key)

        path = self.persist(definition, app_name)
        logger.debug(f"Applied {kind}/{name}, saved to {path}")
        return applied

    def persist(self, definition: dict[str, Any], app_name: str) -> Path:
        """Write the definition as YAML under the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / resource_filename(definition["kind"], app_name)
        with open(path, "w") as f:
            yaml.safe_dump(definition, f, default_flow_style=False, sort_keys=False)
        return path

    async def route_host(self, name: str) -> str:
        """Host assigned by the cluster to a route."""
        route = await self.controller.get_resource("Route", name, self.namespace)
        host = (route or {}).get("spec", {}).get("host")
        if not host:
            raise ClusterError(
                f"Route {name} has no host assigned",
                details=f"Inspect it with: oc get route {name} -n {self.namespace} -o yaml",
            )
        return str(host)

    async def wait_for_rollout(
        self, name: str, timeout: float = DEFAULT_CONSTANTS.ROLLOUT_TIMEOUT
    ) -> None:
        """Block until the deployment is ready, DeploymentTimeoutError otherwise."""
        await self.controller.wait_until_ready(
            "Deployment", name, self.namespace, timeout, self.poll_interval
        )
