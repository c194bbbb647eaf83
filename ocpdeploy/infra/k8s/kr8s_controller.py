"""Kr8s-based implementation of ClusterController.

Uses the kr8s library for native async Kubernetes and OpenShift operations.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import kr8s
from kr8s.asyncio.objects import APIObject, Deployment, Service, new_class
from loguru import logger

from ocpdeploy.deployment.errors import ClusterError, DeploymentTimeoutError
from ocpdeploy.infra.constants import DEFAULT_CONSTANTS

from .controller import BuildEvent, BuildPhase, ClusterController

# OpenShift kinds are not part of the kr8s core object set
Route = new_class("Route", version="route.openshift.io/v1", namespaced=True)
ImageStream = new_class("ImageStream", version="image.openshift.io/v1", namespaced=True)
BuildConfig = new_class("BuildConfig", version="build.openshift.io/v1", namespaced=True)
Build = new_class("Build", version="build.openshift.io/v1", namespaced=True)

_OBJECT_CLASSES: dict[str, type[APIObject]] = {
    "Route": Route,
    "ImageStream": ImageStream,
    "BuildConfig": BuildConfig,
    "Build": Build,
    "Deployment": Deployment,
    "Service": Service,
}


def deployment_is_ready(resource: dict[str, Any]) -> bool:
    """Check whether a Deployment has fully rolled out.

    The latest generation must have been observed and every desired replica
    must be updated and available.
    """
    metadata = resource.get("metadata", {})
    spec = resource.get("spec", {})
    status = resource.get("status", {})

    desired = spec.get("replicas", 1)
    if status.get("observedGeneration", 0) < metadata.get("generation", 0):
        return False
    return (
        status.get("updatedReplicas", 0) >= desired
        and status.get("availableReplicas", 0) >= desired
        and status.get("replicas", 0) <= desired
    )


class Kr8sController(ClusterController):
    """Cluster controller using the kr8s library.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. run_sync() may create a new event loop per
    call, which would leave a cached client unusable.
    """

    def __init__(self, poll_interval: float = DEFAULT_CONSTANTS.ROLLOUT_POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the running event loop."""
        try:
            return await kr8s.asyncio.api()
        except Exception as e:
            raise ClusterError(
                "Unable to create a cluster client",
                details=f"{e}\nCheck your kubeconfig and that you are logged in (oc login).",
            ) from e

    def _object_class(self, kind: str) -> type[APIObject]:
        try:
            return _OBJECT_CLASSES[kind]
        except KeyError:
            raise ClusterError(f"Unsupported resource kind: {kind}") from None

    # =========================================================================
    # Cluster Context
    # =========================================================================

    async def connect(self) -> str:
        api = await self._get_api()
        try:
            version = await api.version()
        except Exception as e:
            raise ClusterError("Unable to connect to the cluster", details=str(e)) from e
        logger.debug(f"Cluster version: {version.get('gitVersion', 'unknown')}")
        return api.auth.active_context or "unknown"

    async def default_namespace(self) -> str:
        api = await self._get_api()
        return api.namespace or "default"

    # =========================================================================
    # Resource Operations
    # =========================================================================

    async def upsert_resource(
        self, definition: dict[str, Any], namespace: str
    ) -> dict[str, Any]:
        kind = definition["kind"]
        name = definition["metadata"]["name"]
        api = await self._get_api()
        obj = self._object_class(kind)(definition, namespace=namespace, api=api)
        try:
            if await obj.exists():
                logger.debug(f"Updating {kind}/{name} in {namespace}")
                await obj.patch(definition, type="merge")
            else:
                logger.debug(f"Creating {kind}/{name} in {namespace}")
                await obj.create()
        except Exception as e:
            raise ClusterError(f"Failed to apply {kind} {name}", details=str(e)) from e
        return dict(obj.raw)

    async def get_resource(
        self, kind: str, name: str, namespace: str
    ) -> dict[str, Any] | None:
        api = await self._get_api()
        try:
            obj = await self._object_class(kind).get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError:
            return None
        except Exception as e:
            raise ClusterError(f"Failed to read {kind} {name}", details=str(e)) from e
        return dict(obj.raw)

    # =========================================================================
    # Build Operations
    # =========================================================================

    async def instantiate_binary_build(
        self, build_config: str, archive: Path, namespace: str
    ) -> str:
        api = await self._get_api()
        payload = await asyncio.to_thread(archive.read_bytes)
        try:
            async with api.call_api(
                "POST",
                version="v1",
                base="/apis/build.openshift.io",
                namespace=namespace,
                url=f"buildconfigs/{build_config}/instantiatebinary",
                content=payload,
                headers={"Content-Type": "application/octet-stream"},
            ) as response:
                build = response.json()
        except Exception as e:
            raise ClusterError(
                f"Failed to start binary build for {build_config}", details=str(e)
            ) from e
        try:
            build_name: str = build["metadata"]["name"]
        except (KeyError, TypeError):
            raise ClusterError(
                f"Unexpected response starting a build of {build_config}",
                details=str(build),
            ) from None
        logger.debug(f"Started build {build_name} ({len(payload)} bytes uploaded)")
        return build_name

    @asynccontextmanager
    async def watch_build(
        self, build_name: str, namespace: str
    ) -> AsyncIterator[AsyncIterator[BuildEvent]]:
        api = await self._get_api()
        events = self._build_events(api, build_name, namespace)
        try:
            yield events
        finally:
            await events.aclose()
            logger.debug(f"Released watch on build {build_name}")

    async def _build_events(
        self, api: Any, build_name: str, namespace: str
    ) -> AsyncIterator[BuildEvent]:
        watcher = api.watch(
            "builds.build.openshift.io",
            namespace=namespace,
            field_selector=f"metadata.name={build_name}",
        )
        try:
            async for event_type, build in watcher:
                status = build.raw.get("status", {})
                phase = BuildPhase.parse(status.get("phase"))
                if phase is None:
                    logger.debug(f"Ignoring {event_type} event without known phase")
                    continue
                yield BuildEvent(
                    build_name=build_name,
                    phase=phase,
                    message=status.get("message", ""),
                )
        except Exception as e:
            raise ClusterError(
                f"Lost the event stream for build {build_name}", details=str(e)
            ) from e
        finally:
            await watcher.aclose()

    # =========================================================================
    # Readiness
    # =========================================================================

    async def wait_until_ready(
        self,
        kind: str,
        name: str,
        namespace: str,
        timeout: float,
        poll_interval: float | None = None,
    ) -> None:
        interval = self.poll_interval if poll_interval is None else poll_interval
        try:
            await asyncio.wait_for(
                self._poll_until_ready(kind, name, namespace, interval),
                timeout=timeout,
            )
        except TimeoutError:
            raise DeploymentTimeoutError(
                f"Timeout waiting for {kind} {name} to become ready",
                timeout=timeout,
                details=f"Check the pods with: oc get pods -n {namespace}",
            ) from None

    async def _poll_until_ready(
        self, kind: str, name: str, namespace: str, interval: float
    ) -> None:
        while True:
            resource = await self.get_resource(kind, name, namespace)
            if resource is not None and (
                kind != "Deployment" or deployment_is_ready(resource)
            ):
                return
            await asyncio.sleep(interval)
