"""Abstract cluster controller interface.

Defines the contract for the cluster operations the deployment flow needs,
so the flow can run against the kr8s backend or a test double.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

# =============================================================================
# Data Types
# =============================================================================


class BuildPhase(StrEnum):
    """Lifecycle phases reported on an OpenShift Build."""

    NEW = "New"
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    ERROR = "Error"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_PHASES

    @classmethod
    def parse(cls, value: str | None) -> BuildPhase | None:
        """Map a raw status.phase value to a BuildPhase, None if unknown."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


_TERMINAL_PHASES = frozenset(
    {BuildPhase.COMPLETE, BuildPhase.FAILED, BuildPhase.ERROR, BuildPhase.CANCELLED}
)


@dataclass(frozen=True)
class BuildEvent:
    """A phase transition observed on a build."""

    build_name: str
    phase: BuildPhase
    message: str = ""


# =============================================================================
# Abstract Controller
# =============================================================================


class ClusterController(ABC):
    """Abstract base class for cluster operations.

    All methods are async. Use `run_sync()` to drive them from synchronous
    code. Implementations translate backend failures into ClusterError and
    bounded waits into DeploymentTimeoutError.
    """

    @abstractmethod
    async def connect(self) -> str:
        """Verify the cluster is reachable.

        Returns:
            Name of the active kubeconfig context

        Raises:
            ClusterError: If the cluster cannot be reached
        """
        ...

    @abstractmethod
    async def default_namespace(self) -> str:
        """Namespace of the active kubeconfig context."""
        ...

    @abstractmethod
    async def upsert_resource(
        self, definition: dict[str, Any], namespace: str
    ) -> dict[str, Any]:
        """Create the resource if absent, update it in place otherwise.

        Args:
            definition: Manifest with apiVersion, kind and metadata.name
            namespace: Target namespace

        Returns:
            The resource as stored by the cluster
        """
        ...

    @abstractmethod
    async def get_resource(
        self, kind: str, name: str, namespace: str
    ) -> dict[str, Any] | None:
        """Get the live state of a resource, None if it does not exist."""
        ...

    @abstractmethod
    async def instantiate_binary_build(
        self, build_config: str, archive: Path, namespace: str
    ) -> str:
        """Start a build of `build_config` using `archive` as binary input.

        Returns:
            Name of the Build that was started
        """
        ...

    @abstractmethod
    def watch_build(
        self, build_name: str, namespace: str
    ) -> AbstractAsyncContextManager[AsyncIterator[BuildEvent]]:
        """Subscribe to phase transitions of a build.

        The returned context manager releases the underlying watch on exit,
        including when the consumer stops early or is cancelled.

        Example:
            async with controller.watch_build("app-build-1", "demo") as events:
                async for event in events:
                    ...
        """
        ...

    @abstractmethod
    async def wait_until_ready(
        self,
        kind: str,
        name: str,
        namespace: str,
        timeout: float,
        poll_interval: float | None = None,
    ) -> None:
        """Block until the resource reports ready.

        Args:
            kind: Resource kind
            name: Resource name
            namespace: Namespace of the resource
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between checks; the controller default when None

        Raises:
            DeploymentTimeoutError: If not ready within `timeout` seconds
        """
        ...
