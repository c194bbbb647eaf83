"""Deployment error hierarchy.

Every failure raised while deploying derives from DeploymentError so the CLI
can render it uniformly. Nothing in the deployment flow retries or swallows
these errors; resources created before a failure are left in place.
"""

from __future__ import annotations


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(DeploymentError):
    """Invalid input detected before any cluster mutation."""


class ClusterError(DeploymentError):
    """Connection, apply or event-stream failure talking to the cluster."""


class DeploymentTimeoutError(DeploymentError):
    """A bounded wait (rollout readiness, build) exceeded its timeout."""

    def __init__(
        self, message: str, timeout: float, details: str | None = None
    ) -> None:
        self.timeout = timeout
        super().__init__(message, details)


class BuildFailedError(DeploymentError):
    """The image build reached a terminal phase other than Complete."""

    def __init__(self, build_name: str, phase: str, details: str | None = None):
        self.build_name = build_name
        self.phase = phase
        super().__init__(
            f"Build {build_name} finished with phase {phase}",
            details,
        )
