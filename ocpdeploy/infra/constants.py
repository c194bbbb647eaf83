"""Deployment constants and configuration.

This module centralizes all magic strings, ports and timeouts used when
describing and applying OpenShift resources.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for OpenShift application deployment.

    All attributes are class-level and immutable.
    """

    # Label used to select the application pods
    APP_LABEL: str = "deployment"

    # Container ports
    HTTP_PORT: int = 8080
    HTTP_PORT_NAME: str = "http"
    ADMIN_PORT: int = 9990
    ADMIN_PORT_NAME: str = "admin"

    # Health probes (served on the admin port)
    READINESS_PATH: str = "/health/ready"
    LIVENESS_PATH: str = "/health/live"
    PROBE_TIMEOUT_SECONDS: int = 1
    PROBE_PERIOD_SECONDS: int = 10
    PROBE_SUCCESS_THRESHOLD: int = 1
    PROBE_FAILURE_THRESHOLD: int = 3

    # Replicas
    HA_REPLICAS: int = 2
    DEFAULT_REPLICAS: int = 1

    # Route
    ROUTE_WEIGHT: int = 100
    TLS_TERMINATION: str = "edge"
    INSECURE_EDGE_POLICY: str = "Redirect"

    # Build
    DEFAULT_BUILDER_IMAGE: str = "quay.io/wildfly/wildfly-s2i:latest"
    BUILD_CONFIG_SUFFIX: str = "-build"
    IMAGE_TAG: str = "latest"
    DEFAULT_ARCHIVE_NAME: str = "openshiftApp.zip"

    # Timeouts (seconds)
    ROLLOUT_TIMEOUT: float = 300.0
    ROLLOUT_POLL_INTERVAL: float = 2.0

    # Deployer resolution
    DISABLE_ALL_DEPLOYERS: str = "ALL"
    DEPLOYER_ENTRY_POINT_GROUP: str = "ocpdeploy.deployers"

    # Artifact served at the route root
    ROOT_ARTIFACT: str = "ROOT.war"

    # DNS-1123 label: resource names for routes, services, deployments
    RESOURCE_NAME_PATTERN: re.Pattern[str] = re.compile(
        r"^[a-z0-9]([-a-z0-9]{0,61}[a-z0-9])?$"
    )


DEFAULT_CONSTANTS = DeploymentConstants()
