"""Resource descriptor builders.

Pure functions producing the OpenShift manifests of an application as plain
dicts. Identical inputs always produce identical manifests, so repeated
deploys of the same application update resources in place.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ocpdeploy.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants

from .models import ApplicationIdentity

_FILENAME_SUFFIXES = {
    "Route": "route",
    "ImageStream": "image-stream",
    "BuildConfig": "build-config",
    "Deployment": "deployment",
    "Service": "service",
}


def app_labels(
    identity: ApplicationIdentity, constants: DeploymentConstants = DEFAULT_CONSTANTS
) -> dict[str, str]:
    """Labels selecting the application pods."""
    return {constants.APP_LABEL: identity.name}


def resource_filename(kind: str, app_name: str) -> str:
    """Name of the local YAML copy of an applied resource.

    Example:
        resource_filename("BuildConfig", "myapp") -> "myapp-build-config.yaml"
    """
    suffix = _FILENAME_SUFFIXES.get(kind)
    if suffix is None:
        suffix = re.sub(r"(?<!^)(?=[A-Z])", "-", kind).lower()
    return f"{app_name}-{suffix}.yaml"


def application_url(host: str, identity: ApplicationIdentity) -> str:
    """Externally reachable URL of the application behind its route."""
    if identity.serves_at_root:
        return f"https://{host}"
    return f"https://{host}/{identity.name}"


# =============================================================================
# Route / ImageStream / BuildConfig
# =============================================================================


def build_route(
    identity: ApplicationIdentity, constants: DeploymentConstants = DEFAULT_CONSTANTS
) -> dict[str, Any]:
    """Edge-terminated route to the application service."""
    return {
        "apiVersion": "route.openshift.io/v1",
        "kind": "Route",
        "metadata": {"name": identity.name},
        "spec": {
            "to": {
                "kind": "Service",
                "name": identity.name,
                "weight": constants.ROUTE_WEIGHT,
            },
            "tls": {
                "termination": constants.TLS_TERMINATION,
                "insecureEdgeTerminationPolicy": constants.INSECURE_EDGE_POLICY,
            },
        },
    }


def build_image_stream(identity: ApplicationIdentity) -> dict[str, Any]:
    """Image stream receiving the built application image."""
    return {
        "apiVersion": "image.openshift.io/v1",
        "kind": "ImageStream",
        "metadata": {"name": identity.name},
        "spec": {"lookupPolicy": {"local": True}},
    }


def build_build_config(
    identity: ApplicationIdentity,
    builder_image: str = DEFAULT_CONSTANTS.DEFAULT_BUILDER_IMAGE,
) -> dict[str, Any]:
    """S2I build fed by a binary upload of the build output directory."""
    return {
        "apiVersion": "build.openshift.io/v1",
        "kind": "BuildConfig",
        "metadata": {"name": identity.build_config_name},
        "spec": {
            "output": {
                "to": {"kind": "ImageStreamTag", "name": identity.image},
            },
            "strategy": {
                "type": "Source",
                "sourceStrategy": {
                    "from": {"kind": "DockerImage", "name": builder_image},
                    "incremental": True,
                    "env": [{"name": "GALLEON_USE_LOCAL_FILE", "value": "true"}],
                },
            },
            "source": {"type": "Binary"},
        },
    }


# =============================================================================
# Deployment / Service
# =============================================================================


def _http_probe(
    path: str, constants: DeploymentConstants
) -> dict[str, Any]:
    return {
        "httpGet": {
            "path": path,
            "port": constants.ADMIN_PORT_NAME,
            "scheme": "HTTP",
        },
        "timeoutSeconds": constants.PROBE_TIMEOUT_SECONDS,
        "periodSeconds": constants.PROBE_PERIOD_SECONDS,
        "successThreshold": constants.PROBE_SUCCESS_THRESHOLD,
        "failureThreshold": constants.PROBE_FAILURE_THRESHOLD,
    }


def build_deployment(
    identity: ApplicationIdentity,
    env: Mapping[str, str],
    ha: bool,
    constants: DeploymentConstants = DEFAULT_CONSTANTS,
) -> dict[str, Any]:
    """Application deployment with health probes on the admin port.

    Args:
        identity: Application identity
        env: Environment variables for the container, emitted in key order
        ha: Run HA_REPLICAS replicas instead of one
        constants: Ports, probes and replica counts

    Returns:
        apps/v1 Deployment manifest
    """
    labels = app_labels(identity, constants)
    container = {
        "name": identity.name,
        "image": identity.image,
        "imagePullPolicy": "IfNotPresent",
        "ports": [
            {
                "containerPort": constants.HTTP_PORT,
                "name": constants.HTTP_PORT_NAME,
                "protocol": "TCP",
            },
            {
                "containerPort": constants.ADMIN_PORT,
                "name": constants.ADMIN_PORT_NAME,
                "protocol": "TCP",
            },
        ],
        "env": [{"name": key, "value": env[key]} for key in sorted(env)],
        "readinessProbe": _http_probe(constants.READINESS_PATH, constants),
        "livenessProbe": _http_probe(constants.LIVENESS_PATH, constants),
        "terminationMessagePath": "/dev/termination-log",
    }
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": identity.name},
        "spec": {
            "replicas": constants.HA_REPLICAS if ha else constants.DEFAULT_REPLICAS,
            "selector": {"matchLabels": dict(labels)},
            "strategy": {"type": "RollingUpdate"},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {
                    "containers": [container],
                    "restartPolicy": "Always",
                },
            },
        },
    }


def build_service(
    identity: ApplicationIdentity, constants: DeploymentConstants = DEFAULT_CONSTANTS
) -> dict[str, Any]:
    """ClusterIP service in front of the application pods."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": identity.name},
        "spec": {
            "ports": [
                {
                    "protocol": "TCP",
                    "port": constants.HTTP_PORT,
                    "targetPort": constants.HTTP_PORT,
                }
            ],
            "type": "ClusterIP",
            "sessionAffinity": "None",
            "selector": app_labels(identity, constants),
        },
    }
