"""Deployment of an application to OpenShift.

The package is organized by concern:
- models: application identity, capabilities, request and result types
- resources: pure builders for Route, ImageStream, BuildConfig, Deployment
  and Service manifests
- reconciler: create-or-update of manifests, local YAML copies, rollout wait
- build: binary image build and build event following
- orchestrator: the end-to-end deployment sequence

Usage:
    from ocpdeploy.deployment.orchestrator import OpenShiftDeployer

    deployer = OpenShiftDeployer(console, controller, deployers)
    result = run_sync(deployer.deploy(request))
"""

from .errors import (
    BuildFailedError,
    ClusterError,
    ConfigurationError,
    DeploymentError,
    DeploymentTimeoutError,
)
from .models import (
    AddOn,
    ApplicationIdentity,
    DeploymentRequest,
    DeploymentResult,
    Layer,
)

__all__ = [
    "DeploymentError",
    "ConfigurationError",
    "ClusterError",
    "DeploymentTimeoutError",
    "BuildFailedError",
    "AddOn",
    "ApplicationIdentity",
    "DeploymentRequest",
    "DeploymentResult",
    "Layer",
]
