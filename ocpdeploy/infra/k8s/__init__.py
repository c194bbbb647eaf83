"""Cluster infrastructure abstraction layer.

This module provides a clean abstraction over the cluster operations the
deployment flow needs, backed by the kr8s library.

Example:
    from ocpdeploy.infra.k8s import get_cluster_controller, run_sync

    controller = get_cluster_controller()
    context = run_sync(controller.connect())
"""

from .controller import BuildEvent, BuildPhase, ClusterController
from .helpers import get_cluster_controller
from .utils import run_sync

__all__ = [
    # Controller classes
    "ClusterController",
    "get_cluster_controller",
    # Data classes
    "BuildEvent",
    "BuildPhase",
    # Utilities
    "run_sync",
]
