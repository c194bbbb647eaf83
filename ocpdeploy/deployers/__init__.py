"""Deployer plugins and their resolution against application capabilities.

Third-party deployers register under the `ocpdeploy.deployers` entry-point
group and subclass `Deployer`.
"""

from .base import Deployer, DeployerContext
from .registry import DeployerRegistry, discover_deployers
from .resolver import DeployerMatch, apply_deployers, merge_env, resolve

__all__ = [
    "Deployer",
    "DeployerContext",
    "DeployerMatch",
    "DeployerRegistry",
    "apply_deployers",
    "discover_deployers",
    "merge_env",
    "resolve",
]
