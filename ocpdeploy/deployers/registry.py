"""Registry of the deployer plugins available to one run.

The registry is built from an explicit list of deployer instances. Plugin
discovery through package entry points lives in `discover_deployers` and is
only used by the CLI layer.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from importlib.metadata import entry_points

from loguru import logger

from ocpdeploy.deployment.errors import ConfigurationError
from ocpdeploy.infra.constants import DEFAULT_CONSTANTS

from .base import Deployer


class DeployerRegistry:
    """Closed, ordered set of deployers keyed by name."""

    def __init__(self, deployers: Iterable[Deployer]) -> None:
        self._deployers: dict[str, Deployer] = {}
        for deployer in deployers:
            if deployer.name in self._deployers:
                raise ConfigurationError(f"Duplicate deployer name: {deployer.name}")
            self._deployers[deployer.name] = deployer

    def __iter__(self) -> Iterator[Deployer]:
        return iter(self._deployers.values())

    def __len__(self) -> int:
        return len(self._deployers)

    def __contains__(self, name: object) -> bool:
        return name in self._deployers

    def names(self) -> list[str]:
        return list(self._deployers)

    def get(self, name: str) -> Deployer | None:
        return self._deployers.get(name)

    def validate_disabled(self, disabled: Iterable[str]) -> None:
        """Reject disabled names that match no registered deployer.

        Raises:
            ConfigurationError: For the first unknown name
        """
        for name in disabled:
            if name == DEFAULT_CONSTANTS.DISABLE_ALL_DEPLOYERS:
                continue
            if name not in self._deployers:
                raise ConfigurationError(
                    f"Invalid deployer to disable: {name}",
                    details="Known deployers: " + (", ".join(self.names()) or "none"),
                )

    @staticmethod
    def is_disabled(name: str, disabled: Iterable[str]) -> bool:
        disabled = set(disabled)
        return DEFAULT_CONSTANTS.DISABLE_ALL_DEPLOYERS in disabled or name in disabled


def discover_deployers(
    group: str = DEFAULT_CONSTANTS.DEPLOYER_ENTRY_POINT_GROUP,
) -> list[Deployer]:
    """Instantiate every deployer registered under the entry-point group.

    Entry points are loaded in name order so that resolution order does not
    depend on installation order.
    """
    deployers: list[Deployer] = []
    for ep in sorted(entry_points(group=group), key=lambda e: e.name):
        try:
            deployer_cls = ep.load()
        except ImportError as e:
            raise ConfigurationError(
                f"Failed to load deployer plugin '{ep.name}' ({ep.value})",
                details=str(e),
            ) from e
        deployers.append(deployer_cls())
        logger.debug(f"Loaded deployer {ep.name} from {ep.value}")
    return deployers
