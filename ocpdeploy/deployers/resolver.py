"""Match deployers to application capabilities and fold their environment.

Resolution order per deployer: layers first, then add-ons only when no layer
matched. Only the first match is acted upon; capabilities are visited in name
order so results are reproducible.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from loguru import logger

from ocpdeploy.deployment.models import AddOn, Layer
from ocpdeploy.utils.console_like import ConsoleLike

from .base import Deployer, DeployerContext
from .registry import DeployerRegistry


@dataclass(frozen=True)
class DeployerMatch:
    """A deployer engaged for one capability.

    Attributes:
        deployer: Matched deployer
        capability: Name of the first matching layer or add-on
        disabled: Run the inert variant instead of the active one
        ignored: Further matching capabilities that are not acted upon
    """

    deployer: Deployer
    capability: str
    disabled: bool = False
    ignored: tuple[str, ...] = ()


def merge_env(*maps: Mapping[str, str]) -> dict[str, str]:
    """Merge environment maps, later maps winning, keys in lexicographic order."""
    merged: dict[str, str] = {}
    for env in maps:
        merged.update(env)
    return dict(sorted(merged.items()))


def matching_capabilities(
    deployer: Deployer,
    layers: Iterable[Layer],
    add_ons: Iterable[AddOn],
) -> list[str]:
    """Capabilities a deployer matches, in resolution order.

    Add-ons are only considered when no layer matches.
    """
    matched = [
        layer.name
        for layer in sorted(layers, key=lambda l: l.name)
        if layer.name in deployer.supported_layers
    ]
    if matched or deployer.supported_addon_family is None:
        return matched
    return [
        add_on.name
        for add_on in sorted(add_ons, key=lambda a: (a.family, a.name))
        if add_on.family == deployer.supported_addon_family
        and add_on.name in deployer.supported_addons
    ]


def resolve(
    registry: DeployerRegistry,
    layers: Iterable[Layer],
    add_ons: Iterable[AddOn],
    disabled: Iterable[str] = (),
) -> list[DeployerMatch]:
    """Resolve which deployers engage, in registry order.

    Callers are expected to have run `registry.validate_disabled` first.
    """
    layers = list(layers)
    add_ons = list(add_ons)
    disabled = frozenset(disabled)

    matches = []
    for deployer in registry:
        found = matching_capabilities(deployer, layers, add_ons)
        if not found:
            continue
        matches.append(
            DeployerMatch(
                deployer=deployer,
                capability=found[0],
                disabled=registry.is_disabled(deployer.name, disabled),
                ignored=tuple(found[1:]),
            )
        )
    return matches


async def apply_deployers(
    matches: Iterable[DeployerMatch],
    *,
    console: ConsoleLike,
    host: str,
    app_name: str,
    env: Mapping[str, str],
    context_for: Callable[[DeployerMatch], DeployerContext],
) -> dict[str, str]:
    """Run each matched deployer and fold the variables they contribute.

    Args:
        matches: Output of `resolve`
        console: Output for user-facing notices
        host: Host of the application route
        app_name: Application name
        env: Deployer inputs supplied with the deployment request
        context_for: Builds the context handed to an active deployer

    Returns:
        Merged environment in lexicographic key order
    """
    environment: dict[str, str] = {}
    for match in matches:
        name = match.deployer.name
        if match.disabled:
            console.warn(f"The deployer {name} has been disabled")
            contributed = match.deployer.inert_deploy(host, app_name, match.capability, env)
        else:
            console.info(f"Found deployer {name} for {match.capability}")
            contributed = await match.deployer.deploy(context_for(match))
        if match.ignored:
            console.warn(
                f"The deployer {name} only handles {match.capability}; "
                f"also matched but not handled: {', '.join(match.ignored)}"
            )
        logger.debug(f"Deployer {name} contributed {sorted(contributed)}")
        environment = merge_env(environment, contributed)
    return environment
