"""OpenShift deployment commands.

This module provides the commands for deploying an application build
output directory to OpenShift and for listing the available deployers.
"""

from pathlib import Path
from typing import Annotated

import typer

from ocpdeploy.cli.capabilities import load_capabilities
from ocpdeploy.cli.context import get_cli_context
from ocpdeploy.cli.shared.console import with_error_handling
from ocpdeploy.config.config_loader import CONFIG_PATH, load_settings
from ocpdeploy.config.config_utils import parse_key_value_pairs
from ocpdeploy.deployment.errors import ConfigurationError
from ocpdeploy.deployment.models import ApplicationIdentity, DeploymentRequest
from ocpdeploy.deployment.orchestrator import OpenShiftDeployer
from ocpdeploy.infra.k8s import run_sync


def _parse_env_option(option: str, values: list[str] | None) -> dict[str, str]:
    try:
        return parse_key_value_pairs(values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {option} value", details=str(e)) from e


@with_error_handling
def deploy(
    ctx: typer.Context,
    output_dir: Annotated[
        Path,
        typer.Argument(
            help="Build output directory bundled for the image build",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ],
    artifact: Annotated[
        str,
        typer.Option("--artifact", "-a", help="Deployed artifact file name, e.g. myapp.war"),
    ],
    name: Annotated[
        str | None,
        typer.Option("--name", help="Application name (derived from the artifact by default)"),
    ] = None,
    ha: Annotated[
        bool, typer.Option("--ha", help="Run the application with multiple replicas")
    ] = False,
    capabilities: Annotated[
        Path | None,
        typer.Option("--capabilities", "-c", help="YAML file listing layers and add-ons"),
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", "-e", help="KEY=VALUE set on the application (overrides deployers)"),
    ] = None,
    deployer_env: Annotated[
        list[str] | None,
        typer.Option("--deployer-env", help="KEY=VALUE input handed to deployers"),
    ] = None,
    disable_deployer: Annotated[
        list[str] | None,
        typer.Option(
            "--disable-deployer",
            "-d",
            help="Deployer to run inert (repeatable), or ALL",
        ),
    ] = None,
    namespace: Annotated[
        str | None, typer.Option("--namespace", "-n", help="Target namespace")
    ] = None,
    config: Annotated[
        Path, typer.Option("--config", help="Settings file")
    ] = CONFIG_PATH,
) -> None:
    """Deploy an application build output directory to OpenShift."""
    cli = get_cli_context(ctx)

    settings = load_settings(config, env_file=Path(".env"))
    if namespace:
        settings = settings.model_copy(update={"namespace": namespace})

    if name:
        identity = ApplicationIdentity(name=name, artifact=Path(artifact).name, ha=ha)
    else:
        identity = ApplicationIdentity.from_artifact(artifact, ha=ha)
    layers, add_ons = load_capabilities(capabilities)

    request = DeploymentRequest(
        identity=identity,
        output_dir=output_dir,
        layers=layers,
        add_ons=add_ons,
        env=_parse_env_option("--deployer-env", deployer_env),
        extra_env=_parse_env_option("--env", env),
        disabled_deployers=frozenset(disable_deployer or []),
    )

    cli.console.print_header(f"Deploying {identity.artifact} to OpenShift")
    deployer = OpenShiftDeployer(cli.console, cli.controller, cli.deployers, settings)
    result = run_sync(deployer.deploy(request))

    cli.console.print_summary(
        "Deployment complete",
        {"Application": identity.name, "Build": result.build_name, "URL": result.url},
    )


@with_error_handling
def deployers(ctx: typer.Context) -> None:
    """List the deployers available to this installation."""
    cli = get_cli_context(ctx)
    if not cli.deployers:
        cli.console.warn("No deployers installed")
        return

    rows = [
        [
            d.name,
            ", ".join(sorted(d.supported_layers)) or "-",
            d.supported_addon_family or "-",
            ", ".join(sorted(d.supported_addons)) or "-",
        ]
        for d in cli.deployers
    ]
    cli.console.print_table(
        "Deployers", ["Name", "Layers", "Add-on family", "Add-ons"], rows
    )
