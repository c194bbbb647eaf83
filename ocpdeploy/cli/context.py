"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass

import click
import typer

from ocpdeploy.cli.shared.console import CLIConsole, console
from ocpdeploy.deployers.base import Deployer
from ocpdeploy.deployers.registry import discover_deployers
from ocpdeploy.infra.k8s import get_cluster_controller
from ocpdeploy.infra.k8s.controller import ClusterController


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    controller: ClusterController
    deployers: tuple[Deployer, ...]


def build_cli_context() -> CLIContext:
    """Build a fresh CLIContext."""
    return CLIContext(
        console=console,
        controller=get_cluster_controller(),
        deployers=tuple(discover_deployers()),
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
