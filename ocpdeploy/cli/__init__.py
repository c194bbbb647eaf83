"""Main CLI application module.

This module provides the main entry point for the ocpdeploy CLI.

Commands:
- deploy: Deploy a build output directory to OpenShift
- deployers: List the installed deployer plugins
"""

import typer

from .commands import deploy, deployers

# Create the main CLI application
app = typer.Typer(
    help="🚀 ocpdeploy - Deploy applications to OpenShift",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("deploy")(deploy)
app.command("deployers")(deployers)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
