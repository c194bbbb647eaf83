"""Tests for the deploy and deployers commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from ocpdeploy.cli import app
from ocpdeploy.cli.context import CLIContext
from ocpdeploy.cli.shared.console import CLIConsole
from ocpdeploy.deployers.postgresql import PostgreSQLDeployer

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "ocpdeploy.yaml"
    path.write_text(f"config:\n  archive_path: {tmp_path / 'openshiftApp.zip'}\n")
    return path


def _invoke(cli_context: CLIContext, *args: str):
    return runner.invoke(app, list(args), obj=cli_context)


def test_deploy_reports_application_url(controller, output_dir, config_file):
    cli_context = CLIContext(console=CLIConsole(), controller=controller, deployers=())

    result = _invoke(
        cli_context,
        "deploy",
        str(output_dir),
        "--artifact",
        "myapp.war",
        "--config",
        str(config_file),
    )

    assert result.exit_code == 0, result.output
    assert f"https://{controller.host}/myapp" in result.output
    assert ("Deployment", "myapp") in controller.resources


def test_deploy_uses_configured_poll_interval(controller, output_dir, config_file):
    config_file.write_text(config_file.read_text() + "  rollout_poll_interval: 0.5\n")
    cli_context = CLIContext(console=CLIConsole(), controller=controller, deployers=())

    result = _invoke(
        cli_context,
        "deploy",
        str(output_dir),
        "--artifact",
        "myapp.war",
        "--config",
        str(config_file),
    )

    assert result.exit_code == 0, result.output
    assert controller.poll_intervals == [0.5]


def test_deploy_passes_options_through(controller, output_dir, config_file, tmp_path):
    capabilities = tmp_path / "capabilities.yaml"
    capabilities.write_text("layers:\n  - postgresql-datasource\n")
    cli_context = CLIContext(
        console=CLIConsole(), controller=controller, deployers=(PostgreSQLDeployer(),)
    )

    result = _invoke(
        cli_context,
        "deploy",
        str(output_dir),
        "--artifact",
        "shop.war",
        "--name",
        "storefront",
        "--ha",
        "--capabilities",
        str(capabilities),
        "--disable-deployer",
        "postgresql",
        "--env",
        "POSTGRESQL_SERVICE_HOST=db.internal",
        "--namespace",
        "shop",
        "--config",
        str(config_file),
    )

    assert result.exit_code == 0, result.output
    deployment = controller.resources[("Deployment", "storefront")]
    assert deployment["spec"]["replicas"] == 2
    container = deployment["spec"]["template"]["spec"]["containers"][0]
    env = {item["name"]: item["value"] for item in container["env"]}
    assert env["POSTGRESQL_SERVICE_HOST"] == "db.internal"
    assert env["POSTGRESQL_USER"] == "TO_BE_SET"
    # Disabled deployer leaves no server behind
    assert ("Deployment", "postgresql") not in controller.resources
    assert "The deployer postgresql has been disabled" in result.output


def test_deploy_unknown_disabled_deployer_exits_with_error(controller, output_dir, config_file):
    cli_context = CLIContext(console=CLIConsole(), controller=controller, deployers=())

    result = _invoke(
        cli_context,
        "deploy",
        str(output_dir),
        "--artifact",
        "myapp.war",
        "--disable-deployer",
        "nosuch",
        "--config",
        str(config_file),
    )

    assert result.exit_code == 1
    assert "Invalid deployer to disable: nosuch" in result.output
    assert controller.calls == []


def test_deploy_malformed_env_option(controller, output_dir, config_file):
    cli_context = CLIContext(console=CLIConsole(), controller=controller, deployers=())

    result = _invoke(
        cli_context,
        "deploy",
        str(output_dir),
        "--artifact",
        "myapp.war",
        "--env",
        "NO_EQUALS_SIGN",
        "--config",
        str(config_file),
    )

    assert result.exit_code == 1
    assert "Invalid --env value" in result.output


def test_deploy_build_failure_exits_with_error(controller, output_dir, config_file):
    controller.build_phases = ["Running", "Failed"]
    cli_context = CLIContext(console=CLIConsole(), controller=controller, deployers=())

    result = _invoke(
        cli_context,
        "deploy",
        str(output_dir),
        "--artifact",
        "myapp.war",
        "--config",
        str(config_file),
    )

    assert result.exit_code == 1
    assert "finished with phase Failed" in result.output


def test_deployers_lists_installed(controller):
    cli_context = CLIContext(
        console=CLIConsole(), controller=controller, deployers=(PostgreSQLDeployer(),)
    )

    result = _invoke(cli_context, "deployers")

    assert result.exit_code == 0
    assert "postgresql" in result.output
    assert "database" in result.output


def test_deployers_none_installed(controller):
    cli_context = CLIContext(console=CLIConsole(), controller=controller, deployers=())

    result = _invoke(cli_context, "deployers")

    assert result.exit_code == 0
    assert "No deployers installed" in result.output
