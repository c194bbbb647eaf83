"""PostgreSQL deployer.

Runs a single PostgreSQL instance next to the application and hands the
application the variables its datasource reads.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ocpdeploy.deployment.errors import ConfigurationError
from ocpdeploy.infra.constants import DEFAULT_CONSTANTS

from .base import Deployer, DeployerContext

POSTGRESQL_NAME = "postgresql"
POSTGRESQL_IMAGE = "registry.redhat.io/rhel8/postgresql-15:latest"
POSTGRESQL_PORT = 5432

DEFAULT_USER = "admin"
DEFAULT_PASSWORD = "admin"
DEFAULT_DATABASE = "sampledb"

# Value reported by the inert variant for settings it cannot know
PLACEHOLDER = "TO_BE_SET"


def make_postgres_url(host: str, port: int | str, dbname: str) -> str:
    return f"jdbc:postgresql://{host}:{port}/{dbname}"


def _credentials(env: Mapping[str, str], default: str | None) -> dict[str, str]:
    return {
        "POSTGRESQL_USER": env.get("POSTGRESQL_USER", default or DEFAULT_USER),
        "POSTGRESQL_PASSWORD": env.get("POSTGRESQL_PASSWORD", default or DEFAULT_PASSWORD),
        "POSTGRESQL_DATABASE": env.get("POSTGRESQL_DATABASE", default or DEFAULT_DATABASE),
    }


def build_postgresql_deployment(credentials: Mapping[str, str]) -> dict[str, Any]:
    labels = {DEFAULT_CONSTANTS.APP_LABEL: POSTGRESQL_NAME}
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": POSTGRESQL_NAME},
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {
                    "containers": [
                        {
                            "name": POSTGRESQL_NAME,
                            "image": POSTGRESQL_IMAGE,
                            "ports": [
                                {"containerPort": POSTGRESQL_PORT, "protocol": "TCP"}
                            ],
                            "env": [
                                {"name": key, "value": value}
                                for key, value in sorted(credentials.items())
                            ],
                        }
                    ],
                    "restartPolicy": "Always",
                },
            },
        },
    }


def build_postgresql_service() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": POSTGRESQL_NAME},
        "spec": {
            "ports": [
                {
                    "protocol": "TCP",
                    "port": POSTGRESQL_PORT,
                    "targetPort": POSTGRESQL_PORT,
                }
            ],
            "selector": {DEFAULT_CONSTANTS.APP_LABEL: POSTGRESQL_NAME},
        },
    }


class PostgreSQLDeployer(Deployer):
    """Deploys PostgreSQL for applications using a PostgreSQL datasource."""

    name = "postgresql"
    supported_layers = frozenset({"postgresql-datasource", "postgresql-driver"})
    supported_addon_family = "database"
    supported_addons = frozenset({"postgresql"})

    async def deploy(self, context: DeployerContext) -> dict[str, str]:
        if context.app_name == POSTGRESQL_NAME:
            raise ConfigurationError(
                f"Application name '{POSTGRESQL_NAME}' clashes with the PostgreSQL server resources",
                details="Choose another name with --name or disable the deployer with "
                f"--disable-deployer {self.name}",
            )

        credentials = _credentials(context.env, None)
        context.console.info("Deploying PostgreSQL server")

        await context.reconciler.apply(build_postgresql_deployment(credentials), POSTGRESQL_NAME)
        await context.reconciler.apply(build_postgresql_service(), POSTGRESQL_NAME)

        context.console.info("Waiting until PostgreSQL is ready ...")
        await context.reconciler.wait_for_rollout(POSTGRESQL_NAME)

        return self._environment(credentials, POSTGRESQL_NAME, str(POSTGRESQL_PORT))

    def inert_deploy(
        self,
        host: str,
        app_name: str,
        capability: str,
        env: Mapping[str, str],
    ) -> dict[str, str]:
        credentials = _credentials(env, PLACEHOLDER)
        return self._environment(credentials, PLACEHOLDER, PLACEHOLDER)

    def _environment(
        self, credentials: Mapping[str, str], host: str, port: str
    ) -> dict[str, str]:
        return {
            **credentials,
            "POSTGRESQL_SERVICE_HOST": host,
            "POSTGRESQL_SERVICE_PORT": port,
            "POSTGRESQL_URL": make_postgres_url(
                host, port, credentials["POSTGRESQL_DATABASE"]
            ),
        }
