"""Shared test doubles and fixtures."""

from __future__ import annotations

import copy
import zipfile
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest

from ocpdeploy.deployers.base import Deployer, DeployerContext
from ocpdeploy.infra.k8s.controller import BuildEvent, BuildPhase, ClusterController

ROUTE_HOST = "myapp-demo.apps.example.com"


class RecordingConsole:
    """Console capturing notices as (level, message) pairs."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def print(self, msg: Any = None) -> None:
        self.messages.append(("print", str(msg)))

    def info(self, msg: str) -> None:
        self.messages.append(("info", msg))

    def warn(self, msg: str) -> None:
        self.messages.append(("warn", msg))

    def error(self, msg: str) -> None:
        self.messages.append(("error", msg))

    def ok(self, msg: str) -> None:
        self.messages.append(("ok", msg))

    def lines(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.messages if level is None or lvl == level]


class FakeClusterController(ClusterController):
    """In-memory cluster recording every call in order."""

    def __init__(
        self,
        host: str = ROUTE_HOST,
        namespace: str = "demo",
        build_phases: tuple[str, ...] = ("Running", "Complete"),
    ) -> None:
        self.host = host
        self.namespace = namespace
        self.build_phases = list(build_phases)
        self.calls: list[tuple[Any, ...]] = []
        self.resources: dict[tuple[str, str], dict[str, Any]] = {}
        self.consumed_phases: list[str] = []
        self.watch_released = False
        self.stream_error: Exception | None = None
        self.ready_error: Exception | None = None
        self.connect_error: Exception | None = None
        self.archive_entries: list[str] = []
        self.poll_intervals: list[float | None] = []

    async def connect(self) -> str:
        self.calls.append(("connect",))
        if self.connect_error is not None:
            raise self.connect_error
        return "fake-context"

    async def default_namespace(self) -> str:
        return self.namespace

    async def upsert_resource(
        self, definition: dict[str, Any], namespace: str
    ) -> dict[str, Any]:
        kind = definition["kind"]
        name = definition["metadata"]["name"]
        self.calls.append(("upsert", kind, name))
        stored = copy.deepcopy(definition)
        if kind == "Route" and self.host:
            stored["spec"]["host"] = self.host
        self.resources[(kind, name)] = stored
        return stored

    async def get_resource(
        self, kind: str, name: str, namespace: str
    ) -> dict[str, Any] | None:
        self.calls.append(("get", kind, name))
        return self.resources.get((kind, name))

    async def instantiate_binary_build(
        self, build_config: str, archive: Path, namespace: str
    ) -> str:
        self.calls.append(("build", build_config))
        with zipfile.ZipFile(archive) as zf:
            self.archive_entries = zf.namelist()
        return f"{build_config}-1"

    @asynccontextmanager
    async def watch_build(
        self, build_name: str, namespace: str
    ) -> AsyncIterator[AsyncIterator[BuildEvent]]:
        self.calls.append(("watch", build_name))

        async def events() -> AsyncIterator[BuildEvent]:
            for phase in self.build_phases:
                self.consumed_phases.append(phase)
                yield BuildEvent(build_name, BuildPhase(phase))
            if self.stream_error is not None:
                raise self.stream_error

        stream = events()
        try:
            yield stream
        finally:
            await stream.aclose()
            self.watch_released = True

    async def wait_until_ready(
        self,
        kind: str,
        name: str,
        namespace: str,
        timeout: float,
        poll_interval: float | None = None,
    ) -> None:
        self.calls.append(("ready", kind, name, timeout))
        self.poll_intervals.append(poll_interval)
        if self.ready_error is not None:
            raise self.ready_error

    def upserted(self) -> list[tuple[str, str]]:
        return [(c[1], c[2]) for c in self.calls if c[0] == "upsert"]


class FakeDeployer(Deployer):
    """Deployer returning canned variables and recording its invocations."""

    def __init__(
        self,
        name: str,
        layers: frozenset[str] = frozenset(),
        family: str | None = None,
        add_ons: frozenset[str] = frozenset(),
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.name = name
        self.supported_layers = frozenset(layers)
        self.supported_addon_family = family
        self.supported_addons = frozenset(add_ons)
        self.env = dict(env or {})
        self.deployed: list[DeployerContext] = []
        self.inert_calls: list[tuple[str, str, str]] = []

    async def deploy(self, context: DeployerContext) -> dict[str, str]:
        self.deployed.append(context)
        return dict(self.env)

    def inert_deploy(
        self, host: str, app_name: str, capability: str, env: Mapping[str, str]
    ) -> dict[str, str]:
        self.inert_calls.append((host, app_name, capability))
        return {key: "TO_BE_SET" for key in self.env}


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def controller() -> FakeClusterController:
    return FakeClusterController()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Build output directory with a deployment and provisioning metadata."""
    target = tmp_path / "target"
    (target / "deployments").mkdir(parents=True)
    (target / "deployments" / "myapp.war").write_bytes(b"PK-war")
    (target / "galleon").mkdir()
    (target / "galleon" / "provisioning.xml").write_text("<installation/>")
    return target


@pytest.fixture
def make_deployer():
    """Factory for FakeDeployer instances."""
    return FakeDeployer
