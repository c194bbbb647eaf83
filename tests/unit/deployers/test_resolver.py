"""Tests for deployer resolution and environment folding."""

from __future__ import annotations

import pytest

from ocpdeploy.deployers.registry import DeployerRegistry
from ocpdeploy.deployers.resolver import (
    DeployerMatch,
    apply_deployers,
    matching_capabilities,
    merge_env,
    resolve,
)
from ocpdeploy.deployment.models import AddOn, Layer


class TestMergeEnv:
    def test_later_maps_win(self) -> None:
        assert merge_env({"A": "1", "B": "2"}, {"B": "3"}) == {"A": "1", "B": "3"}

    def test_keys_are_sorted(self) -> None:
        assert list(merge_env({"Z": "1"}, {"M": "2"}, {"A": "3"})) == ["A", "M", "Z"]

    def test_no_maps(self) -> None:
        assert merge_env() == {}


class TestMatchingCapabilities:
    def test_layers_sorted_by_name(self, make_deployer) -> None:
        db = make_deployer("db", layers={"postgresql-driver", "postgresql-datasource"})
        layers = [Layer("postgresql-driver"), Layer("postgresql-datasource")]

        assert matching_capabilities(db, layers, []) == [
            "postgresql-datasource",
            "postgresql-driver",
        ]

    def test_add_ons_only_without_layer_match(self, make_deployer) -> None:
        db = make_deployer(
            "db", layers={"postgresql-datasource"}, family="database", add_ons={"postgresql"}
        )
        add_ons = [AddOn("database", "postgresql")]

        assert matching_capabilities(db, [], add_ons) == ["postgresql"]
        assert matching_capabilities(db, [Layer("postgresql-datasource")], add_ons) == [
            "postgresql-datasource"
        ]

    def test_add_on_family_must_match(self, make_deployer) -> None:
        db = make_deployer("db", family="database", add_ons={"postgresql"})

        assert matching_capabilities(db, [], [AddOn("messaging", "postgresql")]) == []

    def test_no_family_means_no_add_ons(self, make_deployer) -> None:
        db = make_deployer("db", add_ons={"postgresql"})

        assert matching_capabilities(db, [], [AddOn("database", "postgresql")]) == []


class TestResolve:
    def test_first_match_only(self, make_deployer) -> None:
        db = make_deployer("db", layers={"postgresql-datasource", "postgresql-driver"})
        registry = DeployerRegistry([db])

        (match,) = resolve(
            registry, [Layer("postgresql-driver"), Layer("postgresql-datasource")], []
        )

        assert match.capability == "postgresql-datasource"
        assert match.ignored == ("postgresql-driver",)
        assert match.disabled is False

    def test_registry_order(self, make_deployer) -> None:
        mq = make_deployer("mq", family="messaging", add_ons={"amq"})
        db = make_deployer("db", layers={"postgresql-datasource"})
        registry = DeployerRegistry([mq, db])

        matches = resolve(
            registry, [Layer("postgresql-datasource")], [AddOn("messaging", "amq")]
        )

        assert [m.deployer.name for m in matches] == ["mq", "db"]

    @pytest.mark.asyncio
    async def test_shared_capability_engages_each_deployer_once(
        self, console, make_deployer
    ) -> None:
        first = make_deployer("first", layers={"postgresql-datasource"}, env={"A": "1"})
        second = make_deployer("second", layers={"postgresql-datasource"}, env={"B": "2"})
        registry = DeployerRegistry([first, second])

        matches = resolve(registry, [Layer("postgresql-datasource")], [])

        assert [(m.deployer.name, m.capability) for m in matches] == [
            ("first", "postgresql-datasource"),
            ("second", "postgresql-datasource"),
        ]
        assert all(m.ignored == () for m in matches)

        env = await apply_deployers(
            matches,
            console=console,
            host="h",
            app_name="myapp",
            env={},
            context_for=lambda m: m,
        )

        assert len(first.deployed) == 1
        assert len(second.deployed) == 1
        assert env == {"A": "1", "B": "2"}

    def test_unmatched_deployers_are_skipped(self, make_deployer) -> None:
        registry = DeployerRegistry([make_deployer("db", layers={"postgresql-datasource"})])

        assert resolve(registry, [Layer("jaxrs")], []) == []

    @pytest.mark.parametrize("disabled", [{"db"}, {"ALL"}])
    def test_disabled_flag(self, make_deployer, disabled: set[str]) -> None:
        registry = DeployerRegistry([make_deployer("db", layers={"postgresql-datasource"})])

        (match,) = resolve(registry, [Layer("postgresql-datasource")], [], disabled)

        assert match.disabled is True


class TestApplyDeployers:
    @pytest.mark.asyncio
    async def test_active_and_inert_folding(self, console, make_deployer) -> None:
        first = make_deployer("first", env={"A": "1", "B": "2"})
        second = make_deployer("second", env={"B": "3", "C": "4"})
        matches = [
            DeployerMatch(first, "layer-a"),
            DeployerMatch(second, "layer-b", disabled=True),
        ]
        contexts = []

        env = await apply_deployers(
            matches,
            console=console,
            host="app.example.com",
            app_name="myapp",
            env={"INPUT": "x"},
            context_for=lambda match: contexts.append(match) or match,
        )

        assert env == {"A": "1", "B": "TO_BE_SET", "C": "TO_BE_SET"}
        assert list(env) == ["A", "B", "C"]
        assert [m.deployer.name for m in contexts] == ["first"]
        assert second.inert_calls == [("app.example.com", "myapp", "layer-b")]
        assert console.lines("info") == ["Found deployer first for layer-a"]
        assert console.lines("warn") == ["The deployer second has been disabled"]

    @pytest.mark.asyncio
    async def test_ignored_capabilities_are_reported(self, console, make_deployer) -> None:
        db = make_deployer("db", env={})
        match = DeployerMatch(db, "postgresql-datasource", ignored=("postgresql-driver",))

        await apply_deployers(
            [match],
            console=console,
            host="h",
            app_name="myapp",
            env={},
            context_for=lambda m: m,
        )

        (warning,) = console.lines("warn")
        assert "postgresql-driver" in warning
        assert "only handles postgresql-datasource" in warning

    @pytest.mark.asyncio
    async def test_no_matches(self, console) -> None:
        env = await apply_deployers(
            [], console=console, host="h", app_name="myapp", env={}, context_for=lambda m: m
        )

        assert env == {}
        assert console.messages == []
