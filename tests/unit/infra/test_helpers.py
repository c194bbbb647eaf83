"""Tests for controller construction and the sync bridge."""

import asyncio

import pytest

from ocpdeploy.infra.k8s import get_cluster_controller, run_sync
from ocpdeploy.infra.k8s.kr8s_controller import Kr8sController


def test_get_cluster_controller_is_cached():
    get_cluster_controller.cache_clear()

    first = get_cluster_controller()

    assert isinstance(first, Kr8sController)
    assert get_cluster_controller() is first


def test_get_cluster_controller_poll_interval():
    get_cluster_controller.cache_clear()

    controller = get_cluster_controller(0.5)

    assert controller.poll_interval == 0.5
    get_cluster_controller.cache_clear()


def test_run_sync_returns_result():
    async def answer() -> int:
        await asyncio.sleep(0)
        return 42

    assert run_sync(answer()) == 42


def test_run_sync_propagates_errors():
    async def fail() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        run_sync(fail())
