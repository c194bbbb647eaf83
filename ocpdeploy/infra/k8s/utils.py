"""Utility functions for the cluster infrastructure layer."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Drive an async deployment step to completion from a CLI command.

    Each call gets its own event loop; kr8s clients are created per call so
    none outlives it.
    """
    return asyncio.run(coro)
