"""CLI command modules."""

from .deploy import deploy, deployers

__all__ = ["deploy", "deployers"]
