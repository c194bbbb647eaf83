"""Capabilities file loading.

The layers and add-ons of an application are detected by an external
analysis step and handed over as YAML:

    layers:
      - postgresql-datasource
    add_ons:
      - family: database
        name: postgresql
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ocpdeploy.deployment.errors import ConfigurationError
from ocpdeploy.deployment.models import AddOn, Layer


class AddOnEntry(BaseModel):
    family: str
    name: str


class CapabilitiesFile(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    layers: list[str] = Field(default_factory=list)
    add_ons: list[AddOnEntry] = Field(default_factory=list, alias="add-ons")


def load_capabilities(path: Path | None) -> tuple[frozenset[Layer], frozenset[AddOn]]:
    """Read layers and add-ons from a capabilities file.

    Returns empty sets when no file is given.

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    if path is None:
        return frozenset(), frozenset()
    if not path.is_file():
        raise ConfigurationError(f"Capabilities file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text()) or {}
        parsed = CapabilitiesFile.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(f"Invalid capabilities file {path}", details=str(e)) from e

    layers = frozenset(Layer(name) for name in parsed.layers)
    add_ons = frozenset(AddOn(entry.family, entry.name) for entry in parsed.add_ons)
    return layers, add_ons
