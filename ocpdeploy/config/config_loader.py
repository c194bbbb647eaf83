"""Deployment settings loading."""

from pathlib import Path

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from ocpdeploy.config.config_data import DeploySettings
from ocpdeploy.config.config_utils import substitute_env_vars
from ocpdeploy.deployment.errors import ConfigurationError

CONFIG_PATH = Path("ocpdeploy.yaml")


def load_settings(file_path: Path = CONFIG_PATH, env_file: Path | None = None) -> DeploySettings:
    """
    Load deployment settings from a YAML file with environment substitution.

    Args:
        file_path: Path to the YAML file (default: ocpdeploy.yaml). A missing
                   file yields default settings.
        env_file: Optional .env file loaded first; existing environment
                  variables are not overridden.

    Returns:
        Validated DeploySettings

    Raises:
        ConfigurationError: If a required environment variable is missing,
                            the YAML is malformed or validation fails

    YAML Structure Requirements:
        The file must have a top-level 'config:' key, e.g.

            config:
              namespace: ${OCPDEPLOY_NAMESPACE:-}
              rollout_timeout: 600
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)

    if not file_path.exists():
        logger.debug(f"No settings file at {file_path}, using defaults")
        return DeploySettings()

    logger.info(f"Loading deployment settings from {file_path}")
    try:
        content = substitute_env_vars(file_path.read_text())
        data = yaml.safe_load(content) or {}
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read settings file {file_path}", details=str(e)) from e

    if not isinstance(data, dict) or "config" not in data:
        raise ConfigurationError(
            f"Settings file {file_path} must have a top-level 'config:' key"
        )

    try:
        return DeploySettings.model_validate(data["config"] or {})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {file_path}", details=str(e)) from e
