from .config_data import DeploySettings
from .config_loader import load_settings

__all__ = ["DeploySettings", "load_settings"]
