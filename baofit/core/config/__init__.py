"""
Configuration management for baofit.

Dataclass settings with validation, JSON/YAML file support and environment
variable overrides.
"""

from .settings import (
    BinningConfig,
    FitConfig,
    get_config,
    set_config,
    reset_config,
    update_config,
    load_config_from_env,
)
from .loader import (
    ConfigLoader,
    JSONConfigLoader,
    YAMLConfigLoader,
    get_config_loader,
)

__all__ = [
    # Configuration classes
    "BinningConfig",
    "FitConfig",
    # Global config functions
    "get_config",
    "set_config",
    "reset_config",
    "update_config",
    "load_config_from_env",
    # Loader classes
    "ConfigLoader",
    "JSONConfigLoader",
    "YAMLConfigLoader",
    "get_config_loader",
]
