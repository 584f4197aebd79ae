"""
Configuration loaders for JSON and YAML files.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import logging

import yaml

from ..base.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigLoader(ABC):
    """Abstract base class for configuration loaders."""

    @abstractmethod
    def _read(self, handle) -> Any:
        pass

    @abstractmethod
    def _write(self, data: Dict[str, Any], handle) -> None:
        pass

    @property
    @abstractmethod
    def supported_extensions(self) -> List[str]:
        """Supported file extensions, including the dot."""
        pass

    @property
    @abstractmethod
    def format_name(self) -> str:
        pass

    def preprocess_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Path objects and tuples into plain serializable values."""
        def convert(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert(item) for item in obj]
            else:
                return obj

        return convert(data)

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from file.

        Raises
        ------
        ConfigurationError
            If the file cannot be read or does not hold a mapping
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = self._read(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}",
                                     config_file=str(path), cause=e)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid {self.format_name} in {path}: {e}",
                                     config_file=str(path), cause=e)

        # Handle empty files
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{self.format_name} file must contain a mapping, got {type(data).__name__}",
                config_file=str(path),
            )

        logger.debug(f"Loaded {self.format_name} config from {path}")
        return data

    def save(self, data: Dict[str, Any], path: Union[str, Path]) -> None:
        """Save configuration to file."""
        path = Path(path)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Data must be a dictionary for {self.format_name} format")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                self._write(self.preprocess_data(data), f)
        except OSError as e:
            raise ConfigurationError(f"Failed to save {self.format_name} config to {path}: {e}",
                                     config_file=str(path), cause=e)

        logger.debug(f"Saved {self.format_name} config to {path}")


class JSONConfigLoader(ConfigLoader):
    """JSON configuration loader."""

    @property
    def supported_extensions(self) -> List[str]:
        return ['.json']

    @property
    def format_name(self) -> str:
        return "JSON"

    def _read(self, handle) -> Any:
        return json.load(handle)

    def _write(self, data: Dict[str, Any], handle) -> None:
        json.dump(data, handle, indent=2, ensure_ascii=False, sort_keys=True)


class YAMLConfigLoader(ConfigLoader):
    """YAML configuration loader based on PyYAML."""

    @property
    def supported_extensions(self) -> List[str]:
        return ['.yaml', '.yml']

    @property
    def format_name(self) -> str:
        return "YAML"

    def _read(self, handle) -> Any:
        return yaml.safe_load(handle)

    def _write(self, data: Dict[str, Any], handle) -> None:
        yaml.dump(data, handle, default_flow_style=False, indent=2,
                  allow_unicode=True, sort_keys=True)


_LOADERS = {
    '.json': JSONConfigLoader,
    '.yaml': YAMLConfigLoader,
    '.yml': YAMLConfigLoader,
}


def get_config_loader(file_path: Union[str, Path]) -> ConfigLoader:
    """Get the loader matching the extension of ``file_path``.

    Raises
    ------
    ConfigurationError
        If the format is not supported
    """
    suffix = Path(file_path).suffix.lower()
    if suffix not in _LOADERS:
        raise ConfigurationError(
            f"Unsupported configuration file format: {suffix}. Available: {list(_LOADERS)}",
            config_file=str(file_path),
        )
    return _LOADERS[suffix]()
