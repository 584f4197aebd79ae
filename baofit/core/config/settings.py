"""
Configuration settings for a BAO fit.

Settings are dataclasses validated on construction. A process-wide instance is
available through :func:`get_config` and can be replaced with
:func:`set_config` or overridden from ``BAOFIT_*`` environment variables.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple, Union
from pathlib import Path
import logging

from ..base.exceptions import ConfigurationError
from ..binning import UniformBinning

logger = logging.getLogger(__name__)

# Global configuration instance
_global_config: Optional["FitConfig"] = None

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class BinningConfig:
    """Parameters of one uniform binning."""

    count: int
    low_edge: float
    bin_width: float

    def __post_init__(self):
        self.validate()

    def validate(self, name: str = "binning") -> None:
        errors = []
        if not isinstance(self.count, int) or isinstance(self.count, bool) or self.count <= 0:
            errors.append(f"{name}.count must be a positive integer")
        if not isinstance(self.bin_width, (int, float)) or self.bin_width <= 0:
            errors.append(f"{name}.bin_width must be positive")
        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}",
                                     parameter=name)

    def build(self) -> UniformBinning:
        return UniformBinning(self.count, self.low_edge, self.bin_width)

    def to_tuple(self) -> Tuple[int, float, float]:
        return self.count, self.low_edge, self.bin_width

    @classmethod
    def coerce(cls, value: Union["BinningConfig", Dict[str, Any], List, Tuple]) -> "BinningConfig":
        """Accept a BinningConfig, a mapping or a (count, low_edge, bin_width) sequence."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if isinstance(value, (list, tuple)) and len(value) == 3:
            return cls(int(value[0]), float(value[1]), float(value[2]))
        raise ConfigurationError(f"Cannot interpret {value!r} as a binning")


@dataclass
class FitConfig:
    """Main configuration of a BAO fit.

    File names are prefixes: data is read from ``<data>.params`` and
    ``<data>.cov``; templates from ``<fiducial>.<ell>.dat`` and
    ``<nowiggles>.<ell>.dat`` for ell = 0, 2, 4.
    """

    # Input and output
    data: str = ""
    fiducial: str = ""
    nowiggles: str = ""
    dump: Optional[Path] = None

    # Cosmology
    omega_lambda: float = 0.734
    omega_matter: float = 0.266
    zref: float = 2.25

    # Binning of (log(lam2/lam1), separation in arcmin, redshift)
    log_lambda: BinningConfig = field(default_factory=lambda: BinningConfig(14, 0.0002, 0.004))
    separation: BinningConfig = field(default_factory=lambda: BinningConfig(14, 0.0, 10.0))
    redshift: BinningConfig = field(default_factory=lambda: BinningConfig(2, 1.7, 1.0))

    # Diagnostics
    oversampling: int = 10

    # Minimizer
    strategy: int = 1
    tolerance: float = 0.1
    max_calls: Optional[int] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Post-initialization conversion and validation."""
        self.log_lambda = BinningConfig.coerce(self.log_lambda)
        self.separation = BinningConfig.coerce(self.separation)
        self.redshift = BinningConfig.coerce(self.redshift)
        if self.dump is not None and self.dump != "":
            self.dump = Path(self.dump)
        else:
            self.dump = None
        if self.log_file is not None:
            self.log_file = Path(self.log_file)

        self.validate()

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises
        ------
        ConfigurationError
            If any configuration parameter is invalid
        """
        errors = []

        if self.omega_lambda < 0:
            errors.append("omega_lambda must be non-negative")
        if self.omega_matter < 0:
            errors.append("omega_matter must be non-negative (zero means 1 - omega_lambda)")
        if self.zref <= -1:
            errors.append("zref must be greater than -1")

        for name in ("log_lambda", "separation", "redshift"):
            try:
                getattr(self, name).validate(name)
            except ConfigurationError as e:
                errors.append(e.message)

        if not isinstance(self.oversampling, int) or self.oversampling <= 0:
            errors.append("oversampling must be a positive integer")
        if self.strategy not in (0, 1, 2):
            errors.append("strategy must be 0, 1 or 2")
        if self.tolerance <= 0:
            errors.append("tolerance must be positive")
        if self.max_calls is not None and self.max_calls <= 0:
            errors.append("max_calls must be positive or None")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of {VALID_LOG_LEVELS}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def require_inputs(self) -> None:
        """Check that the input names needed to run a fit are set."""
        missing = [name for name in ("data", "fiducial", "nowiggles") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing required parameter(s): {', '.join('--' + m for m in missing)}",
                parameter=missing[0],
            )

    def binnings(self) -> Tuple[UniformBinning, UniformBinning, UniformBinning]:
        return self.log_lambda.build(), self.separation.build(), self.redshift.build()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, BinningConfig):
                value = {'count': value.count, 'low_edge': value.low_edge,
                         'bin_width': value.bin_width}
            result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FitConfig":
        """Create configuration from a dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration parameter(s): {unknown}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "FitConfig":
        from .loader import get_config_loader

        data = get_config_loader(path).load(path)
        try:
            return cls.from_dict(data)
        except ConfigurationError as e:
            e.add_detail('config_file', str(path))
            raise

    def to_file(self, path: Union[str, Path]) -> None:
        from .loader import get_config_loader

        get_config_loader(path).save(self.to_dict(), path)

    def update(self, **kwargs) -> None:
        """Update configuration parameters and re-validate.

        Raises
        ------
        ConfigurationError
            If unknown parameter or validation fails
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise ConfigurationError(f"Unknown configuration parameter: {key}")
            if key in ("log_lambda", "separation", "redshift"):
                value = BinningConfig.coerce(value)
            elif key in ("dump", "log_file") and value is not None:
                value = Path(value)
            setattr(self, key, value)

        self.validate()


def get_config() -> FitConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = FitConfig()
    return _global_config


def set_config(config: FitConfig) -> None:
    """Set the global configuration instance.

    Raises
    ------
    TypeError
        If config is not a FitConfig instance
    """
    global _global_config
    if not isinstance(config, FitConfig):
        raise TypeError("config must be a FitConfig instance")
    config.validate()
    _global_config = config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _global_config
    _global_config = FitConfig()


def update_config(**kwargs) -> None:
    """Update global configuration parameters."""
    get_config().update(**kwargs)


ENV_MAPPING = {
    'BAOFIT_DATA': ('data', str),
    'BAOFIT_FIDUCIAL': ('fiducial', str),
    'BAOFIT_NOWIGGLES': ('nowiggles', str),
    'BAOFIT_DUMP': ('dump', Path),
    'BAOFIT_OMEGA_LAMBDA': ('omega_lambda', float),
    'BAOFIT_OMEGA_MATTER': ('omega_matter', float),
    'BAOFIT_ZREF': ('zref', float),
    'BAOFIT_OVERSAMPLING': ('oversampling', int),
    'BAOFIT_LOG_LEVEL': ('log_level', str),
    'BAOFIT_LOG_FILE': ('log_file', Path),
}


def load_config_from_env(config: Optional[FitConfig] = None) -> FitConfig:
    """Apply ``BAOFIT_*`` environment variables on top of ``config`` (or defaults)."""
    config = config or FitConfig()

    updates = {}
    for env_var, (attr_name, convert) in ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if not value:
            continue
        try:
            updates[attr_name] = convert(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_var}: {value!r}",
                                     parameter=attr_name, cause=e)

    if updates:
        config.update(**updates)
        logger.info(f"Updated configuration from environment variables: {list(updates.keys())}")

    return config
