"""
baofit: binned chi-square fits of the BAO scale in 3D Lyman-alpha forest
cross-correlations.
"""

__version__ = "0.1.0"

from baofit.core.base.exceptions import BaoFitError
from baofit.core.config import get_config, FitConfig
from baofit.core import (
    UniformBinning,
    LambdaCdmDistances,
    BinnedDataset,
    MultipoleCorrelationModel,
    BaoCorrelationModel,
    Parameter,
    Likelihood,
    MinuitFitter,
    FitResult,
)
from baofit.file_io import load_dataset, load_multipoles

__all__ = [
    "__version__",
    "BaoFitError",
    "get_config",
    "FitConfig",
    "UniformBinning",
    "LambdaCdmDistances",
    "BinnedDataset",
    "MultipoleCorrelationModel",
    "BaoCorrelationModel",
    "Parameter",
    "Likelihood",
    "MinuitFitter",
    "FitResult",
    "load_dataset",
    "load_multipoles",
]


def get_version():
    """Get the version string."""
    return __version__
