"""
Core fitting engine for baofit.

Binning, the sparse binned dataset with its coordinate transform, the
multipole correlation-function model, the chi-square likelihood and the bridge
to the MIGRAD minimizer.
"""

from baofit.core.base import (
    BaoFitError,
    ValidationError,
    ConfigurationError,
    DataError,
    BinningError,
    FitError,
)
from baofit.core.binning import UniformBinning, oversample_binning
from baofit.core.cosmology import LambdaCdmDistances
from baofit.core.dataset import BinnedDataset
from baofit.core.model import (
    PARAMETER_NAMES,
    BaoParameters,
    MultipoleCorrelationModel,
    BaoCorrelationModel,
)
from baofit.core.likelihood import Parameter, Likelihood
from baofit.core.minimizer import InitialState, FitResult, MinuitFitter

__all__ = [
    # Exceptions
    "BaoFitError",
    "ValidationError",
    "ConfigurationError",
    "DataError",
    "BinningError",
    "FitError",
    # Engine
    "UniformBinning",
    "oversample_binning",
    "LambdaCdmDistances",
    "BinnedDataset",
    "PARAMETER_NAMES",
    "BaoParameters",
    "MultipoleCorrelationModel",
    "BaoCorrelationModel",
    "Parameter",
    "Likelihood",
    # Minimizer
    "InitialState",
    "FitResult",
    "MinuitFitter",
]
