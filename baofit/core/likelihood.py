"""
Chi-square likelihood of the binned dataset given the BAO model.

The parameter vector exchanged with the minimizer is unlabeled and decoded
positionally in the order of ``PARAMETER_NAMES``::

    [alpha, bias, beta, amplitude, scale]

:meth:`Likelihood.export_initial_state` and :meth:`BaoParameters.decode`
both rely on this order and must be changed together.
"""

import logging
from pathlib import Path
from typing import IO, Iterator, List, Protocol, Sequence, Union

import numpy as np

from .base.exceptions import DataError, ValidationError
from .dataset import BinnedDataset
from .model import PARAMETER_NAMES, BaoCorrelationModel

logger = logging.getLogger(__name__)

DEFAULT_OVERSAMPLING = 10


class Parameter:
    """Named scalar fit parameter that is either floating or fixed."""

    def __init__(self, name: str, value: float, floating: bool = False):
        if not name:
            raise ValidationError("Parameter name cannot be empty", field="name")
        self._name = name
        self._value = float(value)
        self._floating = bool(floating)

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, value: float) -> None:
        self._value = float(value)

    @property
    def floating(self) -> bool:
        return self._floating

    def fix(self, value: float) -> None:
        """Set the value and stop the parameter from floating."""
        self._value = float(value)
        self._floating = False

    def release(self) -> None:
        self._floating = True

    def __repr__(self) -> str:
        state = "floating" if self._floating else "fixed"
        return f"Parameter('{self._name}', {self._value}, {state})"


class ParameterSink(Protocol):
    """Initial-state protocol of the external minimizer."""

    def add(self, name: str, value: float, error: float) -> None:
        ...

    def fix(self, name: str) -> None:
        ...


def default_parameters() -> List[Parameter]:
    """Initial parameter set, ordered like ``PARAMETER_NAMES``."""
    values = (4.0, 0.2, 0.8, 1.0, 1.0)
    return [Parameter(name, value, floating=True) for name, value in zip(PARAMETER_NAMES, values)]


class Likelihood:
    """Negative log-likelihood (half chi-square) with diagonal variances.

    Parameters
    ----------
    data : BinnedDataset
        Dataset whose every filled bin has a variance
    model : BaoCorrelationModel
        Model providing ``predict(r, mu, z, parameters)``

    Raises
    ------
    DataError
        If the number of variances does not match the number of data bins
    """

    def __init__(self, data: BinnedDataset, model: BaoCorrelationModel):
        if data is None or model is None:
            raise ValidationError("Likelihood requires both a dataset and a model")
        if data.n_data == 0:
            raise DataError("Dataset has no filled bins")
        if not data.is_complete:
            raise DataError(
                f"Dataset has {data.n_variance} variances for {data.n_data} data bins",
                details={'n_data': data.n_data, 'n_variance': data.n_variance},
            )
        self.data = data
        self.model = model
        self._params = default_parameters()

        # The dataset is read-only from here on.
        (self._radius, self._cos_angle, self._redshift,
         self._observed, self._variance) = data.active_arrays()

    # ---------- parameters ----------

    @property
    def parameters(self) -> List[Parameter]:
        return list(self._params)

    @property
    def n_par(self) -> int:
        return len(self._params)

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self._params]

    def parameter(self, name: str) -> Parameter:
        for p in self._params:
            if p.name == name:
                return p
        raise ValidationError(f"Unknown parameter '{name}'. Available: {self.parameter_names}",
                              field="name", value=name)

    def values(self) -> np.ndarray:
        """Current parameter values as a positional vector."""
        return np.array([p.value for p in self._params])

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._params)

    # ---------- evaluation ----------

    def predictions(self, parameters: Sequence[float]) -> np.ndarray:
        """Model predictions for every active bin, in fill order."""
        return np.asarray(self.model.predict(self._radius, self._cos_angle,
                                             self._redshift, parameters), dtype=float)

    def residuals(self, parameters: Sequence[float]) -> np.ndarray:
        """Normalized residuals ``(observed - predicted) / sqrt(variance)``."""
        return (self._observed - self.predictions(parameters)) / np.sqrt(self._variance)

    def objective(self, parameters: Sequence[float]) -> float:
        """Return ``0.5 * sum((obs - pred)^2 / var)`` over the active bins."""
        diff = self._observed - self.predictions(parameters)
        return 0.5 * float(np.sum(diff * diff / self._variance))

    __call__ = objective

    def chi2(self, parameters: Sequence[float]) -> float:
        return 2.0 * self.objective(parameters)

    # ---------- minimizer bridge ----------

    def export_initial_state(self, sink: ParameterSink) -> None:
        """Register every parameter with the minimizer's initial state.

        Floating parameters get a step of 10% of their value, fixed ones are
        registered and then fixed.
        """
        for param in self._params:
            if param.floating:
                sink.add(param.name, param.value, 0.1 * param.value)
            else:
                sink.add(param.name, param.value, 0.0)
                sink.fix(param.name)

    # ---------- diagnostics ----------

    def dump(self, destination: Union[str, Path, IO[str]], parameters: Sequence[float],
             oversampling: int = DEFAULT_OVERSAMPLING) -> None:
        """Write binning, per-bin residuals and an oversampled model grid.

        Layout (one record per line, no section markers):

        - three binning lines ``count low_edge width`` (log-lambda,
          separation, redshift)
        - ``n_data oversampling``
        - ``n_data`` lines ``index observed pull``
        - one prediction per oversampled (redshift, separation, log-lambda)
          point, log-lambda varying fastest
        """
        from ..file_io.readers import write_dump

        data = self.data
        ll_bins = data.log_lambda_binning.oversample(oversampling)
        sep_bins = data.separation_binning.oversample(oversampling)
        z_centers = data.redshift_binning.bin_centers()

        zz, ss, ll = np.meshgrid(z_centers, sep_bins.bin_centers(), ll_bins.bin_centers(),
                                 indexing='ij')
        zz, ss, ll = zz.ravel(), ss.ravel(), ll.ravel()
        r, mu = data.transform(ll, ss, zz, sep_bins.bin_width)
        grid = np.atleast_1d(self.model.predict(r, mu, zz, parameters))

        write_dump(
            destination,
            binnings=(data.log_lambda_binning, data.separation_binning, data.redshift_binning),
            oversampling=oversampling,
            indices=data.active_indices,
            observed=self._observed,
            pulls=self.residuals(parameters),
            predictions=grid,
        )
        logger.info(f"Dumped {data.n_data} residuals and {len(grid)} model points")
