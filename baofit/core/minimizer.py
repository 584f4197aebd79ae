"""
Bridge between the likelihood and the iminuit MIGRAD minimizer.

The likelihood only talks to an :class:`InitialState`, a small ordered record
of (name, value, error, fixed) entries. :class:`MinuitFitter` turns that state
into a configured ``iminuit.Minuit`` instance, runs MIGRAD and collects the
minimum, covariance and correlation diagnostics into a :class:`FitResult`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from iminuit import Minuit

from .base.exceptions import FitError, ValidationError, validate_positive, validate_range
from .likelihood import Likelihood

logger = logging.getLogger(__name__)


class InitialState:
    """Ordered initial parameter state handed to the minimizer."""

    def __init__(self):
        self._names: List[str] = []
        self._values: Dict[str, float] = {}
        self._errors: Dict[str, float] = {}
        self._fixed: Dict[str, bool] = {}

    def add(self, name: str, value: float, error: float) -> None:
        if name in self._values:
            raise ValidationError(f"Parameter '{name}' was already added", field="name", value=name)
        self._names.append(name)
        self._values[name] = float(value)
        self._errors[name] = float(error)
        self._fixed[name] = False

    def fix(self, name: str) -> None:
        if name not in self._values:
            raise ValidationError(f"Cannot fix unknown parameter '{name}'", field="name", value=name)
        self._fixed[name] = True

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def values(self) -> np.ndarray:
        return np.array([self._values[n] for n in self._names])

    @property
    def errors(self) -> np.ndarray:
        return np.array([self._errors[n] for n in self._names])

    def is_fixed(self, name: str) -> bool:
        return self._fixed[name]

    @property
    def n_floating(self) -> int:
        return sum(not f for f in self._fixed.values())

    def __len__(self) -> int:
        return len(self._names)

    def __str__(self) -> str:
        lines = [f"{'Parameter':<12} {'Value':>12} {'Error':>12}  State"]
        for n in self._names:
            state = "fixed" if self._fixed[n] else "free"
            lines.append(f"{n:<12} {self._values[n]:>12.6g} {self._errors[n]:>12.6g}  {state}")
        return "\n".join(lines)


@dataclass
class FitResult:
    """Outcome of a MIGRAD minimization."""

    parameter_names: List[str]
    values: np.ndarray
    errors: np.ndarray
    fval: float
    valid: bool
    nfcn: int
    fixed: List[bool]
    covariance: np.ndarray
    correlation: np.ndarray = field(init=False)
    global_correlation: np.ndarray = field(init=False)

    def __post_init__(self):
        self.correlation = correlation_matrix(self.covariance)
        self.global_correlation = global_correlation(self.covariance, self.fixed)

    def value(self, name: str) -> float:
        return float(self.values[self.parameter_names.index(name)])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parameters': {
                name: {'value': float(v), 'error': float(e), 'fixed': bool(f), 'global_cc': float(g)}
                for name, v, e, f, g in zip(self.parameter_names, self.values, self.errors,
                                            self.fixed, self.global_correlation)
            },
            'fval': self.fval,
            'valid': self.valid,
            'nfcn': self.nfcn,
            'covariance': self.covariance.tolist(),
        }

    def summary(self) -> str:
        lines = [f"FCN = {self.fval:.6g}  valid = {self.valid}  nfcn = {self.nfcn}",
                 f"{'Parameter':<12} {'Value':>12} {'Error':>12} {'GlobalCC':>10}"]
        for name, v, e, f, g in zip(self.parameter_names, self.values, self.errors,
                                    self.fixed, self.global_correlation):
            suffix = "  fixed" if f else ""
            lines.append(f"{name:<12} {v:>12.6g} {e:>12.6g} {g:>10.4f}{suffix}")
        return "\n".join(lines)


def correlation_matrix(covariance: np.ndarray) -> np.ndarray:
    """Normalize a covariance matrix, leaving zero rows (fixed parameters) at zero."""
    cov = np.asarray(covariance, dtype=float)
    sigma = np.sqrt(np.clip(np.diag(cov), 0, None))
    norm = np.outer(sigma, sigma)
    corr = np.zeros_like(cov)
    np.divide(cov, norm, out=corr, where=norm > 0)
    return corr


def global_correlation(covariance: np.ndarray, fixed: List[bool]) -> np.ndarray:
    """Global correlation coefficients ``sqrt(1 - 1/(C_ii * Cinv_ii))``.

    Computed over the floating parameters only; fixed ones get zero.
    """
    cov = np.asarray(covariance, dtype=float)
    result = np.zeros(len(fixed))
    free = np.flatnonzero(~np.asarray(fixed, dtype=bool))
    if len(free) < 2 or not np.all(np.isfinite(cov)):
        return result
    sub = cov[np.ix_(free, free)]
    try:
        inv = np.linalg.inv(sub)
    except np.linalg.LinAlgError:
        logger.warning("Covariance matrix is singular, global correlations unavailable")
        return result
    denom = np.diag(sub) * np.diag(inv)
    with np.errstate(divide='ignore', invalid='ignore'):
        rho2 = np.where(denom > 0, 1.0 - 1.0 / denom, 0.0)
    result[free] = np.sqrt(np.clip(rho2, 0.0, 1.0))
    return result


class MinuitFitter:
    """Minimize a :class:`Likelihood` with MIGRAD.

    Parameters
    ----------
    likelihood : Likelihood
        Objective returning -log(L) = chi2/2
    strategy : int
        Minuit strategy, 0 (low), 1 (medium) or 2 (high)
    tolerance : float
        EDM tolerance passed to MIGRAD
    max_calls : int, optional
        Call budget, ``100 * npar**2`` if not given
    """

    def __init__(self, likelihood: Likelihood, strategy: int = 1, tolerance: float = 0.1,
                 max_calls: Optional[int] = None):
        validate_range(strategy, 0, 2, "strategy")
        validate_positive(tolerance, "tolerance")
        self.likelihood = likelihood
        self.strategy = strategy
        self.tolerance = tolerance
        self.max_calls = max_calls if max_calls is not None else 100 * likelihood.n_par ** 2

    def initial_state(self) -> InitialState:
        state = InitialState()
        self.likelihood.export_initial_state(state)
        return state

    def build_minuit(self, state: InitialState) -> Minuit:
        if state.n_floating == 0:
            raise FitError("No floating parameters to fit", step="initialize")

        minuit = Minuit(self.likelihood.objective, state.values, name=state.names)
        minuit.errordef = Minuit.LIKELIHOOD
        minuit.strategy = self.strategy
        minuit.tol = self.tolerance
        for i, name in enumerate(state.names):
            # Step sizes are magnitudes
            error = abs(state.errors[i])
            if error > 0:
                minuit.errors[name] = error
            if state.is_fixed(name):
                minuit.fixed[name] = True
        return minuit

    def fit(self) -> FitResult:
        """Run MIGRAD from the likelihood's initial state.

        Non-convergence is reported through ``FitResult.valid`` and a warning,
        not raised.
        """
        state = self.initial_state()
        logger.info(f"Initial parameter state:\n{state}")

        minuit = self.build_minuit(state)
        minuit.migrad(ncall=self.max_calls)

        npar = len(state)
        if minuit.covariance is not None:
            covariance = np.array(minuit.covariance, dtype=float)
        else:
            covariance = np.full((npar, npar), np.nan)

        result = FitResult(
            parameter_names=state.names,
            values=np.array(minuit.values, dtype=float),
            errors=np.array(minuit.errors, dtype=float),
            fval=float(minuit.fval),
            valid=bool(minuit.valid),
            nfcn=int(minuit.nfcn),
            fixed=[bool(f) for f in minuit.fixed],
            covariance=covariance,
        )
        if not result.valid:
            logger.warning("MIGRAD did not converge to a valid minimum")
        logger.info(f"Fit result:\n{result.summary()}")
        return result
