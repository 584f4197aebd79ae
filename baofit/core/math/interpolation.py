"""
One-dimensional interpolation of tabulated functions.

The correlation-function multipoles are read as (radius, value) tables and
evaluated through natural cubic splines from scipy.
"""

import logging
from typing import Tuple, Union

import numpy as np
from scipy import interpolate

from ..base.exceptions import InterpolationError

logger = logging.getLogger(__name__)


class Interpolator1D:
    """Cubic-spline interpolator over a tabulated function.

    Parameters
    ----------
    x : np.ndarray
        Abscissa values, sorted or not
    y : np.ndarray
        Function values at ``x``
    kind : str
        'cspline' (natural cubic spline) or 'linear'
    assume_sorted : bool
        Whether x is already sorted in increasing order
    """

    KINDS = ('cspline', 'linear')

    def __init__(self, x: np.ndarray, y: np.ndarray, kind: str = 'cspline',
                 assume_sorted: bool = False):
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        self.kind = kind

        if kind not in self.KINDS:
            raise InterpolationError(f"Unknown interpolation kind '{kind}'. Available: {list(self.KINDS)}")
        if self.x.ndim != 1 or self.x.shape != self.y.shape:
            raise InterpolationError("x and y arrays must be one-dimensional with the same length",
                                     details={'x_shape': self.x.shape, 'y_shape': self.y.shape})
        if len(self.x) < 3:
            raise InterpolationError(f"Need at least 3 points to interpolate, got {len(self.x)}")

        # Sort by x values if needed
        if not assume_sorted:
            sort_idx = np.argsort(self.x, kind='stable')
            self.x = self.x[sort_idx]
            self.y = self.y[sort_idx]

        if np.any(np.diff(self.x) <= 0):
            raise InterpolationError("x values must be strictly increasing (duplicate abscissa found)")

        try:
            if kind == 'cspline':
                self._interpolator = interpolate.CubicSpline(
                    self.x, self.y, bc_type='natural', extrapolate=True
                )
            else:
                self._interpolator = interpolate.interp1d(
                    self.x, self.y, kind='linear', bounds_error=False,
                    fill_value='extrapolate', assume_sorted=True
                )
        except ValueError as e:
            raise InterpolationError(f"Failed to create interpolator: {e}", cause=e)

    def __call__(self, x_new: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Evaluate the interpolator at ``x_new``.

        Scalars come back as Python floats, arrays as arrays of the same shape.
        """
        result = self._interpolator(x_new)
        if np.ndim(result) == 0:
            return float(result)
        return result

    @property
    def domain(self) -> Tuple[float, float]:
        """Range of the tabulated abscissa."""
        return float(self.x[0]), float(self.x[-1])

    def __len__(self) -> int:
        return len(self.x)

    def __repr__(self) -> str:
        lo, hi = self.domain
        return f"Interpolator1D(kind='{self.kind}', n={len(self)}, domain=[{lo}, {hi}])"
