"""
Sparse 3D binned Lyman-alpha cross-correlation dataset.

Bins live on a (log-lambda, separation, redshift) grid flattened in row-major
order with redshift varying fastest::

    index = (ll_bin * n_separation + sep_bin) * n_redshift + z_bin

Only the bins that were filled are "active". Their flattened indices are kept
in fill order, which is also the order used by the likelihood sum.
"""

import logging
from typing import Optional, Protocol, Tuple, Union

import numpy as np

from .base.exceptions import BinningError, ValidationError, validate_not_none
from .binning import UniformBinning

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

ARCMIN_TO_RAD = np.pi / (60.0 * 180.0)
BIN_CENTER_TOLERANCE = 1e-6


class DistanceService(Protocol):
    """Interface of the homogeneous-cosmology distance calculator."""

    def line_of_sight_comoving_distance(self, z: ArrayLike) -> ArrayLike:
        ...

    def transverse_comoving_scale(self, z: ArrayLike) -> ArrayLike:
        ...


class BinnedDataset:
    """Observed correlation values with diagonal variances on a sparse 3D grid.

    Parameters
    ----------
    log_lambda_binning : UniformBinning
        Binning of log(lambda2/lambda1)
    separation_binning : UniformBinning
        Binning of the angular separation in arcmin
    redshift_binning : UniformBinning
        Binning of the pair redshift
    cosmology : DistanceService
        Provides comoving distances used by the coordinate transform
    """

    def __init__(self, log_lambda_binning: UniformBinning,
                 separation_binning: UniformBinning,
                 redshift_binning: UniformBinning,
                 cosmology: DistanceService):
        for name, binning in (("log_lambda_binning", log_lambda_binning),
                              ("separation_binning", separation_binning),
                              ("redshift_binning", redshift_binning)):
            if not isinstance(binning, UniformBinning):
                raise ValidationError(f"{name} must be a UniformBinning", field=name, value=binning)
        validate_not_none(cosmology, "cosmology")

        self.log_lambda_binning = log_lambda_binning
        self.separation_binning = separation_binning
        self.redshift_binning = redshift_binning
        self.cosmology = cosmology

        self._nsep = separation_binning.count
        self._nz = redshift_binning.count
        size = log_lambda_binning.count * self._nsep * self._nz

        self._data = np.zeros(size)
        self._variance = np.zeros(size)
        self._radius = np.zeros(size)
        self._cos_angle = np.zeros(size)
        self._has_data = np.zeros(size, dtype=bool)
        self._has_variance = np.zeros(size, dtype=bool)
        self._index = []
        self._z_centers = redshift_binning.bin_centers()

    # ---------- filling ----------

    def flat_index(self, ll_bin: int, sep_bin: int, z_bin: int) -> int:
        """Flattened grid index of a (log-lambda, separation, redshift) bin triple."""
        return (ll_bin * self._nsep + sep_bin) * self._nz + z_bin

    def add_observation(self, value: float, log_lambda: float, separation: float,
                        redshift: float) -> int:
        """Fill one bin with an observed value and return its flattened index.

        The coordinates must be bin centers (to within 1e-6); passing raw,
        unbinned coordinates is rejected.

        Raises
        ------
        BinningError
            If a coordinate is out of range or off-center, or if the bin was
            already filled
        """
        bins = []
        for name, binning, coord in (("log_lambda", self.log_lambda_binning, log_lambda),
                                     ("separation", self.separation_binning, separation),
                                     ("redshift", self.redshift_binning, redshift)):
            b = binning.bin_index(coord)
            center = binning.bin_center(b)
            if abs(coord - center) >= BIN_CENTER_TOLERANCE:
                raise BinningError(
                    f"{name} {coord} is not the center {center} of bin {b}",
                    value=coord, index=b,
                )
            bins.append(b)

        index = self.flat_index(*bins)
        if self._has_data[index]:
            raise BinningError(
                f"Bin ({log_lambda},{separation},{redshift}) has already been filled",
                index=index,
            )

        self._data[index] = value
        self._has_data[index] = True
        self._index.append(index)
        self._radius[index], self._cos_angle[index] = self.transform(
            log_lambda, separation, redshift, self.separation_binning.bin_width
        )
        return index

    def add_variance(self, k: int, value: float) -> None:
        """Set the variance of the ``k``-th filled bin (in fill order).

        Raises
        ------
        BinningError
            If ``k`` does not refer to a filled bin or its variance is already set
        ValidationError
            If the variance is not positive and finite
        """
        if k < 0 or k >= len(self._index):
            raise BinningError(f"Variance index {k} does not refer to a filled bin "
                               f"(have {len(self._index)})", index=k)
        if not (value > 0 and np.isfinite(value)):
            raise ValidationError(f"Variance must be positive and finite, got {value} for bin {k}",
                                  field="variance", value=value)
        index = self._index[k]
        if self._has_variance[index]:
            raise BinningError(f"Variance of bin {k} has already been set", index=k)
        self._variance[index] = value
        self._has_variance[index] = True

    def add_covariance(self, i: int, j: int, value: float) -> None:
        """Add one covariance entry. Only diagonal entries are supported."""
        if i != j:
            raise ValidationError(
                f"Off-diagonal covariance ({i},{j}) is not supported",
                field="covariance", value=value,
            )
        self.add_variance(i, value)

    # ---------- geometry ----------

    def transform(self, log_lambda: ArrayLike, separation: ArrayLike, redshift: ArrayLike,
                  ds: float) -> Tuple[ArrayLike, ArrayLike]:
        """Map bin coordinates onto 3D comoving (radius, cos_angle).

        Parameters
        ----------
        log_lambda : float or array
            log(lambda2/lambda1) bin center
        separation : float or array
            Angular separation bin center in arcmin
        redshift : float or array
            Redshift bin center
        ds : float
            Width of the separation bins in arcmin

        Returns
        -------
        tuple
            (radius in Mpc/h, |cos| of the angle to the line of sight)
        """
        ratio = np.exp(0.5 * np.asarray(log_lambda, dtype=float))
        zp1 = np.asarray(redshift, dtype=float) + 1
        z1 = zp1 / ratio - 1
        z2 = zp1 * ratio - 1
        dr_los = (np.asarray(self.cosmology.line_of_sight_comoving_distance(z2))
                  - np.asarray(self.cosmology.line_of_sight_comoving_distance(z1)))
        # Integral[s^2 ds]/Integral[s ds] over the bin = s + ds^2/(12 s)
        sep = np.asarray(separation, dtype=float)
        swgt = sep + (ds * ds / 12.0) / sep
        dr_perp = np.asarray(self.cosmology.transverse_comoving_scale(redshift)) * (swgt * ARCMIN_TO_RAD)
        radius = np.sqrt(dr_los * dr_los + dr_perp * dr_perp)
        cos_angle = np.abs(dr_los) / radius
        if np.ndim(radius) == 0:
            return float(radius), float(cos_angle)
        return radius, cos_angle

    # ---------- accessors ----------

    @property
    def size(self) -> int:
        """Total number of bins in the grid."""
        return len(self._data)

    @property
    def n_data(self) -> int:
        """Number of filled bins."""
        return len(self._index)

    @property
    def n_variance(self) -> int:
        """Number of filled bins with a variance."""
        return int(np.count_nonzero(self._has_variance))

    @property
    def is_complete(self) -> bool:
        return self.n_variance == self.n_data

    @property
    def active_indices(self) -> np.ndarray:
        """Flattened indices of the filled bins in fill order."""
        return np.asarray(self._index, dtype=np.int64)

    def index(self, k: int) -> int:
        return self._index[k]

    def has_data(self, index: int) -> bool:
        return bool(self._has_data[index])

    def has_variance(self, index: int) -> bool:
        return bool(self._has_variance[index])

    def value(self, index):
        return self._data[index]

    def variance(self, index):
        return self._variance[index]

    def radius(self, index):
        return self._radius[index]

    def cos_angle(self, index):
        return self._cos_angle[index]

    def redshift(self, index):
        """Redshift bin center of a flattened index (or array of indices)."""
        return self._z_centers[np.asarray(index) % self._nz]

    def active_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Return (radius, cos_angle, redshift, value, variance) of the active bins.

        Arrays are ordered like :attr:`active_indices`.
        """
        idx = self.active_indices
        return (self._radius[idx].copy(), self._cos_angle[idx].copy(), self.redshift(idx),
                self._data[idx].copy(), self._variance[idx].copy())

    def summary(self, name: Optional[str] = None) -> str:
        label = f" from {name}" if name else ""
        return (f"{self.n_data} of {self.size} bins filled{label}, "
                f"{self.n_variance} with variance")

    def __repr__(self) -> str:
        return (f"BinnedDataset(log_lambda={self.log_lambda_binning!r}, "
                f"separation={self.separation_binning!r}, redshift={self.redshift_binning!r}, "
                f"n_data={self.n_data})")
