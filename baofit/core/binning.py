"""
Uniform one-dimensional binning.

A binning maps a scalar coordinate onto an integer bin index and back onto the
bin center. Lookups outside ``[0, count)`` are contract violations and raise
:class:`BinningError`; callers are expected to pre-validate their inputs.
"""

import math
from typing import Tuple

import numpy as np

from .base.exceptions import BinningError, ValidationError, validate_positive


class UniformBinning:
    """Immutable binning of ``count`` equal-width bins starting at ``low_edge``.

    Parameters
    ----------
    count : int
        Number of bins, must be positive
    low_edge : float
        Lower edge of the first bin
    bin_width : float
        Width of every bin, must be positive
    """

    __slots__ = ("_count", "_low_edge", "_bin_width")

    def __init__(self, count: int, low_edge: float, bin_width: float):
        if int(count) != count or count <= 0:
            raise ValidationError(f"Binning count must be a positive integer, got {count}",
                                  field="count", value=count)
        validate_positive(bin_width, "bin_width")
        self._count = int(count)
        self._low_edge = float(low_edge)
        self._bin_width = float(bin_width)

    @property
    def count(self) -> int:
        return self._count

    @property
    def low_edge(self) -> float:
        return self._low_edge

    @property
    def bin_width(self) -> float:
        return self._bin_width

    @property
    def high_edge(self) -> float:
        return self._low_edge + self._count * self._bin_width

    def bin_index(self, value: float) -> int:
        """Return the index of the bin containing ``value``.

        Raises
        ------
        BinningError
            If the value is not finite or lies outside the binned range
        """
        if not math.isfinite(value):
            raise BinningError(f"Value {value} is not a finite number", value=value)
        index = int(math.floor((value - self._low_edge) / self._bin_width))
        if index < 0 or index >= self._count:
            raise BinningError(
                f"Value {value} is outside the binning range "
                f"[{self._low_edge}, {self.high_edge})",
                value=value, index=index,
            )
        return index

    def bin_center(self, index: int) -> float:
        """Return the midpoint of bin ``index``."""
        if index < 0 or index >= self._count:
            raise BinningError(f"Bin index {index} is outside [0, {self._count})", index=index)
        return self._low_edge + (index + 0.5) * self._bin_width

    def bin_centers(self) -> np.ndarray:
        """Return the centers of all bins as an array."""
        return self._low_edge + (np.arange(self._count) + 0.5) * self._bin_width

    def oversample(self, factor: int) -> "UniformBinning":
        """Return a binning over the same range with ``count * factor`` bins."""
        if int(factor) != factor or factor <= 0:
            raise ValidationError(f"Oversampling factor must be a positive integer, got {factor}",
                                  field="factor", value=factor)
        factor = int(factor)
        return UniformBinning(self._count * factor, self._low_edge, self._bin_width / factor)

    def as_tuple(self) -> Tuple[int, float, float]:
        return self._count, self._low_edge, self._bin_width

    def __eq__(self, other) -> bool:
        if not isinstance(other, UniformBinning):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __repr__(self) -> str:
        return (f"UniformBinning(count={self._count}, low_edge={self._low_edge}, "
                f"bin_width={self._bin_width})")


def oversample_binning(binning: UniformBinning, factor: int) -> UniformBinning:
    """Functional form of :meth:`UniformBinning.oversample`."""
    return binning.oversample(factor)
