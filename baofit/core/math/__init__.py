"""
Mathematical utilities for baofit using only numpy and scipy.
"""

from .interpolation import Interpolator1D

__all__ = [
    "Interpolator1D",
]
