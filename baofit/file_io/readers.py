"""
Readers and writers for the plain-text files consumed and produced by a fit.

Input files
-----------
``<name>.<ell>.dat``
    Two columns: radius and correlation multipole ell (0, 2 or 4).
``<name>.params``
    One bin per line:
    ``<value> 0 | Lya covariance 3D (<logLambda>,<separation>,<redshift>)``
``<name>.cov``
    One diagonal covariance entry per line: ``<i> <j> <value>`` with ``i == j``.

Every problem is reported as a :class:`DataError` naming the file and the
1-based line number.
"""

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Dict, Iterator, Sequence, Tuple, Union

import numpy as np

from ..core.base.exceptions import BaoFitError, DataError
from ..core.binning import UniformBinning
from ..core.dataset import BinnedDataset, DistanceService
from ..core.math.interpolation import Interpolator1D

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MULTIPOLES = (0, 2, 4)

# Capturing patterns for non-negative integers and signed floats.
INT_PATTERN = r"(0|(?:[1-9][0-9]*))"
FLOAT_PATTERN = r"([-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)"

PARAMS_LINE = re.compile(
    r"\s*{f}\s+{f}\s*\| Lya covariance 3D \({f},{f},{f}\)\s*".format(f=FLOAT_PATTERN)
)
COV_LINE = re.compile(r"\s*{i}\s+{i}\s+{f}\s*".format(i=INT_PATTERN, f=FLOAT_PATTERN))


def _numbered_lines(path: Path) -> Iterator[Tuple[int, str]]:
    try:
        handle = open(path, 'r', encoding='utf-8')
    except OSError as e:
        raise DataError(f"Unable to open {path}", file_path=path, cause=e)
    with handle:
        for number, line in enumerate(handle, start=1):
            yield number, line.rstrip('\n')


@contextmanager
def _line_context(path: Path, number: int, line: str):
    """Attach file and line information to errors raised while adding one line."""
    try:
        yield
    except DataError:
        raise
    except BaoFitError as e:
        raise DataError(f"Invalid entry '{line}': {e.message}", file_path=path,
                        line_number=number, details=dict(e.details), cause=e)


def read_multipole_table(path: PathLike) -> Tuple[np.ndarray, np.ndarray]:
    """Read a two-column (radius, value) table.

    Blank lines and ``#`` comments are skipped.
    """
    path = Path(path)
    radius, value = [], []
    for number, line in _numbered_lines(path):
        text = line.split('#', 1)[0].strip()
        if not text:
            continue
        tokens = text.split()
        if len(tokens) != 2:
            raise DataError(f"Expected 2 columns, got {len(tokens)}: '{line}'",
                            file_path=path, line_number=number)
        try:
            r, xi = float(tokens[0]), float(tokens[1])
        except ValueError as e:
            raise DataError(f"Badly formatted table line: '{line}'", file_path=path,
                            line_number=number, cause=e)
        radius.append(r)
        value.append(xi)

    logger.debug(f"Read {len(radius)} rows from {path}")
    return np.array(radius), np.array(value)


def multipole_path(name: str, ell: int) -> Path:
    return Path(f"{name}.{ell}.dat")


def load_multipoles(name: str, kind: str = 'cspline') -> Dict[int, Interpolator1D]:
    """Build one interpolator per multipole from ``<name>.<ell>.dat``, ell = 0, 2, 4."""
    multipoles = {}
    for ell in MULTIPOLES:
        path = multipole_path(name, ell)
        r, xi = read_multipole_table(path)
        try:
            multipoles[ell] = Interpolator1D(r, xi, kind=kind)
        except BaoFitError as e:
            raise DataError(f"Cannot interpolate {path}: {e.message}", file_path=path, cause=e)
    return multipoles


def read_params_file(path: PathLike, dataset: BinnedDataset) -> int:
    """Fill ``dataset`` from a ``.params`` file and return the number of bins read."""
    path = Path(path)
    count = 0
    for number, line in _numbered_lines(path):
        match = PARAMS_LINE.fullmatch(line)
        if match is None:
            raise DataError(f"Badly formatted params line: '{line}'", file_path=path,
                            line_number=number)
        value, sentinel, log_lambda, separation, redshift = (float(t) for t in match.groups())
        if sentinel != 0:
            raise DataError(f"Got unexpected non-zero token {sentinel}", file_path=path,
                            line_number=number)
        with _line_context(path, number, line):
            dataset.add_observation(value, log_lambda, separation, redshift)
        count += 1
    return count


def read_covariance_file(path: PathLike, dataset: BinnedDataset) -> int:
    """Fill the variances of ``dataset`` from a ``.cov`` file."""
    path = Path(path)
    count = 0
    for number, line in _numbered_lines(path):
        match = COV_LINE.fullmatch(line)
        if match is None:
            raise DataError(f"Badly formatted cov line: '{line}'", file_path=path,
                            line_number=number)
        i, j = int(match.group(1)), int(match.group(2))
        value = float(match.group(3))
        with _line_context(path, number, line):
            dataset.add_covariance(i, j, value)
        count += 1
    return count


def load_dataset(name: str, binnings: Sequence[UniformBinning],
                 cosmology: DistanceService) -> BinnedDataset:
    """Read ``<name>.params`` and ``<name>.cov`` into a new dataset.

    Parameters
    ----------
    name : str
        Common prefix of the two files
    binnings : sequence of UniformBinning
        (log-lambda, separation, redshift) binnings
    cosmology : DistanceService
        Distance calculator used by the coordinate transform

    Raises
    ------
    DataError
        If either file is malformed or the variance count differs from the
        data count
    """
    if not name:
        raise DataError("Missing data file prefix")
    log_lambda_binning, separation_binning, redshift_binning = binnings
    dataset = BinnedDataset(log_lambda_binning, separation_binning, redshift_binning, cosmology)

    params_path = Path(f"{name}.params")
    read_params_file(params_path, dataset)
    logger.info(f"Read {dataset.n_data} of {dataset.size} data values from {params_path}")

    cov_path = Path(f"{name}.cov")
    read_covariance_file(cov_path, dataset)
    logger.info(f"Read {dataset.n_variance} of {dataset.n_data} diagonal covariance values "
                f"from {cov_path}")

    if not dataset.is_complete:
        raise DataError(
            f"Got {dataset.n_variance} covariance values for {dataset.n_data} data values",
            file_path=cov_path,
        )
    return dataset


def _fmt(value: float) -> str:
    return f"{value:g}"


def write_dump(destination: Union[PathLike, IO[str]], binnings: Sequence[UniformBinning],
               oversampling: int, indices: np.ndarray, observed: np.ndarray,
               pulls: np.ndarray, predictions: np.ndarray) -> None:
    """Write the fit dump described in :meth:`Likelihood.dump`."""
    lines = [f"{b.count} {_fmt(b.low_edge)} {_fmt(b.bin_width)}" for b in binnings]
    lines.append(f"{len(indices)} {oversampling}")
    lines.extend(f"{int(i)} {_fmt(o)} {_fmt(p)}" for i, o, p in zip(indices, observed, pulls))
    lines.extend(_fmt(p) for p in predictions)
    text = "\n".join(lines) + "\n"

    if hasattr(destination, 'write'):
        destination.write(text)
        return

    path = Path(destination)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
    except OSError as e:
        raise DataError(f"Unable to write dump to {path}", file_path=path, cause=e)
