from types import SimpleNamespace

import numpy as np
import pytest

from baofit.core.binning import UniformBinning
from baofit.core.dataset import BinnedDataset
from baofit.core.model import BaoCorrelationModel, MultipoleCorrelationModel


class LinearDistances:
    """Distance service with D(z) proportional to z, enough to exercise the geometry."""

    def __init__(self, hubble_distance=3000.0):
        self.hubble_distance = hubble_distance

    def line_of_sight_comoving_distance(self, z):
        return self.hubble_distance * np.asarray(z, dtype=float)

    def transverse_comoving_scale(self, z):
        return self.hubble_distance * np.asarray(z, dtype=float)


class ConstantModel:
    """Model stub whose prediction is a constant for every bin."""

    def __init__(self, value=5.0):
        self.value = value

    def predict(self, r, mu, z, parameters):
        return np.full(np.shape(r), self.value, dtype=float)


def _xi0(r):
    return 0.02 * np.exp(-np.asarray(r) / 40.0)


def _xi2(r):
    return 0.005 * np.exp(-np.asarray(r) / 60.0)


def _xi4(r):
    return 0.001 * np.exp(-np.asarray(r) / 80.0)


def _bump(r):
    return 0.002 * np.exp(-0.5 * ((np.asarray(r) - 100.0) / 10.0) ** 2)


@pytest.fixture
def templates():
    """Smooth l=0,2,4 multipole functions and the BAO bump added to the monopole."""
    return SimpleNamespace(xi0=_xi0, xi2=_xi2, xi4=_xi4, bump=_bump)


@pytest.fixture
def constant_model():
    return ConstantModel(5.0)


@pytest.fixture
def distances():
    return LinearDistances()


@pytest.fixture
def unit_binning():
    return UniformBinning(2, 0.0, 1.0)


@pytest.fixture
def unit_dataset(unit_binning, distances):
    """2x2x2 grid with unit bins on every axis."""
    return BinnedDataset(unit_binning, unit_binning, unit_binning, distances)


@pytest.fixture
def smooth_model(templates):
    return MultipoleCorrelationModel(templates.xi0, templates.xi2, templates.xi4)


@pytest.fixture
def bao_model(templates):
    """Fiducial model = smooth model plus a monopole bump at r = 100."""
    t = templates
    fiducial = MultipoleCorrelationModel(lambda r: t.xi0(r) + t.bump(r), t.xi2, t.xi4)
    nowiggles = MultipoleCorrelationModel(t.xi0, t.xi2, t.xi4)
    return BaoCorrelationModel(fiducial, nowiggles, zref=2.25)


@pytest.fixture
def lya_binnings():
    """Small version of the default (log-lambda, separation, redshift) binning."""
    return (UniformBinning(6, 0.0002, 0.004),
            UniformBinning(5, 0.0, 10.0),
            UniformBinning(2, 1.7, 1.0))
