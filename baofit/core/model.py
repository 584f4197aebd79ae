"""
Redshift-space correlation-function model for the BAO fit.

:class:`MultipoleCorrelationModel` rebuilds the anisotropic correlation
function xi(r, mu) from tabulated l=0,2,4 Legendre multipoles with linear
(Kaiser) redshift-space distortions::

    xi(r, mu) = C0 xi0(r) - C2 L2(mu) xi2(r) + C4 L4(mu) xi4(r)
    C0 = 1 + 2 beta/3 + beta^2/5
    C2 = 4 beta/3 + 4 beta^2/7
    C4 = 8 beta^2/35

:class:`BaoCorrelationModel` combines a fiducial (with BAO feature) and a
smooth "no-wiggle" model so that only the BAO feature is sensitive to the
amplitude and scale parameters.
"""

import logging
from typing import Callable, Mapping, NamedTuple, Optional, Sequence, Union

import numpy as np

from .base.exceptions import ValidationError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

MULTIPOLES = (0, 2, 4)

# Positional layout of the parameter vector shared by the model, the
# likelihood and the minimizer bridge.
PARAMETER_NAMES = ("Alpha", "Bias", "Beta", "BAO Ampl", "BAO Scale")


class BaoParameters(NamedTuple):
    alpha: float
    bias: float
    beta: float
    amplitude: float
    scale: float

    @classmethod
    def decode(cls, parameters: Sequence[float]) -> "BaoParameters":
        """Decode a positional parameter vector ordered like ``PARAMETER_NAMES``."""
        if len(parameters) != len(PARAMETER_NAMES):
            raise ValidationError(
                f"Expected {len(PARAMETER_NAMES)} parameters {PARAMETER_NAMES}, got {len(parameters)}",
                field="parameters",
            )
        return cls(*(float(p) for p in parameters))


def legendre2(mu: ArrayLike) -> ArrayLike:
    return 0.5 * (3 * mu * mu - 1)


def legendre4(mu: ArrayLike) -> ArrayLike:
    mu2 = mu * mu
    return (3 + mu2 * (-30 + 35 * mu2)) / 8


class MultipoleCorrelationModel:
    """Anisotropic correlation function from l=0,2,4 multipoles.

    Parameters
    ----------
    xi0, xi2, xi4 : callable
        Radial multipole functions r -> xi_l(r)
    beta : float
        Initial redshift-space distortion parameter
    """

    def __init__(self, xi0: Callable, xi2: Callable, xi4: Callable, beta: float = 0.0):
        for name, func in (("xi0", xi0), ("xi2", xi2), ("xi4", xi4)):
            if not callable(func):
                raise ValidationError(f"{name} must be callable", field=name)
        self._xi0 = xi0
        self._xi2 = xi2
        self._xi4 = xi4
        self.set_distortion(beta)

    @classmethod
    def from_multipoles(cls, multipoles: Mapping[int, Callable], beta: float = 0.0
                        ) -> "MultipoleCorrelationModel":
        missing = [ell for ell in MULTIPOLES if ell not in multipoles]
        if missing:
            raise ValidationError(f"Missing multipoles {missing}", field="multipoles")
        return cls(multipoles[0], multipoles[2], multipoles[4], beta=beta)

    @property
    def beta(self) -> float:
        return self._beta

    def set_distortion(self, beta: float) -> None:
        """Set the redshift-space distortion parameter used by :meth:`evaluate`."""
        self._beta = float(beta)

    @staticmethod
    def coefficients(beta: float):
        """Return the (C0, C2, C4) Kaiser coefficients for ``beta``."""
        c0 = 1 + beta * (2.0 / 3.0 + beta / 5.0)
        c2 = beta * (4.0 / 3.0 + (4.0 / 7.0) * beta)
        c4 = beta * beta * 8.0 / 35.0
        return c0, c2, c4

    def evaluate(self, r: ArrayLike, mu: ArrayLike, beta: Optional[float] = None) -> ArrayLike:
        """Evaluate xi(r, mu).

        ``beta`` overrides the stored distortion for this call only.
        """
        c0, c2, c4 = self.coefficients(self._beta if beta is None else beta)
        return (c0 * self._xi0(r)
                - c2 * legendre2(mu) * self._xi2(r)
                + c4 * legendre4(mu) * self._xi4(r))

    __call__ = evaluate


class BaoCorrelationModel:
    """Biased, redshift-evolved BAO model evaluated by the likelihood.

    Parameters
    ----------
    fiducial : MultipoleCorrelationModel
        Model built from templates including the BAO feature
    nowiggles : MultipoleCorrelationModel
        Model built from smooth templates without the feature
    zref : float
        Reference redshift of the redshift-evolution factor
    """

    def __init__(self, fiducial: MultipoleCorrelationModel,
                 nowiggles: MultipoleCorrelationModel, zref: float = 2.25):
        if fiducial is None or nowiggles is None:
            raise ValidationError("Both fiducial and no-wiggle models are required")
        if not zref > -1:
            raise ValidationError(f"Reference redshift must be > -1, got {zref}",
                                  field="zref", value=zref)
        self.fiducial = fiducial
        self.nowiggles = nowiggles
        self.zref = float(zref)

    @classmethod
    def from_files(cls, fiducial_name: str, nowiggles_name: str,
                   zref: float = 2.25) -> "BaoCorrelationModel":
        """Build the model from ``<name>.<ell>.dat`` tables for ell = 0, 2, 4."""
        from ..file_io.readers import load_multipoles

        if not fiducial_name:
            raise ValidationError("Missing fiducial template name", field="fiducial")
        if not nowiggles_name:
            raise ValidationError("Missing no-wiggle template name", field="nowiggles")

        fiducial = MultipoleCorrelationModel.from_multipoles(load_multipoles(fiducial_name))
        nowiggles = MultipoleCorrelationModel.from_multipoles(load_multipoles(nowiggles_name))
        logger.info(f"Loaded fiducial '{fiducial_name}' and no-wiggle '{nowiggles_name}' templates")
        return cls(fiducial, nowiggles, zref)

    def predict(self, r: ArrayLike, mu: ArrayLike, z: ArrayLike,
                parameters: Sequence[float]) -> ArrayLike:
        """Predicted correlation at (r, mu, z).

        ``parameters`` is positional: (alpha, bias, beta, amplitude, scale).
        Only the radius is rescaled; mu is invariant under an isotropic
        dilation.
        """
        p = BaoParameters.decode(parameters)
        z_factor = ((1 + np.asarray(z)) / (1 + self.zref)) ** p.alpha
        r_scaled = np.asarray(r) * p.scale
        fid = self.fiducial.evaluate(r_scaled, mu, beta=p.beta)
        nw = self.nowiggles.evaluate(r_scaled, mu, beta=p.beta)
        xi = p.amplitude * (fid - nw) + nw
        result = p.bias * p.bias * z_factor * xi
        if np.ndim(result) == 0:
            return float(result)
        return result
