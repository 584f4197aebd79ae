"""
Homogeneous-universe distance service backed by astropy.

Distances are returned in Mpc/h: the underlying astropy cosmology is built with
H0 = 100 km/s/Mpc and no radiation component.
"""

import logging
from typing import Union

import numpy as np
from astropy.cosmology import FlatLambdaCDM, LambdaCDM

from .base.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]


class LambdaCdmDistances:
    """Comoving distances in a LambdaCDM universe.

    Parameters
    ----------
    omega_lambda : float
        Present-day dark-energy density
    omega_matter : float
        Present-day matter density, or zero for ``1 - omega_lambda``
    """

    def __init__(self, omega_lambda: float = 0.734, omega_matter: float = 0.266):
        if omega_matter == 0:
            omega_matter = 1 - omega_lambda
        if omega_lambda < 0 or omega_matter <= 0:
            raise ConfigurationError(
                f"Non-physical densities OmegaLambda={omega_lambda}, OmegaMatter={omega_matter}",
                parameter="omega_matter",
            )
        self.omega_lambda = float(omega_lambda)
        self.omega_matter = float(omega_matter)

        if np.isclose(self.omega_lambda + self.omega_matter, 1.0):
            self.cosmo = FlatLambdaCDM(H0=100.0, Om0=self.omega_matter, Tcmb0=0)
        else:
            self.cosmo = LambdaCDM(H0=100.0, Om0=self.omega_matter,
                                   Ode0=self.omega_lambda, Tcmb0=0)
        logger.debug(f"Initialized {self.cosmo}")

    def line_of_sight_comoving_distance(self, z: ArrayLike) -> ArrayLike:
        """Line-of-sight comoving distance to redshift ``z`` in Mpc/h."""
        return _strip(self.cosmo.comoving_distance(z).value)

    def transverse_comoving_scale(self, z: ArrayLike) -> ArrayLike:
        """Transverse comoving distance per radian at redshift ``z`` in Mpc/h."""
        return _strip(self.cosmo.comoving_transverse_distance(z).value)

    def __repr__(self) -> str:
        return (f"LambdaCdmDistances(omega_lambda={self.omega_lambda}, "
                f"omega_matter={self.omega_matter})")


def _strip(value):
    # astropy returns 0-d arrays for scalar input
    if np.ndim(value) == 0:
        return float(value)
    return np.asarray(value, dtype=float)
