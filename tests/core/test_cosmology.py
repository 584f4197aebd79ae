import numpy as np
import pytest

from baofit.core.base.exceptions import ConfigurationError
from baofit.core.cosmology import LambdaCdmDistances


class TestConstruction:
    def test_defaults(self):
        cosmo = LambdaCdmDistances()
        assert cosmo.omega_lambda == 0.734
        assert cosmo.omega_matter == 0.266

    def test_zero_matter_means_flat(self):
        cosmo = LambdaCdmDistances(0.7, 0.0)
        assert cosmo.omega_matter == pytest.approx(0.3)

    @pytest.mark.parametrize("omega_lambda, omega_matter", [(-0.1, 0.3), (0.7, -0.3), (1.2, 0.0)])
    def test_non_physical(self, omega_lambda, omega_matter):
        with pytest.raises(ConfigurationError):
            LambdaCdmDistances(omega_lambda, omega_matter)


class TestDistances:
    def test_flat_distance_scale(self):
        cosmo = LambdaCdmDistances(0.7, 0.3)
        # ~3300 Mpc for h = 0.7
        assert 2250 < cosmo.line_of_sight_comoving_distance(1.0) < 2400

    def test_flat_transverse_equals_line_of_sight(self):
        cosmo = LambdaCdmDistances(0.7, 0.3)
        z = np.array([1.8, 2.3, 3.0])
        assert np.allclose(cosmo.transverse_comoving_scale(z),
                           cosmo.line_of_sight_comoving_distance(z))

    def test_open_transverse_exceeds_line_of_sight(self):
        cosmo = LambdaCdmDistances(0.6, 0.3)
        assert cosmo.transverse_comoving_scale(2.0) > cosmo.line_of_sight_comoving_distance(2.0)

    def test_monotonic(self):
        cosmo = LambdaCdmDistances()
        d = cosmo.line_of_sight_comoving_distance(np.linspace(1.5, 4.0, 20))
        assert np.all(np.diff(d) > 0)

    def test_scalar_returns_float(self):
        assert isinstance(LambdaCdmDistances().line_of_sight_comoving_distance(2.25), float)
