import numpy as np
import pytest

from baofit.core.base.exceptions import ValidationError
from baofit.core.model import (
    PARAMETER_NAMES,
    BaoCorrelationModel,
    BaoParameters,
    MultipoleCorrelationModel,
    legendre2,
    legendre4,
)


def constant(value):
    return lambda r: value * np.ones_like(np.asarray(r, dtype=float))


class TestLegendre:
    @pytest.mark.parametrize("mu", [0.0, 0.3, 1.0])
    def test_against_numpy(self, mu):
        assert legendre2(mu) == pytest.approx(np.polynomial.legendre.legval(mu, [0, 0, 1]))
        assert legendre4(mu) == pytest.approx(np.polynomial.legendre.legval(mu, [0, 0, 0, 0, 1]))


class TestMultipoleCorrelationModel:
    def test_no_distortion_is_monopole(self, smooth_model, templates):
        smooth_model.set_distortion(0.0)
        r = np.array([10.0, 50.0, 120.0])
        assert np.allclose(smooth_model.evaluate(r, 0.7), templates.xi0(r))

    def test_monopole_coefficient(self):
        model = MultipoleCorrelationModel(constant(1.0), constant(0.0), constant(0.0))
        beta = 0.8
        model.set_distortion(beta)
        assert model.evaluate(50.0, 0.3) == pytest.approx(1 + 2 * beta / 3 + beta ** 2 / 5)

    def test_quadrupole_term(self):
        model = MultipoleCorrelationModel(constant(0.0), constant(1.0), constant(0.0), beta=0.5)
        expected = -(4 * 0.5 / 3 + 4 * 0.25 / 7) * legendre2(0.6)
        assert model.evaluate(80.0, 0.6) == pytest.approx(expected)

    def test_hexadecapole_term(self):
        model = MultipoleCorrelationModel(constant(0.0), constant(0.0), constant(1.0), beta=0.5)
        assert model.evaluate(80.0, 1.0) == pytest.approx(8 * 0.25 / 35)

    def test_beta_override_does_not_mutate(self, smooth_model):
        smooth_model.set_distortion(0.3)
        a = smooth_model.evaluate(40.0, 0.5, beta=1.2)
        assert smooth_model.beta == 0.3
        smooth_model.set_distortion(1.2)
        assert smooth_model.evaluate(40.0, 0.5) == pytest.approx(a)

    def test_from_multipoles_requires_all(self, templates):
        with pytest.raises(ValidationError, match="Missing multipoles"):
            MultipoleCorrelationModel.from_multipoles({0: templates.xi0, 2: templates.xi2})

    def test_requires_callables(self, templates):
        with pytest.raises(ValidationError):
            MultipoleCorrelationModel(templates.xi0, 1.0, templates.xi4)


class TestBaoParameters:
    def test_decode(self):
        p = BaoParameters.decode([4.0, 0.2, 0.8, 1.0, 1.1])
        assert p.alpha == 4.0 and p.bias == 0.2 and p.beta == 0.8
        assert p.amplitude == 1.0 and p.scale == 1.1

    def test_wrong_length(self):
        with pytest.raises(ValidationError, match="Expected 5 parameters"):
            BaoParameters.decode([1.0, 2.0])

    def test_names_order(self):
        assert PARAMETER_NAMES == ("Alpha", "Bias", "Beta", "BAO Ampl", "BAO Scale")


class TestPredict:
    def test_zero_amplitude_is_pure_nowiggle(self, bao_model):
        r, mu, z = np.array([60.0, 100.0, 140.0]), np.array([0.1, 0.5, 0.9]), np.array([2.2, 2.2, 3.2])
        alpha, bias, beta = 3.8, 0.17, 1.1
        pred = bao_model.predict(r, mu, z, [alpha, bias, beta, 0.0, 1.0])
        zf = ((1 + z) / (1 + 2.25)) ** alpha
        nw = bao_model.nowiggles.evaluate(r, mu, beta=beta)
        assert np.allclose(pred, bias ** 2 * zf * nw)

    def test_feature_vanishes_for_identical_templates(self, smooth_model, templates):
        other = MultipoleCorrelationModel(templates.xi0, templates.xi2, templates.xi4)
        model = BaoCorrelationModel(smooth_model, other, zref=2.25)
        r, mu, z = 95.0, 0.4, 2.2
        for ampl in (0.0, 1.0, 3.7):
            pred = model.predict(r, mu, z, [4.0, 0.2, 0.8, ampl, 1.0])
            expected = 0.04 * ((3.2 / 3.25) ** 4.0) * other.evaluate(r, mu, beta=0.8)
            assert pred == pytest.approx(expected)

    def test_unit_amplitude_is_fiducial(self, bao_model, templates):
        pred = bao_model.predict(100.0, 0.2, 2.25, [4.0, 1.0, 0.0, 1.0, 1.0])
        assert pred == pytest.approx(templates.xi0(100.0) + templates.bump(100.0))

    def test_scale_dilates_radius_only(self, bao_model):
        params = [4.0, 0.2, 0.8, 1.0, 1.05]
        pred = bao_model.predict(90.0, 0.3, 2.2, params)
        unscaled = bao_model.predict(90.0 * 1.05, 0.3, 2.2, [4.0, 0.2, 0.8, 1.0, 1.0])
        assert pred == pytest.approx(unscaled)

    def test_redshift_factor(self, bao_model):
        at_ref = bao_model.predict(80.0, 0.5, 2.25, [3.0, 0.2, 0.8, 1.0, 1.0])
        higher = bao_model.predict(80.0, 0.5, 3.25, [3.0, 0.2, 0.8, 1.0, 1.0])
        assert higher / at_ref == pytest.approx((4.25 / 3.25) ** 3.0)

    def test_scalar_returns_float(self, bao_model):
        assert isinstance(bao_model.predict(80.0, 0.5, 2.2, [4.0, 0.2, 0.8, 1.0, 1.0]), float)

    def test_predict_leaves_stored_distortion(self, bao_model):
        bao_model.fiducial.set_distortion(0.1)
        bao_model.predict(80.0, 0.5, 2.2, [4.0, 0.2, 0.8, 1.0, 1.0])
        assert bao_model.fiducial.beta == 0.1

    def test_invalid_zref(self, smooth_model):
        with pytest.raises(ValidationError):
            BaoCorrelationModel(smooth_model, smooth_model, zref=-1.0)
