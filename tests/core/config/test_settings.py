import json
import logging
from pathlib import Path

import pytest

from baofit.core.base.exceptions import ConfigurationError
from baofit.core.binning import UniformBinning
from baofit.core.config.settings import (
    BinningConfig,
    FitConfig,
    get_config,
    load_config_from_env,
    reset_config,
    set_config,
    update_config,
)

# Disable all logging for tests to keep output clean
logging.disable(logging.CRITICAL)


@pytest.fixture
def fit_config_data():
    return {
        "data": "xi3d",
        "fiducial": "templates/fid",
        "nowiggles": "templates/nw",
        "omega_lambda": 0.7,
        "omega_matter": 0.3,
        "log_lambda": {"count": 6, "low_edge": 0.0002, "bin_width": 0.004},
        "separation": [5, 0.0, 10.0],
    }


class TestBinningConfig:
    def test_build(self):
        binning = BinningConfig(14, 0.0, 10.0).build()
        assert binning == UniformBinning(14, 0.0, 10.0)

    @pytest.mark.parametrize("value", [{"count": 2, "low_edge": 0.0, "bin_width": 1.0},
                                       [2, 0.0, 1.0], (2, 0, 1)])
    def test_coerce(self, value):
        assert BinningConfig.coerce(value).to_tuple() == (2, 0.0, 1.0)

    def test_coerce_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            BinningConfig.coerce("14 0 10")

    @pytest.mark.parametrize("count, width", [(0, 1.0), (3, 0.0), (3, -1.0)])
    def test_validation(self, count, width):
        with pytest.raises(ConfigurationError):
            BinningConfig(count, 0.0, width)


class TestFitConfig:
    def test_initialization_defaults(self):
        cfg = FitConfig()
        assert cfg.omega_lambda == 0.734
        assert cfg.omega_matter == 0.266
        assert cfg.zref == 2.25
        assert cfg.log_lambda.to_tuple() == (14, 0.0002, 0.004)
        assert cfg.separation.to_tuple() == (14, 0.0, 10.0)
        assert cfg.redshift.to_tuple() == (2, 1.7, 1.0)
        assert cfg.oversampling == 10
        assert cfg.dump is None
        assert cfg.log_level == "INFO"

    def test_initialization_custom(self, fit_config_data):
        cfg = FitConfig(**fit_config_data)
        assert cfg.log_lambda.count == 6
        assert cfg.separation.to_tuple() == (5, 0.0, 10.0)
        ll, sep, z = cfg.binnings()
        assert ll.count == 6 and sep.count == 5 and z.count == 2

    def test_dump_path(self):
        assert FitConfig(dump="fit.dat").dump == Path("fit.dat")
        assert FitConfig(dump="").dump is None

    @pytest.mark.parametrize("overrides", [
        {"omega_lambda": -0.1},
        {"zref": -1.0},
        {"oversampling": 0},
        {"strategy": 5},
        {"tolerance": 0.0},
        {"log_level": "LOUD"},
        {"redshift": (0, 1.7, 1.0)},
    ])
    def test_validation(self, overrides):
        with pytest.raises(ConfigurationError):
            FitConfig(**overrides)

    def test_require_inputs(self):
        with pytest.raises(ConfigurationError, match="--data"):
            FitConfig(fiducial="a", nowiggles="b").require_inputs()
        FitConfig(data="d", fiducial="a", nowiggles="b").require_inputs()

    def test_round_trip_dict(self, fit_config_data):
        cfg = FitConfig.from_dict(fit_config_data)
        again = FitConfig.from_dict(cfg.to_dict())
        assert again == cfg

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration"):
            FitConfig.from_dict({"nll": 3})

    def test_file_round_trip(self, tmp_path, fit_config_data):
        cfg = FitConfig(**fit_config_data)
        for name in ("fit.json", "fit.yaml"):
            cfg.to_file(tmp_path / name)
            assert FitConfig.from_file(tmp_path / name) == cfg

    def test_from_file_reports_path(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"oversampling": -2}))
        with pytest.raises(ConfigurationError) as info:
            FitConfig.from_file(path)
        assert info.value.get_detail("config_file") == str(path)

    def test_update(self):
        cfg = FitConfig()
        cfg.update(separation=(3, 0, 5), dump="out.dat")
        assert cfg.separation.to_tuple() == (3, 0.0, 5.0)
        assert cfg.dump == Path("out.dat")
        with pytest.raises(ConfigurationError):
            cfg.update(colour="blue")


class TestGlobalConfigFunctions:
    @pytest.fixture(autouse=True)
    def reset_global_config_for_each_test(self):
        reset_config()
        yield
        reset_config()

    def test_get_and_set(self):
        cfg = FitConfig(zref=2.4)
        set_config(cfg)
        assert get_config() is cfg

    def test_set_requires_fit_config(self):
        with pytest.raises(TypeError):
            set_config({"zref": 2.4})

    def test_update_config(self):
        update_config(oversampling=4)
        assert get_config().oversampling == 4

    def test_reset(self):
        update_config(oversampling=4)
        reset_config()
        assert get_config().oversampling == 10


class TestEnvironment:
    def test_load_from_env(self, monkeypatch):
        monkeypatch.setenv("BAOFIT_DATA", "from_env")
        monkeypatch.setenv("BAOFIT_ZREF", "2.5")
        monkeypatch.setenv("BAOFIT_OVERSAMPLING", "3")
        cfg = load_config_from_env()
        assert cfg.data == "from_env"
        assert cfg.zref == 2.5
        assert cfg.oversampling == 3

    def test_env_overrides_given_config(self, monkeypatch):
        monkeypatch.setenv("BAOFIT_FIDUCIAL", "env_fid")
        cfg = load_config_from_env(FitConfig(fiducial="file_fid", zref=2.1))
        assert cfg.fiducial == "env_fid"
        assert cfg.zref == 2.1

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("BAOFIT_OVERSAMPLING", "many")
        with pytest.raises(ConfigurationError, match="BAOFIT_OVERSAMPLING"):
            load_config_from_env()
