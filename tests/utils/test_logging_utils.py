import logging

import pytest

from baofit.utils.logging_utils import PerformanceMonitor, format_duration, setup_logging


class TestPerformanceMonitor:
    def test_timer_records(self):
        monitor = PerformanceMonitor()
        with monitor.timer("fit"):
            pass
        with monitor.timer("fit"):
            pass
        summary = monitor.get_summary()
        assert summary["fit"]["count"] == 2
        assert summary["fit"]["total"] >= 0

    def test_timer_records_on_error(self):
        monitor = PerformanceMonitor()
        with pytest.raises(RuntimeError):
            with monitor.timer("dump"):
                raise RuntimeError("boom")
        assert monitor.get_summary()["dump"]["count"] == 1


@pytest.mark.parametrize("seconds, expected", [
    (1.25, "1.2s"),
    (75, "1m 15s"),
    (3725, "1h 2m"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / "fit.log"
    setup_logging("DEBUG", log_file)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
    setup_logging("INFO")
