"""
Logging setup and wall-clock timing of the fit stages.
"""

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(funcName)s:%(lineno)d - %(message)s'

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ('matplotlib', 'astropy', 'iminuit')

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """Configure the root logger for console output and an optional log file.

    Calling it again replaces the previous handlers.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=getattr(logging, log_level.upper()), handlers=handlers,
                        format=LOG_FORMAT, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class PerformanceMonitor:
    """Accumulate wall-clock durations of named stages (loading, fit, dump)."""

    def __init__(self):
        self.metrics: Dict[str, List[float]] = {}

    @contextmanager
    def timer(self, stage: str):
        """Time the enclosed block, recording it even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_timing(stage, time.perf_counter() - start)

    def record_timing(self, stage: str, duration: float) -> None:
        self.metrics.setdefault(stage, []).append(duration)

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """Per-stage count, mean, min, max and total duration in seconds."""
        summary = {}
        for stage, durations in self.metrics.items():
            d = np.asarray(durations)
            summary[stage] = {'count': d.size, 'mean': float(d.mean()), 'min': float(d.min()),
                              'max': float(d.max()), 'total': float(d.sum())}
        return summary

    def log_summary(self) -> None:
        logger.info("Timing summary:")
        for stage, stats in self.get_summary().items():
            logger.info(f"  {stage}: {format_duration(stats['total'])} "
                        f"over {stats['count']} call(s)")


def format_duration(seconds: float) -> str:
    """Render a duration as ``12.3s``, ``4m 5s`` or ``1h 2m``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m {seconds:.0f}s"
    hours, minutes = divmod(minutes, 60)
    return f"{int(hours)}h {int(minutes)}m"
