from .logging_utils import setup_logging, PerformanceMonitor, format_duration

__all__ = [
    "setup_logging",
    "PerformanceMonitor",
    "format_duration",
]
