"""
Plain-text input and output for the BAO fit.
"""

from .readers import (
    read_multipole_table,
    load_multipoles,
    read_params_file,
    read_covariance_file,
    load_dataset,
    write_dump,
)

__all__ = [
    "read_multipole_table",
    "load_multipoles",
    "read_params_file",
    "read_covariance_file",
    "load_dataset",
    "write_dump",
]
