"""Utility functions for DIP-ML."""

from dip_ml.utils.logging import (
    configure_cli_logging,
    log_section,
    setup_logger,
    verbosity_to_level,
)
from dip_ml.utils.serialization import load_joblib, load_json, save_joblib, save_json

__all__ = [
    "setup_logger",
    "configure_cli_logging",
    "log_section",
    "verbosity_to_level",
    "save_joblib",
    "load_joblib",
    "save_json",
    "load_json",
]
