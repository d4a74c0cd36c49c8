"""RasterPages package."""

from rasterpages.exceptions import (
    DependencyError,
    ExtractionFailedError,
    ExtractionTimeoutError,
    InvalidPageSpecError,
    PackageError,
    PageCountError,
    RollingOrderError,
    RollingSourceError,
    SettingsError,
)
from rasterpages.logging import configure_logging, get_logger
from rasterpages.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("rasterpages")

__all__ = [
    "DependencyError",
    "ExtractionFailedError",
    "ExtractionTimeoutError",
    "InvalidPageSpecError",
    "PackageError",
    "PageCountError",
    "RollingOrderError",
    "RollingSourceError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
