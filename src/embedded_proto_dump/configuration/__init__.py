"""Configuration domain exports."""

from .loader import ConfigurationError, load_configuration
from .runtime_settings import (
    DEFAULT_OUTPUT_SETTINGS,
    DEFAULT_SCANNER_SETTINGS,
    Configuration,
    OutputSettings,
    RenderFormat,
    RenderingSettings,
    ResolutionSettings,
    ScannerSettings,
)

__all__ = [
    "Configuration",
    "OutputSettings",
    "RenderFormat",
    "RenderingSettings",
    "ResolutionSettings",
    "ScannerSettings",
    "DEFAULT_OUTPUT_SETTINGS",
    "DEFAULT_SCANNER_SETTINGS",
    "ConfigurationError",
    "load_configuration",
]
