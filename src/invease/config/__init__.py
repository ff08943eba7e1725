"""
Configuration module
"""

from invease.config.invease_config import (
    InveaseConfig,
    StorageBackend,
    LOG_LEVELS,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from invease.config.config_loader import ConfigLoader
from invease.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "InveaseConfig",
    "StorageBackend",
    "LOG_LEVELS",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
