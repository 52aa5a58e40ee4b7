"""Type definitions for configuration system."""


class ConfigError(Exception):
    """Base exception for configuration-related errors."""

    pass


class ConfigLoadError(ConfigError):
    """Exception raised when configuration loading fails."""

    pass
