"""Exceptions raised for misuse of the converter (never for report contents)."""


class JestJunitError(Exception):
    """Base class for converter errors."""


class ConfigError(JestJunitError):
    """Invalid reporter configuration."""


class TemplateError(JestJunitError):
    """A template function returned something other than a string."""


class PropertiesProviderError(JestJunitError):
    """A properties file is missing its function or returned the wrong shape."""
