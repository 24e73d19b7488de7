"""Exceptions raised while building settings and loading data."""

import requests


class StreamLoaderError(Exception):
    """Base exception for the stream loader."""


class ConfigurationError(StreamLoaderError):
    """Exception raised when the loader settings cannot be built.

    The partially built draft is kept on ``draft`` so callers can inspect what
    had been applied before the failing option. It must not be used to load.
    """

    draft = None


class MissingRequiredValueError(ConfigurationError):
    """Exception raised when a required value is empty."""

    def __init__(self, field: str):
        super().__init__(f"missing required value: {field}")
        self.field = field


class AmbiguousOptionError(ConfigurationError):
    """Exception raised when an option already holds a different value."""

    def __init__(self, field: str, current, provided):
        super().__init__(
            f"ambiguous option: {field}. are you going to use {current} or {provided}?"
        )
        self.field = field
        self.current = current
        self.provided = provided


class ZeroValueOptionError(ConfigurationError):
    """Exception raised when an enumerated option receives an empty value."""

    def __init__(self, field: str):
        super().__init__(f"option is zero value: {field}")
        self.field = field


class UnsupportedValueError(ConfigurationError):
    """Exception raised for an unrecognized or out of range option value."""

    def __init__(self, field: str, value):
        super().__init__(f"unsupported value: {value}")
        self.field = field
        self.value = value


class ResponseDecodeError(StreamLoaderError):
    """Exception raised when the stream load response is not a valid result."""


class NoReachableBackendError(requests.ConnectionError):
    """Exception raised when a redirect cannot be resolved to any backend node."""
