"""Stream load client for Doris tables."""

from .errors import (
    AmbiguousOptionError,
    ConfigurationError,
    MissingRequiredValueError,
    NoReachableBackendError,
    ResponseDecodeError,
    StreamLoaderError,
    UnsupportedValueError,
    ZeroValueOptionError,
)
from .options import (
    StreamLoaderOption,
    build_settings,
    with_be_nodes,
    with_column_separator,
    with_columns,
    with_headers,
    with_label,
    with_load_format,
    with_max_attempts,
    with_max_filter_ratio,
    with_password,
    with_protocol,
    with_retry_delay,
    with_timeout,
    with_username,
)
from .payload import BytesPayloadSource, FilePayloadSource, PayloadSource
from .result import LoadResult
from .settings import LoadSettings
from .stream_loader import StreamLoader

__all__ = [
    "AmbiguousOptionError",
    "ConfigurationError",
    "MissingRequiredValueError",
    "NoReachableBackendError",
    "ResponseDecodeError",
    "StreamLoaderError",
    "UnsupportedValueError",
    "ZeroValueOptionError",
    "StreamLoaderOption",
    "build_settings",
    "with_be_nodes",
    "with_column_separator",
    "with_columns",
    "with_headers",
    "with_label",
    "with_load_format",
    "with_max_attempts",
    "with_max_filter_ratio",
    "with_password",
    "with_protocol",
    "with_retry_delay",
    "with_timeout",
    "with_username",
    "BytesPayloadSource",
    "FilePayloadSource",
    "PayloadSource",
    "LoadResult",
    "LoadSettings",
    "StreamLoader",
]
