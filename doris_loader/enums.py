"""Closed sets of values accepted by the loader options."""

from typing import Literal, get_args

LoadFormat = Literal["inline_json", "csv", "csv_with_names"]
Protocol = Literal["http", "https"]

LOAD_FORMATS: tuple[str, ...] = get_args(LoadFormat)
PROTOCOLS: tuple[str, ...] = get_args(Protocol)

DEFAULT_LOAD_FORMAT: LoadFormat = "inline_json"
DEFAULT_PROTOCOL: Protocol = "http"

# Value of the "format" stream load header for each load format
FORMAT_HEADER_VALUES: dict[str, str] = {
    "inline_json": "json",
    "csv": "csv",
    "csv_with_names": "csv_with_names",
}

__all__ = [
    "LoadFormat",
    "Protocol",
    "LOAD_FORMATS",
    "PROTOCOLS",
    "DEFAULT_LOAD_FORMAT",
    "DEFAULT_PROTOCOL",
    "FORMAT_HEADER_VALUES",
]
