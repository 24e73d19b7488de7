from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated
from urllib.parse import quote

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    field_serializer,
    field_validator,
)

from doris_loader import constants
from doris_loader.enums import FORMAT_HEADER_VALUES, LoadFormat, Protocol

HeaderValue = str | bool | int | float


def header_value(value: HeaderValue) -> str:
    """Render a header value the way the stream load API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LoadSettings(BaseModel):
    """Stream load settings produced by ``build_settings``.

    Settings are immutable once built and safe to share between loaders.
    """

    model_config = ConfigDict(frozen=True)

    # Required settings
    fe_nodes: Annotated[tuple[str, ...], Field(min_length=1)]
    database: Annotated[str, Field(min_length=1)]
    table: Annotated[str, Field(min_length=1)]

    # Optional settings with defaults
    be_nodes: tuple[str, ...] = ()
    protocol: Protocol
    load_format: LoadFormat
    username: str = ""
    password: str = ""
    columns: tuple[str, ...] | None = None
    column_separator: str | None = None
    label: str | None = None
    max_filter_ratio: Annotated[float, Field(ge=0, le=1)] | None = None
    headers: Mapping[str, HeaderValue] | None = None
    max_attempts: PositiveInt = constants.DEFAULT_MAX_ATTEMPTS
    retry_delay: NonNegativeFloat = constants.DEFAULT_RETRY_DELAY
    timeout: PositiveFloat = constants.DEFAULT_TIMEOUT

    @field_validator("headers", mode="after")
    @classmethod
    def freeze_headers(
        cls, headers: Mapping[str, HeaderValue] | None
    ) -> Mapping[str, HeaderValue] | None:
        """Store a read-only copy so shared settings cannot be changed."""
        if headers is None:
            return None
        return MappingProxyType(dict(headers))

    @field_serializer("headers")
    def serialize_headers(
        self, headers: Mapping[str, HeaderValue] | None
    ) -> dict[str, HeaderValue] | None:
        return None if headers is None else dict(headers)

    @property
    def auth(self) -> tuple[str, str] | None:
        """Basic-Auth credentials, or None when no username is configured."""
        if not self.username:
            return None
        return self.username, self.password

    def stream_load_url(self, node: str) -> str:
        """Build the stream load URL for a frontend node."""
        path = constants.STREAM_LOAD_PATH.format(
            database=self.database, table=self.table
        )
        return f"{self.protocol}://{node}{path}"

    def backend_url(self, node: str) -> str:
        """Build the stream load URL for a backend node with embedded credentials."""
        path = constants.STREAM_LOAD_PATH.format(
            database=self.database, table=self.table
        )
        userinfo = f"{quote(self.username, safe='')}:{quote(self.password, safe='')}"
        return f"{self.protocol}://{userinfo}@{node}{path}"

    def stream_load_headers(self) -> dict[str, str]:
        """Flatten the settings into stream load HTTP headers.

        Typed settings are written after the free-form headers so they win on
        a name clash.
        """
        name, value = constants.EXPECT_HEADER
        headers = {name: value}

        for key, value in (self.headers or {}).items():
            headers[key] = header_value(value)

        headers["format"] = FORMAT_HEADER_VALUES[self.load_format]
        if self.load_format == "inline_json":
            headers["read_json_by_line"] = header_value(True)

        if self.column_separator is not None:
            headers["column_separator"] = self.column_separator
        elif self.load_format in ("csv", "csv_with_names"):
            headers["column_separator"] = constants.DEFAULT_COLUMN_SEPARATOR

        if self.columns is not None:
            headers["columns"] = ",".join(self.columns)
        if self.label is not None:
            headers["label"] = self.label
        if self.max_filter_ratio is not None:
            headers["max_filter_ratio"] = header_value(self.max_filter_ratio)

        return headers
