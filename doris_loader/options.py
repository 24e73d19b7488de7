"""Build stream load settings from required values and option functions.

Each ``with_*`` function returns an option that mutates a ``SettingsDraft``.
Options can be applied in any order and any number of times as long as they
agree: applying an option again with the same value is a no-op, applying it
with a different value raises ``AmbiguousOptionError``. Nothing is ever
silently overwritten, except header entries passed to ``with_headers``.

    settings = build_settings(
        ["127.0.0.1:8030"],
        "my_db",
        "users",
        with_username("root"),
        with_load_format("csv"),
        with_columns(["name", "age"]),
    )
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import timedelta

from doris_loader.enums import (
    DEFAULT_LOAD_FORMAT,
    DEFAULT_PROTOCOL,
    LOAD_FORMATS,
    PROTOCOLS,
    LoadFormat,
    Protocol,
)
from doris_loader.errors import (
    AmbiguousOptionError,
    ConfigurationError,
    MissingRequiredValueError,
    UnsupportedValueError,
    ZeroValueOptionError,
)
from doris_loader.settings import HeaderValue, LoadSettings

logger = logging.getLogger(__name__)


def _as_tuple(values: Iterable[str]) -> tuple[str, ...] | str:
    """Copy a list of names into a tuple, leaving a single string untouched.

    Iterating a string would split "127.0.0.1:8030" into characters, so a
    string is returned unchanged for the caller to reject.
    """
    if isinstance(values, str):
        return values
    return tuple(values)


def _check_not_string(field: str, values: tuple[str, ...] | str) -> None:
    if isinstance(values, str):
        raise UnsupportedValueError(field, values)


class SettingsDraft:
    """Mutable settings under construction.

    ``None`` marks a field that no option has set yet. Defaults are only
    filled in when the draft is frozen, so an explicit value equal to the
    default is still recognized as set.
    """

    def __init__(self, fe_nodes: list[str], database: str, table: str):
        # a bare string is kept as is and rejected by the required field check
        self.fe_nodes = _as_tuple(fe_nodes or ())
        self.database = database
        self.table = table

        self.be_nodes: tuple[str, ...] | None = None
        self.protocol: str | None = None
        self.load_format: str | None = None
        self.username: str | None = None
        self.password: str | None = None
        self.columns: tuple[str, ...] | None = None
        self.column_separator: str | None = None
        self.label: str | None = None
        self.max_filter_ratio: float | None = None
        self.headers: dict[str, HeaderValue] | None = None
        self.max_attempts: int | None = None
        self.retry_delay: float | None = None
        self.timeout: float | None = None

    def freeze(self) -> LoadSettings:
        """Turn the draft into immutable settings, filling in defaults."""
        values = {
            "fe_nodes": self.fe_nodes,
            "database": self.database,
            "table": self.table,
            "be_nodes": self.be_nodes,
            "protocol": self.protocol,
            "load_format": self.load_format,
            "username": self.username,
            "password": self.password,
            "columns": self.columns,
            "column_separator": self.column_separator,
            "label": self.label,
            "max_filter_ratio": self.max_filter_ratio,
            "headers": self.headers,
            "max_attempts": self.max_attempts,
            "retry_delay": self.retry_delay,
            "timeout": self.timeout,
        }
        # Optional fields take the model defaults when unset. Columns, label,
        # separator, ratio and headers default to None anyway.
        return LoadSettings(**{k: v for k, v in values.items() if v is not None})


StreamLoaderOption = Callable[[SettingsDraft], None]


def _check_ambiguous(field: str, current, provided) -> None:
    if current is not None and current != provided:
        raise AmbiguousOptionError(field, current, provided)


def with_load_format(load_format: LoadFormat) -> StreamLoaderOption:
    """Set the data format of the loaded payload.

    Raises:
        AmbiguousOptionError: A different format was already set
        ZeroValueOptionError: The format is empty
        UnsupportedValueError: The format is not one of LOAD_FORMATS
    """

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("load format", draft.load_format, load_format)
        if not load_format:
            raise ZeroValueOptionError("load format")
        if load_format not in LOAD_FORMATS:
            raise UnsupportedValueError("load format", load_format)

        draft.load_format = load_format

    return option


def with_protocol(protocol: Protocol) -> StreamLoaderOption:
    """Set the transport scheme, http or https.

    Raises:
        AmbiguousOptionError: A different protocol was already set
        ZeroValueOptionError: The protocol is empty
        UnsupportedValueError: The protocol is not one of PROTOCOLS
    """

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("protocol", draft.protocol, protocol)
        if not protocol:
            raise ZeroValueOptionError("protocol")
        if protocol not in PROTOCOLS:
            raise UnsupportedValueError("protocol", protocol)

        draft.protocol = protocol

    return option


def with_headers(headers: Mapping[str, HeaderValue]) -> StreamLoaderOption:
    """Set extra stream load headers.

    The first call adopts the mapping as is, later calls merge into it with
    the newer values winning per key.
    """

    def option(draft: SettingsDraft) -> None:
        if draft.headers is None:
            draft.headers = dict(headers)
            return

        draft.headers.update(headers)

    return option


def with_username(username: str) -> StreamLoaderOption:
    """Set the username for Basic-Auth."""

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("username", draft.username, username)
        draft.username = username

    return option


def with_password(password: str) -> StreamLoaderOption:
    """Set the password for Basic-Auth. An empty password is valid."""

    def option(draft: SettingsDraft) -> None:
        if draft.password is not None and draft.password != password:
            # never echo passwords in error messages
            raise AmbiguousOptionError("password", "***", "***")
        draft.password = password

    return option


def with_be_nodes(be_nodes: Iterable[str]) -> StreamLoaderOption:
    """Set the backend nodes redirects are resolved to, in probing order."""
    nodes = _as_tuple(be_nodes)

    def option(draft: SettingsDraft) -> None:
        _check_not_string("backend nodes", nodes)
        _check_ambiguous("backend nodes", draft.be_nodes, nodes)
        if not nodes:
            raise MissingRequiredValueError("backend nodes")

        draft.be_nodes = nodes

    return option


def with_columns(columns: Iterable[str]) -> StreamLoaderOption:
    """Set the column names the payload maps to, in payload order."""
    names = _as_tuple(columns)

    def option(draft: SettingsDraft) -> None:
        _check_not_string("columns", names)
        _check_ambiguous("columns", draft.columns, names)
        if not names:
            raise MissingRequiredValueError("columns")

        draft.columns = names

    return option


def with_max_attempts(max_attempts: int) -> StreamLoaderOption:
    """Set how many attempts a load makes before giving up."""

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("max attempts", draft.max_attempts, max_attempts)
        draft.max_attempts = max_attempts

    return option


def with_retry_delay(delay: float | timedelta) -> StreamLoaderOption:
    """Set the delay between attempts, in seconds or as a timedelta."""
    seconds = delay.total_seconds() if isinstance(delay, timedelta) else delay

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("retry delay", draft.retry_delay, seconds)
        draft.retry_delay = seconds

    return option


def with_timeout(timeout: float) -> StreamLoaderOption:
    """Set the timeout of a single HTTP exchange in seconds."""

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("timeout", draft.timeout, timeout)
        draft.timeout = timeout

    return option


def with_label(label: str) -> StreamLoaderOption:
    """Set the load label the service uses to reject duplicate loads."""

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("label", draft.label, label)
        if not label:
            raise MissingRequiredValueError("label")

        draft.label = label

    return option


def with_column_separator(separator: str) -> StreamLoaderOption:
    """Set the column separator of CSV payloads."""

    def option(draft: SettingsDraft) -> None:
        _check_ambiguous("column separator", draft.column_separator, separator)
        if not separator:
            raise MissingRequiredValueError("column separator")

        draft.column_separator = separator

    return option


def with_max_filter_ratio(ratio: float) -> StreamLoaderOption:
    """Set the fraction of rows the service may filter out before failing.

    Raises:
        UnsupportedValueError: The ratio is outside [0, 1], checked first
        AmbiguousOptionError: A different ratio was already set
    """

    def option(draft: SettingsDraft) -> None:
        if not 0 <= ratio <= 1:
            raise UnsupportedValueError("max filter ratio", ratio)
        _check_ambiguous("max filter ratio", draft.max_filter_ratio, ratio)

        draft.max_filter_ratio = ratio

    return option


def _check_required_fields(draft: SettingsDraft) -> None:
    if len(draft.fe_nodes) == 0:
        raise MissingRequiredValueError("frontend nodes")
    _check_not_string("frontend nodes", draft.fe_nodes)
    if not draft.database:
        raise MissingRequiredValueError("database")
    if not draft.table:
        raise MissingRequiredValueError("table")


def _apply(draft: SettingsDraft, option: StreamLoaderOption) -> None:
    try:
        option(draft)
    except ConfigurationError as e:
        e.draft = draft
        raise


def build_settings(
    fe_nodes: list[str],
    database: str,
    table: str,
    *options: StreamLoaderOption,
) -> LoadSettings:
    """Build stream load settings.

    Args:
        fe_nodes: Frontend endpoints, e.g. "127.0.0.1:8030"
        database: Database name
        table: Table name
        *options: Options applied in the given order

    Returns:
        Immutable LoadSettings

    Raises:
        ConfigurationError: On the first required value or option that fails;
            the partially built draft is available on ``draft``
        pydantic.ValidationError: If a numeric setting is out of range
    """
    draft = SettingsDraft(fe_nodes, database, table)
    _apply(draft, _check_required_fields)

    for option in options:
        _apply(draft, option)

    # defaults always go last so they never conflict with caller options
    if draft.load_format is None:
        _apply(draft, with_load_format(DEFAULT_LOAD_FORMAT))
    if draft.protocol is None:
        _apply(draft, with_protocol(DEFAULT_PROTOCOL))

    settings = draft.freeze()
    logger.debug(
        "Built stream load settings for %s.%s (format: %s, frontends: %s)",
        settings.database,
        settings.table,
        settings.load_format,
        ", ".join(settings.fe_nodes),
    )
    return settings
