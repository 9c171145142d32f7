"""Ready-made combinators for common scalar types carried as JSON."""

from __future__ import annotations

from datetime import UTC
from datetime import date
from datetime import datetime
from enum import Enum
from urllib.parse import SplitResult
from urllib.parse import urlsplit
from uuid import UUID

from .core import Conversion
from .core import Parser
from .core import representing
from .primitives import FLOAT
from .primitives import INT
from .primitives import Number
from .primitives import String

_EXAMPLE_DATETIME = "2001-02-03T04:05:06+00:00"


def _parse_datetime(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(
            f"Expected a date formatted such as {_EXAMPLE_DATETIME}."
        ) from None


def _parse_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError("Expected a date formatted such as 2001-02-03.") from None


def _format_datetime(value: datetime) -> str:
    if not isinstance(value, datetime):
        raise ValueError(f"expected a datetime, got {type(value).__name__}")
    return value.isoformat()


def _format_date(value: date) -> str:
    if not isinstance(value, date):
        raise ValueError(f"expected a date, got {type(value).__name__}")
    return value.isoformat()


def iso_datetime() -> String:
    """An ISO 8601 timestamp string."""
    return String(Conversion(_parse_datetime, _format_datetime))


def iso_date() -> String:
    return String(Conversion(_parse_date, _format_date))


def formatted_datetime(fmt: str) -> String:
    """A timestamp string in the ``strptime``/``strftime`` format ``fmt``."""

    def parse(text: str) -> datetime:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            raise ValueError(
                f"Expected a date formatted as {fmt!r}, got {text!r}."
            ) from None

    def format(value: datetime) -> str:
        if not isinstance(value, datetime):
            raise ValueError(f"expected a datetime, got {type(value).__name__}")
        return value.strftime(fmt)

    return String(Conversion(parse, format))


def _timestamp(value: datetime) -> float:
    if not isinstance(value, datetime):
        raise ValueError(f"expected a datetime, got {type(value).__name__}")
    return value.timestamp()


def epoch_seconds() -> Parser[datetime]:
    """Seconds since 1970-01-01 UTC, as an aware ``datetime``."""
    return Number(FLOAT).map(
        Conversion(lambda seconds: datetime.fromtimestamp(seconds, UTC), _timestamp)
    )


def _parse_url(text: str) -> SplitResult:
    try:
        parts = urlsplit(text)
    except ValueError:
        parts = None
    if parts is None or not parts.scheme or not (parts.netloc or parts.path):
        raise ValueError("Expected a URL.")
    return parts


def _format_url(value: SplitResult) -> str:
    if not isinstance(value, SplitResult):
        raise ValueError(f"expected a SplitResult, got {type(value).__name__}")
    return value.geturl()


def url() -> String:
    """An absolute URL, as a ``urllib.parse.SplitResult``."""
    return String(Conversion(_parse_url, _format_url))


def _parse_uuid(text: str) -> UUID:
    try:
        return UUID(text)
    except ValueError:
        raise ValueError("Expected a UUID.") from None


def _format_uuid(value: UUID) -> str:
    if not isinstance(value, UUID):
        raise ValueError(f"expected a UUID, got {type(value).__name__}")
    return str(value)


def uuid() -> String:
    return String(Conversion(_parse_uuid, _format_uuid))


def enum_values[E: Enum](enum_type: type[E]) -> Parser[E]:
    """Members of ``enum_type`` by raw value: string or integer."""
    raw_values = [member.value for member in enum_type]
    if all(isinstance(raw, str) for raw in raw_values):
        return String(representing(enum_type))
    if all(isinstance(raw, int) and not isinstance(raw, bool) for raw in raw_values):
        return Number(INT).map(representing(enum_type))
    raise TypeError(f"{enum_type.__name__} must have all-str or all-int values")
