"""
Literal values: formatting for filter text and parsing back from tokens.

Formatting rules:
- booleans render as `true` / `false`
- numbers render in decimal form
- strings are single-quoted with embedded quotes doubled (`'O''Brien'`)
- datetimes render in UTC with millisecond precision and a `Z` suffix
- `RawToken` renders verbatim
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from .exceptions import FilterArgumentError
from .policies import DEFAULT_POLICIES, ParserPolicies, QuotePolicy


@dataclass(frozen=True)
class RawToken:
    """
    A raw token inserted into a filter expression without quoting.

    The parser produces these for unquoted literals it does not recognize as
    numbers (field references, `true`, timestamps, ...), so they are emitted
    back exactly as they were read.
    """

    token: str

    def __str__(self) -> str:
        return self.token


Value = bool | int | float | Decimal | str | datetime | date | RawToken

_QUOTES = ("'", '"')
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _escape_string(value: str) -> str:
    """Double every single quote so the literal can be embedded safely."""
    return value.replace("'", "''")


def _format_timestamp(value: datetime) -> str:
    # Naive datetimes are taken to be UTC already
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return f"{value.replace(tzinfo=None).isoformat(timespec='milliseconds')}Z"


def format_value(value: Any) -> str:
    """Format a Python value for use in a filter expression."""
    if isinstance(value, RawToken):
        return value.token
    if value is None:
        raise FilterArgumentError("None is not a valid filter literal", argument=value)
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FilterArgumentError(f"Non-finite number {value!r} has no literal form", argument=value)
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise FilterArgumentError(f"Non-finite number {value!r} has no literal form", argument=value)
        return str(value)
    if isinstance(value, int):
        return str(value)
    # Handle datetime before date (datetime is subclass of date)
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, date):
        return _format_timestamp(datetime.combine(value, time.min))
    if isinstance(value, str):
        return f"'{_escape_string(value)}'"
    raise FilterArgumentError(
        f"Unsupported filter value type: {type(value).__name__}", argument=value
    )


def _is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] in _QUOTES and token[-1] == token[0]


def parse_value(token: str, policies: ParserPolicies | None = None) -> Value:
    """
    Parse a value token read from filter text.

    Returns a `str` for quoted literals, an `int` or `float` for decimal
    numbers, and a `RawToken` for anything else.
    """
    policies = policies or DEFAULT_POLICIES
    if _is_quoted(token):
        quote = token[0]
        inner = token[1:-1]
        if policies.quotes is QuotePolicy.DOUBLED:
            inner = inner.replace(quote * 2, quote)
        return inner
    if _NUMBER_RE.fullmatch(token):
        # Literals with no finite float or int form are kept as raw text
        if any(ch in token for ch in ".eE"):
            number = float(token)
            return number if math.isfinite(number) else RawToken(token)
        try:
            return int(token)
        except ValueError:
            return RawToken(token)
    return RawToken(token)
