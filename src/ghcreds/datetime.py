"""Date and time manipulation utility functions."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from typing import overload

_TIMEDELTA_PATTERN = re.compile(
    r"((?P<hours>\d+?)\s*(hours|hour|hr|h))?\s*"
    r"((?P<minutes>\d+?)\s*(minutes|minute|mins|min|m))?\s*"
    r"((?P<seconds>\d+?)\s*(seconds|second|secs|sec|s))?$"
)
"""Regular expression pattern for a time duration."""

__all__ = [
    "current_datetime",
    "format_datetime_for_logging",
    "parse_timedelta",
]


def current_datetime(*, microseconds: bool = False) -> datetime:
    """Construct a `~datetime.datetime` for the current time.

    All `~datetime.datetime` objects handled by ghcreds are time zone aware
    and in UTC, matching the ``expires_at`` timestamps returned by GitHub.

    Parameters
    ----------
    microseconds
        Whether to include microseconds. Expiry checks should set this to
        `True` so that truncation never makes a token look fresher than it
        is.

    Returns
    -------
    datetime.datetime
        The current time forced to UTC and optionally with the microseconds
        field zeroed.
    """
    result = datetime.now(tz=UTC)
    if microseconds:
        return result
    else:
        return result.replace(microsecond=0)


@overload
def format_datetime_for_logging(timestamp: datetime) -> str: ...


@overload
def format_datetime_for_logging(timestamp: None) -> None: ...


def format_datetime_for_logging(timestamp: datetime | None) -> str | None:
    """Format a datetime for logging and human readabilty.

    Parameters
    ----------
    timestamp
        Object to format. Must be in UTC or timezone-naive (in which case it's
        assumed to be in UTC).

    Returns
    -------
    str or None
        The datetime in format ``YYYY-MM-DD HH:MM:SS[.sss]`` with milliseconds
        added if and only if the microseconds portion of ``timestamp`` is not
        0. There will be no ``T`` separator or time zone information.

    Raises
    ------
    ValueError
        Raised if the argument is in a time zone other than UTC.
    """
    if timestamp:
        if timestamp.utcoffset() not in (None, timedelta(seconds=0)):
            raise ValueError(f"datetime {timestamp} not in UTC")
        if timestamp.microsecond:
            result = timestamp.isoformat(sep=" ", timespec="milliseconds")
        else:
            result = timestamp.isoformat(sep=" ", timespec="seconds")
        return result.split("+")[0]
    else:
        return None


def parse_timedelta(text: str) -> timedelta:
    """Parse a string into a `datetime.timedelta`.

    Expects a string consisting of one or more sequences of numbers and
    duration abbreviations, separated by optional whitespace. The supported
    abbreviations are:

    - Hour: ``hours``, ``hour``, ``hr``, ``h``
    - Minute: ``minutes``, ``minute``, ``mins``, ``min``, ``m``
    - Second: ``seconds``, ``second``, ``secs``, ``sec``, ``s``

    If several are present, they must be given in the above order, so
    ``1m30s`` is valid but ``30s1m`` is not. Longer units are not supported
    since nothing ghcreds handles lives longer than an hour.

    Parameters
    ----------
    text
        Input string.

    Returns
    -------
    datetime.timedelta
        Converted `datetime.timedelta`.

    Raises
    ------
    ValueError
        Raised if the string is not in a valid format.
    """
    m = _TIMEDELTA_PATTERN.match(text.strip())
    if m is None or not text.strip():
        raise ValueError(f"Could not parse {text!r} as a time duration")
    td_args = {k: int(v) for k, v in m.groupdict().items() if v is not None}
    return timedelta(**td_args)
