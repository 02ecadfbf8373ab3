"""Pydantic types and models shared across ghcreds."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, TypeAlias

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
)

from .datetime import parse_timedelta

__all__ = [
    "CamelCaseModel",
    "HumanTimedelta",
    "UtcDatetime",
    "normalize_datetime",
    "to_camel_case",
]


def to_camel_case(string: str) -> str:
    """Convert a string to camel case.

    Intended for use with Pydantic as an alias generator so that the model can
    be initialized from camel-case input, such as the JSON secrets blob that
    holds the GitHub App credentials.

    Parameters
    ----------
    string
        Input string.

    Returns
    -------
    str
        String converted to camel-case with the first character in lowercase.
    """
    components = string.split("_")
    return components[0] + "".join(c.title() for c in components[1:])


class CamelCaseModel(BaseModel):
    """`pydantic.BaseModel` configured to accept camel-case input.

    The model can be initialized with either camel-case or snake-case keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel_case, populate_by_name=True
    )


def normalize_datetime(v: Any) -> datetime | None:
    """Pydantic field validator for datetime fields.

    Ensures that the resulting datetime object is timezone-aware and in the
    UTC timezone. Integers are interpreted as seconds since epoch.

    Parameters
    ----------
    v
        Field representing a `~datetime.datetime`.

    Returns
    -------
    datetime.datetime or None
        The timezone-aware `~datetime.datetime` or `None` if the input was
        `None`.

    Raises
    ------
    ValueError
        Raised if the input could not be parsed as a `~datetime.datetime`.
    """
    if v is None:
        return v
    elif isinstance(v, int):
        return datetime.fromtimestamp(v, tz=UTC)
    elif not isinstance(v, datetime):
        raise ValueError("Must be a datetime or seconds since epoch")
    elif v.tzinfo and v.tzinfo.utcoffset(v) is not None:
        return v.astimezone(UTC)
    else:
        return v.replace(tzinfo=UTC)


def _validate_human_timedelta(v: str | float | timedelta) -> float | timedelta:
    if not isinstance(v, str):
        return v
    try:
        return float(v)
    except ValueError:
        return parse_timedelta(v)


HumanTimedelta: TypeAlias = Annotated[
    timedelta,
    BeforeValidator(_validate_human_timedelta),
    PlainSerializer(
        lambda t: t.total_seconds(), return_type=float, when_used="json"
    ),
]
"""Parse a human-readable string into a `datetime.timedelta`.

Accepts as input an integer or float (or stringified integer or float) number
of seconds, an already-parsed `~datetime.timedelta`, or a string such as
``90s``, ``2m`` or ``1h 5m``. See `ghcreds.datetime.parse_timedelta` for the
supported abbreviations.
"""

UtcDatetime: TypeAlias = Annotated[
    datetime, AfterValidator(normalize_datetime)
]
"""Coerce a `~datetime.datetime` to UTC.

Accepts as input all of the normal Pydantic representations of a
`~datetime.datetime`, but then forces the result to be timezone-aware and in
UTC.
"""
