"""
Validation of openEHR DV_TIME values.

DV_TIME uses ISO 8601 local time. Accepted inputs:

* Extended (preferred): ``hh:mm:ss[(,|.)sss][Z|±hh[:mm]]``, returned unchanged
* Compact: ``hhmmss[(,|.)sss][Z|±hh[mm]]``, rewritten to the extended form
* Shorthand ``hh:mm`` and ``hh``, padded with zero minutes/seconds
"""

import logging
import re

logger = logging.getLogger(__name__)

_HOUR = r"(?:[01][0-9]|2[0-3])"
_MINUTE = r"[0-5][0-9]"

EXTENDED_TIME = re.compile(
    rf"{_HOUR}:{_MINUTE}:{_MINUTE}(?:[,.][0-9]+)?"
    rf"(?:Z|[+-]{_HOUR}(?::?{_MINUTE})?)?"
)

COMPACT_TIME = re.compile(
    rf"(?P<hours>{_HOUR})(?P<minutes>{_MINUTE})(?P<seconds>{_MINUTE})"
    r"(?P<fraction>[,.][0-9]+)?"
    rf"(?P<tz>Z|(?P<tz_sign>[+-])(?P<tz_hours>{_HOUR})(?P<tz_minutes>{_MINUTE})?)?"
)

HOUR_MINUTE_TIME = re.compile(rf"{_HOUR}:{_MINUTE}")
HOUR_TIME = re.compile(_HOUR)


def _compact_to_extended(match: re.Match[str]) -> str:
    formatted = f"{match['hours']}:{match['minutes']}:{match['seconds']}"

    if match["fraction"]:
        formatted += match["fraction"]

    if match["tz"] == "Z":
        formatted += "Z"
    elif match["tz_sign"]:
        formatted += f"{match['tz_sign']}{match['tz_hours']}"
        if match["tz_minutes"]:
            formatted += f":{match['tz_minutes']}"

    return formatted


def validate_and_format_dv_time(time_str: str | None) -> str | None:
    """
    Validates a time of day and returns it in DV_TIME extended form.

    Args:
        time_str: The time string to validate

    Returns:
        The validated/formatted time string, or None if it cannot be
        interpreted as a local time
    """
    if not time_str:
        return None

    if EXTENDED_TIME.fullmatch(time_str):
        return time_str

    compact = COMPACT_TIME.fullmatch(time_str)
    if compact:
        return _compact_to_extended(compact)

    if HOUR_MINUTE_TIME.fullmatch(time_str):
        return f"{time_str}:00"

    if HOUR_TIME.fullmatch(time_str):
        return f"{time_str}:00:00"

    logger.debug(f"Time value '{time_str}' is not an ISO 8601 local time")
    return None
