"""Best-effort parsing of RFC 822 style ``Date`` header values."""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"[0-9]+")
OFFSET_PATTERN = re.compile(r"[+-]?[0-9]+")

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def _parse_offset(token: str) -> timezone:
    # "+0130" -> +1h30m, "-0745" -> -7h45m
    if not OFFSET_PATTERN.fullmatch(token):
        raise ValueError(f"malformed offset: {token}")
    value = int(token)
    sign = -1 if value < 0 else 1
    hours, minutes = divmod(abs(value), 100)
    if minutes >= 60:
        raise ValueError(f"offset minutes out of range: {token}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_date(text: str) -> Optional[datetime]:
    """Parse a date such as ``Wed, 04 Dec 2019 10:02:08 +0000``.

    Tokens are read by position: day, month abbreviation, year, H:M:S
    and a signed HHMM offset. The leading weekday is ignored.

    Args:
        text: Raw ``Date`` header value

    Returns:
        Optional[datetime]: Timezone-aware timestamp, or None if the value
        does not have the expected shape
    """
    tokens = text.split()
    if len(tokens) < 6:
        return None

    month = MONTHS.get(tokens[2].lower())
    if month is None:
        return None

    time_tokens = tokens[4].split(":")
    if len(time_tokens) != 3:
        return None

    numbers = [tokens[1], tokens[3], *time_tokens]
    if not all(NUMBER_PATTERN.fullmatch(t) for t in numbers):
        return None

    try:
        day = int(tokens[1])
        year = int(tokens[3])
        hour, minute, second = (int(t) for t in time_tokens)
        tzinfo = _parse_offset(tokens[5])
        return datetime(year, month, day, hour, minute, second, tzinfo=tzinfo)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Could not parse date {text!r}: {e}")
        return None
