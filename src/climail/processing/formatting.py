"""Fixed-width rendering helpers for mailbox listings."""

from datetime import datetime
from typing import Optional

DATE_WIDTH = 20
SENDER_WIDTH = 60
SUBJECT_WIDTH = 100


def fit_to_width(text: str, width: int) -> str:
    """Pad ``text`` with spaces, or cut it down and mark the cut with `` ...``."""
    if len(text) > width:
        return text[: width - 4] + " ..."
    return text.ljust(width)


def format_date(value: datetime) -> str:
    return value.strftime("%d.%m.%Y, %H:%M:%S")


def display_line(timestamp: Optional[datetime], sender: str, subject: str) -> str:
    """Render the three-column summary used for listing and matching messages.

    Args:
        timestamp: Message timestamp, rendered as ``<date>`` if missing
        sender: Sender column
        subject: Subject column

    Returns:
        str: ``date |  sender |  subject`` with fixed column widths
    """
    date = format_date(timestamp) if timestamp is not None else "<date>"
    return (
        f"{fit_to_width(date, DATE_WIDTH)} |  "
        f"{fit_to_width(sender, SENDER_WIDTH)} |  "
        f"{fit_to_width(subject, SUBJECT_WIDTH)}"
    )
