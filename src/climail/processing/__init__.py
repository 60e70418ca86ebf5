"""Header and body decoding."""

from .dates import parse_date
from .encoded_word import decode
from .formatting import display_line, fit_to_width, format_date

__all__ = ["decode", "parse_date", "display_line", "fit_to_width", "format_date"]
