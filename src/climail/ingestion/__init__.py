"""Inbox access over POP3 and IMAP."""

from .adapter import MailboxAdapter
from .base import MailBackend
from .headers import parse_header_block
from .imap import ImapBackend, ImapState
from .pop3 import Pop3Backend

__all__ = [
    "MailboxAdapter",
    "MailBackend",
    "ImapBackend",
    "ImapState",
    "Pop3Backend",
    "parse_header_block",
]
