"""Local mailbox views."""

from .mailbox import Mailbox, MailboxEntry
from .proxy import MailProxy
from .registry import MailboxRegistry

__all__ = ["Mailbox", "MailboxEntry", "MailProxy", "MailboxRegistry"]
