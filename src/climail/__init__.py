"""Terminal mail client - POP3/IMAP inboxes in, decoded message listings out."""

# Models
from .models import (
    # Accounts
    Protocol,
    InboxConfig,
    Account,
    # Messages
    MailHeader,
    MailRecord,
    MailBuilder,
    MissingFieldError,
    ParsedEmail,
    # Metrics
    RefreshReport,
)

# Processing
from .processing import decode, parse_date

# Ingestion
from .ingestion import MailboxAdapter, ImapBackend, Pop3Backend

# Mailboxes
from .mailbox import Mailbox, MailboxEntry, MailProxy, MailboxRegistry

# Configuration
from .accounts import AccountFileError, load_accounts
from .config import Config

__version__ = "0.1.0"

__all__ = [
    # Models
    "Protocol",
    "InboxConfig",
    "Account",
    "MailHeader",
    "MailRecord",
    "MailBuilder",
    "MissingFieldError",
    "ParsedEmail",
    "RefreshReport",
    # Components
    "decode",
    "parse_date",
    "MailboxAdapter",
    "ImapBackend",
    "Pop3Backend",
    "Mailbox",
    "MailboxEntry",
    "MailProxy",
    "MailboxRegistry",
    "AccountFileError",
    "load_accounts",
    "Config",
]
