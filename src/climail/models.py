"""Pydantic models for accounts, message headers and retrieved messages."""

from datetime import datetime, timezone
from email.utils import parseaddr
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .processing.dates import parse_date
from .processing.encoded_word import decode
from .processing.formatting import display_line

POP3_PORT = 995
IMAP_PORT = 993


# ============================================================================
# Account Models
# ============================================================================


class Protocol(str, Enum):
    """Inbox protocols a mailbox can be read with."""

    POP3 = "pop3"
    IMAP = "imap"


class InboxConfig(BaseModel):
    """Resolved connection target for an inbox."""

    protocol: Protocol
    host: str
    port: int

    model_config = ConfigDict(frozen=True)

    @classmethod
    def pop3(cls, host: str) -> "InboxConfig":
        return cls(protocol=Protocol.POP3, host=host, port=POP3_PORT)

    @classmethod
    def imap(cls, host: str) -> "InboxConfig":
        return cls(protocol=Protocol.IMAP, host=host, port=IMAP_PORT)


class Account(BaseModel):
    """Mail account as stored in the account file."""

    pop3_domain: Optional[str] = None
    imap_domain: Optional[str] = None
    smtp_domain: str
    name: str = Field(description="Login name")
    password: str
    shortcut: Optional[str] = Field(None, description="Lookup key, defaults to the login name")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _exactly_one_inbox(self) -> "Account":
        if (self.pop3_domain is None) == (self.imap_domain is None):
            raise ValueError("exactly one of pop3_domain or imap_domain is required")
        return self

    @property
    def inbox(self) -> InboxConfig:
        if self.pop3_domain is not None:
            return InboxConfig.pop3(self.pop3_domain)
        return InboxConfig.imap(self.imap_domain)

    @property
    def key(self) -> str:
        return self.shortcut if self.shortcut is not None else self.name

    def describe(self) -> str:
        inbox = self.inbox
        label = "POP3 Domain" if inbox.protocol is Protocol.POP3 else "IMAP Domain"
        return (
            f'Account "{self.name}"\n'
            f"\t{label}:\t{inbox.host}\n"
            f"\tSMTP Domain:\t{self.smtp_domain}\n"
            f"\tPassword:\t{'*' * len(self.password)}\n"
            f"\tShortcut:\t{self.shortcut or '-'}"
        )


# ============================================================================
# Message Models
# ============================================================================


class MissingFieldError(ValueError):
    """Raised when a message is built without one of its required fields."""

    def __init__(self, field: str):
        super().__init__(f"missing field: {field}")
        self.field = field


class MailRecord(BaseModel):
    """Fully retrieved message."""

    from_address: str
    to: list[str]
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    subject: str
    text: str
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    def get_info(self) -> str:
        return display_line(self.timestamp, self.from_address, self.subject)

    def render(self) -> str:
        return (
            f"From:\t{self.from_address}\n"
            f"To:\t{', '.join(self.to)}\n"
            f"Cc:\t{', '.join(self.cc)}\n"
            f"Bcc:\t{', '.join(self.bcc)}\n"
            f"Subject:\t{self.subject}\n"
            f"Text:\n{self.text}"
        )

    def create_reply(self) -> "MailBuilder":
        """Start a reply draft addressed to the sender of this message."""
        builder = MailBuilder()
        builder.to([_bare_address(self.from_address)]).subject(f"Re: {self.subject}")
        if self.to:
            builder.from_(_bare_address(self.to[0]))
        return builder


def _bare_address(value: str) -> str:
    _, address = parseaddr(value)
    return address or value


class MailBuilder:
    """Mutable draft of a message; ``build()`` checks the required fields."""

    REQUIRED = ("from", "to", "subject", "text")

    def __init__(self):
        self.timestamp: Optional[datetime] = None
        self.from_address: Optional[str] = None
        self.to_addresses: Optional[list[str]] = None
        self.cc_addresses: Optional[list[str]] = None
        self.bcc_addresses: Optional[list[str]] = None
        self.subject_text: Optional[str] = None
        self.body_text: Optional[str] = None

    def date(self, value: datetime) -> "MailBuilder":
        self.timestamp = value
        return self

    def from_(self, value: str) -> "MailBuilder":
        self.from_address = value
        return self

    def to(self, value: list[str]) -> "MailBuilder":
        self.to_addresses = list(value)
        return self

    def cc(self, value: list[str]) -> "MailBuilder":
        self.cc_addresses = list(value)
        return self

    def bcc(self, value: list[str]) -> "MailBuilder":
        self.bcc_addresses = list(value)
        return self

    def subject(self, value: str) -> "MailBuilder":
        self.subject_text = value
        return self

    def text(self, value: str) -> "MailBuilder":
        self.body_text = value
        return self

    def build(self) -> MailRecord:
        """Build the message.

        Returns:
            MailRecord: The finished message

        Raises:
            MissingFieldError: If from, to, subject or text is unset
        """
        values = {
            "from": self.from_address,
            "to": self.to_addresses,
            "subject": self.subject_text,
            "text": self.body_text,
        }
        for field in self.REQUIRED:
            if values[field] is None:
                raise MissingFieldError(field)

        return MailRecord(
            from_address=self.from_address,
            to=self.to_addresses,
            cc=self.cc_addresses or [],
            bcc=self.bcc_addresses or [],
            subject=self.subject_text,
            text=self.body_text,
            timestamp=self.timestamp,
        )

    def preview(self) -> str:
        null = "<null>"

        def joined(values: Optional[list[str]]) -> str:
            return ", ".join(values) if values is not None else null

        return (
            f"From:\t{self.from_address if self.from_address is not None else null}\n"
            f"To:\t{joined(self.to_addresses)}\n"
            f"Cc:\t{joined(self.cc_addresses)}\n"
            f"Bcc:\t{joined(self.bcc_addresses)}\n"
            f"About:\t{self.subject_text if self.subject_text is not None else null}\n"
            f"Text:\n{self.body_text if self.body_text is not None else null}"
        )


class MailHeader(BaseModel):
    """Summary of one remote message, built from its raw header fields.

    Equality is by ``id``. Ordering is by timestamp: a header with a
    timestamp is greater than one without, and two headers without one
    compare equal.
    """

    id: int
    to_address: str
    from_address: str
    subject: str
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_fields(cls, id: int, fields: Mapping[str, str]) -> "MailHeader":
        """Build a header from raw ``To``/``From``/``Date``/``Subject`` fields.

        Args:
            id: Backend sequence number of the message
            fields: Raw header values keyed by field name

        Returns:
            MailHeader: Header with a decoded subject
        """
        date = fields.get("Date")
        raw_subject = fields.get("Subject")
        if raw_subject is None:
            raw_subject = "<subject>"

        return cls(
            id=id,
            to_address=fields.get("To", "<to>"),
            from_address=fields.get("From", "<from>"),
            subject=decode(raw_subject.replace("\n", "").replace("\r", "")),
            timestamp=parse_date(date) if date is not None else None,
        )

    def compare(self, other: "MailHeader") -> int:
        """Compare by timestamp, returning -1, 0 or 1."""
        own, theirs = self.timestamp, other.timestamp
        if own is None and theirs is None:
            return 0
        if own is None:
            return -1
        if theirs is None:
            return 1
        own_fields, their_fields = _timestamp_fields(own), _timestamp_fields(theirs)
        return (own_fields > their_fields) - (own_fields < their_fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MailHeader):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __lt__(self, other: "MailHeader") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "MailHeader") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "MailHeader") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "MailHeader") -> bool:
        return self.compare(other) >= 0

    def get_info(self) -> str:
        return display_line(self.timestamp, self.from_address, self.subject)

    def to_builder(self) -> MailBuilder:
        """Seed a draft with this header's sender, recipient, subject and date."""
        builder = MailBuilder()
        if self.timestamp is not None:
            builder.date(self.timestamp)
        builder.from_(self.from_address).subject(self.subject).to([self.to_address])
        return builder


def _timestamp_fields(value: datetime) -> tuple[int, ...]:
    # Normalize to UTC so the offset is honoured
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return (value.year, value.month, value.day, value.hour, value.minute, value.second, value.microsecond)


# ============================================================================
# Internal Processing Models
# ============================================================================


class ParsedEmail(BaseModel):
    """Headers and plain text body of a retrieved RFC822 message."""

    subject: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    cc_address: Optional[str] = None
    date: Optional[str] = None
    body_text: Optional[str] = None


# ============================================================================
# Metrics Models
# ============================================================================


class RefreshReport(BaseModel):
    """Outcome of refreshing every mailbox in a registry."""

    total_new: int = 0
    per_account: dict[str, int] = Field(default_factory=dict)
    duration_sec: float = 0.0
