"""Protocol-independent entry point to an account's inbox."""

import logging
from typing import Optional

from ..models import InboxConfig, MailHeader, MailRecord, Protocol
from .base import MailBackend
from .imap import DEFAULT_SEARCH_SINCE, ImapBackend
from .pop3 import Pop3Backend

logger = logging.getLogger(__name__)


class MailboxAdapter:
    """Connection to one inbox, backed by exactly one protocol backend."""

    def __init__(self, protocol: Protocol, backend: MailBackend):
        self.protocol = protocol
        self._backend = backend

    @classmethod
    def connect(cls, inbox: InboxConfig, search_since: str = DEFAULT_SEARCH_SINCE) -> "MailboxAdapter":
        """Connect to the inbox described by ``inbox``.

        Args:
            inbox: Protocol, host and port of the inbox
            search_since: Reference date for IMAP listings

        Returns:
            MailboxAdapter: Connected, not yet authenticated adapter

        Raises:
            ConnectionError: If the server cannot be reached
        """
        if inbox.protocol is Protocol.POP3:
            backend = Pop3Backend.connect(inbox.host, inbox.port)
        elif inbox.protocol is Protocol.IMAP:
            backend = ImapBackend.connect(inbox.host, inbox.port, search_since=search_since)
        else:
            raise ValueError(f"Unsupported protocol: {inbox.protocol}")
        return cls(inbox.protocol, backend)

    @property
    def authenticated(self) -> bool:
        return self._backend.authenticated

    def login(self, username: str, password: str) -> bool:
        return self._backend.login(username, password)

    def list_headers(self) -> Optional[list[MailHeader]]:
        return self._backend.list_headers()

    def fetch_body(self, header: MailHeader) -> Optional[MailRecord]:
        logger.debug(f"Fetching body of message {header.id} over {self.protocol.value}")
        return self._backend.fetch_body(header)

    def close(self):
        self._backend.close()
