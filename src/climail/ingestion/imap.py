"""IMAP inbox backend."""

import imaplib
import logging
import ssl
from enum import Enum
from typing import Optional

from ..models import MailHeader, MailRecord, MissingFieldError
from .base import MailBackend
from .headers import parse_header_block

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_SINCE = "1-Dec-2019"
INBOX_FOLDER = "INBOX"


class ImapState(Enum):
    """Connection states; ``login`` is the only transition."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


def _literal(data: list) -> Optional[bytes]:
    """Return the first literal payload of an imaplib FETCH response."""
    for item in data or []:
        if isinstance(item, tuple) and len(item) >= 2:
            return item[1]
    return None


class ImapBackend(MailBackend):
    """INBOX of an IMAP account, read over an ``imaplib.IMAP4_SSL`` connection."""

    def __init__(self, imap: imaplib.IMAP4, search_since: str = DEFAULT_SEARCH_SINCE):
        """Initialize the backend on an unauthenticated connection.

        Args:
            imap: Connected IMAP client
            search_since: Reference date for the SINCE search criterion
        """
        self._imap = imap
        self.search_since = search_since
        self._state = ImapState.UNAUTHENTICATED

    @classmethod
    def connect(cls, host: str, port: int, search_since: str = DEFAULT_SEARCH_SINCE) -> "ImapBackend":
        """Open a TLS connection to an IMAP server.

        Raises:
            ConnectionError: If the connection or TLS handshake fails
        """
        try:
            imap = imaplib.IMAP4_SSL(host, port, ssl_context=ssl.create_default_context())
        except (imaplib.IMAP4.error, OSError) as e:
            raise ConnectionError(f"could not connect to {host}:{port}: {e}") from e
        logger.info(f"Connected to IMAP server {host}:{port}")
        return cls(imap, search_since=search_since)

    @property
    def state(self) -> ImapState:
        return self._state

    @property
    def authenticated(self) -> bool:
        return self._state is ImapState.AUTHENTICATED

    def login(self, username: str, password: str) -> bool:
        if self._state is ImapState.AUTHENTICATED:
            return True

        try:
            status, _ = self._imap.login(username, password)
        except (imaplib.IMAP4.error, OSError) as e:
            logger.warning(f"Could not log in on IMAP client: {e}")
            return False

        if status != "OK":
            logger.warning(f"Could not log in on IMAP client: {status}")
            return False

        self._state = ImapState.AUTHENTICATED
        return True

    def _search(self, flag: str) -> list[int]:
        status, data = self._imap.search(None, flag, "SINCE", self.search_since)
        if status != "OK":
            raise imaplib.IMAP4.error(f"{flag} search failed: {status}")
        if not data or not data[0]:
            return []
        return [int(seq) for seq in data[0].split()]

    def _select_inbox(self):
        status, _ = self._imap.select(INBOX_FOLDER)
        if status != "OK":
            raise imaplib.IMAP4.error(f"could not select {INBOX_FOLDER}: {status}")

    def list_headers(self) -> Optional[list[MailHeader]]:
        """List INBOX headers of unseen and seen messages since the reference date.

        Unseen messages come first. Headers are fetched one message at a
        time with ``BODY.PEEK[HEADER]`` so the seen flags are untouched.
        """
        if self._state is not ImapState.AUTHENTICATED:
            logger.warning("No IMAP session established")
            return None

        try:
            self._select_inbox()
            sequence = self._search("UNSEEN") + self._search("SEEN")

            headers = []
            for seq in sequence:
                status, data = self._imap.fetch(str(seq), "(BODY.PEEK[HEADER])")
                content = _literal(data) if status == "OK" else None
                if content is None:
                    raise imaplib.IMAP4.error(f"could not fetch header of message {seq}: {status}")

                fields = parse_header_block(content.decode("utf-8", errors="replace"))
                headers.append(MailHeader.from_fields(seq, fields))
        except (imaplib.IMAP4.error, OSError, ValueError) as e:
            logger.warning(f"Could not list IMAP inbox: {e}")
            return None

        logger.info(f"Listed {len(headers)} IMAP headers")
        return headers

    def fetch_body(self, header: MailHeader) -> Optional[MailRecord]:
        if self._state is not ImapState.AUTHENTICATED:
            logger.warning("No IMAP session established")
            return None

        try:
            self._select_inbox()
            status, data = self._imap.fetch(str(header.id), "(BODY[TEXT])")
        except (imaplib.IMAP4.error, OSError) as e:
            logger.warning(f"Could not fetch message {header.id}: {e}")
            return None

        if status != "OK":
            logger.warning(f"Could not fetch message {header.id}: {status}")
            return None

        builder = header.to_builder()
        content = _literal(data)
        if content is not None:
            try:
                builder.text(content.decode("utf-8"))
            except UnicodeDecodeError:
                logger.warning(f"Body of message {header.id} is not valid UTF-8")

        try:
            return builder.build()
        except MissingFieldError as e:
            logger.warning(f"Could not build message {header.id}: [{e}]")
            return None

    def close(self):
        """Log out and close the connection."""
        try:
            self._imap.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"Error during IMAP logout: {e}")
