"""POP3 inbox backend."""

import logging
import poplib
import ssl
from email.utils import formataddr, getaddresses
from typing import Optional

from ..models import MailHeader, MailRecord, MissingFieldError
from ..processing.dates import parse_date
from ..processing.email_parser import EmailParser
from .base import MailBackend

logger = logging.getLogger(__name__)


def _address_list(value: str) -> list[str]:
    return [formataddr(pair) for pair in getaddresses([value]) if pair[1]]


class Pop3Backend(MailBackend):
    """Maildrop of a POP3 account, read over a ``poplib.POP3_SSL`` connection.

    POP3 listings carry no metadata, so listed headers only hold the message
    number; the real headers arrive with the body.
    """

    def __init__(self, pop: poplib.POP3):
        self._pop = pop
        self._authenticated = False

    @classmethod
    def connect(cls, host: str, port: int) -> "Pop3Backend":
        """Open a TLS connection to a POP3 server.

        Raises:
            ConnectionError: If the connection or TLS handshake fails
        """
        try:
            pop = poplib.POP3_SSL(host, port, context=ssl.create_default_context())
        except (poplib.error_proto, OSError) as e:
            raise ConnectionError(f"could not connect to {host}:{port}: {e}") from e
        logger.info(f"Connected to POP3 server {host}:{port}")
        return cls(pop)

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    def login(self, username: str, password: str) -> bool:
        if self._authenticated:
            return True

        try:
            self._pop.user(username)
            self._pop.pass_(password)
        except (poplib.error_proto, OSError) as e:
            logger.warning(f"Could not log in on POP3 server: {e}")
            return False

        self._authenticated = True
        return True

    def list_headers(self) -> Optional[list[MailHeader]]:
        """List the maildrop with UIDL; headers are built from empty field maps."""
        if not self._authenticated:
            logger.warning("POP3 stream is not authenticated")
            return None

        try:
            _, listings, _ = self._pop.uidl()
            numbers = [int(listing.split()[0]) for listing in listings]
        except (poplib.error_proto, OSError, ValueError, IndexError) as e:
            logger.warning(f"Could not list POP3 maildrop: {e}")
            return None

        logger.info(f"Listed {len(numbers)} POP3 messages")
        return [MailHeader.from_fields(number, {}) for number in numbers]

    def fetch_body(self, header: MailHeader) -> Optional[MailRecord]:
        """Retrieve a message with RETR and keep its plain text part.

        Headers present in the retrieved message replace the placeholders
        of the listed header.
        """
        if not self._authenticated:
            logger.warning("POP3 stream is not authenticated")
            return None

        try:
            _, lines, _ = self._pop.retr(header.id)
        except (poplib.error_proto, OSError) as e:
            logger.warning(f"Could not retrieve message {header.id}: {e}")
            return None

        parsed = EmailParser.parse(b"\r\n".join(lines))

        builder = header.to_builder()
        if parsed.from_address is not None:
            builder.from_(parsed.from_address)
        if parsed.to_address is not None:
            builder.to(_address_list(parsed.to_address))
        if parsed.cc_address is not None:
            builder.cc(_address_list(parsed.cc_address))
        if parsed.subject is not None:
            builder.subject(parsed.subject)
        if parsed.date is not None:
            timestamp = parse_date(parsed.date)
            if timestamp is not None:
                builder.date(timestamp)
        if parsed.body_text is not None:
            builder.text(parsed.body_text)

        try:
            return builder.build()
        except MissingFieldError as e:
            logger.warning(f"Could not build message {header.id}: [{e}]")
            return None

    def close(self):
        """Send QUIT and close the connection."""
        try:
            self._pop.quit()
        except (poplib.error_proto, OSError) as e:
            logger.debug(f"Error during POP3 quit: {e}")
