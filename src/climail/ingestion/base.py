"""Abstract base class for inbox backends."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import MailHeader, MailRecord


class MailBackend(ABC):
    """Abstract interface for reading an inbox over one protocol.

    Backend errors never escape these methods: failures are logged and
    reported as ``False`` or ``None``.
    """

    @property
    @abstractmethod
    def authenticated(self) -> bool:
        """Whether ``login`` has succeeded on this connection."""
        pass

    @abstractmethod
    def login(self, username: str, password: str) -> bool:
        """Authenticate the connection.

        Args:
            username: Login name
            password: Password

        Returns:
            bool: True if the server accepted the credentials
        """
        pass

    @abstractmethod
    def list_headers(self) -> Optional[list[MailHeader]]:
        """List the headers of the messages in INBOX.

        Returns:
            Optional[list[MailHeader]]: All headers, or None if any part of
            the listing failed
        """
        pass

    @abstractmethod
    def fetch_body(self, header: MailHeader) -> Optional[MailRecord]:
        """Retrieve the full message for a listed header.

        Args:
            header: Header returned by ``list_headers``

        Returns:
            Optional[MailRecord]: The message, or None if it could not be
            retrieved or built
        """
        pass

    @abstractmethod
    def close(self):
        """Close the connection."""
        pass
