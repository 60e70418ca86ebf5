"""Lazy wrapper around a listed message."""

import logging
from typing import TYPE_CHECKING, Optional

from ..models import MailHeader, MailRecord

if TYPE_CHECKING:
    from ..ingestion import MailboxAdapter

logger = logging.getLogger(__name__)


class MailProxy:
    """Pairs a header with the full message, which is fetched on first use.

    A fetched message is kept for the lifetime of the proxy and never
    re-fetched, even if the remote mailbox changes.
    """

    def __init__(self, header: MailHeader):
        self.header = header
        self._mail: Optional[MailRecord] = None

    @property
    def loaded(self) -> bool:
        return self._mail is not None

    def get_info(self) -> str:
        if self._mail is not None:
            return self._mail.get_info()
        return self.header.get_info()

    def get_mail(self, adapter: "MailboxAdapter") -> Optional[MailRecord]:
        """Return the full message, fetching it through ``adapter`` if needed.

        Failed fetches are not cached, so a later call retries.
        """
        if self._mail is None:
            logger.debug(f"Loading message {self.header.id}")
            self._mail = adapter.fetch_body(self.header)
        return self._mail
