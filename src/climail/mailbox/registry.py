"""All configured mailboxes, keyed by account shortcut or name."""

import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

from ..accounts import load_accounts
from ..ingestion.imap import DEFAULT_SEARCH_SINCE
from ..metrics import MetricsCollector
from ..models import Account, MailBuilder, RefreshReport
from .mailbox import Connector, Mailbox

logger = logging.getLogger(__name__)


class MailboxRegistry:
    """Owns one mailbox per account and tracks which one is opened.

    The opened mailbox is stored by key and looked up on every access.
    Callers serialize commands by holding ``lock``.
    """

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        connector: Optional[Connector] = None,
        search_since: str = DEFAULT_SEARCH_SINCE,
    ):
        """Initialize the registry.

        Args:
            accounts: Accounts to create mailboxes for; a later account with
                the same key replaces an earlier one
            connector: Adapter factory handed to every mailbox
            search_since: Reference date for IMAP listings
        """
        self.lock = threading.RLock()
        self.metrics = MetricsCollector()
        self.draft: Optional[MailBuilder] = None
        self._opened_key: Optional[str] = None
        self._mailboxes: dict[str, Mailbox] = {}

        for account in accounts:
            if account.key in self._mailboxes:
                logger.warning(f'Account key "{account.key}" is defined twice, keeping the last one')
            self._mailboxes[account.key] = Mailbox(account, connector=connector, search_since=search_since)

    @classmethod
    def from_file(
        cls,
        path: Path,
        connector: Optional[Connector] = None,
        search_since: str = DEFAULT_SEARCH_SINCE,
    ) -> "MailboxRegistry":
        """Create a registry from a YAML account file.

        Raises:
            AccountFileError: If the file cannot be loaded
        """
        return cls(load_accounts(path), connector=connector, search_since=search_since)

    def __len__(self) -> int:
        return len(self._mailboxes)

    def keys(self) -> list[str]:
        return list(self._mailboxes)

    def get(self, key: str) -> Optional[Mailbox]:
        return self._mailboxes.get(key)

    def items(self) -> list[tuple[str, Mailbox]]:
        return list(self._mailboxes.items())

    def refresh(self) -> RefreshReport:
        """Refresh every mailbox.

        Returns:
            RefreshReport: New message counts per account and total duration
        """
        self.metrics.start_timer("refresh")
        per_account = {}
        for key, mailbox in self._mailboxes.items():
            logger.info(f'Refreshing account "{key}"')
            per_account[key] = mailbox.refresh()
        duration = self.metrics.stop_timer("refresh")

        report = self.metrics.create_refresh_report(per_account, duration)
        logger.info(f"Refresh loaded {report.total_new} new messages in {report.duration_sec:.2f}s")
        return report

    def open_inbox(self, key: str) -> bool:
        if key not in self._mailboxes:
            return False
        self._opened_key = key
        return True

    def close_inbox(self) -> None:
        self._opened_key = None

    def get_opened_inbox(self) -> Optional[Mailbox]:
        if self._opened_key is None:
            return None
        return self._mailboxes.get(self._opened_key)

    def close(self) -> None:
        """Close every mailbox connection."""
        for mailbox in self._mailboxes.values():
            mailbox.close()
