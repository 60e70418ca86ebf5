"""Local view of one account's inbox."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..ingestion import MailboxAdapter
from ..ingestion.imap import DEFAULT_SEARCH_SINCE
from ..models import Account, InboxConfig, MailRecord
from .proxy import MailProxy

logger = logging.getLogger(__name__)

Connector = Callable[[InboxConfig], MailboxAdapter]


@dataclass
class MailboxEntry:
    """Listed message and its read state."""

    proxy: MailProxy
    unread: bool = True


def _common_prefix_length(a: str, b: str) -> int:
    length = 0
    for left, right in zip(a, b):
        if left != right:
            break
        length += 1
    return length


class Mailbox:
    """Inbox of one account: adapter connection, listed messages and the opened message.

    Entries are kept sorted newest first. The opened message is tracked by
    its id, so re-sorting after a refresh never moves the cursor to a
    different message.
    """

    def __init__(
        self,
        account: Account,
        connector: Optional[Connector] = None,
        search_since: str = DEFAULT_SEARCH_SINCE,
    ):
        """Initialize an empty mailbox.

        Args:
            account: Account the inbox belongs to
            connector: Opens an adapter for an inbox target; defaults to
                ``MailboxAdapter.connect``
            search_since: Reference date for IMAP listings
        """
        self.account = account
        self._connector = connector or (
            lambda inbox: MailboxAdapter.connect(inbox, search_since=search_since)
        )
        self._adapter: Optional[MailboxAdapter] = None
        self._entries: list[MailboxEntry] = []
        self._opened_id: Optional[int] = None

    @property
    def name(self) -> str:
        return self.account.name

    @property
    def connected(self) -> bool:
        return self._adapter is not None

    @property
    def opened_id(self) -> Optional[int]:
        return self._opened_id

    def entries(self, unread_only: bool = False) -> list[MailboxEntry]:
        if unread_only:
            return [entry for entry in self._entries if entry.unread]
        return list(self._entries)

    def describe(self) -> str:
        return self.account.describe()

    def _ensure_session(self) -> bool:
        if self._adapter is None:
            logger.info(f'Connecting inbox adapter for "{self.name}"')
            try:
                self._adapter = self._connector(self.account.inbox)
            except ConnectionError as e:
                print(f'Could not refresh inbox for "{self.name}" [{e}]')
                return False

        if not self._adapter.authenticated:
            if not self._adapter.login(self.account.name, self.account.password):
                print(f'Could not log in to inbox of "{self.name}"')
                return False

        return True

    def refresh(self) -> int:
        """Load the current listing and merge it into the local entries.

        Connects and logs in first if needed. Messages whose id is already
        present are skipped, so refreshing is idempotent within a session.
        New entries start unread.

        Returns:
            int: Number of newly added entries
        """
        if not self._ensure_session():
            return 0

        headers = self._adapter.list_headers()
        if headers is None:
            logger.warning(f'Listing failed for "{self.name}"')
            return 0

        known = {entry.proxy.header.id for entry in self._entries}
        added = 0
        for header in headers:
            if header.id in known:
                continue
            known.add(header.id)
            self._entries.append(MailboxEntry(MailProxy(header)))
            added += 1

        # Stable sort; messages without a timestamp sink to the end
        self._entries.sort(key=lambda entry: entry.proxy.header, reverse=True)

        logger.info(f'Loaded {added} new messages for "{self.name}"')
        return added

    def _best_match(self, ident: str) -> Optional[int]:
        best_index, best_score = None, 0
        for index, entry in enumerate(self._entries):
            score = _common_prefix_length(entry.proxy.get_info(), ident)
            if score > best_score:
                best_index, best_score = index, score
        return best_index

    def open_mail(self, ident: str) -> Optional[MailProxy]:
        """Select a message by list index or by the start of its summary line.

        Args:
            ident: Index into ``entries()``, or a prefix of a summary line

        Returns:
            Optional[MailProxy]: The opened message, or None if nothing matched
        """
        ident = ident.strip()
        try:
            number = int(ident)
        except ValueError:
            index = self._best_match(ident)
        else:
            index = number if 0 <= number < len(self._entries) else None

        if index is None:
            self._opened_id = None
            return None

        entry = self._entries[index]
        entry.unread = False
        self._opened_id = entry.proxy.header.id
        return entry.proxy

    def _opened_entry(self) -> Optional[MailboxEntry]:
        if self._opened_id is None:
            return None
        for entry in self._entries:
            if entry.proxy.header.id == self._opened_id:
                return entry
        return None

    def get_opened_mail(self) -> Optional[MailRecord]:
        entry = self._opened_entry()
        if entry is None:
            return None
        if entry.proxy.loaded or self._adapter is not None:
            return entry.proxy.get_mail(self._adapter)
        return None

    def close(self):
        if self._adapter is not None:
            self._adapter.close()
            self._adapter = None
