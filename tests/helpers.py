from __future__ import annotations

import imaplib
import poplib
from typing import Optional

from climail import Account, MailHeader, MailRecord


def make_account(
    *,
    name: str = "alice@example.test",
    shortcut: Optional[str] = "work",
    imap_domain: Optional[str] = "imap.example.test",
    pop3_domain: Optional[str] = None,
) -> Account:
    return Account(
        imap_domain=imap_domain,
        pop3_domain=pop3_domain,
        smtp_domain="smtp.example.test",
        name=name,
        password="secret",
        shortcut=shortcut,
    )


def make_header(
    id: int,
    *,
    date: Optional[str] = "Wed, 04 Dec 2019 10:02:08 +0000",
    sender: str = "sender@example.test",
    subject: str = "Test message",
) -> MailHeader:
    fields = {"From": sender, "To": "alice@example.test", "Subject": subject}
    if date is not None:
        fields["Date"] = date
    return MailHeader.from_fields(id, fields)


def make_record(header: MailHeader, text: str = "Body text") -> MailRecord:
    return header.to_builder().text(text).build()


class FakeAdapter:
    """Stands in for MailboxAdapter in mailbox and registry tests."""

    def __init__(
        self,
        headers: Optional[list[MailHeader]] = None,
        records: Optional[dict[int, MailRecord]] = None,
        login_ok: bool = True,
    ) -> None:
        self.headers = headers if headers is not None else []
        self.records = records if records is not None else {}
        self.login_ok = login_ok
        self.login_calls = 0
        self.fetch_calls = 0
        self.closed = False
        self._authenticated = False

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    def login(self, username: str, password: str) -> bool:
        self.login_calls += 1
        self._authenticated = self.login_ok
        return self.login_ok

    def list_headers(self) -> Optional[list[MailHeader]]:
        if self.headers is None:
            return None
        return list(self.headers)

    def fetch_body(self, header: MailHeader) -> Optional[MailRecord]:
        self.fetch_calls += 1
        return self.records.get(header.id)

    def close(self) -> None:
        self.closed = True


def sequence_connector(*outcomes):
    """Connector returning (or raising) the given outcomes in order."""
    remaining = list(outcomes)
    calls = []

    def connector(inbox):
        calls.append(inbox)
        outcome = remaining.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    connector.calls = calls
    return connector


class FakeImap:
    """Mimics the parts of imaplib.IMAP4_SSL used by ImapBackend."""

    def __init__(
        self,
        headers: Optional[dict[int, bytes]] = None,
        bodies: Optional[dict[int, bytes]] = None,
        unseen: tuple[int, ...] = (),
        seen: tuple[int, ...] = (),
        login_ok: bool = True,
        failing_search: Optional[str] = None,
    ) -> None:
        self.headers = headers or {}
        self.bodies = bodies or {}
        self.unseen = unseen
        self.seen = seen
        self.login_ok = login_ok
        self.failing_search = failing_search
        self.calls: list[tuple] = []

    def login(self, user: str, password: str):
        self.calls.append(("LOGIN", user))
        if not self.login_ok:
            raise imaplib.IMAP4.error("[AUTHENTICATIONFAILED] Invalid credentials")
        return "OK", [b"LOGIN completed"]

    def select(self, mailbox: str = "INBOX"):
        self.calls.append(("SELECT", mailbox))
        return "OK", [str(len(self.unseen) + len(self.seen)).encode()]

    def search(self, charset, *criteria):
        self.calls.append(("SEARCH",) + criteria)
        if criteria[0] == self.failing_search:
            return "NO", [None]
        ids = self.unseen if criteria[0] == "UNSEEN" else self.seen
        return "OK", [" ".join(str(i) for i in ids).encode()]

    def fetch(self, message_set: str, parts: str):
        self.calls.append(("FETCH", message_set, parts))
        seq = int(message_set)
        source = self.headers if parts == "(BODY.PEEK[HEADER])" else self.bodies
        if seq not in source:
            return "NO", [None]
        payload = source[seq]
        meta = f"{seq} ({parts.strip('()')} {{{len(payload)}}}".encode()
        return "OK", [(meta, payload), b")"]

    def logout(self):
        self.calls.append(("LOGOUT",))
        return "BYE", [b"Logging out"]


class FakePop:
    """Mimics the parts of poplib.POP3_SSL used by Pop3Backend."""

    def __init__(self, messages: Optional[dict[int, bytes]] = None, login_ok: bool = True) -> None:
        self.messages = messages or {}
        self.login_ok = login_ok
        self.calls: list[tuple] = []

    def user(self, name: str):
        self.calls.append(("USER", name))
        return b"+OK"

    def pass_(self, password: str):
        self.calls.append(("PASS",))
        if not self.login_ok:
            raise poplib.error_proto(b"-ERR invalid password")
        return b"+OK logged in"

    def uidl(self):
        self.calls.append(("UIDL",))
        listings = [f"{number} uid-{number}".encode() for number in sorted(self.messages)]
        return b"+OK", listings, sum(len(item) for item in listings)

    def retr(self, which: int):
        self.calls.append(("RETR", which))
        if which not in self.messages:
            raise poplib.error_proto(b"-ERR no such message")
        raw = self.messages[which]
        return b"+OK", raw.split(b"\r\n"), len(raw)

    def quit(self):
        self.calls.append(("QUIT",))
        return b"+OK bye"
