from __future__ import annotations

import pytest

from climail import MailboxRegistry
from climail.cli import Mode, Shell
from tests.helpers import FakeAdapter, make_account, make_header, make_record


def scripted(*lines: str):
    remaining = list(lines)

    def input_fn(prompt: str) -> str:
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return input_fn


@pytest.fixture
def adapter() -> FakeAdapter:
    header = make_header(1, sender="Bob <bob@example.test>", subject="Lunch")
    return FakeAdapter(headers=[header], records={1: make_record(header, "Noon?")})


@pytest.fixture
def shell(adapter: FakeAdapter) -> Shell:
    registry = MailboxRegistry([make_account()], connector=lambda inbox: adapter)
    return Shell(registry)


def test_prompt_follows_mode(shell: Shell) -> None:
    assert shell.prompt() == '"climail"~> '

    shell.execute("inbox work")
    assert shell.mode is Mode.INBOX
    assert shell.prompt() == '"work"~# '

    shell.execute("exit")
    assert shell.mode is Mode.GLOBAL

    shell.execute("write")
    assert shell.prompt() == "µ "


def test_unknown_command_lists_available(shell: Shell, capsys) -> None:
    assert shell.execute("open 0") is True

    out = capsys.readouterr().out
    assert 'unknown command "open"' in out
    assert "show-inbox" in out
    assert shell.mode is Mode.GLOBAL


def test_blank_line_is_ignored(shell: Shell) -> None:
    assert shell.execute("   ") is True
    assert shell.mode is Mode.GLOBAL


def test_inbox_needs_known_account(shell: Shell, capsys) -> None:
    shell.execute("inbox")
    shell.execute("inbox private")

    out = capsys.readouterr().out
    assert "inbox command needs valid account as parameter!" in out
    assert 'no account named "private" available!' in out
    assert shell.mode is Mode.GLOBAL


def test_refresh_and_read_mail(shell: Shell, capsys) -> None:
    shell.execute("refresh")
    shell.execute("inbox work")
    shell.execute("show-unread")
    out = capsys.readouterr().out
    assert "1 new mails loaded!" in out
    assert "\t  0 * 04.12.2019, 10:02:08 |  Bob <bob@example.test>" in out

    shell.execute("open 0")
    assert shell.mode is Mode.READ
    assert shell.path == "Lunch"

    shell.execute("show-mail")
    assert "Text:\nNoon?" in capsys.readouterr().out

    shell.execute("close")
    assert shell.mode is Mode.INBOX
    assert shell.path == "work"

    shell.execute("show-unread")
    assert 'No unread mails in inbox of "alice@example.test"!' in capsys.readouterr().out


def test_open_without_match(shell: Shell, capsys) -> None:
    shell.execute("refresh")
    shell.execute("inbox work")
    shell.execute("open 3")

    assert "No matching mail!" in capsys.readouterr().out
    assert shell.mode is Mode.INBOX


def test_open_unavailable_body_keeps_selection(shell: Shell, adapter: FakeAdapter, capsys) -> None:
    records = dict(adapter.records)
    adapter.records.clear()
    shell.execute("refresh")
    shell.execute("inbox work")
    shell.execute("open 0")

    assert "use show-mail to retry" in capsys.readouterr().out
    assert shell.mode is Mode.READ
    assert shell.path == "Lunch"

    shell.execute("show-mail")
    assert "Could not open mail!" in capsys.readouterr().out

    adapter.records.update(records)
    shell.execute("show-mail")
    assert "Text:\nNoon?" in capsys.readouterr().out


def test_reply_starts_prefilled_draft(shell: Shell, capsys) -> None:
    shell.execute("refresh")
    shell.execute("inbox work")
    shell.execute("open 0")
    shell.execute("reply")
    assert shell.mode is Mode.WRITE

    shell.execute("preview")
    out = capsys.readouterr().out
    assert "To:\tbob@example.test" in out
    assert "About:\tRe: Lunch" in out

    shell.execute("send")
    assert "Draft is incomplete [missing field: text]" in capsys.readouterr().out


def test_compose_and_send(shell: Shell, capsys) -> None:
    shell.input_fn = scripted("first line", "second line$")
    shell.execute("write")
    shell.execute("from me@example.test")
    shell.execute("to you@example.test them@example.test")
    shell.execute("subject Weekly sync")
    shell.execute("text")

    draft = shell.registry.draft
    assert draft.to_addresses == ["you@example.test", "them@example.test"]
    assert draft.subject_text == "Weekly sync"
    assert draft.body_text == "first line\nsecond line"

    shell.execute("send")
    assert "Sending mail is not supported!" in capsys.readouterr().out

    shell.execute("exit")
    assert shell.mode is Mode.GLOBAL
    assert shell.registry.draft is None


def test_show_servers(shell: Shell, capsys) -> None:
    shell.execute("show-servers")

    out = capsys.readouterr().out
    assert "Displaying info for 1 server ..." in out
    assert "\tIMAP Domain:\timap.example.test" in out
    assert "secret" not in out


def test_run_stops_on_exit_and_eof(shell: Shell) -> None:
    shell.input_fn = scripted("show-servers", "exit", "refresh")
    shell.run()
    assert shell.mode is Mode.EXIT

    other = Shell(MailboxRegistry(), input_fn=scripted())
    other.run()
    assert other.mode is Mode.GLOBAL
