"""Interactive command shell for browsing and replying to mail."""

import argparse
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import dotenv

from .accounts import AccountFileError
from .config import Config
from .mailbox import Mailbox, MailboxRegistry
from .models import MailBuilder, MissingFieldError

logger = logging.getLogger(__name__)

GLOBAL_PROMPT = "climail"
TEXT_TERMINATOR = "$"


class Mode(Enum):
    """Command sets of the shell; the value is the prompt symbol."""

    GLOBAL = ">"
    INBOX = "#"
    READ = "λ"
    WRITE = "µ"
    EXIT = ""


@dataclass
class Transition:
    """Mode switch requested by a command handler."""

    mode: Mode
    path: Optional[str] = None


Handler = Callable[["Shell", list[str]], Optional[Transition]]


# ============================================================================
# Global commands
# ============================================================================


def _refresh(shell: "Shell", args: list[str]) -> None:
    print("Refreshing inboxes ...")
    report = shell.registry.refresh()
    print(f"{report.total_new} new mails loaded!")


def _show_mails(mailbox: Mailbox, named: bool, unread_only: bool = False) -> None:
    entries = mailbox.entries()
    shown = [(index, entry) for index, entry in enumerate(entries) if entry.unread or not unread_only]
    if not shown:
        if unread_only:
            print(f'No unread mails in inbox of "{mailbox.name}"!')
        else:
            print(f'No mails in inbox of "{mailbox.name}"')
        return

    if named:
        print(f'"{mailbox.name}"')
    for index, entry in shown:
        marker = "*" if entry.unread else " "
        print(f"\t{index:>3} {marker} {entry.proxy.get_info()}")


def _show_inbox(shell: "Shell", args: list[str]) -> None:
    key = args[0] if args else "all"
    if key == "all":
        for _, mailbox in shell.registry.items():
            _show_mails(mailbox, named=True)
        return

    mailbox = shell.registry.get(key)
    if mailbox is None:
        print(f'no account named "{key}" available!')
    else:
        _show_mails(mailbox, named=True)


def _open_inbox(shell: "Shell", args: list[str]) -> Optional[Transition]:
    if not args:
        print("inbox command needs valid account as parameter!")
        return None
    if not shell.registry.open_inbox(args[0]):
        print(f'no account named "{args[0]}" available!')
        return None
    return Transition(Mode.INBOX, args[0])


def _show_servers(shell: "Shell", args: list[str]) -> None:
    count = len(shell.registry)
    print(f"Displaying info for {count} server{'' if count == 1 else 's'} ...")
    for _, mailbox in shell.registry.items():
        print(mailbox.describe())


def _write(shell: "Shell", args: list[str]) -> Transition:
    shell.registry.draft = MailBuilder()
    return Transition(Mode.WRITE)


def _exit(shell: "Shell", args: list[str]) -> Transition:
    return Transition(Mode.EXIT)


# ============================================================================
# Inbox commands
# ============================================================================


def _opened_inbox(shell: "Shell") -> Optional[Mailbox]:
    mailbox = shell.registry.get_opened_inbox()
    if mailbox is None:
        print("No inbox opened!")
    return mailbox


def _show_unread(shell: "Shell", args: list[str]) -> None:
    mailbox = _opened_inbox(shell)
    if mailbox is not None:
        _show_mails(mailbox, named=False, unread_only=True)


def _show_all(shell: "Shell", args: list[str]) -> None:
    mailbox = _opened_inbox(shell)
    if mailbox is not None:
        _show_mails(mailbox, named=False)


def _refresh_inbox(shell: "Shell", args: list[str]) -> None:
    mailbox = _opened_inbox(shell)
    if mailbox is not None:
        print(f"{mailbox.refresh()} new mails loaded!")


def _open_mail(shell: "Shell", args: list[str]) -> Optional[Transition]:
    if not args:
        print("command open needs valid parameter!")
        return None

    mailbox = _opened_inbox(shell)
    if mailbox is None:
        return None

    proxy = mailbox.open_mail(" ".join(args))
    if proxy is None:
        print("No matching mail!")
        return None

    mail = mailbox.get_opened_mail()
    if mail is None:
        # Selection stays; show-mail retries the fetch
        print("Could not load mail yet, use show-mail to retry!")
        return Transition(Mode.READ, proxy.header.subject)
    return Transition(Mode.READ, mail.subject)


def _leave_inbox(shell: "Shell", args: list[str]) -> Transition:
    shell.registry.close_inbox()
    return Transition(Mode.GLOBAL, GLOBAL_PROMPT)


# ============================================================================
# Read commands
# ============================================================================


def _show_mail(shell: "Shell", args: list[str]) -> None:
    mailbox = _opened_inbox(shell)
    if mailbox is None:
        return
    mail = mailbox.get_opened_mail()
    if mail is None:
        print("Could not open mail!")
    else:
        print(mail.render())


def _reply(shell: "Shell", args: list[str]) -> Optional[Transition]:
    mailbox = _opened_inbox(shell)
    if mailbox is None:
        return None
    mail = mailbox.get_opened_mail()
    if mail is None:
        print("Could not open mail!")
        return None
    shell.registry.draft = mail.create_reply()
    return Transition(Mode.WRITE, mailbox.name)


def _close_mail(shell: "Shell", args: list[str]) -> Transition:
    mailbox = shell.registry.get_opened_inbox()
    if mailbox is not None:
        return Transition(Mode.INBOX, mailbox.account.key)
    return Transition(Mode.GLOBAL, GLOBAL_PROMPT)


# ============================================================================
# Write commands
# ============================================================================


def _draft(shell: "Shell") -> MailBuilder:
    if shell.registry.draft is None:
        shell.registry.draft = MailBuilder()
    return shell.registry.draft


def _set_from(shell: "Shell", args: list[str]) -> None:
    if not args:
        print("command from needs a sender!")
        return
    _draft(shell).from_(args[0])


def _set_to(shell: "Shell", args: list[str]) -> None:
    _draft(shell).to(args)


def _set_cc(shell: "Shell", args: list[str]) -> None:
    _draft(shell).cc(args)


def _set_bcc(shell: "Shell", args: list[str]) -> None:
    _draft(shell).bcc(args)


def _set_subject(shell: "Shell", args: list[str]) -> None:
    _draft(shell).subject(" ".join(args))


def _set_text(shell: "Shell", args: list[str]) -> None:
    print(f"Enter Text. Finish with '{TEXT_TERMINATOR}'.")
    lines = []
    while True:
        line = shell.input_fn("~ ").strip()
        if line.endswith(TEXT_TERMINATOR):
            lines.append(line[: -len(TEXT_TERMINATOR)])
            break
        lines.append(line)
    _draft(shell).text("\n".join(lines))


def _preview(shell: "Shell", args: list[str]) -> None:
    print(_draft(shell).preview())


def _send(shell: "Shell", args: list[str]) -> None:
    try:
        _draft(shell).build()
    except MissingFieldError as e:
        print(f"Draft is incomplete [{e}]")
        return
    print("Sending mail is not supported!")


def _leave_draft(shell: "Shell", args: list[str]) -> Transition:
    shell.registry.draft = None
    return Transition(Mode.GLOBAL, GLOBAL_PROMPT)


COMMANDS: dict[Mode, dict[str, Handler]] = {
    Mode.GLOBAL: {
        "refresh": _refresh,
        "show-inbox": _show_inbox,
        "inbox": _open_inbox,
        "show-servers": _show_servers,
        "write": _write,
        "exit": _exit,
    },
    Mode.INBOX: {
        "show-unread": _show_unread,
        "show-all": _show_all,
        "refresh": _refresh_inbox,
        "open": _open_mail,
        "exit": _leave_inbox,
    },
    Mode.READ: {
        "show-mail": _show_mail,
        "reply": _reply,
        "close": _close_mail,
    },
    Mode.WRITE: {
        "from": _set_from,
        "to": _set_to,
        "cc": _set_cc,
        "bcc": _set_bcc,
        "subject": _set_subject,
        "text": _set_text,
        "preview": _preview,
        "send": _send,
        "exit": _leave_draft,
    },
}


class Shell:
    """Read-eval loop dispatching whitespace-split commands for the current mode."""

    def __init__(self, registry: MailboxRegistry, input_fn: Callable[[str], str] = input):
        self.registry = registry
        self.input_fn = input_fn
        self.mode = Mode.GLOBAL
        self.path: Optional[str] = GLOBAL_PROMPT

    def prompt(self) -> str:
        prefix = f'"{self.path}"~' if self.path else ""
        return f"{prefix}{self.mode.value} "

    def execute(self, line: str) -> bool:
        """Run one command line.

        Args:
            line: Raw user input

        Returns:
            bool: False once the shell should exit
        """
        tokens = line.split()
        if not tokens:
            return True

        handler = COMMANDS[self.mode].get(tokens[0])
        if handler is None:
            print(f"unknown command \"{tokens[0]}\"; available: {', '.join(COMMANDS[self.mode])}")
            return True

        with self.registry.lock:
            transition = handler(self, tokens[1:])

        if transition is not None:
            logger.debug(f"Switching from {self.mode.name} to {transition.mode.name}")
            self.mode = transition.mode
            self.path = transition.path
        return self.mode is not Mode.EXIT

    def run(self) -> None:
        while True:
            try:
                line = self.input_fn(self.prompt())
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not self.execute(line):
                break


def main():
    """Main CLI entry point."""
    dotenv.load_dotenv()

    parser = argparse.ArgumentParser(description="Terminal mail client for POP3 and IMAP inboxes")
    parser.add_argument("--accounts", help="YAML account file")
    parser.add_argument("--since", help="IMAP listing reference date, e.g. 1-Dec-2019")
    parser.add_argument("--log-level", help="Log level, e.g. INFO")
    args = parser.parse_args()

    try:
        config = Config.from_env()
        if args.accounts:
            config.accounts_file = Path(args.accounts)
        if args.since:
            config.search_since = args.since
        if args.log_level:
            config.log_level = args.log_level.upper()
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        registry = MailboxRegistry.from_file(config.accounts_file, search_since=config.search_since)
    except AccountFileError as e:
        print(f"Could not load account file! [{e}]")
        registry = MailboxRegistry(search_since=config.search_since)

    try:
        Shell(registry).run()
    finally:
        registry.close()


if __name__ == "__main__":
    main()
