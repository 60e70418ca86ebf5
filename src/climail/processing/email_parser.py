"""Email parsing utilities for RFC822 format emails."""

import email
from email.message import Message
from typing import Optional

from ..models import ParsedEmail
from .encoded_word import decode


class EmailParser:
    """Parse RFC822 email messages and extract the headers and plain text body."""

    @staticmethod
    def parse(email_bytes: bytes) -> ParsedEmail:
        """Parse email bytes and extract key components.

        Args:
            email_bytes: Email in RFC822 format (bytes)

        Returns:
            ParsedEmail: Parsed email object
        """
        msg = email.message_from_bytes(email_bytes)

        subject = msg.get("Subject")
        if subject is not None:
            subject = decode(str(subject).replace("\n", "").replace("\r", ""))

        return ParsedEmail(
            subject=subject,
            from_address=EmailParser._header(msg, "From"),
            to_address=EmailParser._header(msg, "To"),
            cc_address=EmailParser._header(msg, "Cc"),
            date=EmailParser._header(msg, "Date"),
            body_text=EmailParser._extract_text(msg),
        )

    @staticmethod
    def _header(msg: Message, name: str) -> Optional[str]:
        value = msg.get(name)
        return str(value) if value is not None else None

    @staticmethod
    def _extract_text(msg: Message) -> Optional[str]:
        """Extract the plain text body from an email message.

        Args:
            msg: Email message object

        Returns:
            Optional[str]: The first non-attachment text/plain part, or None
        """
        if msg.is_multipart():
            for part in msg.walk():
                content_disposition = str(part.get("Content-Disposition", ""))

                # Skip attachments
                if "attachment" in content_disposition:
                    continue

                if part.get_content_type() != "text/plain":
                    continue

                charset = part.get_content_charset() or "utf-8"
                try:
                    return part.get_payload(decode=True).decode(charset, errors="ignore").strip()
                except (AttributeError, LookupError):
                    continue
            return None

        if msg.get_content_type() != "text/plain":
            return None

        charset = msg.get_content_charset() or "utf-8"
        try:
            payload = msg.get_payload(decode=True)
            return payload.decode(charset, errors="ignore").strip()
        except (AttributeError, LookupError):
            return str(msg.get_payload()).strip()
