"""Locate and pull the report attachment out of a parsed message."""

from __future__ import annotations
from email import policy
from email.message import EmailMessage, Message
from email.parser import BytesParser
from email.utils import collapse_rfc2231_value
from typing import Optional

from loguru import logger

from imap_dmarc_extractor.domain.entities.attachment import Attachment
from imap_dmarc_extractor.domain.errors import MissingBody, MissingName, NotFound, ParseError

USABLE_MIMETYPES = frozenset(
    {
        "application/zip",
        "application/gzip",
        "application/octet-stream",
    }
)


def parse_message(rfc822_bytes: bytes) -> EmailMessage:
    try:
        return BytesParser(policy=policy.default).parsebytes(rfc822_bytes)
    except Exception as e:
        raise ParseError(f"Could not parse message: {e}") from e


def message_identifier(em: Message, fallback: str) -> str:
    # Message-ID is optional in practice; fall back to the mailbox position
    value = str(em.get("Message-ID") or "").strip()
    return value or fallback


def locate_report_part(em: Message) -> Message:
    """Return the report-bearing part.

    The top-level part wins when its media type is usable, otherwise the
    first usable direct child. Grandchildren are never inspected.
    """
    if em.get_content_type() in USABLE_MIMETYPES:
        return em

    if em.is_multipart():
        for subpart in em.get_payload():
            if subpart.get_content_type() in USABLE_MIMETYPES:
                logger.debug(f"Selected subpart with type {subpart.get_content_type()}")
                return subpart

    raise NotFound("No attachment found.")


def _disposition_filename(part: Message) -> Optional[str]:
    value = part.get_param("filename", header="content-disposition")
    if value is None:
        return None
    return str(collapse_rfc2231_value(value)).strip()


def extract_attachment(part: Message) -> Attachment:
    body = part.get_payload(decode=True) or b""
    if not body:
        raise MissingBody("No attachment found.")

    name = _disposition_filename(part)
    if not name:
        raise MissingName("No file name found.")

    return Attachment(content=body, mimetype=part.get_content_type(), name=name)


def get_attachment(em: Message) -> Attachment:
    return extract_attachment(locate_report_part(em))
