from __future__ import annotations
import imaplib
import re
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from imap_dmarc_extractor.application.ports.email_source import MailboxSession, RawEmail
from imap_dmarc_extractor.domain.errors import MailboxError
from imap_dmarc_extractor.infrastructure.email.providers.imap.auth import (
    DEFAULT_IMAP_PORT,
    ImapAuthenticator,
    ImapCredentials,
)

_FETCH_SEQ = re.compile(rb"^\s*(\d+)\s")


@dataclass
class ImapConfig:
    host: str
    account: str
    password: str = field(repr=False)
    port: int = DEFAULT_IMAP_PORT
    folder: str = "INBOX"
    timeout: Optional[float] = None


def parse_server(server: str, default_port: int = DEFAULT_IMAP_PORT) -> tuple[str, int]:
    """Split ``host[:port]``; the port falls back to ``default_port``."""
    host, sep, port = server.strip().partition(":")
    if not host:
        raise ValueError(f"Missing host in server address: {server!r}")
    if not sep:
        return host, default_port
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"Invalid port in server address: {server!r}")
    return host, int(port)


class ImapMailboxSession(MailboxSession):
    def __init__(self, cfg: ImapConfig, authenticator: Optional[ImapAuthenticator] = None) -> None:
        self.cfg = cfg
        self.authenticator = authenticator or ImapAuthenticator(
            cfg.host,
            cfg.port,
            ImapCredentials(account=cfg.account, password=cfg.password),
            timeout=cfg.timeout,
        )
        self._conn: Optional[imaplib.IMAP4] = None
        self.message_count = 0

    def __enter__(self) -> "ImapMailboxSession":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def open(self) -> None:
        if self._conn is not None:
            return
        conn = self.authenticator.login()
        self._conn = conn

        try:
            typ, data = conn.select(self.cfg.folder, readonly=True)
        except (imaplib.IMAP4.error, OSError) as e:
            self.close()
            raise MailboxError(f"Failed to select folder {self.cfg.folder}: {e}") from e
        if typ != "OK":
            self.close()
            raise MailboxError(f"Failed to select folder {self.cfg.folder}")

        try:
            self.message_count = int(data[0]) if data and data[0] else 0
        except (TypeError, ValueError) as e:
            self.close()
            raise MailboxError(f"Unexpected SELECT response for {self.cfg.folder}: {data!r}") from e
        logger.info(f"Selected {self.cfg.folder}: {self.message_count} messages")

    def fetch_all(self) -> list[RawEmail]:
        """Fetch every message in the folder, in mailbox order."""
        if self._conn is None:
            raise MailboxError("Mailbox session is not open")
        if self.message_count == 0:
            return []

        try:
            typ, msg_data = self._conn.fetch("1:*", "(RFC822)")
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailboxError(f"FETCH failed: {e}") from e
        if typ != "OK":
            raise MailboxError("FETCH failed")

        results: list[RawEmail] = []
        for item in msg_data or []:
            # Literal responses come back as (b"<seq> (RFC822 {n}", body); the rest is framing
            if not isinstance(item, tuple) or len(item) < 2:
                continue
            m = _FETCH_SEQ.match(item[0])
            seq = int(m.group(1)) if m else len(results) + 1
            results.append(
                RawEmail(
                    account=self.cfg.account,
                    folder=self.cfg.folder,
                    seq=seq,
                    rfc822_bytes=item[1],
                )
            )

        logger.info(f"Fetched {len(results)} messages from {self.cfg.folder}")
        return results

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"Ignoring error during logout: {e}")
        finally:
            self._conn = None
