from __future__ import annotations
from dataclasses import dataclass, field
import imaplib

from imap_dmarc_extractor.domain.errors import MailboxError

DEFAULT_IMAP_PORT = 993


@dataclass(frozen=True)
class ImapCredentials:
    """
    Credentials for a single IMAP account.
    """
    account: str
    password: str = field(repr=False)


class ImapAuthenticator:
    """
    Responsible ONLY for establishing an authenticated IMAP connection.
    No folder logic, no fetching, no parsing.
    """

    def __init__(self, host: str, port: int, creds: ImapCredentials, timeout: float | None = None) -> None:
        self.host = host
        self.port = port
        self.creds = creds
        self.timeout = timeout

    def login(self) -> imaplib.IMAP4_SSL:
        """
        Returns an authenticated IMAP4_SSL connection (implicit TLS).
        """
        try:
            conn = imaplib.IMAP4_SSL(host=self.host, port=self.port, timeout=self.timeout)
        except OSError as e:
            raise MailboxError(f"Error connecting to {self.host}:{self.port}: {e}") from e

        try:
            conn.login(self.creds.account, self.creds.password)
        except (imaplib.IMAP4.error, OSError) as e:
            try:
                conn.shutdown()
            except OSError:
                pass
            raise MailboxError(f"Login failed for account '{self.creds.account}': {e}") from e
        return conn
