from imap_dmarc_extractor.infrastructure.email.providers.imap.auth import (
    DEFAULT_IMAP_PORT,
    ImapAuthenticator,
    ImapCredentials,
)
from imap_dmarc_extractor.infrastructure.email.providers.imap.client import (
    ImapConfig,
    ImapMailboxSession,
    parse_server,
)

__all__ = [
    "DEFAULT_IMAP_PORT",
    "ImapAuthenticator",
    "ImapConfig",
    "ImapCredentials",
    "ImapMailboxSession",
    "parse_server",
]
