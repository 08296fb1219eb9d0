"""Infrastructure layer - IMAP access, MIME handling, storage and configuration."""

from imap_dmarc_extractor.infrastructure.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
