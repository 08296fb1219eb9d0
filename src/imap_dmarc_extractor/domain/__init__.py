"""Domain models and errors."""

from imap_dmarc_extractor.domain.entities.attachment import Attachment, ReportFormat
from imap_dmarc_extractor.domain.errors import (
    CorruptArchive,
    CorruptStream,
    DecompressionError,
    ExtractionError,
    ExtractorError,
    MailboxError,
    MessageSkipped,
    MissingBody,
    MissingName,
    NotFound,
    ParseError,
    ReportStoreError,
    UnsupportedFormat,
)

__all__ = [
    "Attachment",
    "ReportFormat",
    "ExtractorError",
    "MailboxError",
    "MessageSkipped",
    "ParseError",
    "NotFound",
    "ExtractionError",
    "MissingBody",
    "MissingName",
    "DecompressionError",
    "CorruptArchive",
    "CorruptStream",
    "UnsupportedFormat",
    "ReportStoreError",
]
