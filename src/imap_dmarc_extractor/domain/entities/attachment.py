from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from imap_dmarc_extractor.domain.errors import MissingName


class ReportFormat(str, Enum):
    """Container formats a report can arrive in."""

    ARCHIVE = "archive"
    GZIP_STREAM = "gzip_stream"


@dataclass(frozen=True)
class Attachment:
    content: bytes
    mimetype: str
    name: str

    # Set once the payload has been decompressed
    decompressed: Optional[bytes] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise MissingName("No file name found.")

    @property
    def is_decompressed(self) -> bool:
        return self.decompressed is not None
