"""Report storage backends."""

from imap_dmarc_extractor.infrastructure.storage.factory import build_report_store
from imap_dmarc_extractor.infrastructure.storage.local_store import LocalReportStore, safe_filename

__all__ = [
    "LocalReportStore",
    "build_report_store",
    "safe_filename",
]
