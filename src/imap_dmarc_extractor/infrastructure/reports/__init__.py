from imap_dmarc_extractor.infrastructure.reports.decompress import (
    decompress_attachment,
    detect_format,
    strip_extension,
)

__all__ = ["decompress_attachment", "detect_format", "strip_extension"]
