"""Error taxonomy for report extraction.

Everything deriving from ``MessageSkipped`` is scoped to a single message:
the pipeline logs it and moves on to the next one. ``MailboxError`` is the
only failure that ends a run.
"""

from __future__ import annotations


class ExtractorError(RuntimeError):
    """Base class for all extractor errors."""


class MailboxError(ExtractorError):
    """Connecting, authenticating or selecting the folder failed."""


class MessageSkipped(ExtractorError):
    """A single message could not be turned into a stored report."""


class ParseError(MessageSkipped):
    pass


class NotFound(MessageSkipped):
    pass


class ExtractionError(MessageSkipped):
    pass


class MissingBody(ExtractionError):
    pass


class MissingName(ExtractionError):
    pass


class DecompressionError(MessageSkipped):
    pass


class CorruptArchive(DecompressionError):
    pass


class CorruptStream(DecompressionError):
    pass


class UnsupportedFormat(DecompressionError):
    pass


class ReportStoreError(MessageSkipped):
    pass
