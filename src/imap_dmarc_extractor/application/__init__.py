"""Application layer - ports and the report extraction use case."""

from imap_dmarc_extractor.application.use_cases.extract_reports import (
    ExtractReportsUseCase,
    MessageOutcome,
    MessageState,
    RunSummary,
)

__all__ = [
    "ExtractReportsUseCase",
    "MessageOutcome",
    "MessageState",
    "RunSummary",
]
