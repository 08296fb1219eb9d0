"""Pull DMARC reports out of every message in a mailbox."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from imap_dmarc_extractor.application.ports.email_source import MailboxSession, RawEmail
from imap_dmarc_extractor.application.ports.report_store import ReportStore, StoredReport
from imap_dmarc_extractor.domain.errors import MessageSkipped, ReportStoreError
from imap_dmarc_extractor.infrastructure.email.rfc822 import (
    extract_attachment,
    locate_report_part,
    message_identifier,
    parse_message,
)
from imap_dmarc_extractor.infrastructure.reports.decompress import decompress_attachment

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_PARTIAL = 3


class MessageState(str, Enum):
    FETCHED = "fetched"
    PARSED = "parsed"
    LOCATED = "located"
    EXTRACTED = "extracted"
    DECOMPRESSED = "decompressed"
    WRITTEN = "written"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class MessageOutcome:
    seq: int
    message_id: str
    state: MessageState
    reason: Optional[str] = None
    stored: Optional[StoredReport] = None


@dataclass
class RunSummary:
    total: int = 0
    outcomes: list[MessageOutcome] = field(default_factory=list)

    @property
    def written(self) -> int:
        return sum(1 for o in self.outcomes if o.state is MessageState.WRITTEN)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.state is MessageState.SKIPPED)

    @property
    def exit_code(self) -> int:
        return EXIT_PARTIAL if self.skipped else EXIT_OK


def print_progress(done: int, total: int) -> None:
    print(f"{100.0 / total * done:.2f} % done")


class ExtractReportsUseCase:
    """Extract one report per message and hand it to the report store.

    Flow per message:
    1. Parse the raw RFC822 bytes
    2. Locate the report part (top-level, then direct children)
    3. Extract bytes + declared filename
    4. Decompress (zip entry or gzip stream)
    5. Write through the report store

    A failure at any step skips that message only. Mailbox errors abort
    the run.
    """

    def __init__(
        self,
        session: MailboxSession,
        store: ReportStore,
        sniff_octet_stream: bool = False,
        on_progress: Optional[Callable[[int, int], None]] = print_progress,
    ) -> None:
        self.session = session
        self.store = store
        self.sniff_octet_stream = sniff_octet_stream
        self.on_progress = on_progress

    def run(self) -> RunSummary:
        """Process every message in the mailbox once."""
        self.session.open()
        try:
            emails = self.session.fetch_all()
            logger.info(f"Found {len(emails)} messages to process")

            summary = RunSummary(total=len(emails))
            for done, raw in enumerate(emails, start=1):
                outcome = self.process_message(raw)
                summary.outcomes.append(outcome)
                if self.on_progress:
                    self.on_progress(done, summary.total)
        finally:
            self.session.close()

        logger.info(
            f"Finished! written={summary.written}, skipped={summary.skipped}, total={summary.total}"
        )
        return summary

    def process_message(self, raw: RawEmail) -> MessageOutcome:
        """Run one message through the pipeline, never raising."""
        message_id = f"seq:{raw.seq}"
        state = MessageState.FETCHED
        try:
            em = parse_message(raw.rfc822_bytes)
            message_id = message_identifier(em, message_id)
            state = MessageState.PARSED

            part = locate_report_part(em)
            state = MessageState.LOCATED

            attachment = extract_attachment(part)
            state = MessageState.EXTRACTED

            attachment = decompress_attachment(attachment, sniff=self.sniff_octet_stream)
            state = MessageState.DECOMPRESSED

            stored = self.store.put(filename=attachment.name, data=attachment.decompressed)
        except MessageSkipped as e:
            return self._skip(raw, message_id, state, e)
        except Exception as e:
            logger.exception(f"Unexpected error on message {message_id}")
            return self._skip(raw, message_id, state, e)

        logger.info(f"Wrote {stored.filename} ({stored.size_bytes} bytes) Message: {message_id}")
        return MessageOutcome(
            seq=raw.seq,
            message_id=message_id,
            state=MessageState.WRITTEN,
            stored=stored,
        )

    def _skip(self, raw: RawEmail, message_id: str, state: MessageState, error: Exception) -> MessageOutcome:
        reason = f"{type(error).__name__}: {error}"
        log = logger.error if isinstance(error, ReportStoreError) else logger.warning
        log(f"Skipping after {state.value}: {reason} Message: {message_id}")
        return MessageOutcome(
            seq=raw.seq,
            message_id=message_id,
            state=MessageState.SKIPPED,
            reason=reason,
        )
