from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RawEmail:
    account: str
    folder: str
    seq: int  # 1-based position in the mailbox
    rfc822_bytes: bytes


class MailboxSession(Protocol):
    """An explicitly opened mailbox. ``fetch_all`` keeps mailbox order."""

    def open(self) -> None: ...
    def fetch_all(self) -> list[RawEmail]: ...
    def close(self) -> None: ...
