from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredReport:
    filename: str
    location: str  # filesystem path or s3:// URI
    size_bytes: int


class ReportStore(Protocol):
    def put(self, *, filename: str, data: bytes) -> StoredReport: ...
