from __future__ import annotations

import gzip
import io
import zipfile
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from imap_dmarc_extractor.application.ports.email_source import RawEmail
from imap_dmarc_extractor.application.ports.report_store import StoredReport
from imap_dmarc_extractor.domain.errors import ReportStoreError


def make_zip(*entries: tuple[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buf.getvalue()


def make_gzip(data: bytes) -> bytes:
    return gzip.compress(data)


def application_part(data: bytes, subtype: str, filename: str | None = None) -> MIMEApplication:
    part = MIMEApplication(data, _subtype=subtype)
    if filename is not None:
        part.add_header("Content-Disposition", "attachment", filename=filename)
    return part


def top_level_message(
    data: bytes, subtype: str, filename: str | None = None, message_id: str | None = "<r1@example.com>"
) -> bytes:
    msg = application_part(data, subtype, filename)
    msg["Subject"] = "Report domain: example.com"
    if message_id:
        msg["Message-ID"] = message_id
    return msg.as_bytes()


def multipart_message(*parts, message_id: str | None = "<r2@example.com>") -> bytes:
    msg = MIMEMultipart()
    msg["Subject"] = "Report domain: example.com"
    if message_id:
        msg["Message-ID"] = message_id
    msg.attach(MIMEText("This is a DMARC aggregate report.", "plain"))
    for part in parts:
        msg.attach(part)
    return msg.as_bytes()


def text_message(message_id: str | None = "<plain@example.com>") -> bytes:
    msg = MIMEText("Nothing to see here", "plain")
    msg["Subject"] = "Hello"
    if message_id:
        msg["Message-ID"] = message_id
    return msg.as_bytes()


class FakeSession:
    def __init__(self, messages: list[bytes], fail_on_fetch: Exception | None = None) -> None:
        self.messages = messages
        self.fail_on_fetch = fail_on_fetch
        self.calls: list[str] = []

    def open(self) -> None:
        self.calls.append("open")

    def fetch_all(self) -> list[RawEmail]:
        self.calls.append("fetch_all")
        if self.fail_on_fetch:
            raise self.fail_on_fetch
        return [
            RawEmail(account="dmarc@example.com", folder="INBOX", seq=i, rfc822_bytes=m)
            for i, m in enumerate(self.messages, start=1)
        ]

    def close(self) -> None:
        self.calls.append("close")


class MemoryStore:
    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.files: dict[str, bytes] = {}
        self.fail_for = fail_for or set()

    def put(self, *, filename: str, data: bytes) -> StoredReport:
        if filename in self.fail_for:
            raise ReportStoreError(f"disk full while writing {filename}")
        self.files[filename] = data
        return StoredReport(filename=filename, location=f"memory://{filename}", size_bytes=len(data))
