"""Turn a compressed report attachment back into the original document."""

from __future__ import annotations
import dataclasses
import shutil
import zipfile
import zlib
from io import BytesIO
from pathlib import PurePosixPath

from loguru import logger

from imap_dmarc_extractor.domain.entities.attachment import Attachment, ReportFormat
from imap_dmarc_extractor.domain.errors import CorruptArchive, CorruptStream, UnsupportedFormat

MAGIC_ZIP = b"\x50\x4b\x03\x04"

_FORMATS_BY_MIMETYPE = {
    "application/zip": ReportFormat.ARCHIVE,
    "application/gzip": ReportFormat.GZIP_STREAM,
    # Ambiguous in general, but report senders use it for gzip streams
    "application/octet-stream": ReportFormat.GZIP_STREAM,
}


def detect_format(attachment: Attachment, sniff: bool = False) -> ReportFormat:
    """Classify the container from the declared media type.

    With ``sniff`` enabled, an octet-stream whose bytes start with the zip
    local-file header is treated as an archive. Everything else keeps the
    media-type mapping.
    """
    try:
        fmt = _FORMATS_BY_MIMETYPE[attachment.mimetype]
    except KeyError:
        raise UnsupportedFormat(f"Unsupported media type: {attachment.mimetype}") from None

    if sniff and attachment.mimetype == "application/octet-stream":
        if attachment.content.startswith(MAGIC_ZIP):
            logger.debug(f"{attachment.name}: octet-stream sniffed as zip archive")
            return ReportFormat.ARCHIVE
    return fmt


def strip_extension(name: str) -> str:
    # report.xml.gz -> report.xml; names without an extension stay as they are
    suffix = PurePosixPath(name).suffix
    return name[: -len(suffix)] if suffix else name


def _entry_basename(entry_name: str) -> str:
    return PurePosixPath(entry_name.replace("\\", "/")).name


def _decompress_archive(content: bytes) -> tuple[bytes, str]:
    try:
        archive = zipfile.ZipFile(BytesIO(content))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as e:
        raise CorruptArchive(f"Not a valid zip archive: {e}") from e

    with archive:
        entries = archive.infolist()
        if not entries:
            raise CorruptArchive("Zip archive has no entries")
        entry = entries[0]

        out = BytesIO()
        try:
            with archive.open(entry) as report:
                shutil.copyfileobj(report, out)
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError, EOFError, OSError, zlib.error) as e:
            raise CorruptArchive(f"Could not read {entry.filename!r}: {e}") from e

    name = _entry_basename(entry.filename)
    if not name:
        raise CorruptArchive(f"Archive entry has no usable name: {entry.filename!r}")
    return out.getvalue(), name


def _decompress_gzip(content: bytes) -> bytes:
    # Only the first member is decoded; anything after it (CRLF or padding
    # added in transit) is ignored
    decoder = zlib.decompressobj(wbits=zlib.MAX_WBITS | 16)
    try:
        data = decoder.decompress(content)
    except zlib.error as e:
        raise CorruptStream(f"Not a valid gzip stream: {e}") from e
    if not decoder.eof:
        raise CorruptStream("Not a valid gzip stream: ended before the end-of-stream marker")
    if decoder.unused_data:
        logger.debug(f"Ignoring {len(decoder.unused_data)} bytes after the gzip stream")
    return data


def decompress_attachment(attachment: Attachment, sniff: bool = False) -> Attachment:
    """Return a copy of ``attachment`` with ``decompressed`` and the final name set.

    Zip archives yield their first entry, named after the entry itself.
    Gzip streams keep the attachment name minus its last extension.
    """
    fmt = detect_format(attachment, sniff=sniff)

    if fmt is ReportFormat.ARCHIVE:
        data, name = _decompress_archive(attachment.content)
    else:
        data = _decompress_gzip(attachment.content)
        name = strip_extension(attachment.name)

    logger.debug(f"Decompressed {attachment.name} ({fmt.value}) -> {name}, {len(data)} bytes")
    return dataclasses.replace(attachment, decompressed=data, name=name)
