from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from loguru import logger

from imap_dmarc_extractor.application.ports.report_store import StoredReport
from imap_dmarc_extractor.domain.errors import ReportStoreError

CollisionPolicy = Literal["overwrite", "skip", "rename"]


def safe_filename(filename: str) -> str:
    """Drop directory parts so a report name cannot escape the output dir."""
    name = Path(filename.replace("\\", "/")).name
    if name in {"", ".", ".."}:
        raise ReportStoreError(f"Unusable report filename: {filename!r}")
    return name


class LocalReportStore:
    def __init__(self, directory: str | Path, collision_policy: CollisionPolicy = "overwrite") -> None:
        if collision_policy not in ("overwrite", "skip", "rename"):
            raise ValueError(f"Unsupported collision policy: {collision_policy}")
        self.directory = Path(directory)
        self.collision_policy = collision_policy

    def _target_path(self, filename: str) -> Path:
        path = self.directory / safe_filename(filename)
        if not path.exists() or self.collision_policy == "overwrite":
            return path

        if self.collision_policy == "skip":
            raise ReportStoreError(f"{path.name} already exists in {self.directory}")

        # rename: first free name-N.ext slot
        stem, suffix = path.stem, path.suffix
        n = 1
        while True:
            candidate = path.with_name(f"{stem}-{n}{suffix}")
            if not candidate.exists():
                logger.debug(f"{path.name} exists, writing {candidate.name} instead")
                return candidate
            n += 1

    def put(self, *, filename: str, data: bytes) -> StoredReport:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReportStoreError(str(e)) from e

        path = self._target_path(filename)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise ReportStoreError(str(e)) from e

        return StoredReport(filename=path.name, location=str(path), size_bytes=len(data))
