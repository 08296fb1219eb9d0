from __future__ import annotations

from dataclasses import dataclass

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from imap_dmarc_extractor.application.ports.report_store import StoredReport
from imap_dmarc_extractor.domain.errors import ReportStoreError
from imap_dmarc_extractor.infrastructure.storage.local_store import safe_filename


@dataclass(frozen=True)
class S3StoreConfig:
    endpoint: str | None
    region: str
    access_key: str | None
    secret_key: str | None
    bucket: str
    prefix: str = "dmarc-reports"
    force_path_style: bool = True


class S3ReportStore:
    """Writes reports to ``<prefix>/<filename>``; existing keys are overwritten."""

    def __init__(self, cfg: S3StoreConfig, client=None) -> None:
        self.cfg = cfg
        if client is None:
            s3_cfg = Config(s3={"addressing_style": "path"} if cfg.force_path_style else {})
            client = boto3.client(
                "s3",
                endpoint_url=cfg.endpoint,
                aws_access_key_id=cfg.access_key,
                aws_secret_access_key=cfg.secret_key,
                region_name=cfg.region,
                config=s3_cfg,
            )
        self.client = client

    def _key_for(self, filename: str) -> str:
        prefix = self.cfg.prefix.strip("/")
        name = safe_filename(filename)
        return f"{prefix}/{name}" if prefix else name

    def put(self, *, filename: str, data: bytes) -> StoredReport:
        key = self._key_for(filename)
        try:
            self.client.put_object(
                Bucket=self.cfg.bucket,
                Key=key,
                Body=data,
                ContentType="application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            raise ReportStoreError(str(e)) from e

        return StoredReport(
            filename=key.rsplit("/", 1)[-1],
            location=f"s3://{self.cfg.bucket}/{key}",
            size_bytes=len(data),
        )
