from __future__ import annotations

from imap_dmarc_extractor.application.ports.report_store import ReportStore
from imap_dmarc_extractor.infrastructure.settings import Settings
from imap_dmarc_extractor.infrastructure.storage.local_store import LocalReportStore


def build_report_store(settings: Settings) -> ReportStore:
    if settings.report_store == "local":
        return LocalReportStore(settings.output_dir, collision_policy=settings.collision_policy)
    if settings.report_store == "s3":
        # boto3 is only needed for this backend
        from imap_dmarc_extractor.infrastructure.storage.s3_store import S3ReportStore, S3StoreConfig

        if not settings.s3_bucket:
            raise ValueError("S3_BUCKET is required when REPORT_STORE=s3")
        return S3ReportStore(
            S3StoreConfig(
                endpoint=settings.s3_endpoint,
                region=settings.s3_region,
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key.get_secret_value() if settings.s3_secret_key else None,
                bucket=settings.s3_bucket,
                prefix=settings.s3_prefix,
            )
        )
    raise ValueError(f"Unsupported REPORT_STORE: {settings.report_store}")
