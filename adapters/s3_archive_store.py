"""
S3-backed archive store adapter.

Implements ArchiveStorePort using boto3 for finished export archives.
"""

from __future__ import annotations

from typing import Optional

import boto3
from botocore.exceptions import ClientError

from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ExternalServiceError


logger = get_scoped_logger(LogScope.ADAPTER)


class S3ArchiveStoreAdapter:
    """Amazon S3 implementation of ArchiveStorePort.

    Stores archives under ``{bucket}/{prefix}/{session_id}/{filename}``.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "exports",
        region: str = Defaults.AWS_REGION,
        endpoint_url: str = "",
        s3_client: Optional[object] = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        client_kwargs: dict = {"region_name": region}
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        self._s3 = s3_client or boto3.client("s3", **client_kwargs)

    def store_archive(self, session_id: str, filename: str, content: bytes) -> str:
        """Upload the archive and return its s3:// URI."""
        key = f"{self.prefix}/{session_id}/{filename}" if self.prefix else f"{session_id}/{filename}"
        try:
            self._s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType="application/zip",
                ContentDisposition=f'attachment; filename="{filename}"',
            )
        except ClientError as exc:
            logger.error("s3_archive_upload_failed", session_id=session_id, error=str(exc))
            raise ExternalServiceError("S3", f"Failed to upload archive: {exc}") from exc

        uri = f"s3://{self.bucket}/{key}"
        logger.info("archive_stored_s3", session_id=session_id, s3_uri=uri, size_bytes=len(content))
        return uri
