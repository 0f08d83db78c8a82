import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from botocore.exceptions import ClientError

from universal_recommender.constants.app_constants import AppConstants
from universal_recommender.constants.app_message import AppMessage

logger = logging.getLogger(__name__)


class S3JsonlSink:
    """
    Write-only sink collecting JSON Lines exports and uploading them to S3 in one object.

    Usable as the ``io`` argument of ``Engine.export_entity`` / ``Engine.export_event``:

        with S3JsonlSink(get_s3_client()) as sink:
            engine.export_event(sink, type='purchase', user='u-1', item='i-1')
    """

    def __init__(self, client, bucket_name: Optional[str] = None, key: Optional[str] = None):
        """
        Args:
            client: boto3 S3 client
            bucket_name: Target bucket. Falls back to AWS_S3_BUCKET_NAME.
            key: Object key. Defaults to ``events/<timestamp>.jsonl``.
        """
        self.bucket_name = bucket_name or os.getenv(AppConstants.ENV_S3_BUCKET)
        if not self.bucket_name:
            raise ValueError(AppMessage.S3_BUCKET_MISSING)

        self.s3_client = client
        self.key = key or self._default_key()
        self._lines: List[str] = []

    @staticmethod
    def _default_key() -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        return f"events/{timestamp}.jsonl"

    def write(self, data: str) -> int:
        self._lines.append(data)
        return len(data)

    def flush(self) -> Optional[str]:
        """
        Upload everything written so far, replacing the object at ``key``.

        Returns:
            str: S3 key of the uploaded object, None if nothing was written

        Raises:
            ClientError: If upload to S3 fails
        """
        if not self._lines:
            return None
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self.key,
                Body="".join(self._lines),
                ContentType='application/jsonl'
            )
        except ClientError as e:
            logger.error(f"Failed to upload {self.key} to S3: {str(e)}", exc_info=True)
            raise
        logger.info("Uploaded %d lines to s3://%s/%s", len(self._lines), self.bucket_name, self.key)
        return self.key

    def __enter__(self) -> 'S3JsonlSink':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()
