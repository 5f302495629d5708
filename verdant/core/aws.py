"""AWS S3 Service."""

import logging
import re
import boto3
from botocore.exceptions import ClientError
from verdant.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class S3Service:
    """Handles S3 interactions for plant photos."""

    _instance = None
    _s3_client = None

    def __new__(cls):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            try:
                cls._instance._s3_client = boto3.client(
                    "s3",
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                    region_name=settings.AWS_REGION,
                    config=boto3.session.Config(s3={'addressing_style': 'path'})
                )
            except Exception as e:
                logger.error(f"Failed to initialize S3 client: {e}")
                cls._instance._s3_client = None
        return cls._instance

    @property
    def client(self):
        """Get S3 client."""
        return self._s3_client

    @staticmethod
    def _validated_bucket_name() -> str:
        bucket = (settings.AWS_S3_BUCKET or "").strip()
        if not bucket:
            raise ValueError("AWS_S3_BUCKET is not configured.")
        # https://docs.aws.amazon.com/AmazonS3/latest/userguide/bucketnamingrules.html
        if not re.fullmatch(r"[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]", bucket):
            raise ValueError(f"Invalid AWS_S3_BUCKET value '{bucket}'.")
        return bucket

    def _require_client(self):
        if not self.client:
            raise ValueError("AWS S3 credentials not configured.")
        return self.client

    def generate_presigned_get_url(self, object_name: str, expiration=300):
        """Generate a presigned URL for reading private objects."""
        client = self._require_client()
        try:
            return client.generate_presigned_url(
                ClientMethod='get_object',
                Params={
                    'Bucket': self._validated_bucket_name(),
                    'Key': object_name
                },
                ExpiresIn=expiration
            )
        except ClientError as e:
            logger.error(f"Error generating presigned GET URL: {e}")
            raise

    def upload_bytes(self, object_name: str, data: bytes, content_type: str = "image/jpeg") -> None:
        """Upload raw bytes to S3."""
        client = self._require_client()
        try:
            client.put_object(
                Bucket=self._validated_bucket_name(),
                Key=object_name,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            logger.error(f"Error uploading file to S3: {e}")
            raise

    def delete_object(self, object_name: str) -> None:
        """Delete an object from S3."""
        client = self._require_client()
        try:
            client.delete_object(
                Bucket=self._validated_bucket_name(),
                Key=object_name,
            )
        except ClientError as e:
            logger.error(f"Error deleting file from S3: {e}")
            raise
