"""
S3 append target.

Appends blocks to S3 objects using conditional offset writes
(``PutObject`` with ``WriteOffsetBytes``). The bucket must support
appends, e.g. an S3 Express One Zone directory bucket or an S3-compatible
endpoint that implements the same precondition.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from logsink.errors import (
    AppendError,
    AppendTargetError,
    CreateError,
    ObjectNotFoundError,
    OffsetMismatchError,
)
from logsink.target import AppendTarget

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
OFFSET_MISMATCH_CODES = {"InvalidWriteOffset"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3AppendTarget(AppendTarget):
    """
    Append target backed by an S3 bucket.

    The boto3 client is created lazily on first use, so constructing the
    target never touches the network or credentials.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        profile: Optional[str] = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 30.0,
        client=None,
    ):
        """
        Initialize the S3 append target.

        Args:
            bucket: S3 bucket name
            region: AWS region
            endpoint_url: Custom endpoint for S3-compatible services
            profile: Optional AWS profile name for the boto3 session
            connect_timeout: Connect timeout in seconds for every call
            read_timeout: Read timeout in seconds for every call
            client: Pre-built S3 client (skips lazy creation)
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.profile = profile
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._s3_client = client

    @property
    def s3_client(self):
        """Lazy initialize S3 client."""
        if self._s3_client is None:
            session = boto3.session.Session(profile_name=self.profile)
            self._s3_client = session.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                config=Config(
                    connect_timeout=self.connect_timeout,
                    read_timeout=self.read_timeout,
                ),
            )
        return self._s3_client

    def get_size(self, key: str) -> Optional[int]:
        try:
            response = self.s3_client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return None
            raise AppendTargetError(
                f"Failed to read size of s3://{self.bucket}/{key}: {e}", key=key
            ) from e
        except BotoCoreError as e:
            raise AppendTargetError(
                f"Failed to read size of s3://{self.bucket}/{key}: {e}", key=key
            ) from e
        return int(response["ContentLength"])

    def create(
        self,
        key: str,
        content_type: str,
        content_disposition: Optional[str] = None,
    ) -> None:
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": b"",
            "ContentType": content_type,
        }
        if content_disposition:
            params["ContentDisposition"] = content_disposition

        try:
            self.s3_client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise CreateError(
                f"Failed to create s3://{self.bucket}/{key}: {e}", key=key
            ) from e

        logger.debug(f"Created s3://{self.bucket}/{key}")

    def append_at(self, key: str, data: bytes, expected_offset: int) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                WriteOffsetBytes=expected_offset,
            )
        except ClientError as e:
            code = _error_code(e)
            if code in OFFSET_MISMATCH_CODES:
                raise OffsetMismatchError(
                    f"Append to s3://{self.bucket}/{key} rejected at offset {expected_offset}",
                    key=key,
                    expected_offset=expected_offset,
                ) from e
            if code in NOT_FOUND_CODES:
                raise ObjectNotFoundError(
                    f"s3://{self.bucket}/{key} does not exist", key=key
                ) from e
            raise AppendError(
                f"Failed to append to s3://{self.bucket}/{key}: {e}", key=key
            ) from e
        except BotoCoreError as e:
            raise AppendError(
                f"Failed to append to s3://{self.bucket}/{key}: {e}", key=key
            ) from e

        logger.debug(
            f"Appended {len(data)} bytes to s3://{self.bucket}/{key} at offset {expected_offset}"
        )
