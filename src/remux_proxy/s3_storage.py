"""S3 implementation of ObjectStorage."""

import logging
import os

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import UpstreamStoreFailure
from .interfaces import StoredObject

logger = logging.getLogger(__name__)

# Minimum S3 multipart part size (except last) is 5 MB
MULTIPART_CHUNK_SIZE = 8 * 1024 * 1024  # 8 MB
MULTIPART_THRESHOLD = 100 * 1024 * 1024  # 100 MB: use multipart above this
STREAM_CHUNK_SIZE = 64 * 1024

# HeadObject error codes treated as "does not exist" (access denied included)
_ABSENT_ERROR_CODES = frozenset(
    {"404", "NoSuchKey", "NotFound", "403", "Forbidden", "AccessDenied"}
)


def _object_key(key: str) -> str:
    """Media keys are /-rooted; S3 object keys are not."""
    return key.lstrip("/")


class S3ObjectStorage:
    """ObjectStorage implementation using S3 (or any S3-compatible endpoint)."""

    def __init__(
        self,
        bucket: str,
        *,
        region_name: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        exists_timeout_sec: float = 30,
        transfer_timeout_sec: float = 120,
    ) -> None:
        self._bucket = bucket
        session = boto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region_name,
        )
        # Path-style addressing for MinIO and other self-hosted endpoints
        base = Config(s3={"addressing_style": "path"}, retries={"max_attempts": 2})
        self._head_client = session.client(
            "s3",
            endpoint_url=endpoint_url,
            config=base.merge(
                Config(connect_timeout=exists_timeout_sec, read_timeout=exists_timeout_sec)
            ),
        )
        self._client = session.client(
            "s3",
            endpoint_url=endpoint_url,
            config=base.merge(
                Config(connect_timeout=exists_timeout_sec, read_timeout=transfer_timeout_sec)
            ),
        )

    def exists(self, key: str) -> bool:
        """Return True if the object exists; not found and access denied return False."""
        try:
            self._head_client.head_object(Bucket=self._bucket, Key=_object_key(key))
            return True
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _ABSENT_ERROR_CODES:
                return False
            raise UpstreamStoreFailure("exists", key, e) from e
        except BotoCoreError as e:
            raise UpstreamStoreFailure("exists", key, e) from e

    def get(self, key: str) -> StoredObject:
        """Open the object for streamed reading."""
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=_object_key(key))
        except (ClientError, BotoCoreError) as e:
            raise UpstreamStoreFailure("get", key, e) from e
        body = resp["Body"]
        return StoredObject(
            body.iter_chunks(chunk_size=STREAM_CHUNK_SIZE),
            content_length=resp.get("ContentLength"),
            content_type=resp.get("ContentType"),
            close=body.close,
        )

    def download_file(self, key: str, local_path: str) -> None:
        """Stream the object to local_path without loading it into memory."""
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=_object_key(key))
            body = resp["Body"]
            try:
                with open(local_path, "wb") as f:
                    for chunk in body.iter_chunks(chunk_size=STREAM_CHUNK_SIZE):
                        f.write(chunk)
            finally:
                body.close()
        except (ClientError, BotoCoreError, OSError) as e:
            raise UpstreamStoreFailure("download", key, e) from e
        logger.debug("s3: downloaded key=%s -> %s", key, local_path)

    def upload_file(self, local_path: str, key: str, content_type: str) -> None:
        """Upload a file from local path; uses multipart for files over 100 MB."""
        try:
            file_size = os.path.getsize(local_path)
            if file_size >= MULTIPART_THRESHOLD:
                self._upload_multipart(local_path, key, content_type)
            else:
                with open(local_path, "rb") as f:
                    self._client.put_object(
                        Bucket=self._bucket,
                        Key=_object_key(key),
                        Body=f,
                        ContentType=content_type,
                    )
        except (ClientError, BotoCoreError, OSError) as e:
            raise UpstreamStoreFailure("upload", key, e) from e
        logger.debug("s3: uploaded %s -> key=%s size=%s", local_path, key, file_size)

    def _upload_multipart(self, local_path: str, key: str, content_type: str) -> None:
        """Upload using S3 multipart API for large files."""
        object_key = _object_key(key)
        resp = self._client.create_multipart_upload(
            Bucket=self._bucket, Key=object_key, ContentType=content_type
        )
        upload_id = resp["UploadId"]
        parts: list[dict] = []
        try:
            with open(local_path, "rb") as f:
                part_number = 1
                while True:
                    chunk = f.read(MULTIPART_CHUNK_SIZE)
                    if not chunk:
                        break
                    part_resp = self._client.upload_part(
                        Bucket=self._bucket,
                        Key=object_key,
                        UploadId=upload_id,
                        PartNumber=part_number,
                        Body=chunk,
                    )
                    parts.append({"ETag": part_resp["ETag"], "PartNumber": part_number})
                    part_number += 1
            self._client.complete_multipart_upload(
                Bucket=self._bucket,
                Key=object_key,
                UploadId=upload_id,
                MultipartUpload={"Parts": parts},
            )
        except Exception:
            self._client.abort_multipart_upload(
                Bucket=self._bucket, Key=object_key, UploadId=upload_id
            )
            raise

    def delete(self, key: str) -> None:
        """Delete the object."""
        try:
            self._client.delete_object(Bucket=self._bucket, Key=_object_key(key))
        except (ClientError, BotoCoreError) as e:
            raise UpstreamStoreFailure("delete", key, e) from e
