"""
Build adapter instances from environment variables.

Env vars (all optional, defaults in ProxySettings):
- S3_BUCKET, S3_ENDPOINT, S3_ACCESS_KEY, S3_SECRET_KEY, S3_REGION
- S3_EXISTS_TIMEOUT_SEC, S3_TRANSFER_TIMEOUT_SEC
- FFMPEG_PATH, REMUX_TIMEOUT_SEC, SCRATCH_DIR
"""

from .config import ProxySettings, get_settings
from .coordinator import RemuxCoordinator
from .proxy import RemuxProxy
from .remuxer import FfmpegRemuxer
from .s3_storage import S3ObjectStorage


def object_storage_from_env(settings: ProxySettings | None = None) -> S3ObjectStorage:
    """Build S3ObjectStorage from S3_* settings."""
    settings = settings or get_settings()
    return S3ObjectStorage(
        settings.s3_bucket,
        region_name=settings.s3_region,
        endpoint_url=settings.s3_endpoint or None,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        exists_timeout_sec=settings.s3_exists_timeout_sec,
        transfer_timeout_sec=settings.s3_transfer_timeout_sec,
    )


def remuxer_from_env(settings: ProxySettings | None = None) -> FfmpegRemuxer:
    """Build FfmpegRemuxer from FFMPEG_PATH and REMUX_TIMEOUT_SEC."""
    settings = settings or get_settings()
    return FfmpegRemuxer(settings.ffmpeg_path, timeout_sec=settings.remux_timeout_sec)


def proxy_from_env(settings: ProxySettings | None = None) -> RemuxProxy:
    """Build RemuxProxy wired to S3 and ffmpeg."""
    settings = settings or get_settings()
    storage = object_storage_from_env(settings)
    coordinator = RemuxCoordinator(
        storage, remuxer_from_env(settings), scratch_dir=settings.scratch_dir
    )
    return RemuxProxy(storage, coordinator)
