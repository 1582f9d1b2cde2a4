"""
App config from environment with defaults.
Uses pydantic-settings so all env vars are validated and documented in one model.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ProxySettings(BaseSettings):
    """
    All environment variables used by the remux proxy.
    Env vars are read from os.environ (UPPER_SNAKE_CASE by default).
    """

    model_config = SettingsConfigDict(
        env_file=None,  # .env is loaded via bootstrap_env() so env is ready
        extra="ignore",
    )

    # Object store (S3-compatible)
    s3_bucket: str = "mediawiki"
    s3_endpoint: str = "http://localhost:9000"
    s3_access_key: str = "minioadmin"
    s3_secret_key: str = "minioadmin"
    s3_region: str = "us-east-1"
    s3_exists_timeout_sec: float = 30
    s3_transfer_timeout_sec: float = 120

    # HTTP listener, host:port (empty host = all interfaces)
    listen_addr: str = ":8080"

    # Remux executor
    ffmpeg_path: str = "ffmpeg"
    remux_timeout_sec: float = 600
    scratch_dir: str | None = None

    log_level: str = "INFO"

    def listen_host_port(self) -> tuple[str, int]:
        """Parse listen_addr (':8080', '127.0.0.1:9000') into (host, port)."""
        host, sep, port = self.listen_addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"Invalid LISTEN_ADDR: {self.listen_addr!r}")
        return host or "0.0.0.0", int(port)


def get_settings() -> ProxySettings:
    """Return validated settings from current environment."""
    return ProxySettings()


def bootstrap_env() -> None:
    """
    Load .env from path in REMUX_PROXY_ENV_FILE if set.
    Call once at startup before get_settings() so vars from the file are in os.environ.
    """
    import os

    import dotenv

    path = os.environ.get("REMUX_PROXY_ENV_FILE")
    if path:
        dotenv.load_dotenv(Path(path).resolve())
