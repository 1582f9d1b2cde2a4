"""Entrypoint: python -m remux_proxy (or the remux-proxy script) runs the HTTP server."""

import logging

import uvicorn

from .config import bootstrap_env, get_settings
from .logging_config import configure_logging


def main() -> None:
    bootstrap_env()
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    host, port = settings.listen_host_port()
    logger.info(
        "remux-proxy starting on %s:%s; bucket=%s endpoint=%s",
        host,
        port,
        settings.s3_bucket,
        settings.s3_endpoint,
    )
    uvicorn.run(
        "remux_proxy.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
