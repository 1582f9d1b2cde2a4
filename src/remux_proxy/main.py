"""FastAPI app: GET serves (building on a miss) WebM derivatives, DELETE removes them."""

import logging
from collections.abc import Iterator

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from .config import bootstrap_env, get_settings
from .deps import get_proxy
from .errors import RemuxProxyError, UpstreamStoreFailure
from .interfaces import StoredObject
from .logging_config import configure_logging
from .proxy import RemuxProxy

# Load .env from REMUX_PROXY_ENV_FILE if set. Unset in production containers.
bootstrap_env()
configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

WEBM_MEDIA_TYPE = "audio/webm"
# Derivatives are immutable once built
CACHE_CONTROL = "max-age=86400"

app = FastAPI(title="WebM Remux Proxy", version="0.1.0")


@app.exception_handler(RemuxProxyError)
async def remux_proxy_error_handler(request: Request, exc: RemuxProxyError) -> PlainTextResponse:
    """Map proxy errors to plain-text responses; 5xx details stay in the logs."""
    if exc.status_code < 500:
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    logger.error(
        "%s path=%s failed (%s): %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc,
    )
    if isinstance(exc, UpstreamStoreFailure) and exc.operation == "delete":
        content = "Failed to delete transcoded file"
    else:
        content = "Internal Server Error"
    return PlainTextResponse(content, status_code=exc.status_code)


def _stream_body(obj: StoredObject, path: str) -> Iterator[bytes]:
    """Yield object chunks; a read failure ends the transfer (bytes already sent stand)."""
    sent = 0
    try:
        for chunk in obj.iter_chunks():
            sent += len(chunk)
            yield chunk
    except Exception as e:
        logger.error("path=%s stream aborted after %s bytes: %s", path, sent, e)
        raise
    finally:
        obj.close()


@app.get("/{path:path}", response_model=None)
async def get_derivative(
    path: str,
    proxy: RemuxProxy = Depends(get_proxy),
) -> StreamingResponse:
    """Serve the derivative from the store, remuxing it from its source on first request."""
    media_path = "/" + path
    obj = await proxy.fetch(media_path)
    headers = {"Cache-Control": CACHE_CONTROL}
    if obj.content_length is not None:
        headers["Content-Length"] = str(obj.content_length)
    return StreamingResponse(
        _stream_body(obj, media_path),
        media_type=WEBM_MEDIA_TYPE,
        headers=headers,
    )


@app.delete("/{path:path}", response_class=PlainTextResponse)
async def delete_derivative(
    path: str,
    proxy: RemuxProxy = Depends(get_proxy),
) -> PlainTextResponse:
    """Delete the transcoded derivative for an original or transcoded path."""
    await proxy.delete("/" + path)
    return PlainTextResponse("Transcoded file deleted successfully")
