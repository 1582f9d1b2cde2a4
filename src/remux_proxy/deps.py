"""Dependencies and app state for FastAPI routes."""

from fastapi import Request

from .proxy import RemuxProxy


def get_proxy(request: Request) -> RemuxProxy:
    """Return RemuxProxy from app state or build from env (cached on app state).

    The proxy is process-wide so the single-flight registry is shared by all requests.
    """
    proxy = getattr(request.app.state, "proxy", None)
    if proxy is not None:
        return proxy
    from .env_config import proxy_from_env

    proxy = proxy_from_env()
    request.app.state.proxy = proxy
    return proxy
