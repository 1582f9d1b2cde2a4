"""Error taxonomy for the remux proxy. Each error carries the HTTP status it maps to."""


class RemuxProxyError(Exception):
    """Base class for errors surfaced to HTTP clients."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequest(RemuxProxyError):
    """Path does not follow the derivative naming convention."""

    status_code = 400


class NotFound(RemuxProxyError):
    """Neither derivative nor source exists, or the deletion target is absent."""

    status_code = 404


class UpstreamStoreFailure(RemuxProxyError):
    """Object store operation failed for a reason other than absence."""

    def __init__(self, operation: str, key: str, cause: BaseException | None = None) -> None:
        detail = f"{operation} {key} failed"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
        self.operation = operation
        self.key = key


class BuildFailure(RemuxProxyError):
    """Remux executor exited non-zero or produced no usable output."""

    def __init__(self, key: str, reason: str, output: str = "") -> None:
        detail = f"remux of {key} failed: {reason}"
        if output:
            detail = f"{detail}, output: {output}"
        super().__init__(detail)
        self.key = key
        self.reason = reason
        self.output = output
