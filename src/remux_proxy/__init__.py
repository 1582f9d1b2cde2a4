"""On-demand WebM remux proxy for a wiki media library stored in S3."""

from .coordinator import RemuxCoordinator
from .errors import (
    BuildFailure,
    InvalidRequest,
    NotFound,
    RemuxProxyError,
    UpstreamStoreFailure,
)
from .interfaces import ObjectStorage, Remuxer, StoredObject
from .paths import (
    deletion_target,
    derive_source,
    flat_derivative,
    is_remux_request,
    transcoded_derivative,
)
from .proxy import RemuxProxy

__version__ = "0.1.0"
__all__ = [
    "BuildFailure",
    "InvalidRequest",
    "NotFound",
    "ObjectStorage",
    "RemuxCoordinator",
    "RemuxProxy",
    "RemuxProxyError",
    "Remuxer",
    "StoredObject",
    "UpstreamStoreFailure",
    "deletion_target",
    "derive_source",
    "flat_derivative",
    "is_remux_request",
    "transcoded_derivative",
]
