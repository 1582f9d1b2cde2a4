"""
Backend-agnostic interfaces for the object store and the remux executor.

Implementations (S3 via boto3, ffmpeg via subprocess) live in separate modules.
Proxy logic depends on these interfaces and receives the implementation by config.
"""

from collections.abc import Callable, Iterable, Iterator
from typing import Protocol, runtime_checkable


class StoredObject:
    """An object opened for reading: a chunk stream plus length/type metadata."""

    def __init__(
        self,
        chunks: Iterable[bytes],
        *,
        content_length: int | None = None,
        content_type: str | None = None,
        close: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = chunks
        self.content_length = content_length
        self.content_type = content_type
        self._close = close

    def iter_chunks(self) -> Iterator[bytes]:
        yield from self._chunks

    def close(self) -> None:
        if self._close is not None:
            self._close()


@runtime_checkable
class ObjectStorage(Protocol):
    """
    Object store addressed by store-relative media keys (e.g. /wiki/4/40/abc.oga).

    Implementations raise UpstreamStoreFailure for every failure other than absence;
    callers never see backend-specific error types.
    """

    def exists(self, key: str) -> bool:
        """Return True if the object exists. Not found and access denied both mean False."""
        ...

    def get(self, key: str) -> StoredObject:
        """Open the object for streamed reading. Caller must close() it."""
        ...

    def download_file(self, key: str, local_path: str) -> None:
        """Stream the object to a local file."""
        ...

    def upload_file(self, local_path: str, key: str, content_type: str) -> None:
        """Upload a local file; the object becomes visible only once fully written."""
        ...

    def delete(self, key: str) -> None:
        """Delete the object."""
        ...


@runtime_checkable
class Remuxer(Protocol):
    """Repackages a local media file into another container without re-encoding."""

    def remux(self, source_path: str, output_path: str, *, key: str = "") -> None:
        """Write output_path from source_path. Raises BuildFailure on any failure."""
        ...
