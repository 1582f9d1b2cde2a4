"""
Cache-aside orchestration for WebM derivatives.

GET:    CHECK_DERIVATIVE -> SERVE
                         -> CHECK_SOURCE -> BUILD -> SERVE
                                         -> FAIL (not found)
DELETE: resolve transcoded key -> check -> delete

Store calls are blocking and run in worker threads, abandoned if the request is
cancelled. Builds go through the RemuxCoordinator so concurrent misses for one
key trigger a single remux.
"""

from __future__ import annotations

import logging

from anyio import to_thread

from .coordinator import RemuxCoordinator
from .errors import InvalidRequest, NotFound
from .interfaces import ObjectStorage, StoredObject
from .paths import deletion_target, derive_source, is_remux_request

logger = logging.getLogger(__name__)


class RemuxProxy:
    """Serve-or-build decisions over an ObjectStorage and a RemuxCoordinator."""

    def __init__(self, storage: ObjectStorage, coordinator: RemuxCoordinator) -> None:
        self._storage = storage
        self._coordinator = coordinator

    async def _exists(self, key: str) -> bool:
        return await to_thread.run_sync(self._storage.exists, key, abandon_on_cancel=True)

    async def _open(self, key: str) -> StoredObject:
        return await to_thread.run_sync(self._storage.get, key, abandon_on_cancel=True)

    async def fetch(self, path: str) -> StoredObject:
        """
        Return the derivative at path opened for streaming, building it first on a miss.

        Raises:
            InvalidRequest: path is not a remux request or does not follow the naming scheme.
            NotFound: neither the derivative nor its source exists.
            UpstreamStoreFailure, BuildFailure: store or remux failures.
        """
        if not is_remux_request(path):
            raise InvalidRequest("Not a .webm remux request")

        if await self._exists(path):
            logger.info("path=%s cache hit", path)
            return await self._open(path)

        source = derive_source(path)
        if source is None:
            logger.info("path=%s rejected: invalid derivative path", path)
            raise InvalidRequest("Invalid path format")
        logger.info("path=%s cache miss source=%s", path, source)

        if not await self._exists(source):
            logger.info("path=%s source=%s not found", path, source)
            raise NotFound("Original file not found")

        await self._coordinator.ensure(source, path)
        return await self._open(path)

    async def delete(self, path: str) -> str:
        """
        Delete the transcoded derivative for path (original or transcoded form).

        Returns the deleted key. Raises InvalidRequest, NotFound, or UpstreamStoreFailure.
        """
        key = deletion_target(path)
        if key is None:
            logger.info("path=%s delete rejected: invalid path", path)
            raise InvalidRequest("Invalid path format")
        if not is_remux_request(key):
            logger.info("path=%s delete rejected: key=%s not a transcoded file", path, key)
            raise InvalidRequest("Not a valid transcoded file path")
        if not await self._exists(key):
            raise NotFound("Transcoded file not found")
        await to_thread.run_sync(self._storage.delete, key, abandon_on_cancel=True)
        logger.info("path=%s deleted key=%s", path, key)
        return key
