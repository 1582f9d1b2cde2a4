"""
Single-flight remux builds.

One build per derivative key runs at a time. The first caller starts an asyncio task
for the build; concurrent callers for the same key await that same task and see its
outcome (success, or the same exception). Builds for different keys run in parallel.

Waiters await the task through asyncio.shield, so a cancelled waiter (client
disconnect, request timeout) never cancels a build other waiters depend on.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from functools import partial

from anyio import to_thread

from .interfaces import ObjectStorage, Remuxer

logger = logging.getLogger(__name__)

WEBM_CONTENT_TYPE = "audio/webm"
SCRATCH_DIR_PREFIX = "remux-proxy-"
SOURCE_FILENAME = "source"
OUTPUT_FILENAME = "output.webm"


class RemuxCoordinator:
    """Builds derivatives from sources at most once concurrently per derivative key."""

    def __init__(
        self,
        storage: ObjectStorage,
        remuxer: Remuxer,
        *,
        scratch_dir: str | None = None,
    ) -> None:
        self._storage = storage
        self._remuxer = remuxer
        self._scratch_dir = scratch_dir
        self._in_flight: dict[str, asyncio.Task[None]] = {}

    def in_flight(self) -> list[str]:
        """Derivative keys with a build currently running."""
        return list(self._in_flight)

    async def ensure(self, source_key: str, derivative_key: str) -> None:
        """
        Build derivative_key from source_key, or join a build already running for it.

        Returns once the build has completed successfully. Raises the build's
        exception (UpstreamStoreFailure, BuildFailure) to every waiter on failure.
        """
        task = self._in_flight.get(derivative_key)
        if task is None:
            loop = asyncio.get_running_loop()
            task = loop.create_task(
                self._run_build(source_key, derivative_key),
                name=f"remux:{derivative_key}",
            )
            self._in_flight[derivative_key] = task
            task.add_done_callback(partial(self._forget, derivative_key))
            logger.info("remux: key=%s build started source=%s", derivative_key, source_key)
        else:
            logger.info("remux: key=%s joining in-flight build", derivative_key)
        await asyncio.shield(task)

    def _forget(self, derivative_key: str, task: asyncio.Task[None]) -> None:
        if self._in_flight.get(derivative_key) is task:
            del self._in_flight[derivative_key]
        # Mark the exception retrieved; every waiter may have been cancelled.
        if not task.cancelled():
            task.exception()

    async def _run_build(self, source_key: str, derivative_key: str) -> None:
        try:
            await to_thread.run_sync(self.build, source_key, derivative_key)
        except Exception as e:
            # BuildFailure messages carry the captured ffmpeg output
            logger.error(
                "remux: key=%s build failed source=%s: %s", derivative_key, source_key, e
            )
            raise
        logger.info("remux: key=%s build done", derivative_key)

    def build(self, source_key: str, derivative_key: str) -> None:
        """
        Download source, remux it, upload the result. Blocking; runs in a worker thread.

        Returns without building when the derivative already exists (an earlier build
        for the key finished after the caller's miss). The upload is the last step, so a
        failed download or remux never leaves a partial derivative in the store. The
        scratch directory is removed on every path.
        """
        if self._storage.exists(derivative_key):
            logger.info("remux: key=%s already present, skipping build", derivative_key)
            return
        with tempfile.TemporaryDirectory(prefix=SCRATCH_DIR_PREFIX, dir=self._scratch_dir) as tmp:
            source_path = os.path.join(tmp, SOURCE_FILENAME)
            output_path = os.path.join(tmp, OUTPUT_FILENAME)
            logger.debug("remux: key=%s downloading %s -> %s", derivative_key, source_key, tmp)
            self._storage.download_file(source_key, source_path)
            self._remuxer.remux(source_path, output_path, key=derivative_key)
            self._storage.upload_file(output_path, derivative_key, WEBM_CONTENT_TYPE)
