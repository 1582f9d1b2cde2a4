"""Shared test doubles for remux-proxy tests: in-memory store and fake remuxer."""

import threading

from remux_proxy import BuildFailure, StoredObject
from remux_proxy.errors import UpstreamStoreFailure

SOURCE_KEY = "/wiki/4/40/abc.oga"
TRANSCODED_KEY = "/wiki/transcoded/4/40/abc.oga/abc.oga.webm"
FLAT_KEY = "/wiki/4/40/abc.oga.webm"
SOURCE_BYTES = b"OggS fake opus payload"


class InMemoryObjectStorage:
    """ObjectStorage for tests: dict-backed, records every call as (operation, key)."""

    def __init__(self, *, chunk_size: int = 4) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()
        self._chunk_size = chunk_size
        self._lock = threading.Lock()

    def put(self, key: str, data: bytes, content_type: str = "application/ogg") -> None:
        self.objects[key] = (data, content_type)

    def calls_for(self, operation: str) -> list[str]:
        return [key for op, key in self.calls if op == operation]

    def _record(self, operation: str, key: str) -> None:
        with self._lock:
            self.calls.append((operation, key))
        if operation in self.fail_on:
            raise UpstreamStoreFailure(operation, key, RuntimeError("injected"))

    def exists(self, key: str) -> bool:
        self._record("exists", key)
        return key in self.objects

    def get(self, key: str) -> StoredObject:
        self._record("get", key)
        if key not in self.objects:
            raise UpstreamStoreFailure("get", key, RuntimeError("NoSuchKey"))
        data, content_type = self.objects[key]
        chunks = [data[i : i + self._chunk_size] for i in range(0, len(data), self._chunk_size)]
        return StoredObject(chunks, content_length=len(data), content_type=content_type)

    def download_file(self, key: str, local_path: str) -> None:
        self._record("download", key)
        if key not in self.objects:
            raise UpstreamStoreFailure("download", key, RuntimeError("NoSuchKey"))
        with open(local_path, "wb") as f:
            f.write(self.objects[key][0])

    def upload_file(self, local_path: str, key: str, content_type: str) -> None:
        self._record("upload", key)
        with open(local_path, "rb") as f:
            self.objects[key] = (f.read(), content_type)

    def delete(self, key: str) -> None:
        self._record("delete", key)
        self.objects.pop(key, None)


class FakeRemuxer:
    """Remuxer for tests: writes b"WEBM:" + source bytes; can block on a gate or fail."""

    def __init__(self, *, fail: bool = False, gate: threading.Event | None = None) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.fail = fail
        self.gate = gate
        self._lock = threading.Lock()

    def remux(self, source_path: str, output_path: str, *, key: str = "") -> None:
        with self._lock:
            self.calls.append((source_path, output_path, key))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail:
            raise BuildFailure(key, "ffmpeg exited with 1", "Invalid data found when processing input")
        with open(source_path, "rb") as src, open(output_path, "wb") as out:
            out.write(b"WEBM:" + src.read())

