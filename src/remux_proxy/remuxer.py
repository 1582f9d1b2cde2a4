"""
FFmpeg-based remux into a WebM container.

Uses -c copy so the Opus/Vorbis payload is repackaged, never re-encoded.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .errors import BuildFailure

logger = logging.getLogger(__name__)

DEFAULT_REMUX_TIMEOUT_SEC = 600
# Diagnostic output attached to failures is truncated to this many characters
MAX_DIAGNOSTIC_CHARS = 4000


def build_remux_command(ffmpeg_path: str, source_path: str, output_path: str) -> list[str]:
    """ffmpeg argv for a stream-copy remux of source_path into WebM at output_path."""
    return [
        ffmpeg_path,
        "-nostdin",
        "-y",
        "-loglevel",
        "error",
        "-i",
        source_path,
        "-c",
        "copy",
        "-f",
        "webm",
        output_path,
    ]


class FfmpegRemuxer:
    """Remuxer implementation that shells out to ffmpeg."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        *,
        timeout_sec: float = DEFAULT_REMUX_TIMEOUT_SEC,
    ) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._timeout_sec = timeout_sec

    def remux(self, source_path: str, output_path: str, *, key: str = "") -> None:
        """
        Remux source_path into a WebM file at output_path.

        Raises:
            BuildFailure: ffmpeg missing, timed out, exited non-zero, or wrote no output.
                Captured stderr/stdout is attached as BuildFailure.output.
        """
        cmd = build_remux_command(self._ffmpeg_path, source_path, output_path)
        logger.info("remux: key=%s running %s", key or "?", " ".join(cmd))
        try:
            r = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_sec,
            )
        except FileNotFoundError as e:
            raise BuildFailure(key, f"{self._ffmpeg_path} not found") from e
        except subprocess.TimeoutExpired as e:
            raise BuildFailure(
                key,
                f"timed out after {self._timeout_sec}s",
                _diagnostic(e.stderr, e.stdout),
            ) from e
        if r.returncode != 0:
            raise BuildFailure(
                key, f"ffmpeg exited with {r.returncode}", _diagnostic(r.stderr, r.stdout)
            )
        out = Path(output_path)
        if not out.exists() or out.stat().st_size == 0:
            raise BuildFailure(key, "ffmpeg produced no output", _diagnostic(r.stderr, r.stdout))
        logger.info("remux: key=%s done size=%s", key or "?", out.stat().st_size)


def _diagnostic(stderr: str | bytes | None, stdout: str | bytes | None) -> str:
    parts = []
    for stream in (stderr, stdout):
        if not stream:
            continue
        if isinstance(stream, bytes):
            stream = stream.decode(errors="replace")
        parts.append(stream.strip())
    return "\n".join(p for p in parts if p)[-MAX_DIAGNOSTIC_CHARS:]
