"""
Derivative and source path conventions.

Single source of truth for the wiki media naming scheme. The proxy and the tests
build and parse paths only through these functions.

Source path:          /wiki/{p1}/{p2}/{name}                      (name ends .oga or .opus)
Flat derivative:      /wiki/{p1}/{p2}/{name}.webm
Transcoded-tree:      /wiki/transcoded/{p1}/{p2}/{name}/{name}.webm

Parser behaviour: invalid paths return None. Callers must check and handle accordingly.
"""

from __future__ import annotations

WEBM_SUFFIX = ".webm"
SOURCE_EXTENSIONS = (".oga", ".opus")
REMUX_SUFFIXES = tuple(ext + WEBM_SUFFIX for ext in SOURCE_EXTENSIONS)

_WIKI_ROOT = "wiki"
_TRANSCODED_DIR = "transcoded"
_TRANSCODED_MARKER = f"/{_TRANSCODED_DIR}/"
_TRANSCODED_PREFIX = f"/{_WIKI_ROOT}/{_TRANSCODED_DIR}/"


def is_remux_request(path: str) -> bool:
    """Return True if path names a WebM variant of an .oga/.opus file."""
    return path.endswith(REMUX_SUFFIXES)


def _is_source_name(name: str) -> bool:
    return name.endswith(SOURCE_EXTENSIONS) and name not in SOURCE_EXTENSIONS


def derive_source(path: str) -> str | None:
    """
    Map a derivative path to the source object it is built from.

    Args:
        path: Requested derivative path, either flat (/wiki/4/40/abc.oga.webm)
            or transcoded-tree (/wiki/transcoded/4/40/abc.oga/abc.oga.webm).

    Returns:
        The source path (e.g. /wiki/4/40/abc.oga), or None when the path is not
        a remux request or does not follow either naming shape.
    """
    if not is_remux_request(path):
        return None
    if path.startswith(_TRANSCODED_PREFIX):
        return _derive_from_transcoded(path)
    return _derive_from_flat(path)


def _derive_from_transcoded(path: str) -> str | None:
    parts = path.split("/")
    if len(parts) < 7:
        return None
    # parts[0] is the empty string before the leading slash
    if parts[1] != _WIKI_ROOT or parts[2] != _TRANSCODED_DIR:
        return None
    p1, p2, name, doubled = parts[3], parts[4], parts[5], parts[6]
    if len(parts) != 7 or not p1 or not p2:
        return None
    if doubled != name + WEBM_SUFFIX or not _is_source_name(name):
        return None
    return f"/{_WIKI_ROOT}/{p1}/{p2}/{name}"


def _derive_from_flat(path: str) -> str | None:
    if _TRANSCODED_MARKER in path:
        return None
    source = path[: -len(WEBM_SUFFIX)]
    if not source.startswith("/"):
        return None
    name = source.rsplit("/", 1)[-1]
    if not _is_source_name(name):
        return None
    return source


def _split_source(source: str) -> tuple[str, str, str] | None:
    """Split /wiki/{p1}/{p2}/{name} into (p1, p2, name)."""
    parts = source.split("/")
    if len(parts) != 5 or parts[0] or parts[1] != _WIKI_ROOT:
        return None
    p1, p2, name = parts[2], parts[3], parts[4]
    if not p1 or not p2 or not _is_source_name(name):
        return None
    return p1, p2, name


def flat_derivative(source: str) -> str:
    """Build the flat derivative path: {source}.webm."""
    return source + WEBM_SUFFIX


def transcoded_derivative(source: str) -> str:
    """
    Build the transcoded-tree derivative path for a source path.

    Raises ValueError if source is not of the form /wiki/{p1}/{p2}/{name}.
    """
    split = _split_source(source)
    if split is None:
        raise ValueError(f"Not a wiki source path: {source}")
    p1, p2, name = split
    return f"{_TRANSCODED_PREFIX}{p1}/{p2}/{name}/{name}{WEBM_SUFFIX}"


def deletion_target(path: str) -> str | None:
    """
    Resolve the transcoded-tree key a DELETE request refers to.

    Paths already containing /transcoded/ are returned unchanged. Otherwise the
    last three segments are taken as hash prefix, hash subprefix and filename
    (/anything/4/40/abc.oga -> /wiki/transcoded/4/40/abc.oga/abc.oga.webm).

    This is looser than derive_source: only the segment count and the three
    trailing segments are checked. Paths with fewer segments, empty hash
    segments or a filename that is not .oga/.opus return None.
    """
    if _TRANSCODED_MARKER in path:
        return path
    parts = path.split("/")
    if len(parts) < 4:
        return None
    p1, p2, filename = parts[-3], parts[-2], parts[-1]
    if not p1 or not p2 or not _is_source_name(filename):
        return None
    return f"{_TRANSCODED_PREFIX}{p1}/{p2}/{filename}/{filename}{WEBM_SUFFIX}"
