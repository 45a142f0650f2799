"""Relative URL references for the three namespaces exposed by the server.

WebDAV paths are caller supplied and get normalised, Apps and OCS sharing
paths are assembled from fixed segments by the client itself. Each builder
returns a reference relative to the server base URL.
"""

from typing import List, NewType
from urllib.parse import quote

from .errors import ConfigurationError

WEBDAV_ROOT = "remote.php/webdav"
APPS_ROOT = "apps"
SHARES_ROOT = "ocs/v2.php/apps/files_sharing/api/v1"

WebDAVPath = NewType("WebDAVPath", str)
AppsPath = NewType("AppsPath", str)
SharesPath = NewType("SharesPath", str)


def encode_url_path(path: str) -> str:
    """Percent-encode every segment of a path, keeping ``/`` separators."""
    parts = path.split('/')
    encoded_parts = [quote(part, safe='') for part in parts]
    return '/'.join(encoded_parts)


def normalize_remote_path(path: str) -> str:
    """Collapse a remote path to ``a/b/c`` form.

    Leading, trailing and repeated slashes as well as ``.`` segments are
    dropped and ``..`` climbs one level.

    Raises:
        ConfigurationError: If the path is not a string or climbs above the root.
    """
    if not isinstance(path, str):
        raise ConfigurationError(f"Remote path must be a string, got {type(path).__name__}")
    if "\x00" in path:
        raise ConfigurationError(f"Remote path contains a NUL byte: {path!r}")

    segments: List[str] = []
    for segment in path.split('/'):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not segments:
                raise ConfigurationError(f"Remote path '{path}' escapes the WebDAV root")
            segments.pop()
            continue
        segments.append(segment)
    return '/'.join(segments)


def webdav_path(path: str) -> WebDAVPath:
    """Reference to ``path`` below ``remote.php/webdav``."""
    relative = normalize_remote_path(path)
    if not relative:
        return WebDAVPath(WEBDAV_ROOT)
    return WebDAVPath(f"{WEBDAV_ROOT}/{encode_url_path(relative)}")


def _join_segments(root: str, segments) -> str:
    encoded = [quote(str(segment), safe='') for segment in segments]
    for original, segment in zip(segments, encoded):
        if segment in ("", ".", ".."):
            raise ConfigurationError(f"Invalid path segment {original!r} under '{root}'")
    return '/'.join([root] + encoded)


def apps_path(*segments) -> AppsPath:
    """Reference to an endpoint below ``apps/``.

    Segments are encoded one by one, so group names containing ``/`` stay a
    single segment.
    """
    return AppsPath(_join_segments(APPS_ROOT, segments))


def shares_path(*segments) -> SharesPath:
    """Reference to an endpoint of the OCS file sharing API."""
    return SharesPath(_join_segments(SHARES_ROOT, segments))
