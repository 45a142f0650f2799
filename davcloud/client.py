import glob
import logging
import os
import posixpath
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import urljoin, urlparse, urlunparse

import requests
from tqdm import tqdm

from .errors import CloudError, ConfigurationError, OCSError, WebDAVError
from .paths import apps_path, normalize_remote_path, shares_path, webdav_path
from .results import ShareResult, parse_webdav_error

logger = logging.getLogger(__name__)

# OCS status codes accepted as success. The group folders app answers with
# the v1 code, the sharing API is reached through ocs/v2.php.
GROUP_FOLDER_OK_CODES = (100,)
SHARE_OK_CODES = (100, 200)

SHARE_TYPE_PUBLIC_LINK = 3

PERMISSION_READ = 1
PERMISSION_UPDATE = 2
PERMISSION_CREATE = 4
PERMISSION_DELETE = 8
PERMISSION_SHARE = 16
PERMISSION_ALL = 31


class PathStatus(Enum):
    """Outcome of probing a remote path."""
    EXISTS = "exists"
    MISSING = "missing"
    ERROR = "error"


class Client:
    """Client for a {own|next}cloud server.

    File operations go through WebDAV below ``remote.php/webdav``, group folder
    and share administration through the OCS API. Every call sends exactly one
    request with Basic Auth; the client keeps no state besides its settings, so
    one instance can be shared between threads.
    """

    def __init__(self, url: str, username: str, password: str, timeout: Optional[float] = None):
        """Initialize the client. No request is sent here.

        Args:
            url: Server base URL, e.g. ``http://localhost:8080/``
            username: Account used for Basic Auth
            password: Password or app password of the account
            timeout: Seconds to wait for the server (optional, no timeout by default)

        Raises:
            ConfigurationError: If ``url`` is not an http(s) URL with a host, or
                carries a query or fragment.
        """
        if not isinstance(url, str) or not url:
            raise ConfigurationError("Server URL must be a non-empty string")
        try:
            parsed = urlparse(url)
            _ = parsed.port  # raises on a malformed port
        except ValueError as e:
            raise ConfigurationError(f"Invalid server URL '{url}': {e}") from e
        if parsed.scheme not in ("http", "https"):
            raise ConfigurationError(f"Server URL must use http:// or https://, got '{url}'")
        if not parsed.hostname:
            raise ConfigurationError(f"Server URL '{url}' has no host")
        if parsed.query or parsed.fragment:
            raise ConfigurationError(f"Server URL '{url}' must not carry a query or fragment")

        # A base without trailing slash would lose its last segment on resolution
        path = parsed.path if parsed.path.endswith('/') else parsed.path + '/'
        url = urlunparse(parsed._replace(path=path))

        self.url = url
        self.username = username
        self.password = password
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"Client(url={self.url!r}, username={self.username!r})"

    @property
    def _auth(self) -> Tuple[str, str]:
        return (self.username, self.password)

    def _resolve(self, reference: str) -> str:
        return urljoin(self.url, reference)

    # -- WebDAV ------------------------------------------------------------

    def mkdir(self, path: str) -> None:
        """Create a directory."""
        self._send_webdav_request("MKCOL", path)

    def delete(self, path: str) -> None:
        """Remove a file or directory. The server decides whether a missing path is an error."""
        self._send_webdav_request("DELETE", path)

    def upload(self, data: bytes, dest: str) -> None:
        """Store ``data`` at ``dest``, replacing any existing file."""
        self._send_webdav_request("PUT", dest, data=data)

    def download(self, path: str) -> bytes:
        """Return the content of a remote file.

        Raises:
            WebDAVError: If the server answered with an exception document
                instead of the file.
        """
        return self._send_webdav_request("GET", path)

    def status(self, path: str) -> PathStatus:
        """Probe ``path`` with PROPFIND.

        Returns:
            ``PathStatus.MISSING`` when the server reports the path as not
            found, ``PathStatus.ERROR`` for any other failure (authentication,
            network, malformed path) and ``PathStatus.EXISTS`` otherwise.
        """
        try:
            self._send_webdav_request("PROPFIND", path, headers={"Depth": "0"})
        except WebDAVError as e:
            logger.debug(f"PROPFIND {path}: {e}")
            return PathStatus.MISSING if e.is_not_found else PathStatus.ERROR
        except requests.HTTPError as e:
            logger.debug(f"PROPFIND {path}: {e}")
            if e.response is not None and e.response.status_code == 404:
                return PathStatus.MISSING
            return PathStatus.ERROR
        except (requests.RequestException, CloudError) as e:
            logger.debug(f"PROPFIND {path} failed: {e}")
            return PathStatus.ERROR
        return PathStatus.EXISTS

    def exists(self, path: str) -> bool:
        """True if ``path`` answers a PROPFIND without error."""
        return self.status(path) is PathStatus.EXISTS

    def upload_dir(self, pattern: str, dest_dir: str, progress: bool = False) -> List[str]:
        """Upload every local file matching a glob pattern into ``dest_dir``.

        Files are read completely and uploaded one after the other to
        ``dest_dir/<basename>``. The first failure is raised as is; files
        uploaded before it stay on the server.

        Args:
            pattern: Glob pattern, e.g. ``data/Folder/*``
            dest_dir: Remote directory, relative to the WebDAV root
            progress: Show a progress bar

        Returns:
            The matched local paths, in sorted order
        """
        files = sorted(glob.glob(pattern))
        if not files:
            logger.info(f"No local files match '{pattern}'")

        for file in tqdm(files, desc="Uploading", unit="file", disable=not progress):
            with open(file, 'rb') as f:
                data = f.read()
            self.upload(data, posixpath.join(dest_dir, os.path.basename(file)))
            logger.debug(f"Uploaded {file} ({len(data)} bytes)")

        logger.info(f"Uploaded {len(files)} file(s) matching '{pattern}' to '{dest_dir}'")
        return files

    def _send_webdav_request(self, method: str, path: str, data: Optional[bytes] = None,
                             headers: Optional[Dict[str, str]] = None) -> bytes:
        """Send one WebDAV request and return the response body.

        A body starting with ``<`` is probed for an exception document, which
        is raised as ``WebDAVError`` whatever the HTTP status. Other bodies are
        returned untouched unless the status line reports an error.
        """
        url = self._resolve(webdav_path(path))
        logger.debug(f"{method} {url}")

        response = requests.request(
            method,
            url,
            data=data,
            headers=headers,
            auth=self._auth,
            timeout=self.timeout,
        )
        body = response.content

        error = parse_webdav_error(body)
        if error is not None:
            raise error
        response.raise_for_status()
        return body

    # -- Group folders -------------------------------------------------------

    def create_group_folder(self, mount_point: str) -> ShareResult:
        """Create a group folder. Its identifier is ``ShareResult.id``."""
        return self._send_apps_request(
            "POST",
            apps_path("groupfolders", "folders"),
            data={"mountpoint": mount_point},
        )

    def add_group_to_group_folder(self, group: str, folder_id: int) -> ShareResult:
        """Give ``group`` access to a group folder."""
        return self._send_apps_request(
            "POST",
            apps_path("groupfolders", "folders", folder_id, "groups"),
            data={"group": group},
        )

    def set_group_permissions_for_group_folder(self, permissions: int, group: str,
                                               folder_id: int) -> ShareResult:
        """Set the permission bits ``group`` has on a group folder (see ``PERMISSION_*``)."""
        # The endpoint is addressed as apps/apps/groupfolders/... on the servers
        # this client talks to; keep it until verified against the live API.
        return self._send_apps_request(
            "POST",
            apps_path("apps", "groupfolders", "folders", folder_id, "groups", group),
            data={"permissions": int(permissions)},
        )

    # -- Shares --------------------------------------------------------------

    def create_file_drop_share(self, path: str) -> ShareResult:
        """Create an upload-only public link share. The link is ``ShareResult.url``."""
        return self._create_public_link(path, PERMISSION_CREATE, public_upload=True)

    def create_read_only_share(self, path: str) -> ShareResult:
        """Create a read-only public link share. The link is ``ShareResult.url``."""
        return self._create_public_link(path, PERMISSION_READ)

    def get_share(self, path: str) -> ShareResult:
        """List the shares of ``path``. ``ShareResult.elements`` may be empty."""
        return self._send_apps_request(
            "GET",
            shares_path("shares"),
            params={"path": self._share_target(path)},
            ok_codes=SHARE_OK_CODES,
        )

    def delete_share(self, share_id: int) -> ShareResult:
        """Remove a share by identifier."""
        return self._send_apps_request(
            "DELETE",
            shares_path("shares", share_id),
            ok_codes=SHARE_OK_CODES,
        )

    def _create_public_link(self, path: str, permissions: int, public_upload: bool = False) -> ShareResult:
        data: Dict[str, Union[str, int]] = {
            "path": self._share_target(path),
            "shareType": SHARE_TYPE_PUBLIC_LINK,
            "permissions": permissions,
        }
        if public_upload:
            data["publicUpload"] = "true"
        return self._send_apps_request("POST", shares_path("shares"), data=data, ok_codes=SHARE_OK_CODES)

    @staticmethod
    def _share_target(path: str) -> str:
        # The sharing API wants the path from the user's root, with a leading slash
        return '/' + normalize_remote_path(path)

    def _send_apps_request(self, method: str, reference: str,
                           data: Optional[Dict[str, Union[str, int]]] = None,
                           params: Optional[Dict[str, str]] = None,
                           ok_codes: Sequence[int] = GROUP_FOLDER_OK_CODES) -> ShareResult:
        """Send one OCS request and decode the envelope.

        The body is decoded whatever the HTTP status, since the server reports
        failures in the envelope.

        Raises:
            DecodeError: If the body is not an ``<ocs>`` document.
            OCSError: If the status code is not one of ``ok_codes``.
        """
        url = self._resolve(reference)
        logger.debug(f"{method} {url}")

        response = requests.request(
            method,
            url,
            data=data,
            params=params,
            headers={
                "OCS-APIRequest": "true",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            auth=self._auth,
            timeout=self.timeout,
        )

        result = ShareResult.from_xml(response.content)
        if result.status_code not in ok_codes:
            logger.error(f"{method} {url} returned OCS status {result.status_code}: {result.message}")
            raise OCSError(result.status_code, result.message, result)
        return result
