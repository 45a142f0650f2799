import pytest
import requests
from unittest.mock import MagicMock

from davcloud.client import Client

BASE_URL = "http://localhost:8080/"

NOT_FOUND_BODY = b"""<?xml version="1.0" encoding="utf-8"?>
<d:error xmlns:d="DAV:" xmlns:s="http://sabredav.org/ns">
  <s:exception>Sabre\\DAV\\Exception\\NotFound</s:exception>
  <s:message>File with name Test could not be located</s:message>
</d:error>
"""

NOT_AUTHENTICATED_BODY = b"""<?xml version="1.0" encoding="utf-8"?>
<d:error xmlns:d="DAV:" xmlns:s="http://sabredav.org/ns">
  <s:exception>Sabre\\DAV\\Exception\\NotAuthenticated</s:exception>
  <s:message>No public access to this resource., No 'Authorization: Basic' header found.</s:message>
</d:error>
"""


def ocs_body(statuscode: int, status: str = "ok", message: str = "OK", data: str = "") -> bytes:
    return (
        '<?xml version="1.0"?>\n'
        f"<ocs><meta><status>{status}</status><statuscode>{statuscode}</statuscode>"
        f"<message>{message}</message></meta><data>{data}</data></ocs>"
    ).encode()


def make_response(content: bytes = b"", status_code: int = 200) -> MagicMock:
    """Fake requests.Response with the parts the client uses."""
    response = MagicMock()
    response.content = content
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def client():
    return Client(BASE_URL, "admin", "password")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without DAVCLOUD_* variables and outside any directory holding a .env."""
    for name in ("DAVCLOUD_URL", "DAVCLOUD_USERNAME", "DAVCLOUD_PASSWORD", "DAVCLOUD_TIMEOUT"):
        # setenv first so that values loaded from .env files are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
