"""Decoding of OCS envelopes and WebDAV error documents."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import DecodeError, WebDAVError

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    if tag.startswith('{'):
        return tag.split('}', 1)[1]
    return tag


def _child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if element is None:
        return None
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _text(element: Optional[ET.Element], name: str) -> str:
    child = _child(element, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _uint(element: Optional[ET.Element], name: str) -> int:
    raw = _text(element, name)
    if not raw:
        return 0
    try:
        value = int(raw)
    except ValueError as e:
        raise DecodeError(f"Field '{name}' is not an integer: {raw!r}") from e
    if value < 0:
        raise DecodeError(f"Field '{name}' must not be negative: {value}")
    return value


def _parse(body: bytes) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise DecodeError(f"Response is not valid XML: {e}", body) from e


@dataclass
class ShareElement:
    """A single share as listed by the sharing API."""
    id: int
    url: str = ""
    token: str = ""
    path: str = ""
    share_type: int = 0
    permissions: int = 0

    @classmethod
    def from_xml(cls, element: ET.Element) -> 'ShareElement':
        return cls(
            id=_uint(element, "id"),
            url=_text(element, "url"),
            token=_text(element, "token"),
            path=_text(element, "path"),
            share_type=_uint(element, "share_type"),
            permissions=_uint(element, "permissions"),
        )


@dataclass
class ShareResult:
    """Decoded OCS envelope returned by the share and group folder endpoints.

    ``id``, ``url`` and ``token`` are read from ``<data>`` directly (single
    object responses), ``elements`` from its ``<element>`` children (list
    responses). Whatever the response does not carry stays empty.
    """
    status: str
    status_code: int
    message: str = ""
    id: int = 0
    url: str = ""
    token: str = ""
    elements: List[ShareElement] = field(default_factory=list)

    @classmethod
    def from_xml(cls, body: bytes) -> 'ShareResult':
        """Decode an ``<ocs>`` document.

        Raises:
            DecodeError: If the body is not XML, the root is not ``ocs`` or a
                numeric field holds something else than an unsigned integer.
        """
        root = _parse(body)
        if _local_name(root.tag) != "ocs":
            raise DecodeError(f"Expected <ocs> envelope, got <{_local_name(root.tag)}>", body)

        meta = _child(root, "meta")
        data = _child(root, "data")
        elements = []
        if data is not None:
            elements = [ShareElement.from_xml(child) for child in data
                        if _local_name(child.tag) == "element"]

        return cls(
            status=_text(meta, "status"),
            status_code=_uint(meta, "statuscode"),
            message=_text(meta, "message"),
            id=_uint(data, "id"),
            url=_text(data, "url"),
            token=_text(data, "token"),
            elements=elements,
        )


def parse_webdav_error(body: bytes) -> Optional[WebDAVError]:
    """Probe a WebDAV response body for a server-side exception.

    Only bodies starting with ``<`` are looked at. Anything that does not
    parse, or parses without a non-empty ``exception`` child of the root, is
    regular content and yields ``None``.
    """
    if not body or not body.startswith(b'<'):
        return None
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        logger.debug("Body looks like XML but does not parse, treating it as content")
        return None

    exception = _text(root, "exception")
    if not exception:
        return None
    return WebDAVError(exception, _text(root, "message"))
