"""Client for the WebDAV and OCS APIs of {own|next}cloud servers."""

from .client import Client, PathStatus
from .config import ClientConfig, load_config
from .errors import CloudError, ConfigurationError, DecodeError, OCSError, WebDAVError
from .results import ShareElement, ShareResult

__all__ = [
    'Client', 'PathStatus', 'ClientConfig', 'load_config',
    'CloudError', 'ConfigurationError', 'DecodeError', 'OCSError', 'WebDAVError',
    'ShareElement', 'ShareResult',
]
