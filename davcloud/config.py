import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv

from .client import Client
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_URL = "DAVCLOUD_URL"              # e.g. http://localhost:8080/
ENV_USERNAME = "DAVCLOUD_USERNAME"
ENV_PASSWORD = "DAVCLOUD_PASSWORD"
ENV_TIMEOUT = "DAVCLOUD_TIMEOUT"      # seconds, unset means no timeout


@dataclass
class ClientConfig:
    """Connection settings for a Client."""
    url: str
    username: str = ""
    password: str = ""
    timeout: Optional[float] = None

    def create_client(self) -> Client:
        return Client(self.url, self.username, self.password, timeout=self.timeout)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["password"] = "***" if self.password else ""
        return data


def load_config(env_file: Optional[Union[str, Path]] = None, url: Optional[str] = None,
                username: Optional[str] = None, password: Optional[str] = None) -> ClientConfig:
    """Build a ClientConfig from the environment.

    A ``.env`` file (``env_file`` or the one found from the working directory)
    is loaded first without overriding variables that are already set.
    ``url``, ``username`` and ``password`` take precedence over the environment
    when given.

    Raises:
        ConfigurationError: If no URL is configured or the timeout is not a number.
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    url = url or os.getenv(ENV_URL)
    if not url:
        raise ConfigurationError(f"{ENV_URL} is not set")

    raw_timeout = os.getenv(ENV_TIMEOUT)
    timeout = None
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be a number of seconds, got '{raw_timeout}'") from e

    config = ClientConfig(
        url=url,
        username=username if username is not None else os.getenv(ENV_USERNAME, ""),
        password=password if password is not None else os.getenv(ENV_PASSWORD, ""),
        timeout=timeout,
    )
    logger.debug(f"Loaded configuration: {config.to_dict()}")
    return config
