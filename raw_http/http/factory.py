"""
Adapter factory.
"""

from typing import Any, Optional, Union

import aiohttp
import requests

from ..config import ClientConfig
from ..exceptions import ConfigurationError
from .adapter import HTTPAdapter
from .aiohttp_adapter import AiohttpAdapter
from .requests_adapter import RequestsAdapter


def make_adapter(
    client: Optional[Any] = None,
    config: Optional[ClientConfig] = None,
) -> Union[HTTPAdapter, AiohttpAdapter]:
    """
    Build an adapter around the given HTTP client.

    Args:
        client: None or "requests" for a new RequestsAdapter, "aiohttp" for a
            new AiohttpAdapter, a requests.Session or aiohttp.ClientSession to
            wrap, or an adapter instance to use as-is
        config: Adapter configuration for newly built adapters

    Returns:
        Adapter instance

    Raises:
        ConfigurationError: If the client is not supported

    Examples:
        >>> http = make_adapter()
        >>> http = make_adapter(requests.Session(), ClientConfig(timeout=5))
    """
    if isinstance(client, (HTTPAdapter, AiohttpAdapter)):
        return client

    if client is None or client == "requests":
        return RequestsAdapter(config=config)

    if client == "aiohttp":
        return AiohttpAdapter(config=config)

    if isinstance(client, requests.Session):
        return RequestsAdapter(session=client, config=config)

    if isinstance(client, aiohttp.ClientSession):
        return AiohttpAdapter(session=client, config=config)

    raise ConfigurationError(
        f"Unsupported HTTP client: {client!r}. "
        "Expected 'requests', 'aiohttp', a requests.Session, "
        "an aiohttp.ClientSession or an adapter instance"
    )
