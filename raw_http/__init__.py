"""
raw_http - thin HTTP transport adapter

Maps (url, method, body, headers, options) onto requests or aiohttp and
normalizes the outcome into a RawResponse or a ClientError.
"""

from .__version__ import __version__
from .config import ClientConfig
from .exceptions import RawHttpError, ClientError, ConfigurationError
from .models import BatchPolicy, BatchRequest, Err, Ok, RawResponse, Result
from .http import HTTPAdapter, RequestsAdapter, AiohttpAdapter, make_adapter

__all__ = [
    "ClientConfig",
    "RawHttpError",
    "ClientError",
    "ConfigurationError",
    "BatchPolicy",
    "BatchRequest",
    "Err",
    "Ok",
    "RawResponse",
    "Result",
    "HTTPAdapter",
    "RequestsAdapter",
    "AiohttpAdapter",
    "make_adapter",
    "__version__",
]
