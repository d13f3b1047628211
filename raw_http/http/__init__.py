"""
HTTP adapters for raw_http.
"""

from .adapter import HTTPAdapter
from .requests_adapter import RequestsAdapter
from .aiohttp_adapter import AiohttpAdapter
from .factory import make_adapter

__all__ = ["HTTPAdapter", "RequestsAdapter", "AiohttpAdapter", "make_adapter"]
