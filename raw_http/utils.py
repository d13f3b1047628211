"""
raw_http Utilities
"""

import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

SENSITIVE_HEADERS = {"authorization", "proxy-authorization", "cookie", "set-cookie"}
SENSITIVE_FRAGMENTS = ("token", "secret", "api-key", "apikey", "password")

REDACTED = "***REDACTED***"


def sanitize_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Redact credential-bearing headers before logging

    Args:
        headers: Request or response headers

    Returns:
        Copy of the headers with sensitive values replaced

    Example:
        >>> sanitize_headers({"Authorization": "Bearer abc", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}
    """
    sanitized = {}
    for key, value in (headers or {}).items():
        lowered = key.lower()
        if lowered in SENSITIVE_HEADERS or any(f in lowered for f in SENSITIVE_FRAGMENTS):
            sanitized[key] = REDACTED
        else:
            sanitized[key] = value
    return sanitized


def multi_value_headers(headers: Any) -> Dict[str, List[str]]:
    """
    Normalize client headers to ``name -> [values]``.

    Understands urllib3's ``HTTPHeaderDict.getlist`` and multidict's
    ``getall``; plain mappings yield one value per name. The first spelling
    of a header name wins.
    """
    getter = getattr(headers, "getlist", None) or getattr(headers, "getall", None)
    result: Dict[str, List[str]] = {}
    seen = set()

    for name in headers.keys():
        lowered = name.lower()
        if lowered in seen:
            continue
        seen.add(lowered)
        if getter is not None:
            result[name] = [str(v) for v in getter(name)]
        else:
            result[name] = [str(headers[name])]

    return result


def is_path_sink(sink: Any) -> bool:
    return isinstance(sink, (str, bytes, os.PathLike))


def check_sink(sink: Any) -> None:
    """Reject sink values that are neither a path nor writable."""
    if sink is None or is_path_sink(sink) or hasattr(sink, "write"):
        return
    raise TypeError(f"Unsupported sink type: {type(sink).__name__}")


@contextmanager
def open_sink(sink: Any) -> Iterator[Any]:
    """
    Yield a writable binary handle for a sink option.

    Paths are opened (and closed) here; file-like objects are handed back
    as-is and stay open for the caller.
    """
    check_sink(sink)
    if is_path_sink(sink):
        with open(os.fspath(sink), "wb") as handle:
            yield handle
    else:
        yield sink
