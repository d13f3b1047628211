"""
Data models for the raw HTTP adapter.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ClientError


class BatchPolicy(str, Enum):
    """How a batch reacts to a failing entry."""

    ABORT = "abort"
    COLLECT = "collect"


class RawResponse(BaseModel):
    """Normalized response of a completed HTTP exchange (status < 400)"""

    model_config = ConfigDict(frozen=True)

    headers: Dict[str, List[str]] = Field(default_factory=dict, description="Header values by name")
    body: bytes = Field(b"", description="Response body, empty when diverted to a sink")
    status_code: int = Field(..., description="HTTP status code")

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value of a header, matching the name case-insensitively."""
        wanted = name.lower()
        for key, values in self.headers.items():
            if key.lower() == wanted and values:
                return values[0]
        return default

    @property
    def encoding(self) -> str:
        content_type = self.header("Content-Type") or ""
        for param in content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip("\"'")
        return "utf-8"

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding, errors="replace")

    def json_body(self) -> Any:
        """Parse the body as JSON."""
        return json.loads(self.text) if self.body else None


class BatchRequest(BaseModel):
    """
    One entry of a batch.

    ``response`` is filled in by the adapter once the entry settles
    successfully; ``error`` is only filled in under ``BatchPolicy.COLLECT``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[Any] = Field(None, description="Opaque identifier")
    method: str = Field(..., description="HTTP method")
    url: str = Field(..., description="Request URL")
    body: Optional[Any] = Field(None, description="bytes, str or file-like body")
    headers: Optional[Dict[str, str]] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict, description="Client options")
    response: Optional[RawResponse] = None
    error: Optional[ClientError] = None


@dataclass(frozen=True)
class Ok:
    """Successful outcome."""

    value: RawResponse

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> RawResponse:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome."""

    error: ClientError

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> RawResponse:
        raise self.error


Result = Union[Ok, Err]
