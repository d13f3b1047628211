"""
Base HTTP adapter interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..exceptions import ClientError
from ..models import BatchPolicy, Err, Ok, RawResponse, Result

# (status_code, body, headers) of a completed exchange
Exchange = Tuple[int, bytes, Dict[str, List[str]]]


def to_raw_response(status_code: int, body: bytes, headers: Dict[str, List[str]]) -> RawResponse:
    """
    Turn a completed exchange into a RawResponse.

    Raises:
        ClientError: If the status code is 400 or above
    """
    if status_code >= 400:
        raise ClientError.from_body(body, status_code)
    return RawResponse(headers=headers, body=body, status_code=status_code)


class HTTPAdapter(ABC):
    """
    Abstract base class for HTTP adapters.

    Allows pluggable HTTP clients behind one request/response contract.
    """

    @abstractmethod
    def send(
        self,
        url: str,
        method: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> RawResponse:
        """
        Send HTTP request.

        Args:
            url: Request URL
            method: HTTP method (GET, POST, etc.)
            body: bytes, str or file-like request body
            headers: Request headers
            options: Options understood by the underlying client, plus ``sink``

        Returns:
            RawResponse for status codes below 400

        Raises:
            ClientError: On transport failures and on status codes >= 400
        """
        raise NotImplementedError

    @abstractmethod
    def send_batch(
        self,
        entries: Any,
        policy: Optional[BatchPolicy] = None,
    ) -> Dict[Any, Result]:
        """
        Send a batch of requests concurrently and wait for all of them.

        Args:
            entries: Mapping of id to BatchRequest, or iterable of BatchRequest
            policy: Failure policy, defaults to the configured one

        Returns:
            Mapping of entry id to Ok/Err

        Raises:
            ClientError: On the first failing entry under BatchPolicy.ABORT
        """
        raise NotImplementedError

    def try_send(
        self,
        url: str,
        method: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result:
        """Like ``send`` but returns Ok/Err instead of raising ClientError."""
        try:
            return Ok(self.send(url, method, body, headers, options))
        except ClientError as e:
            return Err(e)
