"""
Aiohttp-based HTTP adapter (asynchronous).
"""

import asyncio
import logging
import time
from typing import Any, Dict, Mapping, Optional

import aiohttp

from ..config import ClientConfig
from ..exceptions import ClientError
from ..logging_setup import setup_logging
from ..metrics import record_request
from ..models import BatchPolicy, Err, Ok, RawResponse, Result
from ..utils import check_sink, multi_value_headers, open_sink, sanitize_headers
from .adapter import Exchange, to_raw_response
from .batch import Batch, collect_entries, settle

logger = logging.getLogger("raw_http.http.aiohttp")


class AiohttpAdapter:
    """
    Asynchronous HTTP adapter using aiohttp library.

    Same contract as ``RequestsAdapter`` with coroutine methods. Batches are
    dispatched as concurrent tasks and joined with ``asyncio.gather``.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        config: Optional[ClientConfig] = None,
    ):
        """
        Initialize aiohttp adapter.

        Args:
            session: Optional aiohttp.ClientSession instance
            config: Adapter configuration
        """
        self.config = config or ClientConfig()
        self._external_session = session is not None
        self.session = session

        if self.config.debug:
            setup_logging(debug=True)

    async def __aenter__(self) -> "AiohttpAdapter":
        """Context manager entry."""
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            connector = None if self.config.verify_ssl else aiohttp.TCPConnector(ssl=False)
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": self.config.user_agent},
                connector=connector,
            )
        return self.session

    async def _exchange(
        self,
        url: str,
        method: str,
        body: Optional[Any],
        headers: Optional[Mapping[str, str]],
        options: Optional[Mapping[str, Any]],
    ) -> Exchange:
        """
        Run one request/response exchange.

        Returns:
            Tuple of (status_code, body, headers), whatever the status

        Raises:
            ClientError: On transport failures and failures while reading the body
        """
        session = self._ensure_session()

        request_kwargs: Dict[str, Any] = dict(options or {})
        sink = request_kwargs.pop("sink", None)
        check_sink(sink)
        # status >= 400 is checked after the body is read
        request_kwargs.pop("raise_for_status", None)

        timeout = request_kwargs.pop("timeout", None)
        if timeout is None:
            timeout = self.config.timeout
        if isinstance(timeout, (int, float)):
            timeout = aiohttp.ClientTimeout(total=timeout)
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        logger.debug(
            "Async Request %s %s %s", method, url, sanitize_headers(headers),
            extra={"method": method, "url": url},
        )
        started = time.monotonic()

        try:
            async with session.request(
                method.upper(),
                url,
                data=body,
                headers=dict(headers or {}),
                raise_for_status=False,
                **request_kwargs,
            ) as response:
                status = response.status
                if sink is None or status >= 400:
                    content = await response.read()
                else:
                    with open_sink(sink) as handle:
                        async for chunk in response.content.iter_chunked(self.config.chunk_size):
                            handle.write(chunk)
                    content = b""
                resp_headers = multi_value_headers(response.headers)
        except aiohttp.ClientResponseError as e:
            if not e.status:
                self._failed(method, url, started, e)
                raise ClientError.from_exception(e) from e
            record_request(method, e.status, time.monotonic() - started)
            raise ClientError.from_aiohttp_exception(e) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            self._failed(method, url, started, e)
            raise ClientError.from_exception(e) from e

        record_request(method, status, time.monotonic() - started)
        logger.debug(
            "Async Response %d %s", status, content[:1000],
            extra={"method": method, "url": url, "status": status},
        )

        return status, content, resp_headers

    def _failed(self, method: str, url: str, started: float, exc: BaseException) -> None:
        record_request(method, "error", time.monotonic() - started)
        logger.debug(
            "Async Request %s %s failed: %s", method, url, exc,
            extra={"method": method, "url": url},
        )

    async def send(
        self,
        url: str,
        method: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> RawResponse:
        """
        Send HTTP request using aiohttp library.

        Args:
            url: Request URL
            method: HTTP method
            body: bytes, str or file-like request body
            headers: Request headers
            options: ``ClientSession.request`` keyword arguments, plus ``sink``

        Returns:
            RawResponse for status codes below 400

        Raises:
            ClientError: On transport failures and on status codes >= 400
        """
        return to_raw_response(*await self._exchange(url, method, body, headers, options))

    async def try_send(
        self,
        url: str,
        method: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result:
        """Like ``send`` but returns Ok/Err instead of raising ClientError."""
        try:
            return Ok(await self.send(url, method, body, headers, options))
        except ClientError as e:
            return Err(e)

    async def send_batch(
        self,
        entries: Batch,
        policy: Optional[BatchPolicy] = None,
    ) -> Dict[Any, Result]:
        """
        Send a batch of requests concurrently and wait for all of them.

        Args:
            entries: Mapping of id to BatchRequest, or iterable of BatchRequest
            policy: Failure policy, defaults to ``config.batch_policy``

        Returns:
            Mapping of entry id to Ok/Err

        Raises:
            ClientError: On the first failing entry under BatchPolicy.ABORT
        """
        policy = BatchPolicy(policy) if policy is not None else self.config.batch_policy
        items = collect_entries(entries)
        if not items:
            return {}

        logger.debug("Dispatching async batch of %d requests", len(items))

        outcomes = await asyncio.gather(
            *(
                self._exchange(
                    entry.url,
                    entry.method,
                    entry.body,
                    entry.headers or {},
                    entry.options,
                )
                for _, entry in items
            ),
            return_exceptions=True,
        )
        return settle(items, outcomes, policy)

    async def close(self) -> None:
        """Close the session if this adapter created it."""
        if not self._external_session and self.session is not None:
            await self.session.close()
            self.session = None
