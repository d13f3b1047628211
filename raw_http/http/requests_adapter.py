"""
Requests-based HTTP adapter (synchronous).
"""

import logging
import time
from concurrent import futures
from typing import Any, Dict, Mapping, Optional

import requests

from ..config import ClientConfig
from ..exceptions import ClientError
from ..logging_setup import setup_logging
from ..metrics import record_request
from ..models import BatchPolicy, RawResponse, Result
from ..utils import check_sink, multi_value_headers, open_sink, sanitize_headers
from .adapter import Exchange, HTTPAdapter, to_raw_response
from .batch import Batch, collect_entries, settle

logger = logging.getLogger("raw_http.http.requests")

# Keyword arguments that belong to requests.Request rather than Session.send
REQUEST_KEYS = ("params", "json", "auth", "cookies", "files", "hooks")


class RequestsAdapter(HTTPAdapter):
    """
    Synchronous HTTP adapter using requests library.

    Features:
    - Options passed through to ``requests.Request`` and ``Session.send``
    - ``sink`` option streaming the body to a file or path
    - Concurrent batches on a thread pool
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        config: Optional[ClientConfig] = None,
    ):
        """
        Initialize requests adapter.

        Args:
            session: Optional requests.Session instance
            config: Adapter configuration
        """
        self.config = config or ClientConfig()

        if self.config.debug:
            setup_logging(debug=True)

        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.config.user_agent
            session.verify = self.config.verify_ssl
        self.session = session

    def _exchange(
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
            ClientError: On transport failures, bad-response exceptions and
                failures while reading the body
        """
        send_kwargs: Dict[str, Any] = dict(options or {})
        sink = send_kwargs.pop("sink", None)
        http_errors = send_kwargs.pop("http_errors", False)
        check_sink(sink)

        request_kwargs = {key: send_kwargs.pop(key) for key in REQUEST_KEYS if key in send_kwargs}
        if sink is not None:
            send_kwargs["stream"] = True
        if send_kwargs.get("timeout") is None and self.config.timeout is not None:
            send_kwargs["timeout"] = self.config.timeout

        request = requests.Request(
            method.upper(), url, headers=dict(headers or {}), data=body, **request_kwargs
        )

        logger.debug(
            "Request %s %s %s", method, url, sanitize_headers(request.headers),
            extra={"method": method, "url": url},
        )
        started = time.monotonic()

        try:
            # invalid URLs surface while preparing
            prepared = self.session.prepare_request(request)
            response = self.session.send(prepared, **send_kwargs)
            if http_errors:
                response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            record_request(method, _status_of(e), time.monotonic() - started)
            raise ClientError.from_requests_exception(e) from e
        except requests.exceptions.RequestException as e:
            if e.response is None:
                self._failed(method, url, started, e)
                raise ClientError.from_exception(e) from e
            response = e.response

        status = response.status_code
        try:
            if sink is None or status >= 400:
                content = response.content
            else:
                with open_sink(sink) as handle:
                    for chunk in response.iter_content(chunk_size=self.config.chunk_size):
                        handle.write(chunk)
                content = b""
        except (requests.exceptions.RequestException, OSError) as e:
            self._failed(method, url, started, e)
            raise ClientError.from_exception(e) from e
        finally:
            response.close()

        record_request(method, status, time.monotonic() - started)
        logger.debug(
            "Response %d %s", status, content[:1000],
            extra={"method": method, "url": url, "status": status},
        )

        return status, content, _response_headers(response)

    def _failed(self, method: str, url: str, started: float, exc: BaseException) -> None:
        record_request(method, "error", time.monotonic() - started)
        logger.debug("Request %s %s failed: %s", method, url, exc, extra={"method": method, "url": url})

    def send(
        self,
        url: str,
        method: str,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> RawResponse:
        """
        Send HTTP request using requests library.

        Args:
            url: Request URL
            method: HTTP method
            body: bytes, str or file-like request body
            headers: Request headers
            options: ``requests.Request`` / ``Session.send`` keyword arguments, plus
                ``sink`` (path or writable file) and ``http_errors`` (bool)

        Returns:
            RawResponse for status codes below 400

        Raises:
            ClientError: On transport failures and on status codes >= 400
        """
        return to_raw_response(*self._exchange(url, method, body, headers, options))

    def send_batch(
        self,
        entries: Batch,
        policy: Optional[BatchPolicy] = None,
    ) -> Dict[Any, Result]:
        """
        Send a batch of requests on a thread pool and wait for all of them.

        Every entry is dispatched before any result is inspected. Results
        are then attached to their entries in the caller's order.

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

        logger.debug("Dispatching batch of %d requests", len(items))

        workers = min(self.config.max_workers, len(items))
        with futures.ThreadPoolExecutor(max_workers=workers) as pool:
            pending = [
                pool.submit(
                    self._exchange,
                    entry.url,
                    entry.method,
                    entry.body,
                    entry.headers or {},
                    entry.options,
                )
                for _, entry in items
            ]
            futures.wait(pending)

        outcomes = [f.exception() or f.result() for f in pending]
        return settle(items, outcomes, policy)


def _status_of(exc: requests.exceptions.RequestException) -> Any:
    return exc.response.status_code if exc.response is not None else "error"


def _response_headers(response: requests.Response) -> Dict[str, Any]:
    # urllib3 keeps repeated headers apart; requests folds them into one string
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return multi_value_headers(raw_headers)
    return multi_value_headers(response.headers)
