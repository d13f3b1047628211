"""
Unit tests for RequestsAdapter.send
"""

import errno
import io

import pytest
import requests
from prometheus_client import REGISTRY
from requests_mock import Mocker
from urllib3.exceptions import ProtocolError

from raw_http import ClientConfig, ClientError, Err, Ok, RawResponse, RequestsAdapter


def test_send_returns_raw_response(adapter, api_url):
    """GET against a 200 text/plain endpoint"""
    with Mocker() as m:
        m.get(f"{api_url}/x", text="ok", headers={"Content-Type": "text/plain"}, status_code=200)

        response = adapter.send(f"{api_url}/x", "GET", None, {}, {})

    assert isinstance(response, RawResponse)
    assert response.status_code == 200
    assert response.body == b"ok"
    assert response.headers["Content-Type"] == ["text/plain"]


@pytest.mark.parametrize("status", [200, 201, 204, 304])
def test_send_success_status_codes(adapter, api_url, status):
    """Every status below 400 yields a RawResponse with the full body"""
    body = b"" if status in (204, 304) else b"payload"
    with Mocker() as m:
        m.get(f"{api_url}/x", content=body, status_code=status)

        response = adapter.send(f"{api_url}/x", "GET")

    assert response.status_code == status
    assert response.body == body


def test_send_conflict_raises_client_error(adapter, api_url):
    """409 with a plain response"""
    with Mocker() as m:
        m.get(f"{api_url}/x", text="conflict", status_code=409)

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/x", "GET", None, {}, {})

    error = exc_info.value
    assert error.body == b"conflict"
    assert error.status_code == 409
    assert str(error) == "conflict"


@pytest.mark.parametrize("status", [400, 401, 404, 429, 500, 503])
def test_send_error_status_codes(adapter, api_url, status):
    with Mocker() as m:
        m.post(f"{api_url}/upload", text=f"failure {status}", status_code=status)

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/upload", "POST", b"data")

    assert exc_info.value.status_code == status
    assert exc_info.value.body == f"failure {status}".encode()


def test_send_bad_response_exception_is_translated(adapter, api_url):
    """http_errors makes requests raise HTTPError; the outcome is identical"""
    with Mocker() as m:
        m.get(f"{api_url}/x", text="conflict", status_code=409)

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/x", "GET", options={"http_errors": True})

    error = exc_info.value
    assert error.body == b"conflict"
    assert error.status_code == 409
    assert isinstance(error.__cause__, requests.exceptions.HTTPError)


def test_send_transport_failure_without_response(adapter, api_url):
    """Connection failures wrap the message and errno"""
    with Mocker() as m:
        m.get(
            f"{api_url}/x",
            exc=requests.exceptions.ConnectionError(111, "Connection refused"),
        )

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/x", "GET")

    error = exc_info.value
    assert error.status_code is None
    assert error.body is None
    assert error.code == 111
    assert "Connection refused" in error.message


def test_send_transport_failure_without_message(adapter, api_url):
    with Mocker() as m:
        m.get(f"{api_url}/x", exc=requests.exceptions.ConnectTimeout)

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/x", "GET")

    assert exc_info.value.message == "ConnectTimeout"


class _RedirectLoopSession(requests.Session):
    """Session whose send fails with a response attached."""

    def __init__(self, status_code, content):
        super().__init__()
        self.status_code = status_code
        self.content = content

    def send(self, request, **kwargs):
        response = requests.Response()
        response.status_code = self.status_code
        response.headers["Location"] = "https://api.example.com/loop"
        response._content = self.content
        response._content_consumed = True
        response.request = request
        raise requests.exceptions.TooManyRedirects("Exceeded 30 redirects.", response=response)


def test_send_uses_response_carried_by_transport_error(api_url):
    adapter = RequestsAdapter(session=_RedirectLoopSession(302, b"moved"))

    response = adapter.send(f"{api_url}/loop", "GET")

    assert response.status_code == 302
    assert response.body == b"moved"
    assert response.headers["Location"] == ["https://api.example.com/loop"]


def test_send_carried_error_response_raises(api_url):
    adapter = RequestsAdapter(session=_RedirectLoopSession(500, b"broken"))

    with pytest.raises(ClientError) as exc_info:
        adapter.send(f"{api_url}/loop", "GET")

    assert exc_info.value.body == b"broken"


def test_send_builds_request(adapter, api_url):
    with Mocker() as m:
        m.put(f"{api_url}/files", text="{}", status_code=200)

        adapter.send(
            f"{api_url}/files",
            "put",
            b'{"path": "/a.txt"}',
            {"Content-Type": "application/json", "X-Trace": "abc"},
        )

        sent = m.last_request

    assert sent.method == "PUT"
    assert sent.body == b'{"path": "/a.txt"}'
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.headers["X-Trace"] == "abc"
    assert sent.headers["User-Agent"].startswith("raw-http-adapter/")


def test_send_streams_file_like_body(adapter, api_url):
    with Mocker() as m:
        m.post(f"{api_url}/upload", text="done")

        adapter.send(f"{api_url}/upload", "POST", io.BytesIO(b"chunked upload"))

        sent = m.last_request

    assert sent.body.read() == b"chunked upload"


def test_send_passes_options_through(adapter, api_url):
    with Mocker() as m:
        m.get(f"{api_url}/x", text="ok")

        adapter.send(f"{api_url}/x", "GET", options={"timeout": 5, "verify": False})

        sent = m.last_request

    assert sent.timeout == 5
    assert sent.verify is False


def test_send_uses_configured_timeout(api_url):
    adapter = RequestsAdapter(config=ClientConfig(timeout=12.5))

    with Mocker() as m:
        m.get(f"{api_url}/x", text="ok")

        adapter.send(f"{api_url}/x", "GET")
        assert m.last_request.timeout == 12.5

        adapter.send(f"{api_url}/x", "GET", options={"timeout": 1})
        assert m.last_request.timeout == 1


def test_send_sink_file_object(adapter, api_url):
    """Body diverted to a sink leaves the returned body empty"""
    sink = io.BytesIO()
    with Mocker() as m:
        m.get(f"{api_url}/download", content=b"file contents" * 100)

        response = adapter.send(f"{api_url}/download", "GET", options={"sink": sink})

    assert response.status_code == 200
    assert response.body == b""
    assert sink.getvalue() == b"file contents" * 100
    assert not sink.closed


def test_send_sink_path(adapter, api_url, tmp_path):
    target = tmp_path / "download.bin"
    with Mocker() as m:
        m.get(f"{api_url}/download", content=b"\x00\x01binary")

        response = adapter.send(f"{api_url}/download", "GET", options={"sink": str(target)})

    assert response.body == b""
    assert target.read_bytes() == b"\x00\x01binary"


def test_send_sink_error_keeps_body_in_error(adapter, api_url):
    sink = io.BytesIO()
    with Mocker() as m:
        m.get(f"{api_url}/download", text="path/not_found", status_code=409)

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/download", "GET", options={"sink": sink})

    assert exc_info.value.body == b"path/not_found"
    assert sink.getvalue() == b""


def test_send_rejects_unusable_sink(adapter, api_url):
    with Mocker() as m:
        m.get(f"{api_url}/download", text="data")

        with pytest.raises(TypeError):
            adapter.send(f"{api_url}/download", "GET", options={"sink": 42})

        assert m.call_count == 0


def test_try_send_returns_result(adapter, api_url):
    with Mocker() as m:
        m.get(f"{api_url}/ok", text="fine")
        m.get(f"{api_url}/bad", text="nope", status_code=404)

        ok = adapter.try_send(f"{api_url}/ok", "GET")
        err = adapter.try_send(f"{api_url}/bad", "GET")

    assert isinstance(ok, Ok)
    assert ok.unwrap().body == b"fine"
    assert isinstance(err, Err)
    assert err.error.status_code == 404
    with pytest.raises(ClientError):
        err.unwrap()


def test_send_records_metrics(adapter, api_url):
    labels = {"method": "DELETE", "code": "204"}
    before = REGISTRY.get_sample_value("raw_http_requests_total", labels) or 0.0

    with Mocker() as m:
        m.delete(f"{api_url}/x", status_code=204)
        adapter.send(f"{api_url}/x", "DELETE")

    after = REGISTRY.get_sample_value("raw_http_requests_total", labels)
    assert after == before + 1


def test_injected_session_is_used_as_is(api_url):
    session = requests.Session()
    session.headers["Authorization"] = "Bearer token"
    adapter = RequestsAdapter(session=session)

    with Mocker() as m:
        m.get(f"{api_url}/x", text="ok")
        adapter.send(f"{api_url}/x", "GET")

        assert m.last_request.headers["Authorization"] == "Bearer token"

    assert adapter.session is session


def test_send_invalid_url_raises_client_error(adapter):
    with pytest.raises(ClientError) as exc_info:
        adapter.send("not a url", "GET")

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.exceptions.MissingSchema)


def test_send_params_and_json_options_build_the_request(adapter, api_url):
    with Mocker() as m:
        m.post(f"{api_url}/search", text="ok")

        adapter.send(
            f"{api_url}/search",
            "POST",
            options={"params": {"a": "1"}, "json": {"q": "x"}, "auth": ("user", "pass")},
        )

        sent = m.last_request

    assert sent.qs == {"a": ["1"]}
    assert sent.json() == {"q": "x"}
    assert sent.headers["Authorization"].startswith("Basic ")


class _BrokenStream:
    """urllib3-like raw stream that drops the connection after one chunk."""

    def stream(self, chunk_size, decode_content=None):
        yield b"partial"
        raise ProtocolError("Connection broken: IncompleteRead")

    def close(self):
        pass


class _DroppedConnectionSession(requests.Session):
    def send(self, request, **kwargs):
        response = requests.Response()
        response.status_code = 200
        response.raw = _BrokenStream()
        response.request = request
        return response


@pytest.mark.parametrize("use_sink", [False, True], ids=["memory", "sink"])
def test_send_connection_dropped_while_reading_body(api_url, tmp_path, use_sink):
    adapter = RequestsAdapter(session=_DroppedConnectionSession())
    options = {"sink": str(tmp_path / "out.bin")} if use_sink else {}

    with pytest.raises(ClientError) as exc_info:
        adapter.send(f"{api_url}/download", "GET", options=options)

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.exceptions.ChunkedEncodingError)


def test_send_unwritable_sink_path(adapter, api_url, tmp_path):
    target = tmp_path / "missing" / "out.bin"
    with Mocker() as m:
        m.get(f"{api_url}/download", content=b"data")

        with pytest.raises(ClientError) as exc_info:
            adapter.send(f"{api_url}/download", "GET", options={"sink": str(target)})

    assert exc_info.value.code == errno.ENOENT
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
