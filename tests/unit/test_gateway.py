import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from client.errors import (
    GatewayTimeoutError,
    HttpError,
    NetworkError,
    ServiceUnavailableError,
)
from client.gateway import Gateway
from tests.fakes import API_BASE, CannedSession, FakeResponse, FlaskClientSession, UnreachableSession


def test_successful_call_returns_json(client):
    session = FlaskClientSession(client)
    gateway = Gateway(API_BASE + "/", session=session, timeout=5)

    body = gateway.call("/api/logout")

    assert body == {"message": "Logged out"}
    assert session.calls == [{"method": "POST", "path": "/api/logout", "json": None, "timeout": 5}]


def test_per_call_timeout_overrides_default():
    session = CannedSession(FakeResponse(200, {}))
    Gateway(API_BASE, session=session, timeout=7).call("/api/logout", timeout=4)
    assert session.calls[0]["timeout"] == 4
    assert session.calls[0]["url"] == API_BASE + "/api/logout"


def test_timeout_raises_gateway_timeout():
    gateway = Gateway(API_BASE, session=UnreachableSession(requests.Timeout))
    with pytest.raises(GatewayTimeoutError):
        gateway.call("/api/login", body={"email": "a@x.com", "password": "x"})


def test_connection_failure_raises_network_error():
    gateway = Gateway(API_BASE, session=UnreachableSession())
    with pytest.raises(NetworkError):
        gateway.call("/api/register")


def test_http_error_carries_server_message(client):
    gateway = Gateway(API_BASE, session=FlaskClientSession(client))
    with pytest.raises(HttpError) as excinfo:
        gateway.call("/api/login", body={"email": "ghost@x.com", "password": "secret1"})
    assert excinfo.value.status == 400
    assert excinfo.value.message == "Invalid email or password"


def test_http_error_falls_back_to_generic_message():
    gateway = Gateway(API_BASE, session=CannedSession(FakeResponse(502, None, text="<html>")))
    with pytest.raises(HttpError) as excinfo:
        gateway.call("/api/order", error_message="Order failed")
    assert excinfo.value.status == 502
    assert excinfo.value.message == "Order failed"


def test_503_is_service_unavailable():
    gateway = Gateway(API_BASE, session=CannedSession(FakeResponse(503, {"message": "down"})))
    with pytest.raises(ServiceUnavailableError) as excinfo:
        gateway.call("/api/order")
    assert excinfo.value.message == "down"


def test_unreadable_success_body_is_network_error():
    gateway = Gateway(API_BASE, session=CannedSession(FakeResponse(200, None)))
    with pytest.raises(NetworkError):
        gateway.call("/api/health", method="GET")


class TricklingHandler(BaseHTTPRequestHandler):
    """Sends its JSON body one byte at a time."""

    body = b'{"ok": true}'
    delay = 0.3

    def do_POST(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for index in range(len(self.body)):
                self.wfile.write(self.body[index:index + 1])
                self.wfile.flush()
                time.sleep(self.delay)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture()
def trickling_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), TricklingHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


# a body that keeps trickling in must not outlive the call deadline
def test_slow_body_hits_total_deadline(trickling_server):
    gateway = Gateway(trickling_server, timeout=1.0)

    started = time.monotonic()
    with pytest.raises(GatewayTimeoutError):
        gateway.call("/api/order", body={"movieName": "Dune"})
    elapsed = time.monotonic() - started

    assert elapsed < 1.5


def test_slow_body_within_deadline_succeeds(trickling_server):
    gateway = Gateway(trickling_server, timeout=10.0)
    assert gateway.call("/api/order") == {"ok": True}
