"""Shared fixtures: an in-process fake of the Access Server XML-RPC socket."""

import os
import shutil
import socketserver
import tempfile
import threading
import xmlrpc.client
from xmlrpc.server import SimpleXMLRPCDispatcher, SimpleXMLRPCRequestHandler

import pytest

VPN_SUMMARY = {"n_clients": 7}

SUBSCRIPTION_STATUS = {
    "agent_disabled": False,
    "agent_id": "e1f2a3",
    "cc_limit": 10,
    "current_cc": 3,
    "error": "",
    "fallback_cc": 0,
    "grace_period": 0,
    "last_successful_update": 1700000000,
    "last_successful_update_age": 42,
    "max_cc": 10,
    "name": "openvpn",
    "next_update": 1700003600,
    "next_update_in": 3558,
    "notes": [],
    "overdraft": False,
    "server": "https://subscription.example",
    "state": "ONLINE",
    "type": "Subscription",
    "updates_failed": 0,
}


class _UnixRequestHandler(SimpleXMLRPCRequestHandler):
    # TCP_NODELAY does not apply to AF_UNIX sockets
    disable_nagle_algorithm = False

    def address_string(self):
        return "unix"


class FakeAccessServer(socketserver.UnixStreamServer, SimpleXMLRPCDispatcher):
    """XML-RPC server on a Unix socket answering from :attr:`responses`.

    A response that is an exception instance is raised, so
    :class:`xmlrpc.client.Fault` values become XML-RPC faults.
    """

    def __init__(self, path):
        self.logRequests = False
        self.calls = []
        self.responses = {
            "GetVPNSummary": dict(VPN_SUMMARY),
            "GetSubscriptionStatus": dict(SUBSCRIPTION_STATUS),
        }
        SimpleXMLRPCDispatcher.__init__(self, allow_none=True, encoding=None)
        socketserver.UnixStreamServer.__init__(self, path, _UnixRequestHandler)

    def _dispatch(self, method, params):
        self.calls.append(method)
        if method not in self.responses:
            raise xmlrpc.client.Fault(1, f"unknown method {method}")
        result = self.responses[method]
        if isinstance(result, Exception):
            raise result
        return result


class _RawReplyHandler(socketserver.StreamRequestHandler):
    """Answers every request with the server's fixed :attr:`body`."""

    def handle(self):
        length = 0
        while True:
            line = self.rfile.readline()
            if line in (b"\r\n", b"\n", b""):
                break
            if line.lower().startswith(b"content-length:"):
                length = int(line.split(b":", 1)[1])
        self.rfile.read(length)
        body = self.server.body
        self.wfile.write(
            b"HTTP/1.0 200 OK\r\n"
            b"Content-Type: text/xml\r\n"
            b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body
        )


def _run(server):
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread


@pytest.fixture
def socket_dir():
    # AF_UNIX paths are limited to ~100 bytes, keep them short
    path = tempfile.mkdtemp(prefix="ovpnas")
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def access_server(socket_dir):
    """A running fake Access Server; its socket path is ``server.server_address``."""
    server = FakeAccessServer(os.path.join(socket_dir, "sagent.sock"))
    thread = _run(server)
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def raw_reply_server(socket_dir):
    """Factory for Unix sockets that answer every request with a fixed HTTP 200 body."""
    started = []

    def _start(body):
        path = os.path.join(socket_dir, f"raw{len(started)}.sock")
        server = socketserver.UnixStreamServer(path, _RawReplyHandler)
        server.body = body
        started.append((server, _run(server)))
        return server

    try:
        yield _start
    finally:
        for server, thread in started:
            server.shutdown()
            server.server_close()
            thread.join(timeout=5)


@pytest.fixture
def garbage_server(raw_reply_server):
    """A Unix socket that answers every request with a non-XML body."""
    return raw_reply_server(b"this is not xml")


def method_response(value_xml):
    """A well-formed XML-RPC methodResponse carrying a one-member struct."""
    return (
        b"<?xml version=\"1.0\"?>\n<methodResponse><params><param><value><struct>"
        b"<member><name>n_clients</name><value>" + value_xml + b"</value></member>"
        b"</struct></value></param></params></methodResponse>"
    )


@pytest.fixture
def missing_socket(socket_dir):
    """Path of a socket nobody listens on."""
    return os.path.join(socket_dir, "absent.sock")


class FakeSession:
    """Stand-in for an RPC session answering from a response table."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []
        self.closed = False

    def call(self, method, params=None):
        self.calls.append(method)
        result = self.responses[method]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeClient:
    """Hands out a fresh :class:`FakeSession` per cycle."""

    def __init__(self, responses=None, connect_error=None):
        self.responses = responses or {
            "GetVPNSummary": dict(VPN_SUMMARY),
            "GetSubscriptionStatus": dict(SUBSCRIPTION_STATUS),
        }
        self.connect_error = connect_error
        self.sessions = []

    def open_session(self):
        if self.connect_error is not None:
            raise self.connect_error
        session = FakeSession(self.responses)
        self.sessions.append(session)
        return session

    @property
    def calls(self):
        return [call for s in self.sessions for call in s.calls]
