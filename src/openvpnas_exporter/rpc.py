"""XML-RPC client for the OpenVPN Access Server management socket.

The Access Server answers XML-RPC over HTTP on a Unix domain socket rather
than a TCP port. :class:`RpcClient` opens one :class:`RpcSession` per
collection cycle; every failure is raised as a subclass of :class:`RpcError`.

Usage::

    client = RpcClient("/usr/local/openvpn_as/etc/sock/sagent.localroot")
    with client.open_session() as session:
        summary = session.call("GetVPNSummary")
"""

from __future__ import annotations

import http.client
import logging
import socket
import xmlrpc.client
from typing import Any, Sequence
from xml.parsers.expat import ExpatError

logger = logging.getLogger(__name__)

# Host part of the virtual URL; the socket path decides where bytes go.
_VIRTUAL_URL = "http://localhost/"


class RpcError(Exception):
    """A remote call could not be completed."""


class RpcConnectionError(RpcError):
    """The management socket is unreachable or the connection broke."""


class DecodeError(RpcError):
    """The endpoint replied with something that is not a usable XML-RPC response."""


class RemoteFault(RpcError):
    """The endpoint rejected the call."""


class UnixHTTPConnection(http.client.HTTPConnection):
    """HTTP connection carried over a Unix domain socket."""

    def __init__(self, socket_path: str, timeout: float | None = None) -> None:
        super().__init__("localhost", timeout=timeout)
        self.socket_path = socket_path

    def connect(self) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.timeout)
        try:
            sock.connect(self.socket_path)
        except OSError:
            sock.close()
            raise
        self.sock = sock


class UnixStreamTransport(xmlrpc.client.Transport):
    """``xmlrpc.client`` transport that dials a Unix socket instead of host:port."""

    def __init__(self, socket_path: str, timeout: float | None = None) -> None:
        super().__init__()
        self.socket_path = socket_path
        self.timeout = timeout

    def make_connection(self, host: Any) -> http.client.HTTPConnection:
        if self._connection and host == self._connection[0]:
            return self._connection[1]
        self._connection = host, UnixHTTPConnection(self.socket_path, self.timeout)
        return self._connection[1]


class RpcSession:
    """One connection to the management socket, valid for a single cycle."""

    def __init__(self, socket_path: str, timeout: float | None = None) -> None:
        self._transport = UnixStreamTransport(socket_path, timeout)
        self._proxy = xmlrpc.client.ServerProxy(
            _VIRTUAL_URL,
            transport=self._transport,
            allow_none=True,
        )
        self._closed = False

    def connect(self) -> None:
        """Dial the socket now instead of on the first call."""
        conn = self._transport.make_connection("localhost")
        try:
            conn.connect()
        except OSError as exc:
            self.close()
            raise RpcConnectionError(
                f"cannot connect to {self._transport.socket_path}: {exc}"
            ) from exc

    def call(self, method: str, params: Sequence[Any] | None = None) -> Any:
        """Invoke *method* and return its decoded result."""
        if self._closed:
            raise RpcConnectionError("session is closed")
        args = tuple(params or ())
        try:
            return getattr(self._proxy, method)(*args)
        except xmlrpc.client.Fault as exc:
            raise RemoteFault(f"{method}: fault {exc.faultCode}: {exc.faultString}") from exc
        except xmlrpc.client.ProtocolError as exc:
            raise RemoteFault(f"{method}: HTTP {exc.errcode} {exc.errmsg}") from exc
        except (ExpatError, xmlrpc.client.ResponseError) as exc:
            raise DecodeError(f"{method}: malformed response: {exc}") from exc
        except (ValueError, TypeError) as exc:
            # bad scalar inside well-formed XML, e.g. <int>abc</int> or invalid base64
            raise DecodeError(f"{method}: undecodable value: {exc}") from exc
        except OSError as exc:
            raise RpcConnectionError(f"{method}: {exc}") from exc
        except http.client.HTTPException as exc:
            raise DecodeError(f"{method}: invalid HTTP response: {exc!r}") from exc

    def close(self) -> None:
        if not self._closed:
            self._transport.close()
            self._closed = True

    def __enter__(self) -> RpcSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class RpcClient:
    """Factory for :class:`RpcSession` objects bound to one socket path.

    *timeout* is the per-operation socket deadline in seconds; ``None`` blocks
    until the endpoint answers.
    """

    def __init__(self, socket_path: str, timeout: float | None = None) -> None:
        self.socket_path = socket_path
        self.timeout = timeout

    def open_session(self) -> RpcSession:
        """Return a connected session; raises :class:`RpcConnectionError`."""
        session = RpcSession(self.socket_path, self.timeout)
        session.connect()
        logger.debug("Connected to %s", self.socket_path)
        return session
