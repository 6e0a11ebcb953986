"""Plain HTTP/1.1 exchanges against a fixed address or against any host."""

from __future__ import annotations

import http.client
import ssl
import threading
from dataclasses import dataclass, field

DEFAULT_MAX_CONNS = 512


def _insecure_tls_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


_TLS_CONTEXT = _insecure_tls_context()


@dataclass
class WireRequest:
    """A request as it is sent on the wire."""

    method: str = "GET"
    scheme: str = "http"
    host: str = ""
    path: str = "/"
    query: str = ""
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def url(self) -> str:
        """Return the full URL of the request."""
        return f"{self.scheme}://{self.host}{self._request_target()}"

    def set_header(self, key: str, value: str) -> None:
        """Set a header, replacing any earlier value under the same name."""
        lower = key.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != lower]
        self.headers.append((key, value))

    def _request_target(self) -> str:
        path = self.path or "/"
        return f"{path}?{self.query}" if self.query else path

    def _has_header(self, name: str) -> bool:
        lower = name.lower()
        return any(k.lower() == lower for k, _ in self.headers)


@dataclass
class WireResponse:
    """A response as read from the wire."""

    status_code: int = 0
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Return the first value of a header, matched without regard to case."""
        lower = name.lower()
        return next((v for k, v in self.headers if k.lower() == lower), None)


def _split_address(address: str, tls: bool) -> tuple[str, int]:
    default = 443 if tls else 80
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"invalid address: {address!r}")
        rest = address[end + 1:]
        port = int(rest[1:]) if rest.startswith(":") else default
        return address[1:end], port
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, default
    return host, int(port)


def _pick_timeout(read_timeout: float | None, write_timeout: float | None) -> float | None:
    values = [t for t in (read_timeout, write_timeout) if t is not None]
    return max(values) if values else None


def _exchange(
    host: str, port: int, tls: bool, timeout: float | None, request: WireRequest
) -> WireResponse:
    if tls:
        conn: http.client.HTTPConnection = http.client.HTTPSConnection(
            host, port, timeout=timeout, context=_TLS_CONTEXT
        )
    else:
        conn = http.client.HTTPConnection(host, port, timeout=timeout)
    try:
        conn.putrequest(
            request.method,
            request._request_target(),
            skip_host=True,
            skip_accept_encoding=True,
        )
        if not request._has_header("Host"):
            conn.putheader("Host", request.host)
        for key, value in request.headers:
            conn.putheader(key, value)
        if request.body and not request._has_header("Content-Length"):
            conn.putheader("Content-Length", str(len(request.body)))
        conn.endheaders(request.body or None)
        response = conn.getresponse()
        body = response.read()
        return WireResponse(response.status, list(response.getheaders()), body)
    finally:
        conn.close()


class HTTPClient:
    """A client that always connects to one address, whatever the request's host."""

    def __init__(self, host: str, tls: bool) -> None:
        self.addr = host
        self.is_tls = tls
        self.read_timeout: float | None = None
        self.write_timeout: float | None = None
        self._max_conns = DEFAULT_MAX_CONNS
        self._slots = threading.BoundedSemaphore(DEFAULT_MAX_CONNS)

    @property
    def max_conns(self) -> int:
        """The most requests allowed in flight at once."""
        return self._max_conns

    @max_conns.setter
    def max_conns(self, value: int) -> None:
        if value < 1:
            value = DEFAULT_MAX_CONNS
        self._max_conns = value
        self._slots = threading.BoundedSemaphore(value)

    def do(self, request: WireRequest) -> WireResponse:
        """Send the request to the client's address and return the response."""
        host, port = _split_address(self.addr, self.is_tls)
        with self._slots:
            return _exchange(
                host,
                port,
                self.is_tls,
                _pick_timeout(self.read_timeout, self.write_timeout),
                request,
            )


class BackupClient:
    """A client that connects to whatever host and scheme the request names."""

    def __init__(self, timeout: float | None) -> None:
        self.read_timeout = timeout
        self.write_timeout = timeout

    def do(self, request: WireRequest) -> WireResponse:
        """Send the request to its own host and return the response."""
        if not request.host:
            raise ValueError("request has no host to connect to")
        tls = request.scheme.lower() == "https"
        host, port = _split_address(request.host, tls)
        return _exchange(
            host,
            port,
            tls,
            _pick_timeout(self.read_timeout, self.write_timeout),
            request,
        )