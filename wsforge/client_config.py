"""Settings for a WebSocket client: behaviour, socket options and endpoint."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntFlag, auto
from typing import Any, Callable, Optional

MAX_IDLE_TIMEOUT = 240 * 4
MIN_IDLE_TIMEOUT = 8
MAX_LIFETIME_MINUTES = 240

DEFAULT_PORT = 80
DEFAULT_SSL_PORT = 443

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


class CompressOptions(IntFlag):
    """Per-message compression modes for a WebSocket."""

    DISABLED = 0
    SHARED_COMPRESSOR = auto()
    DEDICATED_COMPRESSOR = auto()
    DEDICATED_DECOMPRESSOR = auto()


@dataclass(frozen=True)
class SocketContextOptions:
    """TLS options for the socket context; None means not set."""

    key_file_name: Optional[str] = None
    cert_file_name: Optional[str] = None
    passphrase: Optional[str] = None
    dh_params_file_name: Optional[str] = None
    ca_file_name: Optional[str] = None
    ssl_ciphers: Optional[str] = None
    ssl_prefer_low_memory_usage: int = 0


Handler = Optional[Callable[..., Any]]


@dataclass
class WebSocketBehavior:
    """Settings and event handlers for client WebSocket connections."""

    compression: CompressOptions = CompressOptions.DISABLED
    max_payload_length: int = 16 * 1024
    idle_timeout: int = 120
    max_backpressure: int = 64 * 1024
    close_on_backpressure_limit: bool = False
    reset_idle_timeout_on_send: bool = False
    send_pings_automatically: bool = True
    max_lifetime: int = 0
    upgrade: Handler = None
    open: Handler = None
    message: Handler = None
    dropped: Handler = None
    drain: Handler = None
    ping: Handler = None
    pong: Handler = None
    subscription: Handler = None
    close: Handler = None

    def validate(self) -> None:
        """Raise ValueError for idle timeouts or lifetimes out of range."""
        if self.idle_timeout and self.idle_timeout < MIN_IDLE_TIMEOUT:
            raise ValueError("idleTimeout must be either 0 or greater than 8!")
        if self.idle_timeout > MAX_IDLE_TIMEOUT:
            raise ValueError("idleTimeout must not be greater than 960 seconds!")
        if self.max_lifetime > MAX_LIFETIME_MINUTES:
            raise ValueError("maxLifetime must not be greater than 240 minutes!")


@dataclass(frozen=True)
class ClientEndpoint:
    """Where a client connects: host, port and request path."""

    host: str
    port: int
    path: str


def _parse_port(text: str) -> int:
    match = _LEADING_INTEGER.match(text)
    if match is None:
        raise ValueError(f"invalid port: {text!r}")
    return int(match.group(1))


def parse_ws_url(url: str, ssl: bool = False) -> ClientEndpoint:
    """Split a ws:// or wss:// URL into host, port and path.

    The default port follows ``ssl``, not the scheme.
    """
    port = DEFAULT_SSL_PORT if ssl else DEFAULT_PORT
    for scheme in ("wss://", "ws://"):
        if url.startswith(scheme):
            url = url[len(scheme):]
            break
    host_port, slash, rest = url.partition("/")
    path = slash + rest if slash else "/"
    host, colon, port_text = host_port.partition(":")
    if colon:
        port = _parse_port(port_text)
    return ClientEndpoint(host=host, port=port, path=path)