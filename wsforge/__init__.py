"""Building blocks for WebSocket and HTTP servers: a pub/sub topic tree, a
PROXY v2 parser, option parsing, client settings and build helpers."""

__version__ = "0.1.0"