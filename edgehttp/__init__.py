"""HTTP/1.x headers, connection and body negotiation, and WebSocket upgrade helpers."""

__version__ = "0.6.0"
__all__ = ["headers", "method", "negotiation", "ws"]