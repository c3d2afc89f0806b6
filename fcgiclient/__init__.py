"""Asynchronous FastCGI client over asyncio streams: params, requests, whole or streamed responses."""

__version__ = "0.9.0"

__all__ = ["client", "conn", "errors", "meta", "params", "request", "response"]