"""A small select-based HTTP server with event callbacks, a static file handler and response helpers."""

__version__ = "0.2.0"