"""Asynchronous ZIP archive reading and writing with a focus on streaming."""

__version__ = "0.1.0"