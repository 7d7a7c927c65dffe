"""A writer wrapper that counts the bytes written through it."""

from __future__ import annotations

import inspect
from typing import Any


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class OffsetWriter:
    """Tracks the byte offset of data written to an inner writer.

    The inner writer needs a ``write(data)`` method, plain or async, returning
    the number of bytes written or None for all of them.
    """

    def __init__(self, inner: Any) -> None:
        self._inner = inner
        self._offset = 0

    @property
    def offset(self) -> int:
        """Number of bytes written so far."""
        return self._offset

    @property
    def inner(self) -> Any:
        """The wrapped writer."""
        return self._inner

    async def write(self, data: bytes) -> int:
        """Write once to the inner writer and return the bytes it took."""
        result = await _resolve(self._inner.write(data))
        count = len(data) if result is None else int(result)
        self._offset += count
        return count

    async def write_all(self, data: bytes) -> None:
        """Write the whole of ``data``."""
        view = memoryview(data)
        written = 0
        while written < len(view):
            count = await self.write(view[written:])
            if count == 0:
                raise OSError("failed to write whole buffer")
            written += count

    async def flush(self) -> None:
        """Flush the inner writer, if it can be flushed."""
        flush = getattr(self._inner, "flush", None)
        if flush is not None:
            await _resolve(flush())

    async def shutdown(self) -> None:
        """Shut the inner writer down, or flush it when it has no shutdown."""
        shutdown = getattr(self._inner, "shutdown", None)
        if shutdown is not None:
            await _resolve(shutdown())
        else:
            await self.flush()