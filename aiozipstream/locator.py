"""Locating the end of central directory record by reading backwards."""

from __future__ import annotations

import inspect
import os
from typing import Any

from .errors import UnableToLocateEOCDRError, UpstreamReadError
from .records import EOCDR_LENGTH, EOCDR_SIGNATURE, SIGNATURE_LENGTH

BUFFER_SIZE = 2048

# The record cannot start further back than this from the end of the data.
EOCDR_LOWER_BOUND = EOCDR_LENGTH + SIGNATURE_LENGTH + 0xFFFF


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def locate_eocdr(reader: Any) -> int:
    """Return the offset of the end of central directory record signature.

    ``reader`` needs ``seek(offset, whence)`` and ``read(size)``, plain or async.
    The data is read backwards in overlapping buffers so that a signature
    crossing a buffer boundary is still found.
    """
    signature = EOCDR_SIGNATURE.to_bytes(4, "little")
    try:
        length = await _resolve(reader.seek(0, os.SEEK_END))
        if length is None:
            length = await _resolve(reader.tell())
        lowest = max(0, length - EOCDR_LOWER_BOUND)
        position = max(0, length - (EOCDR_LENGTH + BUFFER_SIZE))
        await _resolve(reader.seek(position, os.SEEK_SET))

        while True:
            buffer = await _resolve(reader.read(BUFFER_SIZE))
            match = reverse_search_buffer(buffer, signature)
            if match is not None:
                return position + (match + 1) - SIGNATURE_LENGTH
            if position == 0 or position <= lowest:
                raise UnableToLocateEOCDRError()
            position = max(0, position - (BUFFER_SIZE - SIGNATURE_LENGTH))
            await _resolve(reader.seek(position, os.SEEK_SET))
    except OSError as exc:
        raise UpstreamReadError(exc) from exc


def reverse_search_buffer(buffer: bytes, signature: bytes) -> int | None:
    """Return the index of the last byte of the final match of ``signature``."""
    buffer = bytes(buffer)
    signature = bytes(signature)
    width = len(signature)
    for index in reversed(range(len(buffer))):
        if index + 1 < width:
            return None
        if buffer[index + 1 - width:index + 1] == signature:
            return index
    return None