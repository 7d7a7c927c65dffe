"""Exceptions raised while reading or writing ZIP archives."""

from __future__ import annotations


class ZipError(Exception):
    """Base class for every error raised by this package."""

    default_message = "zip error"

    def __init__(self, *args: object) -> None:
        super().__init__(*(args or (self.default_message,)))


class FeatureNotSupportedError(ZipError):
    """A ZIP feature was encountered that this package does not handle."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"feature not supported: '{feature}'")


class CompressionNotSupportedError(ZipError):
    """An entry uses a compression method code that is not supported."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"compression not supported: {value}")


class AttributeCompatibilityNotSupportedError(ZipError):
    """An entry uses a host attribute compatibility that is not supported."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"host attribute compatibility not supported: {value}")


class TargetZip64NotSupportedError(ZipError):
    """The archive needs ZIP64 handling that the target cannot provide."""

    default_message = "attempted to read a ZIP64 file whilst on a 32-bit target"


class UnableToLocateEOCDRError(ZipError):
    """No end of central directory record could be found."""

    default_message = "unable to locate the end of central directory record"


class UpstreamReadError(ZipError):
    """The underlying reader or writer failed."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"an upstream reader returned an error: {cause}")
        self.__cause__ = cause


class CRC32CheckError(ZipError):
    """Data read back did not match the CRC32 recorded in the archive."""

    default_message = "a computed CRC32 value did not match the expected value"


class EntryIndexOutOfBoundsError(ZipError, IndexError):
    """An entry index did not name an entry of the archive."""

    default_message = "entry index was out of bounds"