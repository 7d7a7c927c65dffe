import pytest

from aiozipstream.errors import (
    AttributeCompatibilityNotSupportedError,
    CompressionNotSupportedError,
    CRC32CheckError,
    EntryIndexOutOfBoundsError,
    FeatureNotSupportedError,
    TargetZip64NotSupportedError,
    UnableToLocateEOCDRError,
    UpstreamReadError,
    ZipError,
)


def test_feature_not_supported_message():
    err = FeatureNotSupportedError("Spanned/split files")
    assert str(err) == "feature not supported: 'Spanned/split files'"
    assert err.feature == "Spanned/split files"
    assert isinstance(err, ZipError)


def test_compression_not_supported_message():
    err = CompressionNotSupportedError(7)
    assert str(err) == "compression not supported: 7"
    assert err.value == 7


def test_attribute_compatibility_message():
    err = AttributeCompatibilityNotSupportedError(0)
    assert str(err) == "host attribute compatibility not supported: 0"
    assert err.value == 0


def test_upstream_read_error_keeps_cause():
    cause = OSError("disk gone")
    err = UpstreamReadError(cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    assert str(err) == "an upstream reader returned an error: disk gone"


@pytest.mark.parametrize(
    "cls, message",
    [
        (TargetZip64NotSupportedError, "attempted to read a ZIP64 file whilst on a 32-bit target"),
        (UnableToLocateEOCDRError, "unable to locate the end of central directory record"),
        (CRC32CheckError, "a computed CRC32 value did not match the expected value"),
        (EntryIndexOutOfBoundsError, "entry index was out of bounds"),
    ],
)
def test_default_messages(cls, message):
    err = cls()
    assert str(err) == message
    assert isinstance(err, ZipError)


def test_errors_are_caught_as_zip_error():
    err = CompressionNotSupportedError(99)
    assert isinstance(err, ZipError)
    assert err.value == 99
    assert str(err) == "compression not supported: 99"


def test_index_error_is_also_index_error():
    err = EntryIndexOutOfBoundsError()
    assert isinstance(err, IndexError)
    assert isinstance(err, ZipError)
    assert str(err) == "entry index was out of bounds"