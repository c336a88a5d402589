"""
Unit-тесты для иерархии исключений AEAD.
"""

import pytest

from src.security.aead.core.exceptions import (
    AuthenticationFailedError,
    CryptoError,
    DuplicateRegistrationError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
    InvalidKeySizeError,
    KeyManagerNotFoundError,
    ParseError,
    PlaintextTooLargeError,
    RandomSourceError,
    RegistryError,
    UnsupportedKeyTypeError,
    UnsupportedVersionError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_cls",
        [
            InvalidKeySizeError,
            UnsupportedVersionError,
            UnsupportedKeyTypeError,
            ParseError,
            AuthenticationFailedError,
            PlaintextTooLargeError,
        ],
    )
    def test_invalid_argument_subclasses(self, exc_cls: type) -> None:
        assert issubclass(exc_cls, InvalidArgumentError)
        assert issubclass(exc_cls, CryptoError)
        assert exc_cls.code is ErrorCode.INVALID_ARGUMENT

    def test_internal(self) -> None:
        assert issubclass(RandomSourceError, InternalError)
        assert RandomSourceError.code is ErrorCode.INTERNAL
        assert CryptoError.code is ErrorCode.INTERNAL

    def test_registry_codes(self) -> None:
        assert RegistryError.code is ErrorCode.INVALID_ARGUMENT
        assert KeyManagerNotFoundError.code is ErrorCode.NOT_FOUND
        assert DuplicateRegistrationError.code is ErrorCode.ALREADY_EXISTS


class TestMessages:
    def test_invalid_key_size(self) -> None:
        exc = InvalidKeySizeError(8, (16, 32), algorithm="AES-GCM-SIV")

        assert exc.message == "invalid key size: 8 bytes; supported sizes: 16, 32"
        assert exc.actual_size == 8
        assert exc.supported_sizes == (16, 32)
        assert str(exc) == (
            "InvalidKeySizeError: invalid key size: 8 bytes; supported sizes: 16, 32 "
            "[algorithm=AES-GCM-SIV]"
        )

    def test_unsupported_version(self) -> None:
        exc = UnsupportedVersionError(1, 0)

        assert "version 1" in str(exc)
        assert "(version=1, max_version=0)" in str(exc)

    def test_unsupported_key_type(self) -> None:
        assert UnsupportedKeyTypeError("X").message == "key type 'X' is not supported"
        assert UnsupportedKeyTypeError("X", expected="Y").message == (
            "key type 'X' is not supported by this manager (expected 'Y')"
        )

    def test_parse_error(self) -> None:
        exc = ParseError("google.crypto.tink.AesGcmSivKey", "malformed encoding")
        assert exc.message == (
            "could not parse the passed string as proto "
            "'google.crypto.tink.AesGcmSivKey': malformed encoding"
        )

    def test_authentication_failed_is_uniform(self) -> None:
        assert AuthenticationFailedError().message == "authentication failed"
        assert AuthenticationFailedError(algorithm="AES-128-GCM-SIV").message == (
            "authentication failed"
        )

    def test_random_source_error(self) -> None:
        exc = RandomSourceError(16, "OSError")
        assert exc.message == "random source failed to produce 16 bytes: OSError"
        assert exc.context == {"requested": 16}

    def test_not_found_lists_available(self) -> None:
        available = [f"type.googleapis.com/k{i}" for i in range(7)]

        exc = KeyManagerNotFoundError("type.googleapis.com/x", available)

        assert "k0" in exc.message
        assert "k5" not in exc.message
        assert "(7 total)" in exc.message

    def test_repr(self) -> None:
        exc = CryptoError("boom", algorithm="AES", context={"a": 1})
        assert repr(exc) == "CryptoError(message='boom', algorithm='AES', context={'a': 1})"

    def test_catch_as_crypto_error(self) -> None:
        with pytest.raises(CryptoError):
            raise AuthenticationFailedError()
