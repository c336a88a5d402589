"""
Unit-тесты для валидаторов ключевого материала.
"""

import pytest

from src.security.aead.core.exceptions import InvalidKeySizeError, UnsupportedVersionError
from src.security.aead.core.messages import AesGcmSivKey, AesGcmSivKeyFormat
from src.security.aead.validators import (
    validate_generation_params,
    validate_key_material,
    validate_key_size,
    validate_version,
)


@pytest.mark.parametrize("version, max_version", [(0, 0), (0, 3), (3, 3)])
def test_validate_version_accepts(version: int, max_version: int) -> None:
    validate_version(version, max_version)


@pytest.mark.parametrize("version, max_version", [(1, 0), (-1, 0), (4, 3)])
def test_validate_version_rejects(version: int, max_version: int) -> None:
    with pytest.raises(UnsupportedVersionError) as exc_info:
        validate_version(version, max_version)
    assert exc_info.value.version == version
    assert exc_info.value.max_version == max_version


@pytest.mark.parametrize("key_size", [16, 32])
def test_validate_key_size_accepts(key_size: int) -> None:
    validate_key_size(key_size)


@pytest.mark.parametrize("key_size", [0, 1, 15, 17, 24, 31, 33, 64])
def test_validate_key_size_rejects(key_size: int) -> None:
    with pytest.raises(InvalidKeySizeError, match=f"invalid key size: {key_size} bytes"):
        validate_key_size(key_size)


def test_validate_key_material_checks_version_first() -> None:
    with pytest.raises(UnsupportedVersionError):
        validate_key_material(AesGcmSivKey(version=1, key_value=b"short"))


def test_validate_key_material_checks_length() -> None:
    with pytest.raises(InvalidKeySizeError):
        validate_key_material(AesGcmSivKey(version=0, key_value=b"a" * 24))


def test_validate_key_material_accepts() -> None:
    validate_key_material(AesGcmSivKey(version=0, key_value=b"a" * 32))


def test_validate_generation_params() -> None:
    validate_generation_params(AesGcmSivKeyFormat(key_size=16))
    with pytest.raises(InvalidKeySizeError, match="8 bytes"):
        validate_generation_params(AesGcmSivKeyFormat(key_size=8))
