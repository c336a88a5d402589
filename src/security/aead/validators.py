# -*- coding: utf-8 -*-
"""
RU: Валидация ключевого материала и параметров генерации AES-GCM-SIV.
EN: Pure validation of AES-GCM-SIV key material and key generation parameters.

Все функции чистые: либо возвращают None, либо бросают InvalidArgumentError.
"""
from __future__ import annotations

from src.security.aead.config import KEY_VERSION, SUPPORTED_KEY_SIZES
from src.security.aead.core.exceptions import InvalidKeySizeError, UnsupportedVersionError
from src.security.aead.core.messages import AesGcmSivKey, AesGcmSivKeyFormat

_ALGORITHM = "AES-GCM-SIV"


def validate_version(version: int, max_version: int) -> None:
    """
    Проверить версию ключа.

    Raises:
        UnsupportedVersionError: version вне диапазона 0..max_version
    """
    if version < 0 or version > max_version:
        raise UnsupportedVersionError(version, max_version, algorithm=_ALGORITHM)


def validate_key_size(key_size: int) -> None:
    """
    Raises:
        InvalidKeySizeError: размер не 16 и не 32 байта
    """
    if key_size not in SUPPORTED_KEY_SIZES:
        raise InvalidKeySizeError(key_size, SUPPORTED_KEY_SIZES, algorithm=_ALGORITHM)


def validate_key_material(key: AesGcmSivKey) -> None:
    """Проверить версию и длину ключа."""
    validate_version(key.version, KEY_VERSION)
    validate_key_size(len(key.key_value))


def validate_generation_params(key_format: AesGcmSivKeyFormat) -> None:
    """Проверить параметры генерации ключа."""
    validate_key_size(key_format.key_size)


__all__ = [
    "validate_version",
    "validate_key_size",
    "validate_key_material",
    "validate_generation_params",
]
