# -*- coding: utf-8 -*-
"""
RU: Конфигурация подсистемы AEAD: профили размера ключа и параметры по умолчанию.
EN: AEAD subsystem configuration: key size profiles and defaults.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Mapping, Tuple

SUPPORTED_KEY_SIZES: Final[Tuple[int, ...]] = (16, 32)
NONCE_SIZE: Final[int] = 12
TAG_SIZE: Final[int] = 16
KEY_VERSION: Final[int] = 0


class KeySizeProfile(str, Enum):
    """Predefined AES key sizes for AES-GCM-SIV."""

    # AES-128: 16-byte key
    AES128 = "aes128"

    # AES-256: 32-byte key (default)
    AES256 = "aes256"

    @property
    def key_size(self) -> int:
        return 16 if self is KeySizeProfile.AES128 else 32

    @classmethod
    def from_key_size(cls, key_size: int) -> "KeySizeProfile":
        for profile in cls:
            if profile.key_size == key_size:
                return profile
        raise ValueError(
            f"key_size must be one of {', '.join(map(str, SUPPORTED_KEY_SIZES))}, got {key_size}"
        )


@dataclass(frozen=True)
class AeadConfig:
    """
    AEAD subsystem configuration.

    Attributes:
        key_size_profile: Key size used by the default key template.
        register_on_import: Register built-in key managers when
            `src.security.aead` is imported.

    Examples:
        >>> config = AeadConfig()
        >>> config.default_key_size
        32

        >>> AeadConfig.from_mapping({"default_key_size": 16}).key_size_profile
        <KeySizeProfile.AES128: 'aes128'>
    """

    key_size_profile: KeySizeProfile = KeySizeProfile.AES256
    register_on_import: bool = False

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not isinstance(self.key_size_profile, KeySizeProfile):
            raise ValueError("key_size_profile must be a KeySizeProfile")

    @property
    def default_key_size(self) -> int:
        return self.key_size_profile.key_size

    @staticmethod
    def from_mapping(values: Mapping[str, Any]) -> "AeadConfig":
        """
        Build configuration from a `load_config()` dictionary.

        Raises:
            ValueError: unsupported default_key_size.
        """
        key_size = int(values.get("default_key_size", 32))
        return AeadConfig(
            key_size_profile=KeySizeProfile.from_key_size(key_size),
            register_on_import=bool(values.get("register_on_import", False)),
        )


__all__ = [
    "SUPPORTED_KEY_SIZES",
    "NONCE_SIZE",
    "TAG_SIZE",
    "KEY_VERSION",
    "KeySizeProfile",
    "AeadConfig",
]
