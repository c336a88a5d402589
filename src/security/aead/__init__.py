"""
AEAD-подсистема: менеджер ключей AES-GCM-SIV и сам примитив.
EN: Top-level AEAD API. Key manager, key templates and registry entrypoint.

Example:
    >>> from src.security.aead import register, key_templates
    >>> from src.security.aead.core.registry import KeyManagerRegistry
    >>> register()
    >>> registry = KeyManagerRegistry.get_instance()
    >>> aead = registry.get_primitive(registry.new_key_data(key_templates.AES128_GCM_SIV))
"""

import logging
from typing import Optional

from src import load_config
from src.security.aead import key_templates
from src.security.aead.algorithms.aes_gcm_siv import AesGcmSivCipher
from src.security.aead.config import AeadConfig
from src.security.aead.core.exceptions import (
    AuthenticationFailedError,
    CryptoError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
)
from src.security.aead.core.messages import (
    AesGcmSivKey,
    AesGcmSivKeyFormat,
    KeyData,
    KeyMaterialType,
    KeyTemplate,
)
from src.security.aead.core.registry import KeyManagerRegistry
from src.security.aead.key_manager import AesGcmSivKeyFactory, AesGcmSivKeyManager

logger = logging.getLogger(__name__)


def register(*, new_key_allowed: bool = True) -> None:
    """
    Зарегистрировать встроенные менеджеры ключей в KeyManagerRegistry.

    Идемпотентна: повторный вызов только обновляет new_key_allowed.
    """
    registry = KeyManagerRegistry.get_instance()
    registry.register_key_manager(AesGcmSivKeyManager(), new_key_allowed=new_key_allowed)


def default_key_template(config: Optional[AeadConfig] = None) -> KeyTemplate:
    """Шаблон ключа с размером из конфигурации (по умолчанию AES-256)."""
    if config is None:
        config = _config
    return key_templates.create_aes_gcm_siv_key_template(config.default_key_size)


try:
    _config = AeadConfig.from_mapping(load_config())
except (TypeError, ValueError) as e:
    logger.warning(f"Invalid AEAD configuration: {e}. Using defaults.")
    _config = AeadConfig()

if _config.register_on_import:
    register()


__all__ = [
    # Registry
    "register",
    "default_key_template",
    "KeyManagerRegistry",
    # Key management
    "AesGcmSivKeyManager",
    "AesGcmSivKeyFactory",
    "AesGcmSivCipher",
    "key_templates",
    # Schemas
    "AesGcmSivKey",
    "AesGcmSivKeyFormat",
    "KeyData",
    "KeyMaterialType",
    "KeyTemplate",
    # Errors
    "CryptoError",
    "ErrorCode",
    "InvalidArgumentError",
    "InternalError",
    "AuthenticationFailedError",
]
