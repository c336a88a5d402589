"""
Предопределённые шаблоны ключей AES-GCM-SIV.

Example:
    >>> from src.security.aead import key_templates
    >>> key_data = registry.new_key_data(key_templates.AES256_GCM_SIV)
"""

from __future__ import annotations

from src.security.aead.core.messages import (
    TYPE_URL_PREFIX,
    AesGcmSivKey,
    AesGcmSivKeyFormat,
    KeyTemplate,
    OutputPrefixType,
)
from src.security.aead.validators import validate_key_size

__all__ = [
    "create_aes_gcm_siv_key_template",
    "AES128_GCM_SIV",
    "AES256_GCM_SIV",
]


def create_aes_gcm_siv_key_template(
    key_size: int,
    output_prefix_type: OutputPrefixType = OutputPrefixType.TINK,
) -> KeyTemplate:
    """
    Создать шаблон ключа AES-GCM-SIV.

    Raises:
        InvalidKeySizeError: key_size не 16 и не 32
    """
    validate_key_size(key_size)
    return KeyTemplate(
        type_url=TYPE_URL_PREFIX + AesGcmSivKey.TYPE_NAME,
        value=AesGcmSivKeyFormat(key_size=key_size).serialize(),
        output_prefix_type=output_prefix_type,
    )


AES128_GCM_SIV = create_aes_gcm_siv_key_template(16)
AES256_GCM_SIV = create_aes_gcm_siv_key_template(32)
