"""
Протокольные интерфейсы подсистемы AEAD.

Определяет контракты:
- AeadProtocol: примитив аутентифицированного шифрования
- KeyFactoryProtocol: генерация ключей и контейнеров ключей
- KeyManagerProtocol: запись реестра для одного type URL

Модуль использует typing.Protocol (structural subtyping без явного
наследования). Все Protocol классы помечены @runtime_checkable, реестр
проверяет менеджеры через isinstance().

Example:
    >>> from src.security.aead.key_manager import AesGcmSivKeyManager
    >>> isinstance(AesGcmSivKeyManager(), KeyManagerProtocol)
    True
"""

from __future__ import annotations

from typing import Protocol, Union, runtime_checkable

from src.security.aead.core.messages import KeyData, Message

# ==============================================================================
# AEAD PRIMITIVE PROTOCOL
# ==============================================================================


@runtime_checkable
class AeadProtocol(Protocol):
    """
    Протокол AEAD-примитива.

    Шифртекст самоописывающий: включает nonce и тег, отдельная передача
    nonce не требуется.

    Validation Rules:
        - decrypt() отклоняет любой изменённый шифртекст или чужой AAD
        - decrypt() не раскрывает причину отказа
    """

    def encrypt(self, plaintext: bytes, associated_data: bytes = b"") -> bytes:
        """
        Зашифровать plaintext, аутентифицируя associated_data.

        Returns:
            Шифртекст (nonce || ciphertext || tag)
        """
        ...

    def decrypt(self, ciphertext: bytes, associated_data: bytes = b"") -> bytes:
        """
        Расшифровать и проверить шифртекст.

        Raises:
            AuthenticationFailedError: шифртекст или AAD не прошли проверку
        """
        ...


# ==============================================================================
# KEY FACTORY PROTOCOL
# ==============================================================================


@runtime_checkable
class KeyFactoryProtocol(Protocol):
    """Фабрика ключей одного типа."""

    def new_key(self, key_format: Union[Message, bytes]) -> Message:
        """Создать новый ключ по параметрам (структура или сериализация)."""
        ...

    def new_key_data(self, serialized_key_format: bytes) -> KeyData:
        """Создать новый ключ и упаковать его в KeyData."""
        ...


# ==============================================================================
# KEY MANAGER PROTOCOL
# ==============================================================================


@runtime_checkable
class KeyManagerProtocol(Protocol):
    """
    Менеджер ключей одного type URL.

    Attributes:
        key_type: Type URL, под которым менеджер регистрируется
        version: Максимальная поддерживаемая версия ключа
    """

    @property
    def key_type(self) -> str: ...

    @property
    def version(self) -> int: ...

    @property
    def key_factory(self) -> KeyFactoryProtocol: ...

    def does_support(self, type_url: str) -> bool: ...

    def get_primitive(self, key: Union[Message, KeyData]) -> AeadProtocol:
        """Создать примитив из ключа или KeyData."""
        ...
