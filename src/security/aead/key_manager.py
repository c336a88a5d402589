"""
Менеджер ключей и фабрика ключей AES-GCM-SIV.

AesGcmSivKeyManager регистрируется в KeyManagerRegistry под type URL
`type.googleapis.com/google.crypto.tink.AesGcmSivKey` и отвечает за:
- проверку и разбор входящих ключей (структура или KeyData)
- создание примитива AesGcmSivCipher из проверенного ключа
- доступ к фабрике новых ключей

Полиморфный вход разбирается один раз на границе: всё, что не является
AesGcmSivKey / AesGcmSivKeyFormat, отклоняется ошибкой "not supported"
с именем типа (TYPE_NAME структуры).

Example:
    >>> manager = AesGcmSivKeyManager()
    >>> key = manager.key_factory.new_key(AesGcmSivKeyFormat(key_size=16))
    >>> aead = manager.get_primitive(key)
    >>> aead.decrypt(aead.encrypt(b"data", b"aad"), b"aad")
    b'data'

Thread Safety:
    Менеджер и фабрика не имеют изменяемого состояния; потокобезопасность
    определяется внедрённым источником случайности.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from src.security.aead.algorithms.aes_gcm_siv import AesGcmSivCipher
from src.security.aead.config import KEY_VERSION
from src.security.aead.core.exceptions import UnsupportedKeyTypeError
from src.security.aead.core.messages import (
    TYPE_URL_PREFIX,
    AesGcmSivKey,
    AesGcmSivKeyFormat,
    KeyData,
    KeyMaterialType,
    Message,
)
from src.security.aead.utils import RandomSource, draw_random
from src.security.aead.validators import validate_generation_params, validate_key_material

logger = logging.getLogger(__name__)

__all__ = [
    "AesGcmSivKeyFactory",
    "AesGcmSivKeyManager",
]

SerializedOrMessage = Union[Message, bytes, bytearray, str]


def _type_name_of(value: Any) -> str:
    if isinstance(value, Message):
        return value.type_name
    return type(value).__name__


class AesGcmSivKeyFactory:
    """
    Фабрика ключей AES-GCM-SIV.

    Args:
        key_type: Type URL, записываемый в KeyData
        random_source: Источник случайных байт (по умолчанию
            generate_random_bytes)
    """

    def __init__(self, key_type: str, *, random_source: Optional[RandomSource] = None) -> None:
        self._key_type = key_type
        self._random_source = random_source

    def new_key(self, key_format: SerializedOrMessage) -> AesGcmSivKey:
        """
        Создать новый ключ.

        Args:
            key_format: AesGcmSivKeyFormat или его сериализация

        Returns:
            AesGcmSivKey(version=0, key_value=<key_size случайных байт>)

        Raises:
            ParseError: сериализация не разбирается
            UnsupportedKeyTypeError: структура другого типа
            InvalidKeySizeError: key_size не 16 и не 32
            RandomSourceError: сбой источника случайности
        """
        if isinstance(key_format, (bytes, bytearray, str)):
            key_format = AesGcmSivKeyFormat.parse(key_format)
        elif not isinstance(key_format, AesGcmSivKeyFormat):
            raise UnsupportedKeyTypeError(
                _type_name_of(key_format), expected=AesGcmSivKeyFormat.TYPE_NAME
            )

        validate_generation_params(key_format)

        key_value = draw_random(self._random_source, key_format.key_size)
        logger.info(f"Generated new AES-GCM-SIV key ({key_format.key_size} bytes)")
        return AesGcmSivKey(version=KEY_VERSION, key_value=key_value)

    def new_key_data(self, serialized_key_format: SerializedOrMessage) -> KeyData:
        """
        Создать новый ключ и упаковать его в KeyData (SYMMETRIC).

        Raises:
            Те же исключения, что и new_key()
        """
        key = self.new_key(serialized_key_format)
        return KeyData(
            type_url=self._key_type,
            value=key.serialize(),
            key_material_type=KeyMaterialType.SYMMETRIC,
        )


class AesGcmSivKeyManager:
    """
    Менеджер ключей AES-GCM-SIV.

    Attributes:
        KEY_TYPE: Type URL ключей этого менеджера
        VERSION: Максимальная поддерживаемая версия ключа

    Example:
        >>> manager = AesGcmSivKeyManager()
        >>> manager.does_support(manager.key_type)
        True
    """

    KEY_TYPE = TYPE_URL_PREFIX + AesGcmSivKey.TYPE_NAME
    VERSION = KEY_VERSION

    def __init__(self, *, random_source: Optional[RandomSource] = None) -> None:
        self._random_source = random_source
        self._key_factory = AesGcmSivKeyFactory(self.KEY_TYPE, random_source=random_source)

    @property
    def key_type(self) -> str:
        return self.KEY_TYPE

    @property
    def version(self) -> int:
        return self.VERSION

    @property
    def key_factory(self) -> AesGcmSivKeyFactory:
        return self._key_factory

    def does_support(self, type_url: str) -> bool:
        return type_url == self.KEY_TYPE

    def get_primitive(self, key: Union[Message, KeyData]) -> AesGcmSivCipher:
        """
        Создать AEAD-примитив из ключа.

        Args:
            key: AesGcmSivKey или KeyData с сериализованным AesGcmSivKey

        Returns:
            Новый экземпляр AesGcmSivCipher

        Raises:
            UnsupportedKeyTypeError: чужой type URL или тип структуры
            ParseError: KeyData.value не разбирается
            UnsupportedVersionError: version != 0
            InvalidKeySizeError: длина ключа не 16 и не 32
        """
        if isinstance(key, KeyData):
            return self._get_primitive_from_key_data(key)

        if not isinstance(key, AesGcmSivKey):
            logger.debug(f"Rejected key of type {_type_name_of(key)}")
            raise UnsupportedKeyTypeError(_type_name_of(key), expected=AesGcmSivKey.TYPE_NAME)

        validate_key_material(key)
        return AesGcmSivCipher(key.key_value, random_source=self._random_source)

    def _get_primitive_from_key_data(self, key_data: KeyData) -> AesGcmSivCipher:
        if not self.does_support(key_data.type_url):
            logger.debug(f"Rejected KeyData with type url {key_data.type_url}")
            raise UnsupportedKeyTypeError(key_data.type_url, expected=self.KEY_TYPE)

        key = AesGcmSivKey.parse(key_data.value)
        return self.get_primitive(key)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key_type={self.KEY_TYPE!r}, version={self.VERSION})"
