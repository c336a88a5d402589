"""
Структуры ключей и их сериализация.

Каждая структура - неизменяемый dataclass с дискриминантом TYPE_NAME.
Менеджер ключей сравнивает TYPE_NAME вместо isinstance(), поэтому любая
чужая структура (например, ключ другого алгоритма) отклоняется
с ошибкой "not supported" с указанием её имени.

Формат сериализации: компактный JSON в UTF-8, байтовые поля в Base64,
поле "@type" содержит TYPE_NAME.

Example:
    >>> key = AesGcmSivKey(version=0, key_value=os.urandom(16))
    >>> data = key.serialize()
    >>> AesGcmSivKey.parse(data) == key
    True
    >>> type_url_for(key)
    'type.googleapis.com/google.crypto.tink.AesGcmSivKey'
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Type, TypeVar, Union

from src.security.aead.core.exceptions import ParseError

__all__ = [
    "TYPE_URL_PREFIX",
    "KeyMaterialType",
    "OutputPrefixType",
    "Message",
    "AesGcmSivKey",
    "AesGcmSivKeyFormat",
    "KeyData",
    "KeyTemplate",
    "type_url_for",
]

TYPE_URL_PREFIX = "type.googleapis.com/"

_UINT32_MAX = 0xFFFFFFFF

M = TypeVar("M", bound="Message")


class KeyMaterialType(str, Enum):
    """Категория ключевого материала в KeyData."""

    UNKNOWN_KEYMATERIAL = "unknown_keymaterial"
    SYMMETRIC = "symmetric"
    ASYMMETRIC_PRIVATE = "asymmetric_private"
    ASYMMETRIC_PUBLIC = "asymmetric_public"
    REMOTE = "remote"


class OutputPrefixType(str, Enum):
    """Префикс шифртекста в наборе ключей."""

    UNKNOWN_PREFIX = "unknown_prefix"
    TINK = "tink"
    LEGACY = "legacy"
    RAW = "raw"
    CRUNCHY = "crunchy"


def _b64e(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64d(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


@dataclass(frozen=True)
class Message:
    """
    Базовый класс сериализуемой структуры.

    Подклассы задают TYPE_NAME и объявляют поля dataclass с типами
    int, bytes, str или Enum. Сериализация и разбор работают
    по этим аннотациям.
    """

    TYPE_NAME: ClassVar[str] = ""

    @property
    def type_name(self) -> str:
        return self.TYPE_NAME

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь с примитивными типами."""
        result: Dict[str, Any] = {"@type": self.TYPE_NAME}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (bytes, bytearray)):
                result[f.name] = _b64e(bytes(value))
            elif isinstance(value, Enum):
                result[f.name] = value.value
            else:
                result[f.name] = value
        return result

    def serialize(self) -> bytes:
        return json.dumps(
            self.to_dict(), sort_keys=True, separators=(",", ":")
        ).encode("utf-8")

    @classmethod
    def from_dict(cls: Type[M], data: Dict[str, Any]) -> M:
        """
        Десериализация из словаря (результат to_dict()).

        Raises:
            ParseError: Неверный @type, неизвестные поля или значения
                        неверного типа
        """
        if not isinstance(data, dict):
            raise ParseError(cls.TYPE_NAME, f"expected object, got {type(data).__name__}")
        if data.get("@type") != cls.TYPE_NAME:
            raise ParseError(cls.TYPE_NAME, "type name mismatch")

        known = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(known) - {"@type"}
        if unknown:
            raise ParseError(cls.TYPE_NAME, f"unknown fields: {', '.join(sorted(unknown))}")

        kwargs: Dict[str, Any] = {}
        for name, f in known.items():
            if name not in data:
                continue
            kwargs[name] = _decode_field(cls.TYPE_NAME, name, f.type, data[name])
        return cls(**kwargs)

    @classmethod
    def parse(cls: Type[M], data: Union[bytes, bytearray, str]) -> M:
        """
        Разобрать сериализованную структуру.

        Raises:
            ParseError: Данные не являются корректной сериализацией cls
        """
        try:
            raw = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
            obj = json.loads(raw)
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise ParseError(cls.TYPE_NAME, "malformed encoding") from e
        return cls.from_dict(obj)


def _decode_field(type_name: str, name: str, annotation: Any, value: Any) -> Any:
    # Аннотации - строки из-за `from __future__ import annotations`
    annotation = annotation if isinstance(annotation, str) else getattr(annotation, "__name__", "")
    if annotation == "bytes":
        if not isinstance(value, str):
            raise ParseError(type_name, f"field '{name}' must be base64 string")
        try:
            return _b64d(value)
        except (binascii.Error, ValueError) as e:
            raise ParseError(type_name, f"field '{name}' is not valid base64") from e
    if annotation == "int":
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _UINT32_MAX:
            raise ParseError(type_name, f"field '{name}' must be uint32")
        return value
    if annotation == "str":
        if not isinstance(value, str):
            raise ParseError(type_name, f"field '{name}' must be string")
        return value
    enum_cls = _ENUM_FIELDS.get(annotation)
    if enum_cls is not None:
        try:
            return enum_cls(value)
        except ValueError as e:
            raise ParseError(type_name, f"field '{name}' has unknown value") from e
    raise ParseError(type_name, f"field '{name}' has unsupported type")


_ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "KeyMaterialType": KeyMaterialType,
    "OutputPrefixType": OutputPrefixType,
}


# ==============================================================================
# AES-GCM-SIV SCHEMAS
# ==============================================================================


@dataclass(frozen=True)
class AesGcmSivKey(Message):
    """
    Ключ AES-GCM-SIV.

    Attributes:
        version: Версия схемы ключа (поддерживается только 0)
        key_value: Сырые байты ключа (16 или 32)
    """

    TYPE_NAME: ClassVar[str] = "google.crypto.tink.AesGcmSivKey"

    version: int = 0
    key_value: bytes = field(default=b"", repr=False)


@dataclass(frozen=True)
class AesGcmSivKeyFormat(Message):
    """Параметры генерации ключа AES-GCM-SIV."""

    TYPE_NAME: ClassVar[str] = "google.crypto.tink.AesGcmSivKeyFormat"

    key_size: int = 0


# ==============================================================================
# GENERIC CONTAINERS
# ==============================================================================


@dataclass(frozen=True)
class KeyData(Message):
    """
    Контейнер ключа: type URL + сериализованный ключ + категория.

    Attributes:
        type_url: Идентификатор типа ключа
        value: Сериализованный ключ
        key_material_type: Категория ключевого материала
    """

    TYPE_NAME: ClassVar[str] = "google.crypto.tink.KeyData"

    type_url: str = ""
    value: bytes = field(default=b"", repr=False)
    key_material_type: KeyMaterialType = KeyMaterialType.UNKNOWN_KEYMATERIAL


@dataclass(frozen=True)
class KeyTemplate(Message):
    """Шаблон ключа: type URL + сериализованные параметры генерации."""

    TYPE_NAME: ClassVar[str] = "google.crypto.tink.KeyTemplate"

    type_url: str = ""
    value: bytes = b""
    output_prefix_type: OutputPrefixType = OutputPrefixType.TINK


def type_url_for(message: Message) -> str:
    """Type URL структуры: префикс + TYPE_NAME."""
    return TYPE_URL_PREFIX + message.type_name
