"""
Централизованные исключения подсистемы AEAD.

Иерархия типизированных исключений менеджера ключей AES-GCM-SIV.
Каждое исключение несёт код ошибки (ErrorCode), по которому вызывающий
код отличает детерминированные отказы (INVALID_ARGUMENT) от сбоев
окружения (INTERNAL).

Example:
    >>> from src.security.aead.core.exceptions import CryptoError, ErrorCode
    >>> try:
    ...     manager.get_primitive(key_data)
    ... except CryptoError as e:
    ...     if e.code is ErrorCode.INVALID_ARGUMENT:
    ...         logger.error(f"Rejected key: {e}")

Иерархия:
    CryptoError (базовое)
    ├── InvalidArgumentError
    │   ├── InvalidKeySizeError
    │   ├── UnsupportedVersionError
    │   ├── UnsupportedKeyTypeError
    │   ├── ParseError
    │   ├── AuthenticationFailedError
    │   └── PlaintextTooLargeError
    ├── InternalError
    │   └── RandomSourceError
    └── RegistryError
        ├── KeyManagerNotFoundError
        └── DuplicateRegistrationError

Security Note:
    Все исключения НЕ раскрывают:
    - Ключи или их части
    - Plaintext или ciphertext
    - Причину отказа расшифрования (только "authentication failed")
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, Optional

__all__: list[str] = [
    "ErrorCode",
    # Base exception
    "CryptoError",
    # Invalid argument
    "InvalidArgumentError",
    "InvalidKeySizeError",
    "UnsupportedVersionError",
    "UnsupportedKeyTypeError",
    "ParseError",
    "AuthenticationFailedError",
    "PlaintextTooLargeError",
    # Internal
    "InternalError",
    "RandomSourceError",
    # Registry
    "RegistryError",
    "KeyManagerNotFoundError",
    "DuplicateRegistrationError",
]


class ErrorCode(str, Enum):
    """Канонические коды ошибок."""

    INVALID_ARGUMENT = "invalid_argument"
    INTERNAL = "internal"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class CryptoError(Exception):
    """
    Базовое исключение для всех ошибок подсистемы.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        algorithm: Имя алгоритма, вызвавшего ошибку (опционально)
        context: Дополнительный контекст для отладки (без секретов!)
        code: Код ошибки (ErrorCode)

    Example:
        >>> raise CryptoError("Operation failed", algorithm="AES-GCM-SIV")
    """

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}

    def __str__(self) -> str:
        """
        Строковое представление исключения.

        Example:
            >>> str(error)
            'InvalidKeySizeError: invalid key size: 8 bytes; ... [algorithm=AES-GCM-SIV]'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        """Представление для отладки."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# INVALID ARGUMENT ERRORS
# ==============================================================================


class InvalidArgumentError(CryptoError):
    """
    Некорректный или неподдерживаемый входной аргумент.

    Детерминированный отказ: повтор вызова с теми же данными
    всегда завершится той же ошибкой.
    """

    code = ErrorCode.INVALID_ARGUMENT


class InvalidKeySizeError(InvalidArgumentError):
    """
    Неверный размер ключа.

    Example:
        >>> InvalidKeySizeError(8, (16, 32))
        InvalidKeySizeError: invalid key size: 8 bytes; supported sizes: 16, 32
    """

    def __init__(
        self,
        actual: int,
        supported: Iterable[int],
        *,
        algorithm: Optional[str] = None,
    ) -> None:
        supported_sizes = tuple(supported)
        message = (
            f"invalid key size: {actual} bytes; supported sizes: "
            f"{', '.join(str(size) for size in supported_sizes)}"
        )
        super().__init__(message, algorithm=algorithm)
        self.actual_size = actual
        self.supported_sizes = supported_sizes


class UnsupportedVersionError(InvalidArgumentError):
    """Версия ключа выше поддерживаемой менеджером."""

    def __init__(
        self,
        version: int,
        max_version: int,
        *,
        algorithm: Optional[str] = None,
    ) -> None:
        message = (
            f"key version {version} is not supported; "
            f"expected version <= {max_version}"
        )
        super().__init__(
            message,
            algorithm=algorithm,
            context={"version": version, "max_version": max_version},
        )
        self.version = version
        self.max_version = max_version


class UnsupportedKeyTypeError(InvalidArgumentError):
    """
    Тип ключа (или type URL) не поддерживается менеджером.

    Example:
        >>> UnsupportedKeyTypeError("google.crypto.tink.AesEaxKey")
        UnsupportedKeyTypeError: key type 'google.crypto.tink.AesEaxKey' is not supported
    """

    def __init__(self, key_type: str, *, expected: Optional[str] = None) -> None:
        message = f"key type '{key_type}' is not supported"
        if expected:
            message += f" by this manager (expected '{expected}')"
        super().__init__(message)
        self.key_type = key_type
        self.expected = expected


class ParseError(InvalidArgumentError):
    """Не удалось разобрать сериализованную структуру."""

    def __init__(self, type_name: str, reason: Optional[str] = None) -> None:
        message = f"could not parse the passed string as proto '{type_name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.type_name = type_name


class AuthenticationFailedError(InvalidArgumentError):
    """
    Отказ расшифрования.

    Сообщение всегда одно и то же ("authentication failed"), независимо
    от причины: короткий вход, неверный тег, другой AAD.
    """

    def __init__(self, *, algorithm: Optional[str] = None) -> None:
        super().__init__("authentication failed", algorithm=algorithm)


class PlaintextTooLargeError(InvalidArgumentError):
    """Длина входных данных превышает лимит алгоритма."""

    def __init__(
        self,
        name: str,
        size: int,
        max_size: int,
        *,
        algorithm: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"{name} too large: {size} bytes, maximum {max_size} bytes",
            algorithm=algorithm,
            context={"size": size, "max_size": max_size},
        )
        self.size = size
        self.max_size = max_size


# ==============================================================================
# INTERNAL ERRORS
# ==============================================================================


class InternalError(CryptoError):
    """Сбой окружения; повтор возможен по принципу best-effort."""

    code = ErrorCode.INTERNAL


class RandomSourceError(InternalError):
    """Источник случайных байт не смог выдать запрошенное количество."""

    def __init__(self, requested: int, reason: Optional[str] = None) -> None:
        message = f"random source failed to produce {requested} bytes"
        if reason:
            message += f": {reason}"
        super().__init__(message, context={"requested": requested})
        self.requested = requested


# ==============================================================================
# REGISTRY ERRORS
# ==============================================================================


class RegistryError(CryptoError):
    """Базовая ошибка реестра менеджеров ключей."""

    code = ErrorCode.INVALID_ARGUMENT


class KeyManagerNotFoundError(RegistryError):
    """
    Для type URL не зарегистрирован менеджер.

    Attributes:
        type_url: Запрошенный type URL
        available: Зарегистрированные type URL
    """

    code = ErrorCode.NOT_FOUND

    def __init__(self, type_url: str, available: Optional[list[str]] = None) -> None:
        message = f"no key manager for type url '{type_url}' has been registered"
        if available:
            message += f". Available: {', '.join(available[:5])}"
            if len(available) > 5:
                message += f" ... ({len(available)} total)"
        super().__init__(message)
        self.type_url = type_url
        self.available = available or []


class DuplicateRegistrationError(RegistryError):
    """Type URL уже занят менеджером другого класса."""

    code = ErrorCode.ALREADY_EXISTS

    def __init__(self, type_url: str, existing: str, new: str) -> None:
        super().__init__(
            f"a manager of class {existing} is already registered for "
            f"type url '{type_url}', cannot register {new}"
        )
        self.type_url = type_url
