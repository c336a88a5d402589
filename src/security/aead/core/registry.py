"""
Реестр менеджеров ключей.

Thread-safe Singleton реестр, отображающий type URL на менеджер ключей.
Обеспечивает:
- Регистрацию менеджеров с валидацией KeyManagerProtocol
- Создание примитивов из KeyData
- Генерацию новых ключей по KeyTemplate
- Query API (is_registered, list_key_types)

Example:
    >>> from src.security.aead import register
    >>> from src.security.aead.core.registry import KeyManagerRegistry
    >>> register()
    >>> registry = KeyManagerRegistry.get_instance()
    >>> key_data = registry.new_key_data(AES128_GCM_SIV)
    >>> aead = registry.get_primitive(key_data)

Thread Safety:
    Все публичные методы thread-safe благодаря RLock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from src.security.aead.core.exceptions import (
    DuplicateRegistrationError,
    InvalidArgumentError,
    KeyManagerNotFoundError,
    RegistryError,
)
from src.security.aead.core.messages import KeyData, KeyTemplate
from src.security.aead.core.protocols import AeadProtocol, KeyManagerProtocol

logger = logging.getLogger(__name__)


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class RegistryEntry:
    """
    Запись реестра.

    Attributes:
        type_url: Type URL ключей менеджера
        manager: Экземпляр менеджера
        new_key_allowed: Разрешена ли генерация новых ключей этого типа
    """

    type_url: str
    manager: KeyManagerProtocol
    new_key_allowed: bool = True


# ==============================================================================
# MAIN CLASS: KEY MANAGER REGISTRY
# ==============================================================================


class KeyManagerRegistry:
    """
    Thread-safe реестр менеджеров ключей.

    Singleton: создаётся через get_instance(). Встроенные менеджеры
    регистрируются явно (`src.security.aead.register()`), после чего
    реестр только читается.

    Attributes:
        _instance: Singleton instance
        _lock: RLock для thread-safety
        _registry: Словарь {type_url -> RegistryEntry}
    """

    _instance: Optional[KeyManagerRegistry] = None
    _lock: threading.RLock = threading.RLock()

    def __init__(self) -> None:
        """
        Приватный конструктор (используйте get_instance()).

        Raises:
            RuntimeError: Если попытка создать второй экземпляр
        """
        if KeyManagerRegistry._instance is not None:
            raise RuntimeError(
                "KeyManagerRegistry is a singleton. "
                "Use KeyManagerRegistry.get_instance()"
            )

        self._registry: Dict[str, RegistryEntry] = {}
        logger.debug("KeyManagerRegistry initialized")

    @classmethod
    def get_instance(cls) -> KeyManagerRegistry:
        """
        Получить singleton instance реестра.

        Thread Safety:
            Thread-safe double-checked locking
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """
        Сбросить singleton (только для тестов).

        WARNING:
            Используйте только в unit-тестах!
        """
        with cls._lock:
            cls._instance = None
            logger.warning("KeyManagerRegistry instance reset (testing only!)")

    def register_key_manager(
        self,
        manager: Any,
        *,
        new_key_allowed: bool = True,
    ) -> None:
        """
        Зарегистрировать менеджер под его type URL.

        Повторная регистрация менеджера того же класса обновляет флаг
        new_key_allowed и не считается ошибкой.

        Raises:
            TypeError: manager не реализует KeyManagerProtocol
            RegistryError: пустой type URL
            DuplicateRegistrationError: type URL занят менеджером другого класса
        """
        if not isinstance(manager, KeyManagerProtocol):
            raise TypeError(
                f"manager must implement KeyManagerProtocol, "
                f"got {type(manager).__name__}"
            )

        type_url = manager.key_type
        if not type_url or not type_url.strip():
            raise RegistryError("key manager type url must not be empty")

        with self._lock:
            existing = self._registry.get(type_url)
            if existing is not None and type(existing.manager) is not type(manager):
                raise DuplicateRegistrationError(
                    type_url,
                    type(existing.manager).__name__,
                    type(manager).__name__,
                )

            self._registry[type_url] = RegistryEntry(
                type_url=type_url,
                manager=existing.manager if existing is not None else manager,
                new_key_allowed=new_key_allowed,
            )

            if existing is None:
                logger.info(f"Registered key manager: {type_url} ({type(manager).__name__})")
            else:
                logger.debug(f"Updated key manager registration: {type_url}")

    def get_key_manager(self, type_url: str) -> KeyManagerProtocol:
        """
        Raises:
            KeyManagerNotFoundError: Если type URL не зарегистрирован
        """
        return self._get_entry(type_url).manager

    def get_primitive(self, key_data: KeyData) -> AeadProtocol:
        """
        Создать примитив из KeyData через зарегистрированный менеджер.

        Raises:
            KeyManagerNotFoundError: type URL не зарегистрирован
            InvalidArgumentError: менеджер отклонил ключ
        """
        return self.get_key_manager(key_data.type_url).get_primitive(key_data)

    def new_key_data(self, key_template: KeyTemplate) -> KeyData:
        """
        Сгенерировать новый ключ по шаблону.

        Raises:
            KeyManagerNotFoundError: type URL не зарегистрирован
            InvalidArgumentError: генерация ключей этого типа запрещена
                или параметры шаблона некорректны
        """
        entry = self._get_entry(key_template.type_url)
        if not entry.new_key_allowed:
            raise InvalidArgumentError(
                f"KeyManager for type {key_template.type_url} does not allow "
                f"for creation of new keys."
            )
        return entry.manager.key_factory.new_key_data(key_template.value)

    def is_registered(self, type_url: str) -> bool:
        with self._lock:
            return type_url in self._registry

    def list_key_types(self) -> List[str]:
        """Список зарегистрированных type URL (sorted)."""
        with self._lock:
            return sorted(self._registry.keys())

    def unregister(self, type_url: str) -> None:
        """
        Удалить менеджер из реестра.

        Raises:
            KeyManagerNotFoundError: Если type URL не зарегистрирован
        """
        with self._lock:
            if type_url not in self._registry:
                raise KeyManagerNotFoundError(type_url, sorted(self._registry))
            del self._registry[type_url]
            logger.warning(f"Unregistered key manager: {type_url}")

    def _get_entry(self, type_url: str) -> RegistryEntry:
        with self._lock:
            entry = self._registry.get(type_url)
            if entry is None:
                raise KeyManagerNotFoundError(type_url, sorted(self._registry))
            return entry


# ==============================================================================
# MODULE EXPORTS
# ==============================================================================

__all__: list[str] = [
    "KeyManagerRegistry",
    "RegistryEntry",
]
