"""
Пакет AES-GCM-SIV Key Manager
=============================

Менеджер ключей для AEAD-примитива AES-GCM-SIV (RFC 8452), устойчивого
к повторному использованию nonce.

Этот пакет предоставляет:
    - Валидацию ключевого материала и параметров генерации ключей
    - Генерацию новых ключей и контейнеров ключей (KeyData)
    - Создание AEAD-примитива из сериализованного ключа
    - Реестр менеджеров ключей, адресуемых по type URL
    - Собственную реализацию AES-GCM-SIV поверх блочного шифра AES

Пример базового использования:
    >>> from src.security.aead import register, key_templates
    >>> from src.security.aead.core.registry import KeyManagerRegistry
    >>>
    >>> register()
    >>> registry = KeyManagerRegistry.get_instance()
    >>> key_data = registry.new_key_data(key_templates.AES256_GCM_SIV)
    >>> aead = registry.get_primitive(key_data)
    >>> ciphertext = aead.encrypt(b"secret", b"context")
    >>> aead.decrypt(ciphertext, b"context")
    b'secret'

Конфигурация логирования:
    Уровень задаётся переменной окружения AEAD_LOG_LEVEL
    (DEBUG, INFO, WARNING, ERROR, CRITICAL). Если задана AEAD_LOG_FILE,
    дополнительно пишется ротирующий лог-файл.
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "AES-GCM-SIV Key Manager Development Team"
__description__ = "Key manager and nonce-misuse resistant AEAD (AES-GCM-SIV)"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"AES-GCM-SIV Key Manager требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

_ROOT_LOGGER_NAME = __name__

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком, если задана AEAD_LOG_FILE
    - Структурированным форматом с временной меткой, уровнем,
      модулем и сообщением

    Функция идемпотентна - повторные вызовы не имеют эффекта.
    """
    log_level_str = os.environ.get("AEAD_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = os.environ.get("AEAD_LOG_FILE")
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                f"Не удалось инициализировать файловое логирование: {e}. "
                f"Используется только консоль."
            )


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён пакета.

    Аргументы:
        module_name: Имя модуля, обычно `__name__`.

    Возвращает:
        Экземпляр logging.Logger, наследующий конфигурацию пакета.

    Пример:
        >>> logger = get_logger(__name__)
        >>> logger.info("Registered key manager")
    """
    if module_name.startswith(_ROOT_LOGGER_NAME):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger(f"{_ROOT_LOGGER_NAME}.main")
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{module_name.lstrip('.')}")


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

_DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    "default_key_size": 32,
    "register_on_import": False,
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить конфигурацию из JSON-файла или использовать значения по умолчанию.

    Ключи конфигурации:
        - log_level: str - Уровень логирования
        - default_key_size: int - Размер ключа для шаблона по умолчанию (16 или 32)
        - register_on_import: bool - Регистрировать встроенные менеджеры при импорте

    Аргументы:
        config_path: Путь к файлу. Если None, берётся AEAD_CONFIG
                    или 'aead_config.json' в текущем каталоге.

    Возвращает:
        Словарь со всеми ключами по умолчанию, поверх которых наложены
        пользовательские значения.

    Примечание:
        Ошибки чтения и разбора не фатальны: пишется предупреждение,
        возвращаются значения по умолчанию.
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path(os.environ.get("AEAD_CONFIG", "aead_config.json"))

    config = _DEFAULT_CONFIG.copy()

    if not config_path.exists():
        logger.debug(f"Файл конфигурации {config_path} не найден, используются значения по умолчанию")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)

        if not isinstance(user_config, dict):
            raise ValueError(
                f"Файл конфигурации должен содержать JSON-объект, "
                f"получен {type(user_config).__name__}"
            )

        config.update(user_config)
        logger.info(f"Конфигурация загружена из {config_path}")

    except json.JSONDecodeError as e:
        logger.warning(
            f"Не удалось разобрать {config_path}: Недопустимый JSON "
            f"в строке {e.lineno}, столбце {e.colno}. "
            f"Используется конфигурация по умолчанию."
        )
    except OSError as e:
        logger.warning(
            f"Не удалось прочитать {config_path}: {e}. "
            f"Используется конфигурация по умолчанию."
        )
    except ValueError as e:
        logger.warning(
            f"Недопустимый формат конфигурации: {e}. "
            f"Используется конфигурация по умолчанию."
        )

    return config


__all__ = [
    "__version__",
    "get_logger",
    "load_config",
]

# =============================================================================
# ИНИЦИАЛИЗАЦИЯ ПАКЕТА
# =============================================================================

_setup_logging()

_logger = get_logger(__name__)
_logger.debug(f"AES-GCM-SIV Key Manager v{__version__} инициализирован")
