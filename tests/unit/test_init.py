"""
Модульные тесты для src/__init__.py
Тестирует инициализацию пакета, конфигурацию, логирование и публичный API.
"""

import json
import logging
import re
import sys
import tempfile
from importlib import reload
from pathlib import Path
from unittest import mock

import pytest

import src as aead_package


class TestVersionMetadata:
    """Тестирование метаданных версии и констант."""

    def test_version_format(self) -> None:
        """Проверить, что __version__ следует семантическому версионированию."""
        assert re.match(
            r"^\d+\.\d+\.\d+$", aead_package.__version__
        ), f"Версия '{aead_package.__version__}' не соответствует паттерну"

    def test_version_components(self) -> None:
        """Проверить, что компоненты версии соответствуют __version__."""
        expected_version = (
            f"{aead_package.VERSION_MAJOR}."
            f"{aead_package.VERSION_MINOR}."
            f"{aead_package.VERSION_PATCH}"
        )
        assert aead_package.__version__ == expected_version

    def test_metadata_attributes(self) -> None:
        """Проверить, что все атрибуты метаданных являются непустыми строками."""
        for name in ("__author__", "__description__", "__license__", "__python_requires__"):
            value = getattr(aead_package, name)
            assert isinstance(value, str) and value, f"{name} должен быть непустой строкой"

    def test_python_version_requirement(self) -> None:
        """Если мы дошли до этого места, проверка версии прошла."""
        assert sys.version_info >= (3, 11)


class TestPublicAPI:
    """Тестирование экспортов публичного API."""

    def test_all_exports_exist(self) -> None:
        for name in aead_package.__all__:
            assert hasattr(aead_package, name), f"Имя '{name}' из __all__ не существует"

    def test_no_duplicate_exports(self) -> None:
        assert len(aead_package.__all__) == len(set(aead_package.__all__))

    def test_utilities_exported(self) -> None:
        assert "get_logger" in aead_package.__all__
        assert "load_config" in aead_package.__all__


class TestLogging:
    """Тестирование конфигурации логирования."""

    def test_get_logger_name_format(self) -> None:
        logger = aead_package.get_logger("test_module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "src.test_module"

    def test_get_logger_with_qualified_name(self) -> None:
        logger = aead_package.get_logger("src.security.aead.key_manager")
        assert logger.name == "src.security.aead.key_manager"

    def test_get_logger_with_main(self) -> None:
        assert aead_package.get_logger("__main__").name == "src.main"

    def test_get_logger_with_dots(self) -> None:
        assert aead_package.get_logger(".core.registry").name == "src.core.registry"

    def test_logger_is_configured(self) -> None:
        """Корневой логгер пакета имеет как минимум консольный обработчик."""
        assert len(logging.getLogger("src").handlers) >= 1

    def test_log_level_from_environment(self) -> None:
        root_logger = logging.getLogger("src")
        saved_handlers = root_logger.handlers[:]
        saved_level = root_logger.level
        try:
            with mock.patch.dict("os.environ", {"AEAD_LOG_LEVEL": "DEBUG"}):
                for handler in saved_handlers:
                    root_logger.removeHandler(handler)

                reload(aead_package)

                assert root_logger.level == logging.DEBUG
        finally:
            for handler in root_logger.handlers[:]:
                root_logger.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root_logger.addHandler(handler)
            root_logger.setLevel(saved_level)

    def test_log_file_from_environment(self) -> None:
        root_logger = logging.getLogger("src")
        saved_handlers = root_logger.handlers[:]
        saved_level = root_logger.level
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "logs" / "aead.log"
            try:
                with mock.patch.dict("os.environ", {"AEAD_LOG_FILE": str(log_file)}):
                    for handler in saved_handlers:
                        root_logger.removeHandler(handler)

                    reload(aead_package)

                    assert len(root_logger.handlers) == 2
                    assert log_file.parent.is_dir()
            finally:
                for handler in root_logger.handlers[:]:
                    root_logger.removeHandler(handler)
                    handler.close()
                for handler in saved_handlers:
                    root_logger.addHandler(handler)
                root_logger.setLevel(saved_level)

    def test_setup_logging_idempotent(self) -> None:
        handlers_before = len(logging.getLogger("src").handlers)
        aead_package._setup_logging()
        assert len(logging.getLogger("src").handlers) == handlers_before


class TestConfiguration:
    """Тестирование управления конфигурацией."""

    def test_load_config_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = aead_package.load_config(Path(tmpdir) / "nonexistent.json")

        assert config == {
            "log_level": "INFO",
            "default_key_size": 32,
            "register_on_import": False,
        }

    def test_load_config_does_not_share_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = aead_package.load_config(Path(tmpdir) / "nonexistent.json")
        config["default_key_size"] = 16

        assert aead_package._DEFAULT_CONFIG["default_key_size"] == 32

    def test_load_config_merge_behavior(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "partial_config.json"
            config_path.write_text(json.dumps({"default_key_size": 16, "custom": 1}), "utf-8")

            config = aead_package.load_config(config_path)

        assert config["default_key_size"] == 16
        assert config["custom"] == 1
        assert config["log_level"] == "INFO"

    def test_load_config_from_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "env_config.json"
            config_path.write_text(json.dumps({"register_on_import": True}), "utf-8")

            with mock.patch.dict("os.environ", {"AEAD_CONFIG": str(config_path)}):
                config = aead_package.load_config()

        assert config["register_on_import"] is True

    @pytest.mark.parametrize(
        "content",
        ["{invalid json content", json.dumps(["not", "a", "dict"])],
    )
    def test_load_config_bad_content_falls_back(self, content: str) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "bad_config.json"
            config_path.write_text(content, "utf-8")

            config = aead_package.load_config(config_path)

        assert config["default_key_size"] == 32

    def test_load_config_unreadable_falls_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            config_path.write_text("{}", "utf-8")

            with mock.patch("builtins.open", side_effect=PermissionError("denied")):
                config = aead_package.load_config(config_path)

        assert config["log_level"] == "INFO"
