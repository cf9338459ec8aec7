"""
Тесты для системы конфигурации
"""

import os
import tempfile

import pytest

from apidoc_client.config import DEFAULT_DIRNAME, ApidocConfig
from apidoc_client.internal.types.settings import Dialects


class TestApidocConfig:
    """Тесты конфигурации генератора"""

    def test_config_creation(self):
        """Тест создания конфигурации"""
        config = ApidocConfig(url="http://localhost:9000/service.json", dirname="test_client")

        assert config.url == "http://localhost:9000/service.json"
        assert config.dirname == "test_client"
        assert config.dialect == "aiohttp"

    def test_config_save_and_load(self):
        """Тест сохранения и загрузки конфигурации"""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, "test_apidoc.toml")

            original_config = ApidocConfig(
                url="http://api.example.com/service.json",
                dirname="example_client",
                dialect="aiohttp-compat",
            )
            original_config.save_to_file(config_path)

            loaded_config = ApidocConfig.from_file(config_path)

            assert loaded_config is not None
            assert loaded_config.url == "http://api.example.com/service.json"
            assert loaded_config.dirname == "example_client"
            assert loaded_config.dialect == "aiohttp-compat"

    def test_config_in_search_dir(self):
        """Конфиг ищется в папке клиента"""
        with tempfile.TemporaryDirectory() as temp_dir:
            ApidocConfig(url="service.json").save_to_file(os.path.join(temp_dir, "apidoc.toml"))

            loaded_config = ApidocConfig.from_file("nonexistent.toml", search_dir=temp_dir)

            assert loaded_config.url == "service.json"
            assert loaded_config.dirname == DEFAULT_DIRNAME

    def test_config_file_not_exists(self):
        """Тест загрузки несуществующего конфига"""
        config = ApidocConfig.from_file("nonexistent.toml")
        assert config is None

    def test_broken_config_file(self, caplog):
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, "apidoc.toml")
            with open(config_path, "w") as f:
                f.write("url = [unclosed")

            assert ApidocConfig.from_file(config_path) is None

        assert "Не удалось прочитать" in caplog.text

    def test_config_merge_with_args(self):
        """Тест объединения конфига с аргументами"""
        config = ApidocConfig(url="http://localhost:9000", dirname="original_client")

        class MockArgs:
            def __init__(self):
                self.url = "http://api.new.com"
                self.dirname = None
                self.dialect = "aiohttp-compat"

        merged = config.merge_with_args(MockArgs())

        assert merged.url == "http://api.new.com"  # Переписан из args
        assert merged.dirname == "original_client"  # Остался из config
        assert merged.dialect == "aiohttp-compat"

    def test_merge_without_dialect_argument(self):
        config = ApidocConfig(url="a.json", dialect="aiohttp-compat")

        class MockArgs:
            url = None
            dirname = None

        assert config.merge_with_args(MockArgs()).dialect == "aiohttp-compat"

    def test_default_values(self):
        """Тест значений по умолчанию"""
        config = ApidocConfig()

        assert config.url is None
        assert config.dirname is None
        assert config.settings() == Dialects.AIOHTTP

    def test_unknown_dialect(self):
        with pytest.raises(ValueError, match="Неизвестный диалект"):
            ApidocConfig(dialect="requests").settings()
