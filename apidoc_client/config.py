"""
Конфигурация для генерации API клиента
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import toml

from .internal.types.settings import Dialects, GeneratorSettings

logger = logging.getLogger(__name__)

CONFIG_FILE = "apidoc.toml"
DEFAULT_DIRNAME = "api_client"
DEFAULT_DIALECT = Dialects.AIOHTTP.name


@dataclass
class ApidocConfig:
    """Конфигурация генератора клиента"""

    url: Optional[str] = None
    dirname: Optional[str] = None
    dialect: str = DEFAULT_DIALECT

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE, search_dir: str = None
    ) -> Optional["ApidocConfig"]:
        """Загрузка конфигурации из файла"""
        # Если указана директория для поиска, ищем конфиг там
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, CONFIG_FILE)
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except (toml.TomlDecodeError, OSError) as e:
            logger.warning("Не удалось прочитать %s: %s", config_path, e)
            return None

        return cls(
            url=config_data.get("url"),
            dirname=config_data.get("dirname", DEFAULT_DIRNAME),
            dialect=config_data.get("dialect", DEFAULT_DIALECT),
        )

    def save_to_file(self, config_path: str = CONFIG_FILE) -> None:
        """Сохранение конфигурации в файл"""
        config_data = {
            "url": self.url,
            "dirname": self.dirname,
            "dialect": self.dialect,
        }

        with open(config_path, "w") as f:
            toml.dump({k: v for k, v in config_data.items() if v is not None}, f)

    def merge_with_args(self, args) -> "ApidocConfig":
        """Объединение с аргументами командной строки"""
        return ApidocConfig(
            url=args.url or self.url,
            dirname=args.dirname or self.dirname,
            dialect=getattr(args, "dialect", None) or self.dialect,
        )

    def settings(self) -> GeneratorSettings:
        return Dialects.get(self.dialect)
