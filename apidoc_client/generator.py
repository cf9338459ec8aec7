"""
Главный модуль генератора - чистый интерфейс
"""

from typing import Any, Dict

from .internal.parser.service_json import ServiceParser
from .internal.types.models import Project
from .internal.types.service import Service
from .internal.types.settings import Dialects, GeneratorSettings


class ApiClientGenerator:
    """Чистый интерфейс для генерации API клиентов"""

    def __init__(
        self,
        document: Dict[str, Any],
        source_url: str = None,
        settings: GeneratorSettings = Dialects.AIOHTTP,
        dirname: str = None,
    ):
        self.parser = ServiceParser(document, source_url, settings, dirname)

    def service(self) -> Service:
        return self.parser.service()

    def generate(self) -> Project:
        """Генерация проекта клиента"""
        return self.parser.parse()


def generate_client(
    document: Dict[str, Any],
    source_url: str = None,
    dialect: str = Dialects.AIOHTTP.name,
) -> Project:
    """Создание API клиента из JSON описания сервиса"""
    generator = ApiClientGenerator(document, source_url, Dialects.get(dialect))
    return generator.generate()
