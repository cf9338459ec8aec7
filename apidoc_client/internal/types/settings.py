"""
Настройки генерации, явно передаваемые в каждый генератор
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict

from .service import Method


class GeneratorSettings(BaseModel):
    """Конфигурация диалекта генерируемого клиента"""

    model_config = ConfigDict(frozen=True)

    name: str

    # Конверт ответа в сгенерированном коде
    response_class: str = "common.Response"
    response_status: str = "status"
    response_body: str = "body"
    response_variable: str = "r"

    models_namespace: str = "models"
    errors_namespace: str = "errors"
    controllers_package: str = "controllers"

    # HTTP метод -> метод aiohttp.ClientSession
    dispatch: Dict[Method, str] = {
        Method.GET: "get",
        Method.POST: "post",
        Method.PUT: "put",
        Method.PATCH: "patch",
        Method.DELETE: "delete",
        Method.HEAD: "head",
        Method.OPTIONS: "options",
    }
    supports_patch: bool = True

    def status_of(self, variable: str = None) -> str:
        return f"{variable or self.response_variable}.{self.response_status}"

    def body_of(self, variable: str = None) -> str:
        return f"{variable or self.response_variable}.{self.response_body}"


class Dialects:
    AIOHTTP = GeneratorSettings(name="aiohttp")

    AIOHTTP_COMPAT = GeneratorSettings(name="aiohttp-compat", supports_patch=False)

    @classmethod
    def all(cls) -> Dict[str, GeneratorSettings]:
        return {d.name: d for d in (cls.AIOHTTP, cls.AIOHTTP_COMPAT)}

    @classmethod
    def get(cls, name: str) -> GeneratorSettings:
        dialects = cls.all()
        if name not in dialects:
            raise ValueError(
                f"Неизвестный диалект {name}. Доступны: {', '.join(sorted(dialects))}"
            )
        return dialects[name]
