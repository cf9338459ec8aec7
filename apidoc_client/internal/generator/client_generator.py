import logging
from typing import Dict

import toml

from ...exceptions import ConfigurationError
from ..types.models import Class, CodeBlock, Parameter, Project
from ..types.service import Service
from ..types.settings import Dialects, GeneratorSettings
from ..types.type_resolver import TypeResolver
from ..utils.text import indent, snake_case
from .error_generator import ErrorTypeGenerator
from .method_generator import ClientMethodGenerator
from .model_generator import ModelGenerator
from .route_generator import RouteGenerator
from .templates import templates
from .union_generator import UnionCodecGenerator

logger = logging.getLogger(__name__)


class ClientGenerator:
    """Генератор API клиента из описания сервиса"""

    def __init__(
        self,
        service: Service,
        settings: GeneratorSettings = Dialects.AIOHTTP,
        source_url: str = None,
        dirname: str = None,
    ):
        self.service = service
        self.settings = settings
        self.source_url = source_url
        self.dirname = dirname

        self.resolver = TypeResolver(service, settings)
        self.models = ModelGenerator(service, settings, self.resolver)
        self.unions = UnionCodecGenerator(service, settings, self.resolver)
        self.errors = ErrorTypeGenerator(service, settings, self.resolver)
        self.methods = ClientMethodGenerator(service, settings, self.resolver)
        self.routes = RouteGenerator(service, settings, self.resolver)

        self.project = Project(name=snake_case(service.name))

    def generate(self) -> Project:
        """Основная генерация; любая ошибка описания прерывает ее целиком"""
        self._check_resource_names()
        self._create_base_files()
        self._generate_models()
        self._generate_errors()
        self._generate_interfaces()
        self._generate_client()
        self._generate_routes()
        self._finalize_structure()

        logger.debug(
            "Generated %d files for service %s", len(self.project.files), self.service.name
        )
        return self.project

    def _check_resource_names(self):
        seen: Dict[str, str] = {}
        for resource in self.service.sorted_resources():
            name = self.methods.trait_name(resource)
            if name in seen:
                raise ConfigurationError(
                    f"Class name[{name}] collides with resource {seen[name]}",
                    resource=resource.plural,
                )
            seen[name] = resource.plural

    def _constants(self) -> CodeBlock:
        headers = {h.name: h.value for h in self.service.headers}
        dispatch = {
            method.value: call for method, call in self.settings.dispatch.items()
        }

        return CodeBlock(
            order=2,
            code="\n".join(
                [
                    "logger = logging.getLogger(__name__)",
                    "",
                    f"BASE_URL: Optional[str] = {self.service.base_url!r}",
                    f"DEFAULT_HEADERS: Dict[str, str] = {self._literal(headers)}",
                    "",
                    "# HTTP метод -> метод aiohttp.ClientSession",
                    f"DISPATCH: Dict[str, str] = {self._literal(dispatch)}",
                    f"SUPPORTS_PATCH = {self.settings.supports_patch}",
                ]
            ),
        )

    @staticmethod
    def _literal(values: Dict[str, str]) -> str:
        if not values:
            return "{}"
        items = [f"{k!r}: {v!r}," for k, v in values.items()]
        return "{\n" + indent("\n".join(items)) + "\n}"

    def _create_base_files(self):
        """Создание базовых файлов проекта"""
        common = self.project.add_file("common.py")
        common.imports.append(templates.common_imports)
        common.add_code_block(self._constants())
        common.add_code_block(CodeBlock(order=1, code=templates.aiohttp_common))

        # Конфиг файл в папке клиента
        if self.source_url:
            config = {"url": self.source_url, "dialect": self.settings.name}
            if self.dirname:
                config["dirname"] = self.dirname

            self.project.add_file("apidoc.toml").add_code_block(
                CodeBlock(code="# Configuration for API client\n" + toml.dumps(config).rstrip())
            )

    def _generate_models(self):
        models = self.project.add_file("models.py")
        models.imports.append(templates.models_imports)

        for cls in self.models.enum_classes():
            cls.order = 4
            models.add_class(cls)

        for cls in self.models.model_classes():
            cls.order = 3
            models.add_class(cls)

        for codec in self.unions.codecs():
            codec.order = 2
            models.add_code_block(codec)

        if self.service.models:
            rebuild = self.models.rebuild_block()
            rebuild.order = 1
            models.add_code_block(rebuild)

    def _generate_errors(self):
        errors = self.project.add_file("errors.py")
        errors.imports.append(templates.errors_imports)

        for cls in self.errors.classes():
            errors.add_class(cls)

    def _generate_interfaces(self):
        interfaces = self.project.add_file("interfaces.py")
        interfaces.imports.append(templates.interfaces_imports)

        for trait in self.methods.traits():
            interfaces.add_class(trait)

    def _generate_client(self):
        client = self.project.add_file("client.py")
        client.imports.append(templates.client_imports)

        for obj in self.methods.objects():
            obj.order = 1
            client.add_class(obj)

        api_client = Class(
            name="ApiClient",
            inherits=["AiohttpClient", "metaclass=Singleton"],
            description=self.service.description,
        )
        api_client.add_function(
            "__init__",
            parameters=[Parameter(name="self")],
            code=CodeBlock.join(["super().__init__()"] + self.methods.accessors()),
        )
        client.add_class(api_client)

    def _generate_routes(self):
        self.project.add_file("routes").add_code_block(
            CodeBlock(code=self.routes.render().rstrip("\n"))
        )

    def _finalize_structure(self):
        """Главный __init__.py"""
        main_init = self.project.add_file("__init__.py")
        main_init.imports.extend(
            [
                "from .client import ApiClient",
                "from . import errors, models",
            ]
        )
        main_init.add_code_block(CodeBlock(code='__all__ = ["ApiClient", "errors", "models"]'))
