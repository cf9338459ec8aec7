"""
Генерация типов ошибок для ответов с телом ошибки
"""

import logging
from typing import Dict, List

from ..types.models import Class, CodeBlock, Function, Parameter, Variable
from ..types.service import Service
from ..types.settings import GeneratorSettings
from ..types.type_resolver import TypeKind, TypeReference, TypeResolver
from ..utils.text import pascal_case, pluralize, snake_case
from .operations import operation_views

logger = logging.getLogger(__name__)

FAILED_REQUEST = "FailedRequest"
INVALID_JSON = "InvalidJson"

# Атрибуты исключения, которые не должно перекрывать тело ошибки
_EXCEPTION_ATTRIBUTES = ("add_note", "args", "message", "response", "with_traceback")


def error_variable_name(ref: TypeReference) -> str:
    """[error] -> errors, error -> error, map[error] -> error_map"""
    base = snake_case(ref.short_name)

    if ref.kind == TypeKind.LIST:
        return pluralize(base)
    if ref.kind == TypeKind.MAP:
        return f"{base}_map"
    return base


def error_class_name(ref: TypeReference) -> str:
    """[error] -> ErrorsResponse"""
    return pascal_case(error_variable_name(ref)) + "Response"


class ErrorTypeGenerator:
    """Один тип ошибки на каждую уникальную форму тела ошибки"""

    def __init__(self, service: Service, settings: GeneratorSettings, resolver: TypeResolver = None):
        self.service = service
        self.settings = settings
        self.resolver = resolver or TypeResolver(service, settings)

    def error_types(self) -> Dict[str, TypeReference]:
        """Имя класса ошибки -> тип тела, без повторов, по алфавиту"""
        found: Dict[str, TypeReference] = {}
        sources: Dict[str, str] = {}

        for resource in self.service.resources:
            for view in operation_views(resource, self.resolver):
                for response in view.operation.responses:
                    if response.is_success or response.is_unit:
                        continue

                    ref = view.resolve(response.type, response.code)
                    class_name = error_class_name(ref)

                    if class_name not in found:
                        found[class_name] = ref
                        sources[class_name] = response.type
                    elif found[class_name] != ref:
                        raise view.error(
                            f"Error class[{class_name}] of type[{response.type}] collides "
                            f"with type[{sources[class_name]}]",
                            response.code,
                        )

        return {name: found[name] for name in sorted(found)}

    def classes(self) -> List[Class]:
        classes = [self.failed_request_class(), self.invalid_json_class()]
        error_types = self.error_types()

        logger.debug("Generating %d error types", len(error_types))

        for class_name, ref in error_types.items():
            classes.append(self.error_type_class(class_name, ref))

        return classes

    def failed_request_class(self) -> Class:
        cls = Class(
            name=FAILED_REQUEST,
            inherits=["Exception"],
            description="Неожиданный ответ сервера или ответ без описанного тела",
        )
        cls.add_function(
            "__init__",
            parameters=[
                Parameter(name="self"),
                Parameter(name="response_code", var_type=Variable(value="int")),
                Parameter(name="message", var_type=Variable(value="str")),
            ],
            code=CodeBlock(
                code=(
                    "self.response_code = response_code\n"
                    "self.message = message\n"
                    'super().__init__(f"HTTP {response_code}: {message}")'
                )
            ),
        )
        return cls

    def invalid_json_class(self) -> Class:
        return Class(
            name=INVALID_JSON,
            inherits=[FAILED_REQUEST],
            description="Тело ответа не соответствует описанному типу",
        )

    def error_type_class(self, class_name: str, ref: TypeReference) -> Class:
        status = self.settings.status_of("response")
        body = self.settings.body_of("response")
        datatype = self.resolver.resolve(ref)

        cls = Class(name=class_name, inherits=["Exception"])
        cls.add_function(
            "__init__",
            parameters=[
                Parameter(name="self"),
                Parameter(name="response", var_type=Variable(value=self.settings.response_class)),
                Parameter(
                    name="message",
                    var_type=Variable.wrap("Optional", "str"),
                    default="None",
                ),
            ],
            code=CodeBlock(
                code=(
                    "self.response = response\n"
                    "self.message = message\n"
                    f'super().__init__(message or f"{{{status}}}: {{{body}}}")'
                )
            ),
        )

        view_name = error_variable_name(ref)
        if view_name in _EXCEPTION_ATTRIBUTES:
            view_name += "_body"

        # Тело разбирается только при первом обращении
        view = Function(
            name=view_name,
            parameters=[Parameter(name="self")],
            response=str(datatype),
            decorators=["@functools.cached_property"],
            code=CodeBlock(
                code=f'return common.parse_json("{datatype}", self.response, {datatype})'
            ),
        )
        cls.add_function(view)
        return cls
