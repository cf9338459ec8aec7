"""
Представление операции: имя метода, упорядоченные параметры, проверки
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ...exceptions import ConfigurationError
from ..types.service import Operation, Parameter, ParameterLocation, Primitive, Resource
from ..types.type_resolver import ResolvedType, TypeKind, TypeReference, TypeResolver
from ..utils.text import camel_case, pluralize, safe_name, snake_case

# Имена, занятые в теле сгенерированного метода
_SHADOWED = {
    "common",
    "datetime",
    "decimal",
    "errors",
    "interfaces",
    "models",
    "payload",
    "query_parameters",
    "r",
    "self",
    "uuid",
}


@dataclass(frozen=True)
class ParameterView:
    name: str
    arg_name: str
    location: Optional[ParameterLocation]
    ref: TypeReference
    type: ResolvedType
    default: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_body(self) -> bool:
        return self.location is None


class OperationView:
    """Операция ресурса, подготовленная для генерации"""

    def __init__(self, resource: Resource, operation: Operation, resolver: TypeResolver):
        self.resource = resource
        self.operation = operation
        self.resolver = resolver

        self.placeholders = self._placeholders()
        self.body = self._body()
        self.parameters = self._ordered_parameters()

        self.snake_name = self._snake_name()
        self.method_name = safe_name(self.snake_name)
        self.camel_name = camel_case(self.snake_name)

        self._check_bodyless_verbs()
        self._check_argument_names()

    def error(self, message: str, code: int = None) -> ConfigurationError:
        return ConfigurationError(
            message,
            resource=self.resource.plural,
            operation=self.operation.label,
            code=code,
        )

    def resolve(self, type_string: str, code: int = None) -> TypeReference:
        try:
            return self.resolver.parse(type_string)
        except ConfigurationError as e:
            raise self.error(e.message, code) from e

    @property
    def path_parameters(self) -> List[ParameterView]:
        return [p for p in self.parameters if p.location == ParameterLocation.PATH]

    @property
    def query_parameters(self) -> List[ParameterView]:
        return [p for p in self.parameters if p.location == ParameterLocation.QUERY]

    @property
    def form_parameters(self) -> List[ParameterView]:
        return [p for p in self.parameters if p.location == ParameterLocation.FORM]

    @property
    def arguments(self) -> List[ParameterView]:
        """Аргументы метода клиента: path, body, затем остальные"""
        path = self.path_parameters
        rest = [p for p in self.parameters if p.location != ParameterLocation.PATH]
        return path + ([self.body] if self.body else []) + rest

    def _placeholders(self) -> List[str]:
        placeholders = [
            segment[1:]
            for segment in self.operation.path.split("/")
            if segment.startswith(":")
        ]

        seen = set()
        for name in placeholders:
            if name in seen:
                raise self.error(f"Path parameter[{name}] appears more than once in path")
            seen.add(name)

        return placeholders

    def _body(self) -> Optional[ParameterView]:
        if self.operation.body is None:
            return None

        ref = self.resolve(self.operation.body)
        if ref.kind == TypeKind.LIST:
            name = pluralize(snake_case(ref.short_name))
        else:
            name = snake_case(ref.short_name)

        return ParameterView(
            name=name,
            arg_name=self._arg_name(name),
            location=None,
            ref=ref,
            type=self.resolver.resolve(ref),
        )

    def _ordered_parameters(self) -> List[ParameterView]:
        declared: Dict[str, Parameter] = {}
        for parameter in self.operation.parameters:
            if parameter.name in declared:
                raise self.error(f"Parameter[{parameter.name}] is declared more than once")
            declared[parameter.name] = parameter

        for name, parameter in declared.items():
            if parameter.location == ParameterLocation.PATH and name not in self.placeholders:
                raise self.error(f"Path parameter[{name}] does not appear in path")

        # Параметры пути - строго в порядке появления в пути
        path = [
            self._parameter_view(
                declared.get(name) or Parameter(name=name, type=Primitive.STRING.value),
                ParameterLocation.PATH,
            )
            for name in self.placeholders
        ]

        rest = [
            self._parameter_view(parameter, parameter.location)
            for parameter in self.operation.parameters
            if parameter.name not in self.placeholders
        ]

        return path + rest

    def _parameter_view(
        self, parameter: Parameter, location: ParameterLocation
    ) -> ParameterView:
        ref = self.resolve(parameter.type)
        default = None

        if location == ParameterLocation.PATH:
            if not parameter.required:
                raise self.error(f"Path parameter[{parameter.name}] cannot be optional")
        elif parameter.default is not None:
            try:
                default = self.resolver.default_literal(ref, parameter.default)
            except ConfigurationError as e:
                raise self.error(e.message) from e
        elif not parameter.required:
            ref = self.resolver.optional(ref)
            default = "None"

        return ParameterView(
            name=parameter.name,
            arg_name=self._arg_name(parameter.name),
            location=location,
            ref=ref,
            type=self.resolver.resolve(ref),
            default=default,
            description=parameter.description,
        )

    @staticmethod
    def _arg_name(name: str) -> str:
        arg_name = safe_name(snake_case(name))
        return arg_name + "_" if arg_name in _SHADOWED else arg_name

    def _snake_name(self) -> str:
        """GET /users/:guid -> get_by_guid, POST /users/:guid/accept -> post_accept_by_guid"""
        base = self.resource.base_path.rstrip("/")
        url = self.operation.path

        if base and not base.startswith("/:") and (url == base or url.startswith(base + "/")):
            url = url[len(base):]

        pieces = [p for p in url.split("/") if p]
        named = [snake_case(p[1:]) for p in pieces if p.startswith(":")]
        not_named = [snake_case(p) for p in pieces if not p.startswith(":")]

        words = [self.operation.method.value.lower()]
        if not_named:
            words.append("_and_".join(not_named))
        if named:
            words.extend(["by", "_and_".join(named)])

        return "_".join(words)

    def _check_bodyless_verbs(self):
        if self.body is not None and self.form_parameters:
            raise self.error("Form parameters cannot be combined with a request body")

        if self.operation.method.has_body:
            return

        if self.body is not None:
            raise self.error(f"{self.operation.method.value} does not accept a request body")

        if self.form_parameters:
            raise self.error(
                f"{self.operation.method.value} does not accept form parameters: "
                + ", ".join(p.name for p in self.form_parameters)
            )

    def _check_argument_names(self):
        seen = set()
        for argument in self.arguments:
            if argument.arg_name in seen:
                raise self.error(f"Argument[{argument.arg_name}] is declared more than once")
            seen.add(argument.arg_name)


def operation_views(resource: Resource, resolver: TypeResolver) -> List[OperationView]:
    """Операции ресурса в порядке объявления с проверкой коллизий имен"""
    views = []
    names: Dict[str, OperationView] = {}

    for operation in resource.operations:
        view = OperationView(resource, operation, resolver)

        if view.method_name in names:
            raise view.error(
                f"Method name[{view.method_name}] collides with "
                f"{names[view.method_name].operation.label}"
            )

        names[view.method_name] = view
        views.append(view)

    return views
