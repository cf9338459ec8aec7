"""
Генерация таблицы маршрутов серверных обработчиков
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..types.service import ParameterLocation, Primitive, Service
from ..types.settings import GeneratorSettings
from ..types.type_resolver import TypeKind, TypeReference, TypeResolver
from ..utils.text import pascal_case
from .operations import OperationView, ParameterView, operation_views

logger = logging.getLogger(__name__)

# Эти примитивы не связываются со строкой запроса
_UNBINDABLE = (Primitive.OBJECT, Primitive.UNIT)


@dataclass(frozen=True)
class Route:
    verb: str
    url: str
    method: str
    params: Tuple[str, ...] = field(default_factory=tuple)
    param_comments: Optional[str] = None

    @property
    def handler(self) -> str:
        return f"{self.method}({', '.join(self.params)})"


def is_bindable(ref: TypeReference) -> bool:
    """Примитив или enum, возможно необязательный"""
    if ref.kind == TypeKind.OPTION:
        return is_bindable(ref.of)
    if ref.kind == TypeKind.ENUM:
        return True
    return ref.kind == TypeKind.PRIMITIVE and not any(ref.is_primitive(p) for p in _UNBINDABLE)


class RouteGenerator:
    def __init__(self, service: Service, settings: GeneratorSettings, resolver: TypeResolver = None):
        self.service = service
        self.settings = settings
        self.resolver = resolver or TypeResolver(service, settings)

    def handler_name(self, view: OperationView) -> str:
        """controllers.Users.getByGuid"""
        return ".".join(
            filter(
                bool,
                [self.settings.controllers_package, pascal_case(view.resource.plural), view.camel_name],
            )
        )

    def routes(self) -> List[Route]:
        routes = []
        handlers: Dict[str, OperationView] = {}

        for resource in self.service.sorted_resources():
            for view in operation_views(resource, self.resolver):
                route = self.route(view)

                if route.method in handlers:
                    raise view.error(
                        f"Handler[{route.method}] collides with "
                        f"{handlers[route.method].operation.label} of resource "
                        f"{handlers[route.method].resource.plural}"
                    )
                handlers[route.method] = view
                routes.append(route)

        logger.debug("Generated %d routes", len(routes))
        return routes

    def route(self, view: OperationView) -> Route:
        params = []
        additional = []
        seen = set()

        for parameter in view.path_parameters + view.query_parameters:
            if parameter.name in seen:
                continue
            seen.add(parameter.name)

            if parameter.location == ParameterLocation.PATH or is_bindable(parameter.ref):
                params.append(self._param(parameter))
            else:
                additional.append(parameter)

        comments = None
        if additional:
            comments = "\n".join(
                [f"# Additional parameters to {view.operation.label}"]
                + [f"#   - {p.name}: {self._type(p)}" for p in additional]
            )

        return Route(
            verb=view.operation.method.value,
            url=view.operation.path,
            method=self.handler_name(view),
            params=tuple(params),
            param_comments=comments,
        )

    def _type(self, parameter: ParameterView) -> str:
        return str(self.resolver.resolve(parameter.ref))

    def _param(self, parameter: ParameterView) -> str:
        param = f"{parameter.name}: {self._type(parameter)}"
        if parameter.default is not None and parameter.default != "None":
            param += f" ?= {parameter.default}"
        return param

    def render(self, routes: List[Route] = None) -> str:
        """Текст файла маршрутов с выровненными колонками"""
        if routes is None:
            routes = self.routes()

        if not routes:
            return ""

        verb_width = max(len(r.verb) for r in routes)
        url_width = max(len(r.url) for r in routes)

        lines = []
        for route in routes:
            if route.param_comments:
                lines.append(route.param_comments)
            lines.append(
                f"{route.verb.ljust(verb_width)}  {route.url.ljust(url_width)}  {route.handler}".rstrip()
            )

        return "\n".join(lines) + "\n"
