"""
Разбор JSON описания сервиса в модель Service
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ...exceptions import ConfigurationError
from ..generator.client_generator import ClientGenerator
from ..types.models import Project
from ..types.service import (
    EnumType,
    EnumValue,
    Field,
    Header,
    Method,
    ModelType,
    Operation,
    Parameter,
    ParameterLocation,
    Resource,
    Response,
    Service,
    UnionType,
)
from ..types.settings import Dialects, GeneratorSettings
from ..utils.text import pluralize

logger = logging.getLogger(__name__)


def _text(value: Any) -> Optional[str]:
    """Значение по умолчанию из JSON в строку описания"""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _named(section: Any, name: str) -> Dict[str, Dict[str, Any]]:
    """Секция вида {имя: описание} или [{"name": имя, ...}]"""
    if section is None:
        return {}

    if isinstance(section, list):
        return {item["name"]: item for item in section}

    if not isinstance(section, dict):
        raise ConfigurationError(f"Section[{name}] must be an object")

    return section


class ServiceParser:
    """Парсер JSON описания сервиса"""

    def __init__(
        self,
        document: Dict[str, Any],
        source_url: str = None,
        settings: GeneratorSettings = Dialects.AIOHTTP,
        dirname: str = None,
    ):
        self.document = document
        self.source_url = source_url
        self.settings = settings
        self.dirname = dirname

    def parse(self) -> Project:
        """Парсинг описания в Project структуру"""
        generator = ClientGenerator(self.service(), self.settings, self.source_url, self.dirname)
        return generator.generate()

    def service(self) -> Service:
        if not isinstance(self.document, dict):
            raise ConfigurationError("Service description must be a JSON object")

        try:
            service = Service(
                name=self.document.get("name", "api"),
                namespace=self.document.get("namespace"),
                base_url=self.document.get("base_url"),
                description=self.document.get("description"),
                headers=self._headers(self.document.get("headers")),
                enums=self._enums(),
                models=self._models(),
                unions=self._unions(),
                resources=self._resources(),
            )
        except ConfigurationError:
            raise
        except ValidationError as e:
            raise ConfigurationError(f"Invalid service description: {e}") from e
        except KeyError as e:
            raise ConfigurationError(f"Missing required key {e}") from e
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid service description: {e}") from e

        logger.debug(
            "Parsed service %s: %d enums, %d models, %d unions, %d resources",
            service.name,
            len(service.enums),
            len(service.models),
            len(service.unions),
            len(service.resources),
        )
        return service

    @staticmethod
    def _headers(headers: Any) -> List[Header]:
        if not headers:
            return []
        if isinstance(headers, dict):
            return [Header(name=k, value=_text(v)) for k, v in headers.items()]
        return [Header(name=h["name"], value=_text(h["value"])) for h in headers]

    def _enums(self) -> List[EnumType]:
        enums = []
        for name, spec in _named(self.document.get("enums"), "enums").items():
            values = [
                EnumValue(name=v) if isinstance(v, str) else EnumValue(**v)
                for v in spec.get("values", [])
            ]
            enums.append(EnumType(name=name, values=values, description=spec.get("description")))
        return enums

    def _models(self) -> List[ModelType]:
        models = []
        for name, spec in _named(self.document.get("models"), "models").items():
            fields = [
                Field(
                    name=f["name"],
                    type=f["type"],
                    required=f.get("required", True),
                    default=_text(f.get("default")),
                    description=f.get("description"),
                )
                for f in spec.get("fields", [])
            ]
            models.append(ModelType(name=name, fields=fields, description=spec.get("description")))
        return models

    def _unions(self) -> List[UnionType]:
        unions = []
        for name, spec in _named(self.document.get("unions"), "unions").items():
            types = [t["type"] if isinstance(t, dict) else t for t in spec.get("types", [])]
            unions.append(UnionType(name=name, types=types, description=spec.get("description")))
        return unions

    def _resources(self) -> List[Resource]:
        resources = []
        for name, spec in _named(self.document.get("resources"), "resources").items():
            plural = spec.get("plural") or pluralize(name)
            path = spec.get("path", "/" + plural)

            operations = [self._operation(name, path, o) for o in spec.get("operations", [])]
            resources.append(
                Resource(
                    type=name,
                    plural=plural,
                    path=path,
                    operations=operations,
                    description=spec.get("description"),
                )
            )
        return resources

    def _operation(self, resource: str, resource_path: str, spec: Dict[str, Any]) -> Operation:
        method = Method(spec["method"].upper())
        path = (resource_path or "").rstrip("/") + spec.get("path", "")
        if not path:
            path = "/"

        placeholders = set(re.findall(r":([^/]+)", path))
        body = spec.get("body")
        if isinstance(body, dict):
            body = body["type"]

        parameters = [
            self._parameter(p, method, placeholders) for p in spec.get("parameters", [])
        ]

        label = f"{method.value} {path}"
        responses = self._responses(resource, label, spec.get("responses", {}))

        return Operation(
            method=method,
            path=path,
            body=body,
            parameters=parameters,
            responses=responses,
            description=spec.get("description"),
        )

    @staticmethod
    def _parameter(spec: Dict[str, Any], method: Method, placeholders: set) -> Parameter:
        location = spec.get("location")
        if location is None:
            if spec["name"] in placeholders:
                location = ParameterLocation.PATH
            elif method.has_body:
                location = ParameterLocation.FORM
            else:
                location = ParameterLocation.QUERY
        else:
            location = ParameterLocation(location.lower())

        return Parameter(
            name=spec["name"],
            type=spec.get("type", "string"),
            location=location,
            required=spec.get("required", True),
            default=_text(spec.get("default")),
            description=spec.get("description"),
        )

    @staticmethod
    def _responses(resource: str, label: str, spec: Dict[str, Any]) -> List[Response]:
        responses = []
        for code, response in spec.items():
            try:
                code = int(code)
            except ValueError as e:
                raise ConfigurationError(
                    f"Response code[{code}] is not a number", resource=resource, operation=label
                ) from e

            response = response or {}
            responses.append(
                Response(
                    code=code,
                    type=response.get("type", "unit"),
                    optional=response.get("optional", False),
                )
            )

        # 404 без тела делает первый успешный ответ с телом необязательным
        not_found = any(r.is_not_found and r.is_unit for r in responses)
        if not_found and not any(r.is_success and r.optional for r in responses):
            for i, r in enumerate(responses):
                if r.is_success and not r.is_unit:
                    responses[i] = r.model_copy(update={"optional": True})
                    break

        return responses
