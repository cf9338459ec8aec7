"""
Генерация enum и pydantic моделей
"""

import logging
from typing import List

from ...exceptions import ConfigurationError
from ..types.models import Class, CodeBlock, Parameter
from ..types.service import EnumType, ModelType, Service
from ..types.settings import GeneratorSettings
from ..types.type_resolver import TypeResolver
from ..utils.text import safe_name, snake_case

logger = logging.getLogger(__name__)

# Имена, которые нельзя использовать как поля pydantic модели: методы
# BaseModel и модули из аннотаций
_RESERVED_FIELDS = {
    "construct",
    "copy",
    "datetime",
    "decimal",
    "dict",
    "from_orm",
    "json",
    "parse_file",
    "parse_obj",
    "parse_raw",
    "schema",
    "schema_json",
    "update_forward_refs",
    "uuid",
    "validate",
}


def enum_member_name(value: str) -> str:
    name = snake_case(value).upper()
    if not name or name[0].isdigit():
        name = "VALUE_" + name
    return safe_name(name)


def field_name(name: str) -> str:
    python_name = safe_name(snake_case(name))
    if python_name in _RESERVED_FIELDS or python_name.startswith("model_"):
        python_name += "_"
    return python_name


class ModelGenerator:
    """Enum и модели описания сервиса"""

    def __init__(self, service: Service, settings: GeneratorSettings, resolver: TypeResolver = None):
        self.service = service
        self.settings = settings
        self.resolver = resolver or TypeResolver(service, settings)

    def enum_classes(self) -> List[Class]:
        return [self.enum_class(enum) for enum in self.service.enums]

    def model_classes(self) -> List[Class]:
        return [self.model_class(model) for model in self.service.models]

    def enum_class(self, enum: EnumType) -> Class:
        members = []
        seen = set()

        for value in enum.values:
            name = enum_member_name(value.name)
            if name in seen:
                raise ConfigurationError(
                    f"Enum[{enum.name}]: value[{value.name}] collides with member {name}"
                )
            seen.add(name)
            members.append(Parameter(name=name, default=repr(value.name)))

        return Class(
            name=self.resolver.class_name(enum.name, qualified=False),
            inherits=["str", "Enum"],
            description=enum.description,
            parameters=members,
        )

    def model_class(self, model: ModelType) -> Class:
        fields = [Parameter(name="model_config", default="ConfigDict(populate_by_name=True)")]
        seen = set()

        for field in model.fields:
            python_name = field_name(field.name)
            if python_name in seen:
                raise ConfigurationError(
                    f"Model[{model.name}]: field[{field.name}] collides with {python_name}"
                )
            seen.add(python_name)

            try:
                ref = self.resolver.parse(field.type)
                default = None
                if field.default is not None:
                    default = self.resolver.default_literal(ref, field.default, qualified=False)
                elif not field.required:
                    ref = self.resolver.optional(ref)
                    default = "None"
            except ConfigurationError as e:
                raise ConfigurationError(f"Model[{model.name}] field[{field.name}]: {e.message}") from e

            if python_name != field.name:
                args = ([f"default={default}"] if default is not None else []) + [
                    f'alias="{field.name}"'
                ]
                default = f"Field({', '.join(args)})"

            fields.append(
                Parameter(
                    name=python_name,
                    var_type=self.resolver.resolve(ref, qualified=False).name,
                    default=default,
                )
            )

        return Class(
            name=self.resolver.class_name(model.name, qualified=False),
            inherits=["BaseModel"],
            description=model.description,
            parameters=fields,
        )

    def rebuild_block(self) -> CodeBlock:
        """model_rebuild() для разрешения ссылок вперед"""
        return CodeBlock.join(
            [
                f"{self.resolver.class_name(m.name, qualified=False)}.model_rebuild()"
                for m in self.service.models
            ]
        )
