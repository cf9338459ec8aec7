import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Optional

from ...exceptions import ConfigurationError
from ..utils.text import pascal_case
from .models import Variable
from .service import Primitive, Service
from .settings import GeneratorSettings

logger = logging.getLogger(__name__)


class TypeKind(str, Enum):
    PRIMITIVE = "primitive"
    ENUM = "enum"
    MODEL = "model"
    UNION = "union"
    LIST = "list"
    MAP = "map"
    OPTION = "option"


@dataclass(frozen=True)
class TypeReference:
    kind: TypeKind
    name: Optional[str] = None
    of: Optional["TypeReference"] = None

    @property
    def short_name(self) -> str:
        """Имя типа без оберток: [user] -> user"""
        if self.of is not None:
            return self.of.short_name
        return self.name

    @property
    def is_named(self) -> bool:
        return self.kind in (TypeKind.ENUM, TypeKind.MODEL, TypeKind.UNION)

    def is_primitive(self, primitive: Primitive) -> bool:
        return self.kind == TypeKind.PRIMITIVE and self.name == primitive.value


@dataclass(frozen=True)
class ResolvedType:
    name: Variable
    nil_value: str
    is_unit: bool

    def __str__(self):
        return str(self.name)


_PRIMITIVES: Dict[str, Variable] = {
    Primitive.STRING.value: Variable(value="str"),
    Primitive.INTEGER.value: Variable(value="int"),
    Primitive.LONG.value: Variable(value="int"),
    Primitive.DOUBLE.value: Variable(value="float"),
    Primitive.DECIMAL.value: Variable(value="decimal.Decimal"),
    Primitive.BOOLEAN.value: Variable(value="bool"),
    Primitive.UUID.value: Variable(value="uuid.UUID"),
    Primitive.DATE_ISO8601.value: Variable(value="datetime.date"),
    Primitive.DATE_TIME_ISO8601.value: Variable(value="datetime.datetime"),
    Primitive.OBJECT.value: Variable.wrap("Dict", "str", "Any"),
    Primitive.UNIT.value: Variable(value="None"),
}

# Классы для isinstance проверок в кодеках union типов
_RUNTIME_CLASSES: Dict[str, str] = {
    **{name: str(var) for name, var in _PRIMITIVES.items()},
    Primitive.OBJECT.value: "dict",
}


class TypeResolver:
    """Разрешение ссылок на типы описания сервиса в типы Python"""

    def __init__(self, service: Service, settings: GeneratorSettings):
        self.service = service
        self.settings = settings
        self._registry: Dict[str, TypeKind] = {}
        self._class_names: Dict[str, str] = {}

        for enum in service.enums:
            self._register(enum.name, TypeKind.ENUM)
        for model in service.models:
            self._register(model.name, TypeKind.MODEL)
        for union in service.unions:
            self._register(union.name, TypeKind.UNION)

        logger.debug("Registered %d named types", len(self._registry))

    def _register(self, name: str, kind: TypeKind):
        if name in self._registry or name in _PRIMITIVES:
            raise ConfigurationError(f"Type[{name}] is declared more than once")

        class_name = self.class_name(name, qualified=False)
        if class_name in self._class_names:
            raise ConfigurationError(
                f"Type[{name}] collides with type[{self._class_names[class_name]}] "
                f"as class {class_name}"
            )

        self._registry[name] = kind
        self._class_names[class_name] = name

    def parse(self, type_string: str) -> TypeReference:
        """Разбор нотации типа: user, [user], map[user], map"""
        value = type_string.strip()

        if value.startswith("[") and value.endswith("]"):
            return TypeReference(TypeKind.LIST, of=self.parse(value[1:-1]))

        if value.startswith("map[") and value.endswith("]"):
            return TypeReference(TypeKind.MAP, of=self.parse(value[4:-1]))

        if value == "map":
            return TypeReference(
                TypeKind.MAP, of=TypeReference(TypeKind.PRIMITIVE, Primitive.STRING.value)
            )

        if value in _PRIMITIVES:
            return TypeReference(TypeKind.PRIMITIVE, value)

        if value in self._registry:
            return TypeReference(self._registry[value], value)

        raise ConfigurationError(f"Unresolved type reference[{type_string}]")

    @staticmethod
    def optional(ref: TypeReference) -> TypeReference:
        if ref.kind == TypeKind.OPTION:
            return ref
        return TypeReference(TypeKind.OPTION, of=ref)

    def class_name(self, name: str, qualified: bool = True) -> str:
        """Имя сгенерированного класса для enum/model/union"""
        class_name = pascal_case(name)
        if qualified and self.settings.models_namespace:
            return f"{self.settings.models_namespace}.{class_name}"
        return class_name

    def resolve(self, ref: TypeReference, qualified: bool = True) -> ResolvedType:
        if ref.kind == TypeKind.PRIMITIVE:
            return ResolvedType(
                name=_PRIMITIVES[ref.name],
                nil_value="None",
                is_unit=ref.name == Primitive.UNIT.value,
            )

        if ref.is_named:
            return ResolvedType(
                name=Variable(value=self.class_name(ref.name, qualified)),
                nil_value="None",
                is_unit=False,
            )

        inner = self.resolve(ref.of, qualified)

        if ref.kind == TypeKind.LIST:
            return ResolvedType(Variable.wrap("List", inner.name), "[]", False)

        if ref.kind == TypeKind.MAP:
            return ResolvedType(Variable.wrap("Dict", "str", inner.name), "{}", False)

        return ResolvedType(Variable.wrap("Optional", inner.name), "None", inner.is_unit)

    def resolve_string(self, type_string: str, qualified: bool = True) -> ResolvedType:
        return self.resolve(self.parse(type_string), qualified)

    def runtime_class(self, ref: TypeReference, qualified: bool = True) -> str:
        """Класс для isinstance проверки значения типа"""
        if ref.kind == TypeKind.PRIMITIVE:
            if ref.name == Primitive.UNIT.value:
                raise ConfigurationError("Type[unit] has no runtime representation")
            return _RUNTIME_CLASSES[ref.name]

        if ref.is_named:
            return self.class_name(ref.name, qualified)

        return {TypeKind.LIST: "list", TypeKind.MAP: "dict"}.get(ref.kind, "object")

    def default_literal(
        self, ref: TypeReference, raw: str, qualified: bool = True
    ) -> str:
        """Значение по умолчанию из описания в виде литерала Python"""
        if ref.kind == TypeKind.OPTION:
            return self.default_literal(ref.of, raw, qualified)

        try:
            if ref.kind == TypeKind.ENUM:
                return self._enum_default(ref, raw, qualified)

            if ref.kind == TypeKind.PRIMITIVE:
                return self._primitive_default(ref.name, raw)
        except (ValueError, InvalidOperation) as e:
            raise ConfigurationError(
                f"Invalid default[{raw}] for type[{ref.name}]: {e}"
            ) from e

        raise ConfigurationError(
            f"Defaults are not supported for type[{ref.short_name}]"
        )

    def _enum_default(self, ref: TypeReference, raw: str, qualified: bool) -> str:
        enum = next(e for e in self.service.enums if e.name == ref.name)
        if raw not in [v.name for v in enum.values]:
            raise ValueError(f"not one of {', '.join(v.name for v in enum.values)}")
        return f"{self.class_name(ref.name, qualified)}({raw!r})"

    @staticmethod
    def _primitive_default(primitive: str, raw: str) -> str:
        if primitive == Primitive.STRING.value:
            return repr(raw)
        if primitive in (Primitive.INTEGER.value, Primitive.LONG.value):
            return str(int(raw))
        if primitive == Primitive.DOUBLE.value:
            return repr(float(raw))
        if primitive == Primitive.DECIMAL.value:
            Decimal(raw)
            return f"decimal.Decimal({raw!r})"
        if primitive == Primitive.BOOLEAN.value:
            if raw.lower() not in ("true", "false"):
                raise ValueError("expected true or false")
            return "True" if raw.lower() == "true" else "False"
        if primitive == Primitive.UUID.value:
            return f"uuid.UUID({raw!r})"
        if primitive == Primitive.DATE_ISO8601.value:
            return f"datetime.date.fromisoformat({raw!r})"

        raise ValueError("no literal form")
