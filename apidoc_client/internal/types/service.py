"""
Модель описания сервиса - неизменяемый вход генератора
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @property
    def has_body(self) -> bool:
        return self in (Method.POST, Method.PUT, Method.PATCH)


class ParameterLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    FORM = "form"


class Primitive(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    UUID = "uuid"
    DATE_ISO8601 = "date-iso8601"
    DATE_TIME_ISO8601 = "date-time-iso8601"
    OBJECT = "object"
    UNIT = "unit"


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Header(Frozen):
    name: str
    value: str


class EnumValue(Frozen):
    name: str
    description: Optional[str] = None


class EnumType(Frozen):
    name: str
    values: Tuple[EnumValue, ...] = ()
    description: Optional[str] = None


class Field(Frozen):
    name: str
    type: str
    required: bool = True
    default: Optional[str] = None
    description: Optional[str] = None


class ModelType(Frozen):
    name: str
    fields: Tuple[Field, ...] = ()
    description: Optional[str] = None


class UnionType(Frozen):
    """Порядок вариантов значим: при чтении побеждает первый подошедший"""

    name: str
    types: Tuple[str, ...] = ()
    description: Optional[str] = None


class Parameter(Frozen):
    name: str
    type: str = Primitive.STRING.value
    location: ParameterLocation = ParameterLocation.QUERY
    required: bool = True
    default: Optional[str] = None
    description: Optional[str] = None


class Response(Frozen):
    code: int
    type: str = Primitive.UNIT.value
    optional: bool = False

    @property
    def is_success(self) -> bool:
        return 200 <= self.code < 300

    @property
    def is_unit(self) -> bool:
        return self.type == Primitive.UNIT.value

    @property
    def is_option(self) -> bool:
        return self.is_success and self.optional and not self.is_unit

    @property
    def is_not_found(self) -> bool:
        return self.code == 404


class Operation(Frozen):
    method: Method
    path: str
    body: Optional[str] = None
    parameters: Tuple[Parameter, ...] = ()
    responses: Tuple[Response, ...] = ()
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.method.value} {self.path}"


class Resource(Frozen):
    type: str
    plural: str
    path: Optional[str] = None
    operations: Tuple[Operation, ...] = ()
    description: Optional[str] = None

    @property
    def base_path(self) -> str:
        return self.path if self.path is not None else "/" + self.plural


class Service(Frozen):
    name: str
    namespace: Optional[str] = None
    base_url: Optional[str] = None
    description: Optional[str] = None
    headers: Tuple[Header, ...] = ()
    enums: Tuple[EnumType, ...] = ()
    models: Tuple[ModelType, ...] = ()
    unions: Tuple[UnionType, ...] = ()
    resources: Tuple[Resource, ...] = ()

    def sorted_resources(self) -> Tuple[Resource, ...]:
        """Ресурсы в регистронезависимом порядке множественного имени"""
        return tuple(sorted(self.resources, key=lambda r: r.plural.lower()))
