"""
Кодеки union типов.

Значение union пишется в JSON как объект с единственным ключом-дискриминатором:
{"registered_user": {...}}. Дискриминатор - snake_case имени типа варианта.
При чтении варианты перебираются в порядке объявления, побеждает первый
вариант, чей ключ присутствует и чье содержимое проходит валидацию.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from ...exceptions import ConfigurationError
from ..types.models import CodeBlock, Function, Parameter, Variable
from ..types.service import Primitive, Service, UnionType
from ..types.settings import GeneratorSettings
from ..types.type_resolver import TypeKind, TypeReference, TypeResolver
from ..utils.text import indent, snake_case

logger = logging.getLogger(__name__)

_SUBCLASSES = ("bool", "datetime.datetime")


@dataclass(frozen=True)
class UnionVariant:
    type_name: str
    discriminator: str
    ref: TypeReference


class UnionCodecGenerator:
    def __init__(self, service: Service, settings: GeneratorSettings, resolver: TypeResolver = None):
        self.service = service
        self.settings = settings
        self.resolver = resolver or TypeResolver(service, settings)

    @staticmethod
    def prefix(union: UnionType) -> str:
        return snake_case(union.name)

    def read_name(self, union: UnionType) -> str:
        return f"read_{self.prefix(union)}"

    def write_name(self, union: UnionType) -> str:
        return f"write_{self.prefix(union)}"

    def variants(self, union: UnionType) -> List[UnionVariant]:
        if not union.types:
            raise ConfigurationError(f"Union[{union.name}] has no variants")

        variants = []
        seen: Dict[str, str] = {}

        for type_name in union.types:
            try:
                ref = self.resolver.parse(type_name)
            except ConfigurationError as e:
                raise ConfigurationError(f"Union[{union.name}]: {e.message}") from e

            if ref.kind not in (TypeKind.PRIMITIVE, TypeKind.ENUM, TypeKind.MODEL) or ref.is_primitive(
                Primitive.UNIT
            ):
                raise ConfigurationError(
                    f"Union[{union.name}]: variant[{type_name}] must be a primitive, enum or model"
                )

            discriminator = snake_case(type_name)
            if discriminator in seen:
                raise ConfigurationError(
                    f"Union[{union.name}]: variants [{seen[discriminator]}] and [{type_name}] "
                    f"share discriminator[{discriminator}]"
                )
            seen[discriminator] = type_name

            variants.append(UnionVariant(type_name, discriminator, ref))

        return variants

    def alias(self, union: UnionType) -> CodeBlock:
        """Annotated тип, подключающий кодек к pydantic"""
        name = self.resolver.class_name(union.name, qualified=False)
        members = [str(self._type(v)) for v in self.variants(union)]

        return CodeBlock(
            code=(
                f"{name} = Annotated[\n"
                + indent(
                    f"Union[{', '.join(members)}],\n"
                    f"PlainValidator({self.read_name(union)}),\n"
                    f"PlainSerializer({self.write_name(union)}),"
                )
                + "\n]"
            )
        )

    def functions(self, union: UnionType) -> List[Function]:
        """Функции кодека: по паре на вариант, затем общие read и write"""
        variants = self.variants(union)
        functions = []

        for variant in variants:
            functions.append(self._variant_writer(union, variant))
            functions.append(self._variant_reader(union, variant))

        functions.append(self._reader(union, variants))
        functions.append(self._writer(union, variants))
        return functions

    def codec(self, union: UnionType) -> CodeBlock:
        """Кодек и alias одного union типа одним блоком"""
        return CodeBlock.join(
            [str(f) for f in self.functions(union)] + [self.alias(union)],
            separator="\n\n\n",
        )

    def codecs(self) -> List[CodeBlock]:
        logger.debug("Generating codecs for %d unions", len(self.service.unions))
        return [self.codec(union) for union in self.service.unions]

    def _type(self, variant: UnionVariant) -> Variable:
        return self.resolver.resolve(variant.ref, qualified=False).name

    def _variant_writer(self, union: UnionType, variant: UnionVariant) -> Function:
        datatype = self._type(variant)
        return Function(
            name=f"_write_{self.prefix(union)}_{variant.discriminator}",
            parameters=[Parameter(name="obj", var_type=datatype)],
            response="Any",
            code=CodeBlock(
                code=f'return TypeAdapter({datatype}).dump_python(obj, mode="json", by_alias=True)'
            ),
        )

    def _variant_reader(self, union: UnionType, variant: UnionVariant) -> Function:
        datatype = self._type(variant)
        return Function(
            name=f"_read_{self.prefix(union)}_{variant.discriminator}",
            parameters=[Parameter(name="data", var_type=Variable(value="Any"))],
            response=str(datatype),
            code=CodeBlock(code=f"return TypeAdapter({datatype}).validate_python(data)"),
        )

    def _reader(self, union: UnionType, variants: List[UnionVariant]) -> Function:
        prefix = self.prefix(union)

        # Уже разобранное значение возвращается как есть; dict - это payload
        passthrough = [
            c for c in dict.fromkeys(self.resolver.runtime_class(v.ref, qualified=False) for v in variants)
            if c != "dict"
        ]

        checks = []
        for variant in variants:
            attempt = CodeBlock.join(
                [
                    "try:",
                    indent(
                        f"return _read_{prefix}_{variant.discriminator}"
                        f'(data["{variant.discriminator}"])'
                    ),
                    "except ValidationError as e:",
                    indent("errors.append(e)"),
                ]
            )
            checks.append(CodeBlock.nested(f'if "{variant.discriminator}" in data:', attempt))

        code = []
        if passthrough:
            classes = passthrough[0] if len(passthrough) == 1 else f"({', '.join(passthrough)})"
            code.append(
                CodeBlock.nested(
                    f"if isinstance(data, {classes}) and not isinstance(data, dict):",
                    "return data",
                )
            )
        code.append("errors = []")
        code.append(CodeBlock.nested("if isinstance(data, dict):", CodeBlock.join(checks)))
        code.append(
            f'raise ValueError(f"Invalid json for union[{union.name}]: {{data!r}} {{errors}}")'
        )

        return Function(
            name=self.read_name(union),
            parameters=[Parameter(name="data", var_type=Variable(value="Any"))],
            response=str(Variable.wrap("Union", *[self._type(v) for v in variants])),
            description=(
                f"Чтение union[{union.name}], варианты в порядке проверки: "
                + ", ".join(v.discriminator for v in variants)
            ),
            code=CodeBlock.join(code),
        )

    def _writer(self, union: UnionType, variants: List[UnionVariant]) -> Function:
        prefix = self.prefix(union)

        # enum и модели раньше примитивов (enum наследует str), bool раньше int,
        # datetime раньше date
        ordered = sorted(
            variants,
            key=lambda v: (
                v.ref.kind == TypeKind.PRIMITIVE,
                self.resolver.runtime_class(v.ref, qualified=False) not in _SUBCLASSES,
            ),
        )
        branches = [
            CodeBlock.nested(
                f"if isinstance(obj, {self.resolver.runtime_class(v.ref, qualified=False)}):",
                f'return {{"{v.discriminator}": _write_{prefix}_{v.discriminator}(obj)}}',
            )
            for v in ordered
        ]
        branches.append(
            CodeBlock(
                code=(
                    f'raise TypeError(f"Unsupported type[{{type(obj).__name__}}] '
                    f'for union[{union.name}]")'
                )
            )
        )

        return Function(
            name=self.write_name(union),
            parameters=[
                Parameter(
                    name="obj",
                    var_type=Variable.wrap("Union", *[self._type(v) for v in variants]),
                )
            ],
            response="Dict[str, Any]",
            code=CodeBlock.join(branches),
        )
