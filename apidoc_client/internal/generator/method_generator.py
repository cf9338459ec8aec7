"""
Генерация методов клиента: запрос, таблица разбора кодов ответа
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..types.models import Class, CodeBlock, EndpointError, Function, Parameter, Variable
from ..types.service import Method, Resource, Service
from ..types.settings import GeneratorSettings
from ..types.type_resolver import TypeResolver
from ..utils.text import indent, pascal_case, safe_name, snake_case
from .error_generator import FAILED_REQUEST, error_class_name
from .operations import OperationView, operation_views

logger = logging.getLogger(__name__)

# Атрибуты AiohttpClient, которые не должны перекрываться ресурсами
_CLIENT_ATTRIBUTES = {
    "close",
    "headers",
    "initialize",
    "set_auth_token",
    "update_headers",
    "with_headers",
}


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    SUCCESS_UNIT = "success_unit"
    SUCCESS_ABSENT = "success_absent"
    FAILURE = "failure"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    code: Optional[int] = None
    datatype: Optional[str] = None
    error_class: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class DispatchTable:
    """Ветки разбора ответа в порядке проверки и ветка по умолчанию"""

    branches: Tuple[Outcome, ...]
    expected_codes: Tuple[int, ...]
    fallback: Outcome = Outcome(OutcomeKind.UNEXPECTED)

    def classify(self, code: int) -> Outcome:
        for branch in self.branches:
            if branch.code == code:
                return branch
        return self.fallback

    @property
    def has_absent(self) -> bool:
        return any(b.kind == OutcomeKind.SUCCESS_ABSENT for b in self.branches)


@dataclass(frozen=True)
class ClientMethod:
    """Один метод клиента; интерфейс и реализация - два вида одного значения"""

    name: str
    arguments: Tuple[Parameter, ...]
    return_type: str
    method_call: CodeBlock
    dispatch: DispatchTable
    response: CodeBlock
    comments: Optional[str] = None
    errors: Tuple[EndpointError, ...] = field(default_factory=tuple)

    def _function(self, **kwargs) -> Function:
        return Function(
            name=self.name,
            parameters=[Parameter(name="self")] + list(self.arguments),
            response=self.return_type,
            async_def=True,
            description=self.comments,
            errors=list(self.errors),
            **kwargs,
        )

    def interface(self) -> Function:
        return self._function(decorators=["@abc.abstractmethod"], code=None)

    def implementation(self) -> Function:
        return self._function(code=CodeBlock.join([self.method_call, self.response]))


class ClientMethodGenerator:
    """Генератор методов клиента для ресурсов сервиса"""

    def __init__(self, service: Service, settings: GeneratorSettings, resolver: TypeResolver = None):
        self.service = service
        self.settings = settings
        self.resolver = resolver or TypeResolver(service, settings)

    @staticmethod
    def trait_name(resource: Resource) -> str:
        return pascal_case(resource.plural)

    def object_name(self, resource: Resource) -> str:
        return self.trait_name(resource) + "Endpoints"

    @staticmethod
    def accessor_name(resource: Resource) -> str:
        name = safe_name(snake_case(resource.plural))
        return name + "_" if name in _CLIENT_ATTRIBUTES else name

    def traits(self) -> List[Class]:
        """Абстрактный интерфейс на каждый ресурс"""
        return [
            Class(
                name=self.trait_name(resource),
                inherits=["abc.ABC"],
                description=resource.description,
                functions={m.name: m.interface() for m in self.methods(resource)},
            )
            for resource in self.service.sorted_resources()
        ]

    def objects(self) -> List[Class]:
        """Реализация интерфейса на каждый ресурс"""
        objects = []

        for resource in self.service.sorted_resources():
            cls = Class(
                name=self.object_name(resource),
                inherits=[f"interfaces.{self.trait_name(resource)}"],
            )
            cls.add_function(
                "__init__",
                parameters=[
                    Parameter(name="self"),
                    Parameter(name="client", var_type=Variable(value='"ApiClient"')),
                ],
                code=CodeBlock(code="self._client = client"),
            )
            for method in self.methods(resource):
                cls.add_function(method.implementation())

            objects.append(cls)

        return objects

    def accessors(self) -> List[str]:
        return [
            f'self.{self.accessor_name(r)}: "{self.object_name(r)}" = {self.object_name(r)}(self)'
            for r in self.service.sorted_resources()
        ]

    def methods(self, resource: Resource) -> List[ClientMethod]:
        return [self.method(view) for view in operation_views(resource, self.resolver)]

    def method(self, view: OperationView) -> ClientMethod:
        if view.operation.method == Method.PATCH and not self.settings.supports_patch:
            logger.warning(
                "%s: PATCH is not supported by dialect %s, the method will raise at runtime",
                view.operation.label,
                self.settings.name,
            )

        dispatch = self.dispatch_table(view)

        return ClientMethod(
            name=view.method_name,
            arguments=tuple(
                Parameter(
                    name=a.arg_name,
                    var_type=a.type.name,
                    default=a.default,
                    description=a.description,
                )
                for a in view.arguments
            ),
            return_type=self.return_type(view, dispatch),
            method_call=self.method_call(view),
            dispatch=dispatch,
            response=self.render_dispatch(dispatch),
            comments=view.operation.description or view.operation.label,
            errors=tuple(self._documented_errors(dispatch)),
        )

    def dispatch_table(self, view: OperationView) -> DispatchTable:
        responses = view.operation.responses

        optional = [r for r in responses if r.is_success and r.optional]
        if len(optional) > 1:
            raise view.error(
                "At most one success response may be optional", optional[1].code
            )
        option = optional[0] if optional else None

        branches = []
        seen = set()
        for response in responses:
            if option is not None and response.is_not_found:
                # 404 становится одной веткой отсутствия значения в конце
                continue

            if response.code in seen:
                logger.warning(
                    "%s: duplicate response code %d ignored",
                    view.operation.label,
                    response.code,
                )
                continue
            seen.add(response.code)

            branches.append(self._outcome(view, response))

        if option is not None:
            nil_value = "None"
            if not option.is_unit:
                nil_value = self.resolver.resolve(view.resolve(option.type, option.code)).nil_value
            branches.append(Outcome(OutcomeKind.SUCCESS_ABSENT, 404, value=nil_value))

        expected = {r.code for r in responses} | ({404} if option is not None else set())

        return DispatchTable(branches=tuple(branches), expected_codes=tuple(sorted(expected)))

    def _outcome(self, view: OperationView, response) -> Outcome:
        errors = self.settings.errors_namespace

        if response.is_success:
            if response.is_unit:
                return Outcome(OutcomeKind.SUCCESS_UNIT, response.code, value="None")

            ref = view.resolve(response.type, response.code)
            return Outcome(
                OutcomeKind.SUCCESS,
                response.code,
                datatype=str(self.resolver.resolve(ref)),
            )

        if response.is_unit:
            return Outcome(OutcomeKind.FAILURE, response.code, error_class=f"{errors}.{FAILED_REQUEST}")

        ref = view.resolve(response.type, response.code)
        return Outcome(
            OutcomeKind.FAILURE,
            response.code,
            datatype=str(self.resolver.resolve(ref)),
            error_class=f"{errors}.{error_class_name(ref)}",
        )

    def return_type(self, view: OperationView, dispatch: DispatchTable) -> str:
        types = []
        for branch in dispatch.branches:
            if branch.kind == OutcomeKind.SUCCESS and branch.datatype not in types:
                types.append(branch.datatype)

        has_unit = any(b.kind == OutcomeKind.SUCCESS_UNIT for b in dispatch.branches)

        if not types:
            return "None"

        result = types[0] if len(types) == 1 else str(Variable.wrap("Union", *types))
        if has_unit or dispatch.has_absent:
            return str(Variable.wrap("Optional", result))
        return result

    def method_call(self, view: OperationView) -> CodeBlock:
        code = []
        args = []

        if view.body is not None:
            code.append(f"payload = common.to_json({view.body.type}, {view.body.arg_name})")
            args.append("body=payload")
        elif view.form_parameters:
            fields = [
                f'"{p.name}": common.to_json({p.type}, {p.arg_name}),'
                for p in view.form_parameters
            ]
            code.append("payload = {\n" + indent("\n".join(fields)) + "\n}")
            args.append("body=payload")

        if view.query_parameters:
            pairs = [
                f'*common.query_pairs("{p.name}", {p.arg_name}),'
                for p in view.query_parameters
            ]
            code.append("query_parameters = [\n" + indent("\n".join(pairs)) + "\n]")
            args.append("query_parameters=query_parameters")

        call = (
            f"{self.settings.response_variable} = await self._client._execute_request("
            + ", ".join([f'"{view.operation.method.value}"', self.path_expression(view)] + args)
            + ")"
        )

        return CodeBlock.join(code + [call], separator="\n\n")

    @staticmethod
    def path_expression(view: OperationView) -> str:
        if not view.placeholders:
            return f'"{view.operation.path}"'

        arguments = {p.name: p.arg_name for p in view.path_parameters}
        segments = [
            "{common.quote_path(" + arguments[s[1:]] + ")}" if s.startswith(":") else s
            for s in view.operation.path.split("/")
        ]
        return 'f"' + "/".join(segments) + '"'

    def render_dispatch(self, dispatch: DispatchTable) -> CodeBlock:
        status = self.settings.status_of()
        blocks = []

        for branch in dispatch.branches:
            blocks.append(CodeBlock.nested(f"if {status} == {branch.code}:", self._render_outcome(branch)))

        expected = ", ".join(map(str, dispatch.expected_codes))
        blocks.append(
            CodeBlock(
                code=(
                    f"raise {self.settings.errors_namespace}.{FAILED_REQUEST}({status}, "
                    f'f"Unsupported response code[{{{status}}}]. Expected: {expected}")'
                )
            )
        )

        return CodeBlock.join(blocks)

    def _render_outcome(self, outcome: Outcome) -> str:
        r = self.settings.response_variable

        if outcome.kind == OutcomeKind.SUCCESS:
            return f'return common.parse_json("{outcome.datatype}", {r}, {outcome.datatype})'

        if outcome.kind in (OutcomeKind.SUCCESS_UNIT, OutcomeKind.SUCCESS_ABSENT):
            return f"return {outcome.value}"

        if outcome.datatype is None:
            return f"raise {outcome.error_class}({self.settings.status_of()}, {self.settings.body_of()})"

        return f"raise {outcome.error_class}({r})"

    def _documented_errors(self, dispatch: DispatchTable) -> List[EndpointError]:
        errors = [
            EndpointError(error_class=b.error_class, description=f"HTTP {b.code}")
            for b in dispatch.branches
            if b.kind == OutcomeKind.FAILURE
        ]
        errors.append(
            EndpointError(
                error_class=f"{self.settings.errors_namespace}.{FAILED_REQUEST}",
                description="unexpected response code, expected: "
                + ", ".join(map(str, dispatch.expected_codes)),
            )
        )
        return errors
