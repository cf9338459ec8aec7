from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

from pydantic import BaseModel, field_validator

from ..utils.text import indent


def _escape_doc(text: str) -> str:
    return text.strip().replace("\\", "\\\\").replace('"""', "'''")


class Variable(BaseModel):
    """Типовое выражение: имя или обертка вида Wrap[a, b]"""

    value: list[Union["Variable", str]] = []
    wrap_name: Optional[str] = None

    @field_validator("value", mode="before")
    def value_check(cls, value):
        _value = value

        if not isinstance(value, list):
            _value = [value]

        return _value

    def __str__(self):
        _value = ", ".join([_.__str__() for _ in self.value])

        if self.wrap_name is None:
            return _value

        return f"{self.wrap_name}[{_value}]"

    def names(self) -> Iterator[str]:
        for _ in self.value:
            if isinstance(_, Variable):
                yield from _.names()
            else:
                yield _

    @classmethod
    def wrap(cls, wrap_name: str, *value: Union["Variable", str]) -> "Variable":
        return cls(value=list(value), wrap_name=wrap_name)


Variable.model_rebuild()


class Parameter(BaseModel):
    name: str

    default: Optional[str] = None
    var_type: Optional[Variable] = None
    description: Optional[str] = None

    def __str__(self):
        return (
            self.name
            + (f": {self.var_type}" if self.var_type else "")
            + (f" = {self.default}" if self.default is not None else "")
        )


class CodeBlock(BaseModel):
    order: int = 0
    code: str = "pass"

    def __str__(self):
        return self.code.replace("\t", "    ")

    @classmethod
    def join(cls, parts: List[Union["CodeBlock", str]], separator: str = "\n") -> "CodeBlock":
        """Склейка непустых фрагментов"""
        return cls(code=separator.join(str(p) for p in parts if str(p)))

    @classmethod
    def nested(cls, header: str, body: Union["CodeBlock", str]) -> "CodeBlock":
        """Блок вида `header:` с телом на уровень глубже"""
        return cls(code=f"{header}\n{indent(str(body))}")


@dataclass
class EndpointError:
    """Модель ошибки эндпоинта"""

    error_class: str
    description: str


class Function(BaseModel):
    name: str
    parameters: list[Parameter] = []
    response: str = "None"

    async_def: bool = False
    decorators: list[str] = []

    description: Optional[str] = None
    errors: List[EndpointError] = []

    code: Optional[CodeBlock] = CodeBlock(order=0, code="pass")

    order: int = 0

    def __str__(self) -> str:
        # Параметры со значением по умолчанию идут последними
        parameters = sorted(self.parameters, key=lambda x: x.default is not None)

        if len(parameters) > 1:
            signature = "(\n" + ",\n".join(indent(str(p)) for p in parameters) + "\n)"
        else:
            signature = "(" + ", ".join(map(str, parameters)) + ")"

        header = (
            f"{'async ' if self.async_def else ''}def {self.name}{signature}"
            f" -> {self.response}:"
        )

        body = "\n\n".join(
            filter(bool, [self._generate_docstring(), str(self.code) if self.code else ""])
        )

        return "\n".join(self.decorators + [header, indent(body or "pass")])

    def _generate_docstring(self) -> str:
        """Генерация docstring на основе описания, параметров и ошибок"""
        if not self.description and not self.errors:
            return ""

        sections = []

        described = [p for p in self.parameters if p.description]
        if described:
            sections.append(
                ["Args:"]
                + [f"    {p.name} ({p.var_type}): {p.description}" for p in described]
            )

        if self.response and self.response != "None":
            sections.append(["Returns:", f"    {self.response}"])

        if self.errors:
            sections.append(
                ["Raises:"] + [f"    {e.error_class}: {e.description}" for e in self.errors]
            )

        # Без описания docstring начинается сразу с первой секции
        parts = ([_escape_doc(self.description)] if self.description else []) + [
            "\n".join(s) for s in sections
        ]
        return '"""' + "\n\n".join(parts) + '\n"""'

    def set_code_block(self, code_block: Union["CodeBlock", str]) -> "Function":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block)

        self.code = code_block
        return self


class Class(BaseModel):
    name: str

    functions: dict[str, "Function"] = {}
    code_blocks: list["CodeBlock"] = []
    parameters: list[Parameter] = []

    inherits: list[str] = []
    description: Optional[str] = None

    order: int = 0

    def __str__(self) -> str:
        members = [f'"""{_escape_doc(self.description)}"""'] if self.description else []

        if self.parameters:
            members.append("\n".join(map(str, self.parameters)))

        members.extend(
            str(m)
            for m in sorted(
                self.code_blocks + list(self.functions.values()),
                key=lambda x: x.order,
                reverse=True,
            )
        )

        return (
            f"class {self.name}"
            + (f"({', '.join(self.inherits)})" if self.inherits else "")
            + ":\n"
            + indent("\n\n".join(members) if members else "pass")
        )

    def add_function(self, function: Union["Function", str], **kwargs) -> "Function":
        if isinstance(function, str):
            function = Function(name=function, **kwargs)

        self.functions[function.name] = function

        return function

    def add_code_block(self, code_block: Union["CodeBlock", str], **kwargs) -> "Class":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class CodeFile(BaseModel):
    file_name: str

    imports: list[str] = []
    functions: dict[str, "Function"] = {}
    classes: dict[str, "Class"] = {}
    code_blocks: list["CodeBlock"] = []

    def __str__(self):
        return (
            "\n\n\n".join(
                filter(
                    bool,
                    [
                        ("\n".join(self.imports) if self.imports else ""),
                        (
                            "\n\n\n".join(
                                map(
                                    lambda f: str(f),
                                    sorted(
                                        (
                                            self.code_blocks
                                            + list(self.functions.values())
                                            + list(self.classes.values())
                                        ),
                                        key=lambda x: x.order,
                                        reverse=True,
                                    ),
                                )
                            )
                        ),
                    ],
                )
            ).replace("\t", "    ")
            + "\n"
        )

    def add_function(self, function: Union["Function", str], **kwargs) -> "Function":
        if isinstance(function, str):
            function = Function(name=function, **kwargs)

        self.functions[function.name] = function

        return function

    def add_class(self, cls: Union["Class", str], **kwargs) -> "Class":
        if isinstance(cls, str):
            cls = Class(name=cls, **kwargs)

        self.classes[cls.name] = cls

        return cls

    def add_code_block(self, code_block: Union["CodeBlock", str], **kwargs) -> "CodeFile":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: Union["CodeFile", str], **kwargs) -> "CodeFile":
        code_file = file_name
        if isinstance(file_name, str):
            code_file = CodeFile(file_name=file_name, **kwargs)

        self.files.append(code_file)
        return code_file

    def get_file(self, file_name: str) -> Optional[CodeFile]:
        for code_file in self.files:
            if code_file.file_name == file_name:
                return code_file
        return None
