"""Утилиты для преобразования имен"""

import keyword
import re

_IRREGULAR_PLURALS = {
    "child": "children",
    "echo": "echoes",
    "hero": "heroes",
    "person": "people",
    "potato": "potatoes",
}


def snake_case(name: str) -> str:
    """
    Приводит произвольный идентификатор к snake_case.

    Дефисы, пробелы и точки считаются разделителями, CamelCase
    разбивается по границам слов, аббревиатуры сохраняются как одно слово.

    Examples:
        >>> snake_case("GuestUser")
        'guest_user'
        >>> snake_case("arrays-only")
        'arrays_only'
        >>> snake_case("HTTPServer")
        'http_server'
    """
    name = re.sub(r"[^A-Za-z0-9_]+", "_", name.strip())

    # HTTPServer -> HTTP_Server, GuestUser -> Guest_User
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    # orgKey -> org_Key
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    s3 = re.sub("_+", "_", s2)
    return s3.strip("_").lower()


def _capitalize(part: str) -> str:
    # Явно помеченные аббревиатуры (ID, HTTP) остаются как есть
    if part.isupper():
        return part
    return part[:1].upper() + part[1:]


def camel_case(name: str) -> str:
    """
    Приводит snake_case к lowerCamelCase.

    Examples:
        >>> camel_case("get_by_guid")
        'getByGuid'
        >>> camel_case("get_by_ID")
        'getByID'
    """
    parts = [p for p in name.split("_") if p]
    if not parts:
        return ""

    return parts[0].lower() + "".join(_capitalize(p) for p in parts[1:])


def pascal_case(name: str) -> str:
    """Правильное PascalCase преобразование"""
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", name) if p]
    return "".join(_capitalize(p) for p in parts)


def pluralize(word: str) -> str:
    """Множественное число для английского слова в единственном числе"""
    if not word:
        return word

    lower = word.lower()
    if lower in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[lower]

    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"

    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"

    return word + "s"


def safe_name(name: str) -> str:
    """Допустимый идентификатор Python"""
    if not name:
        return "_"

    if name[0].isdigit():
        name = "_" + name

    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        return name + "_"

    return name


def indent(text: str, level: int = 1) -> str:
    """Отступ в 4 пробела на уровень для всех непустых строк"""
    prefix = "    " * level
    return "\n".join(prefix + line if line.strip() else "" for line in text.split("\n"))
