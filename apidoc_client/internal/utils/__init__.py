"""Утилиты для генератора"""

from .text import (
    camel_case,
    indent,
    pascal_case,
    pluralize,
    safe_name,
    snake_case,
)

__all__ = [
    "camel_case",
    "indent",
    "pascal_case",
    "pluralize",
    "safe_name",
    "snake_case",
]
