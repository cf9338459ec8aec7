"""
Ошибки генерации
"""

from typing import Optional


class ConfigurationError(ValueError):
    """Фатальная ошибка описания сервиса - генерация прерывается целиком"""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        operation: Optional[str] = None,
        code: Optional[int] = None,
    ):
        self.message = message
        self.resource = resource
        self.operation = operation
        self.code = code
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.resource:
            location.append(f"resource[{self.resource}]")
        if self.operation:
            location.append(f"operation[{self.operation}]")
        if self.code is not None:
            location.append(f"response[{self.code}]")

        if not location:
            return self.message

        return f"{' '.join(location)}: {self.message}"
