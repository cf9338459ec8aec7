class Templates:
    """Шаблоны для генерации файлов"""

    common_imports = """import asyncio
import dataclasses
import json
import logging
import shlex
import urllib.parse
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

from aiohttp import ClientSession, ClientTimeout
from pydantic import TypeAdapter, ValidationError"""

    aiohttp_common = """@dataclasses.dataclass(frozen=True)
class Response:
    \"\"\"Ответ сервера: код, тело и заголовки\"\"\"

    status: int
    body: str
    headers: Dict[str, str] = dataclasses.field(default_factory=dict)


def parse_json(class_name: str, response: Response, tp: Any) -> Any:
    \"\"\"Разбор тела ответа в тип tp; ошибка разбора - errors.InvalidJson\"\"\"
    from . import errors

    try:
        return TypeAdapter(tp).validate_json(response.body or "null")
    except ValidationError as e:
        raise errors.InvalidJson(
            response.status, f"Invalid json for {class_name}: {e}"
        ) from e


def to_json(tp: Any, value: Any) -> Any:
    return TypeAdapter(tp).dump_python(value, mode="json", by_alias=True)


def _plain(value: Any) -> str:
    dumped = TypeAdapter(Any).dump_python(value, mode="json")
    if isinstance(dumped, bool):
        return "true" if dumped else "false"
    return str(dumped)


def query_pairs(name: str, value: Any) -> List[Tuple[str, str]]:
    \"\"\"Пары строки запроса: None пропускается, список повторяет ключ\"\"\"
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        return [pair for item in value for pair in query_pairs(name, item)]

    return [(name, _plain(value))]


def quote_path(value: Any) -> str:
    return urllib.parse.quote(_plain(value), safe="")


class AiohttpClient:
    \"\"\"HTTP клиент на базе aiohttp\"\"\"

    def __init__(self):
        self._session: Optional[ClientSession] = None
        self._api_url: Optional[str] = None
        self._base_headers: Dict[str, str] = dict(DEFAULT_HEADERS)
        self._temp_headers: Dict[str, str] = {}
        self._timeout: int = 30
        self._session_dirty = False
        self._session_lock = asyncio.Lock()

    @property
    def headers(self) -> Dict[str, str]:
        \"\"\"Получение текущих заголовков\"\"\"
        return {**self._base_headers, **self._temp_headers}

    @headers.setter
    def headers(self, value: Dict[str, str]):
        self._base_headers = {**DEFAULT_HEADERS, **(value or {})}
        self._session_dirty = True

    def update_headers(self, **headers):
        self._base_headers.update(headers)
        self._session_dirty = True
        return self

    @asynccontextmanager
    async def with_headers(self, **temp_headers):
        \"\"\"Контекстный менеджер для временных заголовков\"\"\"
        old_temp = self._temp_headers.copy()
        try:
            self._temp_headers.update(temp_headers)
            self._session_dirty = True
            yield self
        finally:
            self._temp_headers = old_temp
            self._session_dirty = True

    def set_auth_token(self, token: str):
        \"\"\"Установка Bearer токена авторизации\"\"\"
        return self.update_headers(Authorization=f"Bearer {token}")

    async def _ensure_session(self) -> ClientSession:
        async with self._session_lock:
            if (
                self._session is not None
                and not self._session.closed
                and not self._session_dirty
            ):
                return self._session

            if self._session and not self._session.closed:
                await self._session.close()

            self._session = ClientSession(
                timeout=ClientTimeout(total=self._timeout),
                headers=self.headers,
                trust_env=True,
            )
            self._session_dirty = False

        return self._session

    def _curl(
        self,
        method: str,
        url: str,
        query_parameters: Optional[List[Tuple[str, str]]],
        body: Any,
    ) -> str:
        if query_parameters:
            url = f"{url}?{urllib.parse.urlencode(query_parameters)}"

        parts = ["curl", "-X", method]
        for name, value in self.headers.items():
            parts.extend(["-H", shlex.quote(f"{name}: {value}")])
        if body is not None:
            parts.extend(["-d", shlex.quote(json.dumps(body))])
        parts.append(shlex.quote(url))

        return " ".join(parts)

    async def _execute_request(
        self,
        method: str,
        path: str,
        query_parameters: Optional[List[Tuple[str, str]]] = None,
        body: Any = None,
    ) -> Response:
        if method == "PATCH" and not SUPPORTS_PATCH:
            raise NotImplementedError("PATCH method is not supported by this client")

        if method not in DISPATCH:
            raise ValueError(f"Unsupported HTTP method {method}")

        if not self._api_url:
            raise ValueError("API URL is empty, call initialize() first")

        url = f"{self._api_url}{path}"
        logger.info(self._curl(method, url, query_parameters, body))

        session = await self._ensure_session()
        request = getattr(session, DISPATCH[method])

        kwargs: Dict[str, Any] = {}
        if query_parameters:
            kwargs["params"] = query_parameters
        if body is not None:
            kwargs["json"] = body

        async with request(url, **kwargs) as response:
            logger.debug(f"Response status: {response.status}")
            return Response(
                status=response.status,
                body=await response.text(),
                headers=dict(response.headers),
            )

    def initialize(
        self,
        api_url: str = BASE_URL,
        headers: Dict[str, str] = None,
        timeout: int = 30,
    ) -> "AiohttpClient":
        \"\"\"Инициализация клиента с настройками\"\"\"
        if not api_url:
            raise ValueError("API URL is required")

        self._api_url = str(api_url).rstrip("/")
        if headers:
            self.headers = headers
        self._timeout = int(timeout) if timeout else 30
        self._session_dirty = True

        return self

    async def close(self):
        \"\"\"Закрытие клиента и освобождение ресурсов\"\"\"
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()"""

    client_imports = """import datetime
import decimal
import uuid
from typing import Any, Dict, List, Optional, Union

from simple_singleton import Singleton

from . import common, errors, interfaces, models
from .common import AiohttpClient"""

    interfaces_imports = """import abc
import datetime
import decimal
import uuid
from typing import Any, Dict, List, Optional, Union

from . import models"""

    errors_imports = """import datetime
import decimal
import functools
import uuid
from typing import Any, Dict, List, Optional, Union

from . import common, models"""

    models_imports = """from __future__ import annotations

import datetime
import decimal
import uuid
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    TypeAdapter,
    ValidationError,
)"""



templates = Templates()
