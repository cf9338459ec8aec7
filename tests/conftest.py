import copy
import importlib
import sys
import uuid

import pytest

from apidoc_client.internal.parser.service_json import ServiceParser
from apidoc_client.internal.types.settings import Dialects
from apidoc_client.internal.types.type_resolver import TypeResolver

REFERENCE_API = {
    "name": "apidoc-reference-api",
    "base_url": "http://localhost:9000",
    "description": "Reference API",
    "headers": {"X-Api-Version": "1.0"},
    "enums": {
        "age_group": {"values": [{"name": "youth"}, {"name": "adult"}]},
    },
    "models": {
        "error": {
            "fields": [
                {"name": "code", "type": "string"},
                {"name": "message", "type": "string"},
            ]
        },
        "user": {
            "fields": [
                {"name": "guid", "type": "uuid"},
                {"name": "email", "type": "string"},
                {"name": "ageGroup", "type": "age_group", "required": False},
            ]
        },
        "registered_user": {
            "fields": [
                {"name": "guid", "type": "uuid"},
                {"name": "email", "type": "string"},
            ]
        },
        "guest_user": {"fields": [{"name": "sessionId", "type": "string"}]},
        "echo": {"fields": [{"name": "value", "type": "string"}]},
        "group": {
            "fields": [
                {"name": "name", "type": "string"},
                {"name": "members", "type": "[visitor]", "required": False},
            ]
        },
    },
    "unions": {
        "visitor": {
            "types": [
                {"type": "registered_user"},
                {"type": "guest_user"},
                {"type": "uuid"},
            ]
        },
    },
    "resources": {
        "user": {
            "operations": [
                {
                    "method": "GET",
                    "parameters": [
                        {"name": "guid", "type": "uuid", "required": False},
                        {"name": "email", "required": False},
                        {"name": "limit", "type": "integer", "default": 25},
                    ],
                    "responses": {"200": {"type": "[user]"}},
                },
                {
                    "method": "GET",
                    "path": "/:guid",
                    "parameters": [{"name": "guid", "type": "uuid"}],
                    "responses": {"200": {"type": "user"}, "404": {"type": "unit"}},
                },
                {
                    "method": "POST",
                    "body": {"type": "user"},
                    "responses": {"201": {"type": "user"}, "409": {"type": "[error]"}},
                },
                {
                    "method": "PUT",
                    "path": "/:guid",
                    "body": "user",
                    "parameters": [{"name": "guid", "type": "uuid"}],
                    "responses": {"200": {"type": "user"}, "422": {"type": "[error]"}},
                },
                {
                    "method": "DELETE",
                    "path": "/:guid",
                    "parameters": [{"name": "guid", "type": "uuid"}],
                    "responses": {"204": {"type": "unit"}, "404": {"type": "unit"}},
                },
            ]
        },
        "membership_request": {
            "path": "/membership_requests",
            "operations": [
                {
                    "method": "POST",
                    "path": "/:guid/accept",
                    "parameters": [{"name": "guid", "type": "uuid"}],
                    "responses": {"204": {"type": "unit"}},
                },
            ],
        },
        "echo": {
            "operations": [
                {
                    "method": "GET",
                    "parameters": [
                        {"name": "foo", "required": False},
                        {"name": "optional_messages", "type": "[string]", "required": False},
                        {"name": "required_messages", "type": "[string]"},
                    ],
                    "responses": {"200": {"type": "echo"}},
                },
                {
                    "method": "GET",
                    "path": "/arrays-only",
                    "parameters": [{"name": "values", "type": "[string]"}],
                    "responses": {"200": {"type": "[echo]"}},
                },
            ]
        },
        "visitor": {
            "operations": [
                {
                    "method": "GET",
                    "path": "/:guid",
                    "parameters": [{"name": "guid", "type": "uuid"}],
                    "responses": {"200": {"type": "visitor"}},
                },
                {
                    "method": "POST",
                    "body": "visitor",
                    "responses": {"201": {"type": "visitor"}},
                },
            ]
        },
        "service": {
            "path": "",
            "operations": [
                {
                    "method": "GET",
                    "path": "/:orgKey",
                    "responses": {"200": {"type": "[string]"}},
                },
            ],
        },
    },
}


@pytest.fixture
def reference_document():
    return copy.deepcopy(REFERENCE_API)


@pytest.fixture
def reference_service(reference_document):
    return ServiceParser(reference_document).service()


@pytest.fixture
def reference_resolver(reference_service):
    return TypeResolver(reference_service, Dialects.AIOHTTP)


@pytest.fixture
def parse_service():
    """Service из сокращенного JSON описания"""

    def _parse(**document):
        document.setdefault("name", "test")
        return ServiceParser(document).service()

    return _parse


@pytest.fixture
def import_project(tmp_path):
    """Запись сгенерированного проекта на диск и импорт как пакета"""
    imported = []
    sys.path.insert(0, str(tmp_path))

    def _import(project):
        name = f"generated_{uuid.uuid4().hex[:8]}"
        target = tmp_path / name

        for code_file in project.files:
            path = target / code_file.file_name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(str(code_file), encoding="utf-8")

        importlib.invalidate_caches()
        imported.append(name)
        return importlib.import_module(name)

    yield _import

    sys.path.remove(str(tmp_path))
    for name in imported:
        for module in [m for m in sys.modules if m == name or m.startswith(name + ".")]:
            del sys.modules[module]
