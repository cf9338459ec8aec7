"""
Интеграционные тесты: генерация, импорт и вызовы сгенерированного клиента
"""

import ast
import datetime
import json
import os
import sys
import uuid

import pytest

from apidoc_client import cli
from apidoc_client.config import ApidocConfig
from apidoc_client.generator import ApiClientGenerator
from apidoc_client.internal.types.settings import Dialects

GUID = uuid.UUID("f5a4f5c6-0b0c-4c2f-8f1e-0a6f1a3a6c11")
USER = {"guid": str(GUID), "email": "a@example.com", "ageGroup": "youth"}


class FakeTransport:
    """Подмена HTTP запроса: записывает вызовы и отдает заготовленные ответы"""

    def __init__(self, package):
        self.package = package
        self.calls = []
        self.responses = []

    def reply(self, status, body=None):
        text = body if body is None or isinstance(body, str) else json.dumps(body)
        self.responses.append(self.package.common.Response(status=status, body=text or ""))

    async def __call__(self, method, path, query_parameters=None, body=None):
        self.calls.append((method, path, query_parameters, body))
        return self.responses.pop(0)


@pytest.fixture
def package(reference_document, import_project):
    return import_project(ApiClientGenerator(reference_document).generate())


@pytest.fixture
def client(package):
    api = package.ApiClient()
    transport = FakeTransport(package)
    api._execute_request = transport
    return api, transport


class TestGeneratedFiles:
    """Состав и синтаксис сгенерированных файлов"""

    def test_file_names(self, reference_document):
        project = ApiClientGenerator(reference_document, source_url="service.json").generate()

        assert [f.file_name for f in project.files] == [
            "common.py",
            "apidoc.toml",
            "models.py",
            "errors.py",
            "interfaces.py",
            "client.py",
            "routes",
            "__init__.py",
        ]

    def test_no_config_without_source(self, reference_document):
        project = ApiClientGenerator(reference_document).generate()

        assert project.get_file("apidoc.toml") is None

    def test_python_files_parse(self, reference_document):
        project = ApiClientGenerator(reference_document).generate()

        for code_file in project.files:
            if code_file.file_name.endswith(".py"):
                ast.parse(str(code_file), filename=code_file.file_name)

    def test_models_layout(self, reference_document):
        code = str(ApiClientGenerator(reference_document).generate().get_file("models.py"))

        assert code.startswith("from __future__ import annotations\n")
        assert code.index("class AgeGroup(str, Enum):") < code.index("class User(BaseModel):")
        assert code.index("class Group(BaseModel):") < code.index("def read_visitor(")
        assert code.index("Visitor = Annotated[") < code.index("Group.model_rebuild()")

    def test_constants(self, reference_document):
        code = str(ApiClientGenerator(reference_document).generate().get_file("common.py"))

        assert "BASE_URL: Optional[str] = 'http://localhost:9000'" in code
        assert "    'X-Api-Version': '1.0',\n" in code
        assert "SUPPORTS_PATCH = True" in code
        assert code.index("DISPATCH: Dict[str, str]") < code.index("class AiohttpClient:")

    def test_config_file(self, reference_document, tmp_path):
        project = ApiClientGenerator(
            reference_document, source_url="service.json", dirname="out"
        ).generate()
        config_path = tmp_path / "apidoc.toml"
        config_path.write_text(str(project.get_file("apidoc.toml")), encoding="utf-8")

        config = ApidocConfig.from_file(str(config_path))

        assert config.url == "service.json"
        assert config.dirname == "out"
        assert config.dialect == "aiohttp"


class TestImportedPackage:
    def test_client_accessors(self, package):
        api = package.ApiClient()

        assert api is package.ApiClient()
        assert isinstance(api.users, package.client.UsersEndpoints)
        assert isinstance(api.users, package.interfaces.Users)
        assert isinstance(api.membership_requests, package.interfaces.MembershipRequests)
        assert package.__all__ == ["ApiClient", "errors", "models"]

    def test_interfaces_are_abstract(self, package):
        with pytest.raises(TypeError):
            package.interfaces.Users()

    def test_model_aliases(self, package):
        user = package.models.User.model_validate(USER)

        assert user.age_group is package.models.AgeGroup.YOUTH
        assert user.model_dump(mode="json", by_alias=True) == USER

    def test_headers(self, package):
        api = package.ApiClient().initialize("http://api.example.com/")
        api.set_auth_token("secret")

        assert api._api_url == "http://api.example.com"
        assert api.headers == {"X-Api-Version": "1.0", "Authorization": "Bearer secret"}

    def test_default_base_url(self, package):
        api = package.ApiClient().initialize()

        assert api._api_url == "http://localhost:9000"

    def test_curl(self, package):
        api = package.ApiClient()

        command = api._curl("GET", "http://x/users", [("limit", "25")], None)

        assert command == "curl -X GET -H 'X-Api-Version: 1.0' 'http://x/users?limit=25'"


class TestRuntimeHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, []),
            (True, [("v", "true")]),
            (25, [("v", "25")]),
            ([1, 2], [("v", "1"), ("v", "2")]),
            (datetime.date(2024, 1, 31), [("v", "2024-01-31")]),
            (GUID, [("v", str(GUID))]),
        ],
    )
    def test_query_pairs(self, package, value, expected):
        assert package.common.query_pairs("v", value) == expected

    def test_enum_query_value(self, package):
        assert package.common.query_pairs("g", package.models.AgeGroup.ADULT) == [("g", "adult")]

    def test_quote_path(self, package):
        assert package.common.quote_path("a b/c") == "a%20b%2Fc"


class TestClientCalls:
    """Вызовы методов клиента и разбор ответов"""

    @pytest.mark.asyncio
    async def test_success(self, client, package):
        api, transport = client
        transport.reply(200, USER)

        user = await api.users.get_by_guid(GUID)

        assert isinstance(user, package.models.User)
        assert user.guid == GUID
        assert transport.calls == [("GET", f"/users/{GUID}", None, None)]

    @pytest.mark.asyncio
    async def test_not_found_is_none(self, client):
        api, transport = client
        transport.reply(404)

        assert await api.users.get_by_guid(GUID) is None

    @pytest.mark.asyncio
    async def test_unexpected_code(self, client, package):
        api, transport = client
        transport.reply(500, "boom")

        with pytest.raises(package.errors.FailedRequest) as e:
            await api.users.get_by_guid(GUID)

        assert e.value.response_code == 500
        assert e.value.message == "Unsupported response code[500]. Expected: 200, 404"

    @pytest.mark.asyncio
    async def test_error_response(self, client, package):
        api, transport = client
        transport.reply(409, [{"code": "taken", "message": "Email taken"}])

        with pytest.raises(package.errors.ErrorsResponse) as e:
            await api.users.post(package.models.User.model_validate(USER))

        assert e.value.response.status == 409
        assert [error.code for error in e.value.errors] == ["taken"]

    @pytest.mark.asyncio
    async def test_request_body(self, client, package):
        api, transport = client
        transport.reply(201, USER)

        await api.users.post(package.models.User(guid=GUID, email="a@example.com"))

        ((method, path, query, body),) = transport.calls
        assert (method, path, query) == ("POST", "/users", None)
        assert body == {"guid": str(GUID), "email": "a@example.com", "ageGroup": None}

    @pytest.mark.asyncio
    async def test_invalid_json(self, client, package):
        api, transport = client
        transport.reply(201, {"guid": "not-a-uuid"})

        with pytest.raises(package.errors.InvalidJson) as e:
            await api.users.post(package.models.User(guid=GUID, email="a@example.com"))

        assert isinstance(e.value, package.errors.FailedRequest)
        assert e.value.response_code == 201
        assert "Invalid json for models.User" in e.value.message

    @pytest.mark.asyncio
    async def test_failure_without_body(self, client, package):
        api, transport = client
        transport.reply(204)
        transport.reply(404, "missing")

        assert await api.users.delete_by_guid(GUID) is None

        with pytest.raises(package.errors.FailedRequest) as e:
            await api.users.delete_by_guid(GUID)

        assert (e.value.response_code, e.value.message) == (404, "missing")

    @pytest.mark.asyncio
    async def test_query_parameters(self, client):
        api, transport = client
        transport.reply(200, [USER])
        transport.reply(200, {"value": "x"})

        users = await api.users.get(email="a@example.com")
        await api.echoes.get(required_messages=["a", "b"])

        assert len(users) == 1
        assert transport.calls[0][2] == [("email", "a@example.com"), ("limit", "25")]
        assert transport.calls[1][2] == [("required_messages", "a"), ("required_messages", "b")]

    @pytest.mark.asyncio
    async def test_union_response(self, client, package):
        api, transport = client
        transport.reply(200, {"guest_user": {"sessionId": "s-1"}})
        transport.reply(201, {"uuid": str(GUID)})

        visitor = await api.visitors.get_by_guid(GUID)
        created = await api.visitors.post(visitor)

        assert isinstance(visitor, package.models.GuestUser)
        assert created == GUID
        assert transport.calls[1][3] == {"guest_user": {"sessionId": "s-1"}}

    @pytest.mark.asyncio
    async def test_root_resource_path(self, client):
        api, transport = client
        transport.reply(200, ["a"])

        assert await api.services.get_by_org_key("my org") == ["a"]
        assert transport.calls[0][1] == "/my%20org"


class TestTransport:
    @pytest.mark.asyncio
    async def test_requires_initialize(self, package):
        with pytest.raises(ValueError, match="API URL is empty"):
            await package.ApiClient()._execute_request("GET", "/users")

    @pytest.mark.asyncio
    async def test_patch_in_compat_dialect(self, reference_document, import_project):
        project = ApiClientGenerator(
            reference_document, settings=Dialects.AIOHTTP_COMPAT
        ).generate()
        package = import_project(project)

        assert package.common.SUPPORTS_PATCH is False
        with pytest.raises(NotImplementedError):
            await package.ApiClient()._execute_request("PATCH", "/users")


class TestCli:
    """Загрузка описания и запись файлов"""

    def test_load_document_resolves_refs(self, tmp_path):
        path = tmp_path / "service.json"
        path.write_text(
            json.dumps(
                {
                    "name": "refs",
                    "shared": {"user": {"fields": [{"name": "guid", "type": "uuid"}]}},
                    "models": {"user": {"$ref": "#/shared/user"}},
                }
            ),
            encoding="utf-8",
        )

        document = cli.load_document(str(path))

        assert document["models"]["user"]["fields"][0]["name"] == "guid"
        assert ApiClientGenerator(document).service().models[0].fields[0].type == "uuid"

    def test_load_missing_document(self, tmp_path):
        with pytest.raises(ValueError, match="Не удалось загрузить описание"):
            cli.load_document(str(tmp_path / "missing.json"))

    def test_generate_command(self, reference_document, tmp_path, monkeypatch):
        (tmp_path / "service.json").write_text(json.dumps(reference_document), encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            sys, "argv", ["apidoc-client", "--url", "service.json", "--dirname", "out", "--force"]
        )

        cli.generate()

        assert sorted(os.listdir(tmp_path / "out")) == [
            "__init__.py",
            "apidoc.toml",
            "client.py",
            "common.py",
            "errors.py",
            "interfaces.py",
            "models.py",
            "routes",
        ]
        assert ApidocConfig.from_file(search_dir=str(tmp_path / "out")).url == "service.json"

    def test_invalid_description_exits(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "service.json").write_text(
            json.dumps({"name": "broken", "models": {"user": {"fields": [{"name": "a", "type": "foo"}]}}}),
            encoding="utf-8",
        )
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "argv", ["apidoc-client", "--url", "service.json"])

        with pytest.raises(SystemExit) as e:
            cli.generate()

        assert e.value.code == 1
        assert "Unresolved type reference[foo]" in capsys.readouterr().out
        assert not (tmp_path / "api_client").exists()
