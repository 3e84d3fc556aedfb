"""
Error mapping and access-control short-circuiting, with mocked stores.
"""

import logging
import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from auth.dependencies import extract_bearer_token
from core.errors import AuthenticationError, DuplicateEmailError, InternalError, NotFoundError
from main import create_app


@pytest.fixture
def credential_mock() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def task_mock() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def app(settings, credential_mock, task_mock):
    return create_app(settings, credential_store=credential_mock, task_store=task_mock)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def headers(app):
    token = app.state.token_service.issue(str(uuid.uuid4()))
    return {"Authorization": f"Bearer {token}"}


class TestExtractBearerToken:
    @pytest.mark.parametrize("value", [None, "", "Bearer", "Bearer   ", "Token abc", "abc"])
    def test_rejected(self, value):
        with pytest.raises(AuthenticationError) as exc_info:
            extract_bearer_token(value)
        assert exc_info.value.message == "Credential required"

    @pytest.mark.parametrize("value", ["Bearer abc.def", "bearer abc.def", "  Bearer  abc.def "])
    def test_accepted(self, value):
        assert extract_bearer_token(value) == "abc.def"


class TestShortCircuit:
    def test_handler_never_runs_without_credential(self, client, task_mock):
        assert client.get("/tasks").status_code == 401
        assert client.post("/tasks", json={"title": "x"}).status_code == 401
        assert client.delete("/tasks/1", headers={"Authorization": "Bearer junk"}).status_code == 401
        task_mock.list_for_owner.assert_not_called()
        task_mock.create.assert_not_called()
        task_mock.delete.assert_not_called()

    def test_handler_scoped_to_token_user(self, app, client, task_mock):
        user_id = str(uuid.uuid4())
        token = app.state.token_service.issue(user_id)
        task_mock.list_for_owner.return_value = []

        response = client.get(
            "/tasks", params={"completed": "false"}, headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200
        task_mock.list_for_owner.assert_awaited_once_with(user_id, completed=False)

    def test_update_passes_only_sent_fields(self, client, headers, task_mock):
        task_mock.update.side_effect = NotFoundError("Task not found")
        response = client.put("/tasks/7", json={"completed": True, "user_id": "x"}, headers=headers)
        assert response.status_code == 404
        _, task_id, fields = task_mock.update.await_args.args
        assert task_id == 7
        assert fields == {"completed": True}


class TestErrorMapping:
    def test_unexpected_fault_is_opaque_500(self, client, headers, task_mock):
        task_mock.list_for_owner.side_effect = RuntimeError("connection to db-host:5432 lost")
        response = client.get("/tasks", headers=headers)
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "code": "internal_error"}
        assert response.json()["code"] == InternalError.code
        assert "db-host" not in response.text

    def test_unexpected_fault_is_access_logged(self, client, headers, task_mock, caplog):
        task_mock.get_for_owner.side_effect = RuntimeError("boom")
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            response = client.get("/tasks/3", headers=headers)
        assert response.status_code == 500
        lines = [r.getMessage() for r in caplog.records if r.name == "api.middleware"]
        assert any(line.startswith("GET /tasks/3 → 500") for line in lines)

    def test_duplicate_email_maps_to_400(self, client, credential_mock):
        credential_mock.create.side_effect = DuplicateEmailError()
        response = client.post("/register", json={"email": "a@x.com", "password": "pw1"})
        assert response.status_code == 400
        assert response.json() == {"error": "User already exists", "code": "duplicate_email"}

    def test_login_unknown_user(self, client, credential_mock):
        credential_mock.find_by_email.side_effect = NotFoundError("User not found")
        response = client.post("/login", json={"email": "a@x.com", "password": "pw1"})
        assert response.status_code == 401
        assert "not found" not in response.text.lower()

    def test_schema_errors_are_400_with_details(self, client, headers):
        response = client.post("/tasks", json={"title": 5}, headers=headers)
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "validation_error"
        assert body["details"][0]["loc"] == ["body", "title"]

    def test_non_integer_task_id(self, client, headers, task_mock):
        response = client.get("/tasks/abc", headers=headers)
        assert response.status_code == 400
        task_mock.get_for_owner.assert_not_called()
