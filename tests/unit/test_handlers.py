"""
Unit tests for the user endpoints, run through the full middleware chain
and router without sockets.
"""

from http import HTTPStatus
import logging

import pytest

from userapi.users import UserPayload, UserStore


ADA = {"name": "Ada", "title": "Engineer", "email": "ada@example.com"}


class TestHomePage:
    def test_home_is_public(self, handler, make_request):
        response = handler(make_request("GET", "/", api_key=None))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Hi, this is the home page"
        assert response.headers["Content-Type"].startswith("text/plain")

    def test_home_ignores_bad_key(self, handler, make_request):
        response = handler(make_request("GET", "/", api_key="wrong"))

        assert response.status == HTTPStatus.OK


class TestAuthentication:
    def test_missing_key(self, handler, make_request):
        response = handler(make_request("GET", "/api/users", api_key=None))

        assert response.status == HTTPStatus.UNAUTHORIZED
        assert response.json == {"error": "API Key header is required."}

    def test_invalid_key(self, handler, make_request):
        response = handler(make_request("GET", "/api/users", api_key="nope"))

        assert response.status == HTTPStatus.UNAUTHORIZED
        assert response.json == {"error": "Invalid API key."}

    def test_auth_runs_before_routing(self, handler, make_request):
        """Unknown paths outside the public area are still 401 without a key."""
        response = handler(make_request("GET", "/api/nothing", api_key=None))

        assert response.status == HTTPStatus.UNAUTHORIZED

    def test_admin_key(self, handler, make_request):
        response = handler(make_request("GET", "/api/users", api_key="admin-api-key-67890"))

        assert response.status == HTTPStatus.OK


class TestListAndGet:
    def test_list_empty(self, handler, make_request):
        response = handler(make_request("GET", "/api/users"))

        assert response.status == HTTPStatus.OK
        assert response.json == []

    def test_list(self, handler, make_request, store: UserStore):
        store.create(UserPayload(**ADA))
        store.create(UserPayload(name="Grace", title="Admiral", email="grace@example.com"))

        response = handler(make_request("GET", "/api/users"))

        assert [user["name"] for user in response.json] == ["Ada", "Grace"]

    def test_get(self, handler, make_request, store: UserStore):
        store.create(UserPayload(**ADA))

        response = handler(make_request("GET", "/api/users/1"))

        assert response.status == HTTPStatus.OK
        assert response.json == {"id": 1, **ADA}

    def test_get_unknown(self, handler, make_request):
        response = handler(make_request("GET", "/api/users/99"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    def test_get_non_integer_id(self, handler, make_request):
        response = handler(make_request("GET", "/api/users/abc"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.json == {"error": "No route matches /api/users/abc"}

    def test_method_not_allowed(self, handler, make_request):
        response = handler(make_request("PATCH", "/api/users/1"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "DELETE, GET, PUT"


class TestCreate:
    def test_create(self, handler, make_request, store: UserStore):
        response = handler(make_request("POST", "/api/users", ADA))

        assert response.status == HTTPStatus.CREATED
        assert response.json == {"id": 1, **ADA}
        assert response.headers["Location"] == "/api/users/1"
        assert len(store) == 1

    def test_client_id_is_ignored(self, handler, make_request):
        response = handler(make_request("POST", "/api/users", {"id": 500, **ADA}))

        assert response.json["id"] == 1

    def test_validation_errors(self, handler, make_request, store: UserStore):
        body = {"name": "", "title": "", "email": "not-an-email"}

        response = handler(make_request("POST", "/api/users", body))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json == {"errors": [
            "Name is required",
            "Title is required",
            "Please enter a valid email address",
        ]}
        assert len(store) == 0
        assert store.next_id == 1

    @pytest.mark.parametrize("body, message", [
        ("{not json", None),
        ("[1, 2]", "Request body must be a JSON object."),
        ('"Ada"', "Request body must be a JSON object."),
        ('{"name": 1, "title": "x", "email": "a@b.c"}', "Field 'name' must be a string."),
        ("null", "Request body is required."),
    ])
    def test_malformed_body(self, handler, make_request, body: str, message):
        response = handler(make_request("POST", "/api/users", body))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert "error" in response.json
        if message:
            assert response.json["error"] == message

    def test_deeply_nested_body(self, handler, make_request, store: UserStore):
        """JSON nested past the decoder's recursion limit is a client error."""
        body = "[" * 100000 + "]" * 100000

        response = handler(make_request("POST", "/api/users", body))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json["error"].startswith("Invalid JSON body")
        assert len(store) == 0

    def test_field_names_are_case_insensitive(self, handler, make_request):
        body = {"Name": "Ada", "TITLE": "Engineer", "Email": "ada@example.com"}

        response = handler(make_request("POST", "/api/users", body))

        assert response.status == HTTPStatus.CREATED
        assert response.json == {"id": 1, **ADA}

    def test_empty_body(self, handler, make_request):
        response = handler(make_request("POST", "/api/users"))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json == {"error": "Request body is required."}


class TestUpdate:
    def test_update(self, handler, make_request, store: UserStore):
        store.create(UserPayload(**ADA))
        changes = {"name": "Ada Lovelace", "title": "Analyst", "email": "ada@example.com"}

        response = handler(make_request("PUT", "/api/users/1", changes))

        assert response.status == HTTPStatus.OK
        assert response.json == {"id": 1, **changes}
        assert store.get(1).name == "Ada Lovelace"

    def test_update_unknown_checks_existence_first(self, handler, make_request, store: UserStore):
        """An unknown id is 404 even when the body is invalid."""
        response = handler(make_request("PUT", "/api/users/9", {"name": ""}))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""
        assert len(store) == 0
        assert store.next_id == 1

    def test_update_unknown_with_garbage_body(self, handler, make_request):
        response = handler(make_request("PUT", "/api/users/9", "{not json"))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_update_validation_errors(self, handler, make_request, store: UserStore):
        store.create(UserPayload(**ADA))

        response = handler(make_request("PUT", "/api/users/1", {"name": "Ada", "title": "Engineer"}))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json == {"errors": ["Email is required"]}
        assert store.get(1).email == "ada@example.com"

    def test_update_bad_json(self, handler, make_request, store: UserStore):
        store.create(UserPayload(**ADA))

        response = handler(make_request("PUT", "/api/users/1", "{not json"))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert "error" in response.json


class TestDelete:
    def test_delete(self, handler, make_request, store: UserStore):
        store.create(UserPayload(**ADA))

        response = handler(make_request("DELETE", "/api/users/1"))

        assert response.status == HTTPStatus.NO_CONTENT
        assert response.body == b""
        assert len(store) == 0

    def test_delete_unknown(self, handler, make_request):
        response = handler(make_request("DELETE", "/api/users/1"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""


class TestFaults:
    def test_faulting_handler_gives_500(self, faulty_handler, make_request, caplog):
        with caplog.at_level(logging.ERROR, logger="userapi.middleware.errors"):
            response = faulty_handler(make_request("GET", "/api/explode"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.json == {"error": "Internal server error."}
        assert any("boom" in r.getMessage() for r in caplog.records)

    def test_service_keeps_working_after_fault(self, faulty_handler, make_request):
        faulty_handler(make_request("GET", "/api/explode"))

        response = faulty_handler(make_request("GET", "/api/users"))

        assert response.status == HTTPStatus.OK

    def test_store_failure_gives_500(self, handler, make_request, store: UserStore, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(store, "all", broken)

        response = handler(make_request("GET", "/api/users"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR


class TestAdaScenario:
    """Create, read, update and delete one user end to end."""

    def test_lifecycle(self, handler, make_request):
        created = handler(make_request("POST", "/api/users", ADA))
        assert created.status == HTTPStatus.CREATED
        assert created.json == {"id": 1, **ADA}
        assert created.headers["Location"] == "/api/users/1"

        listed = handler(make_request("GET", "/api/users"))
        assert listed.json == [{"id": 1, **ADA}]

        changes = {"name": "Ada Lovelace", "title": "Countess", "email": "ada@example.com"}
        updated = handler(make_request("PUT", "/api/users/1", changes))
        assert updated.status == HTTPStatus.OK
        assert updated.json == {"id": 1, **changes}

        fetched = handler(make_request("GET", "/api/users/1"))
        assert fetched.json == {"id": 1, **changes}

        deleted = handler(make_request("DELETE", "/api/users/1"))
        assert deleted.status == HTTPStatus.NO_CONTENT

        gone = handler(make_request("GET", "/api/users/1"))
        assert gone.status == HTTPStatus.NOT_FOUND

        again = handler(make_request("POST", "/api/users", ADA))
        assert again.json["id"] == 2
        assert again.headers["Location"] == "/api/users/2"
