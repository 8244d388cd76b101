"""Pytest configuration and fixtures."""

import json
import os

import httpx
import pytest
import structlog

# Keep settings deterministic regardless of the developer's shell.
for _key in ("PAGEKIT_API_URL", "PAGEKIT_TOKEN", "PAGEKIT_TIMEOUT", "PAGEKIT_LOG_LEVEL", "PAGEKIT_LOG_JSON"):
    os.environ.pop(_key, None)

# Run every log call through the processors but print nothing.
structlog.configure(logger_factory=structlog.ReturnLoggerFactory())

API_URL = "http://pages.test/api"
PAGES = "/tenant/pages"
TYPE_KEYS = ("page_type", "type", "form_type")


class FakeBackend:
    """In-memory tenant pages API served through httpx.MockTransport.

    Records are stored the way the backend stores them: ``form_config`` and
    ``settings`` as JSON text. Every request is recorded in ``requests``.
    """

    def __init__(self):
        self.pages: dict[str, dict] = {}
        self.requests: list[dict] = []
        self.rejected_filters: set[str] = set()
        self.failures: list[tuple[str, str, int, dict]] = []
        self.network_error: type[Exception] | None = None
        self._next_id = 1

    # -- setup helpers --------------------------------------------------

    def add_page(self, record: dict) -> dict:
        """Seed a page record, assigning an id if it has none."""
        record = dict(record)
        record.setdefault("id", self._allocate_id())
        self.pages[str(record["id"])] = record
        return record

    def fail(self, method: str, path_prefix: str, status: int, body: dict | None = None) -> None:
        """Make the next matching request fail with the given status."""
        self.failures.append((method, path_prefix, status, body or {}))

    def calls(self, method: str | None = None) -> list[dict]:
        """Recorded requests, optionally filtered by method."""
        return [r for r in self.requests if method is None or r["method"] == method]

    def _allocate_id(self) -> str:
        page_id = str(self._next_id)
        self._next_id += 1
        return page_id

    # -- transport ------------------------------------------------------

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        body = json.loads(request.content) if request.content else None
        params = dict(request.url.params)
        self.requests.append(
            {
                "method": request.method,
                "path": path,
                "params": params,
                "json": body,
                "headers": dict(request.headers),
            }
        )

        if self.network_error is not None:
            raise self.network_error("connection failed", request=request)

        for index, (method, prefix, status, error_body) in enumerate(self.failures):
            if method == request.method and path.startswith(prefix):
                del self.failures[index]
                return httpx.Response(status, json=error_body)

        if path == "/tenant/login":
            return self._login(body or {})
        if path == "/tenant/logout":
            return httpx.Response(200, json={"message": "Logged out"})
        if path == PAGES:
            if request.method == "GET":
                return self._list(params)
            if request.method == "POST":
                return self._create(body or {})
        if path.startswith(PAGES + "/"):
            page_id = path[len(PAGES) + 1:]
            if request.method == "GET":
                return self._show(page_id)
            if request.method in ("PUT", "PATCH"):
                return self._update(page_id, body or {})
            if request.method == "DELETE":
                return self._delete(page_id)

        return httpx.Response(404, json={"message": "Route not found"})

    def _login(self, credentials: dict) -> httpx.Response:
        if credentials.get("username") == "admin" and credentials.get("password") == "secret":
            return httpx.Response(
                200,
                json={"data": {"token": "tok-123", "user": {"id": 7, "tenantId": "tenant-1"}}},
            )
        return httpx.Response(401, json={"message": "Invalid credentials"})

    def _list(self, params: dict) -> httpx.Response:
        records = list(self.pages.values())
        for key in TYPE_KEYS:
            if key in params:
                if key in self.rejected_filters:
                    return httpx.Response(400, json={"message": f"Unknown filter '{key}'"})
                records = [r for r in records if r.get("page_type") == params[key]]
        return httpx.Response(200, json={"data": records})

    def _show(self, page_id: str) -> httpx.Response:
        record = self.pages.get(page_id)
        if record is None:
            return httpx.Response(404, json={"message": "Page not found"})
        return httpx.Response(200, json={"data": record})

    def _create(self, body: dict) -> httpx.Response:
        for record in self.pages.values():
            if record.get("slug") == body.get("slug") and record.get("page_type") == body.get("page_type"):
                return httpx.Response(
                    422,
                    json={
                        "message": "The given data was invalid.",
                        "errors": {"slug": ["The slug has already been taken."]},
                    },
                )
        record = self.add_page(body)
        return httpx.Response(201, json={"data": record})

    def _update(self, page_id: str, body: dict) -> httpx.Response:
        record = self.pages.get(page_id)
        if record is None:
            return httpx.Response(404, json={"message": "Page not found"})
        record.update(body)
        return httpx.Response(200, json={"data": record})

    def _delete(self, page_id: str) -> httpx.Response:
        if self.pages.pop(page_id, None) is None:
            return httpx.Response(404, json={"message": "Page not found"})
        return httpx.Response(204)


@pytest.fixture
def backend():
    """Fresh in-memory backend."""
    return FakeBackend()


@pytest.fixture
def client(backend):
    """API client wired to the fake backend."""
    from pagekit.client import ApiClient

    with ApiClient(API_URL, token="test-token", transport=httpx.MockTransport(backend)) as api:
        yield api


@pytest.fixture
def repository(client):
    """Page repository over the fake backend."""
    from pagekit.repositories.page import PageRepository

    return PageRepository(client)


@pytest.fixture
def login_record():
    """Stored login page with a customized username label."""
    return {
        "id": "10",
        "title": "Member Login",
        "name": "Login Page",
        "slug": "login",
        "page_type": "login",
        "status": "published",
        "form_config": json.dumps(
            [
                {"id": "username", "name": "username", "label": "Email", "type": "text", "required": True, "order": 0},
                {"id": "password", "name": "password", "label": "Password", "type": "password", "required": True, "order": 1},
            ]
        ),
        "settings": json.dumps(
            {
                "usernameLabel": "Email",
                "passwordLabel": "Password",
                "submitButtonText": "Sign In",
                "forgotPasswordLink": "false",
                "registerLink": True,
                "rememberMeOption": 1,
            }
        ),
    }


@pytest.fixture
def contact_record():
    """Stored contact page whose field labels differ from its settings."""
    return {
        "id": "20",
        "title": "Get in touch",
        "name": "Contact Page",
        "slug": "contact",
        "page_type": "contact_us",
        "status": "draft",
        "form_config": json.dumps(
            [
                {"id": "name", "name": "name", "label": "Full Name", "type": "text", "required": True},
                {"id": "email", "name": "email", "label": "Email", "type": "email", "required": True},
                {"id": "message", "name": "message", "label": "Message", "type": "textarea", "required": True},
            ]
        ),
        "settings": json.dumps({"nameLabel": "Your Name", "submitButtonText": "Send"}),
    }


@pytest.fixture
def register_record():
    """Stored registration page using the wrapped field list."""
    return {
        "id": "30",
        "title": "Event Registration",
        "name": "Registration Page",
        "slug": "event-registration",
        "page_type": "register",
        "status": "draft",
        "form_config": json.dumps(
            {
                "fields": [
                    {"id": "first_name", "name": "first_name", "label": "First Name", "type": "text", "required": True, "order": 0},
                    {"id": "last_name", "name": "last_name", "label": "Last Name", "type": "text", "required": True, "order": 1},
                    {"id": "email", "name": "email", "label": "Email Address", "type": "email", "required": True, "order": 2},
                    {"id": "password", "name": "password", "label": "Password", "type": "password", "required": True, "order": 3},
                    {"id": "phone", "name": "phone", "label": "Phone", "type": "tel", "required": True, "order": 4},
                    {"id": "company", "name": "company", "label": "Company", "type": "text", "required": False, "order": 5},
                ]
            }
        ),
        "settings": json.dumps({"submitButtonText": "Register Now", "show_in_nav": "0"}),
    }


@pytest.fixture
def custom_record():
    """Stored custom page with two modules."""
    return {
        "id": "40",
        "title": "Summer Gala",
        "name": "Gala Landing",
        "slug": "summer-gala",
        "page_type": "custom",
        "form_type": "custom",
        "status": "published",
        "form_config": "[]",
        "settings": json.dumps({"backgroundColor": "#000000", "description": "Gala night"}),
        "modules": json.dumps(
            [
                {"id": "m2", "type": "text", "title": "About", "content": {"title": "About"}, "order": 1},
                {"id": "m1", "type": "hero", "title": "Hero", "content": {"title": "Welcome"}, "order": 0},
            ]
        ),
    }
