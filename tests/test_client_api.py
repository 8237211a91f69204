import asyncio
import json
from typing import List

import httpx
import pytest

from client.api import ApiClient, ApiError
from client.session import LoginSessionProvider, Session, StaticSessionProvider


def _api(handler, session=None) -> ApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
    return ApiClient(http, StaticSessionProvider(session))


def test_authorized_requests_carry_bearer_token() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    api = _api(handler, Session(access_token="tok-123", user={"id": "u1", "isAdmin": True}))

    async def scenario():
        await api.get("/api/dashboard")
        await api.get("/api/companies/search", params={"query": "abc"}, authorized=False)
        await api.aclose()

    asyncio.run(scenario())

    assert seen[0].headers["Authorization"] == "Bearer tok-123"
    assert seen[0].headers["Content-Type"] == "application/json"
    assert "Authorization" not in seen[1].headers


@pytest.mark.parametrize(
    "status,body,message,code",
    [
        (400, {"detail": {"code": "admin.users.email_taken", "message": "Taken."}}, "Taken.", "admin.users.email_taken"),
        (404, {"detail": "Not Found"}, "Not Found", None),
        (500, {"error": "boom"}, "boom", None),
        (502, None, "HTTP 502", None),
    ],
)
def test_error_responses_become_api_errors(status, body, message, code) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(status, content=b"<html>bad gateway</html>")
        return httpx.Response(status, json=body)

    api = _api(handler)

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(api.post("/api/anything", json={}))

    assert str(excinfo.value) == message
    assert excinfo.value.code == code
    assert excinfo.value.status_code == status


def test_transport_failure_becomes_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(_api(handler).get("/api/languages"))

    assert excinfo.value.status_code is None
    assert not excinfo.value.is_unauthorized


def test_empty_body_returns_none() -> None:
    api = _api(lambda request: httpx.Response(204))

    assert asyncio.run(api.delete("/api/thing")) is None


def test_non_json_success_body_becomes_api_error() -> None:
    api = _api(lambda request: httpx.Response(200, content=b"<html>gateway</html>"))

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(api.get("/api/languages"))

    assert str(excinfo.value) == "Invalid JSON response"
    assert excinfo.value.status_code == 200


@pytest.mark.parametrize("status,unauthorized", [(401, True), (403, False), (500, False)])
def test_only_401_counts_as_unauthorized(status, unauthorized) -> None:
    api = _api(lambda request: httpx.Response(status, json={"detail": {"message": "no"}}))

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(api.get("/api/admin/users"))

    assert excinfo.value.is_unauthorized is unauthorized


def test_login_session_provider_logs_in_once() -> None:
    logins: List[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/auth/login":
            logins.append(json.loads(request.content))
            return httpx.Response(200, json={"accessToken": "fresh", "user": {"id": "u9", "isAdmin": False}})
        return httpx.Response(200, json={"authorization": request.headers.get("Authorization")})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
    provider = LoginSessionProvider(http, email="a@b.fi", password="secret123")
    api = ApiClient(http, provider)

    async def scenario():
        first = await api.get("/api/dashboard")
        second = await api.get("/api/dashboard")
        session = await provider.get_session()
        return first, second, session

    first, second, session = asyncio.run(scenario())

    assert first == second == {"authorization": "Bearer fresh"}
    assert logins == [{"email": "a@b.fi", "password": "secret123"}]
    assert session.user_id == "u9"
    assert session.is_admin is False


def test_login_session_provider_returns_none_when_rejected() -> None:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(401, json={})), base_url="http://api.test"
    )
    provider = LoginSessionProvider(http, email="a@b.fi", password="wrong")

    assert asyncio.run(provider.get_session()) is None
