import asyncio
import json
from typing import List

import httpx
import pytest

from client.admin import AdminMediaClient, AdminUsersClient, CreateUserForm, FormValidationError, MediaFilter
from client.api import ApiClient
from client.calculator import CHAT_ERROR_MESSAGE, MAX_CHAT_TURNS, FactoringCalculator, estimate
from client.company_search import CompanySearch
from client.languages import LanguageList
from client.session import Session, StaticSessionProvider
from client.upload import DroppedFile, UploadZone
from services import calculator_service


def _api(handler) -> ApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
    return ApiClient(http, StaticSessionProvider(Session("tok")))


class Recorder:
    def __init__(self, responder=None) -> None:
        self.requests: List[httpx.Request] = []
        self.responder = responder or (lambda request: httpx.Response(200, json={"data": []}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]


# -- upload zone ---------------------------------------------------------------


def test_drop_invokes_callback_once_with_accepted_batch() -> None:
    batches: List[List[DroppedFile]] = []
    zone = UploadZone(_api(Recorder()), batches.append, max_bytes=10)

    accepted = zone.drop(
        [
            DroppedFile("logo.png", b"png"),
            DroppedFile("clip.mp4", b"mp4", "video/mp4"),
            DroppedFile("setup.bin", b"bin", "application/octet-stream"),
            DroppedFile("huge.png", b"x" * 11),
            DroppedFile("empty.pdf", b""),
        ]
    )

    assert len(batches) == 1
    assert [item.name for item in batches[0]] == ["logo.png", "clip.mp4"]
    assert accepted == batches[0]
    assert [item.name for item in zone.rejected] == ["setup.bin", "huge.png", "empty.pdf"]


def test_drop_with_nothing_accepted_skips_callback() -> None:
    batches: List[List[DroppedFile]] = []
    zone = UploadZone(_api(Recorder()), batches.append)

    assert zone.drop([DroppedFile("notes.bin", b"x", "application/octet-stream")]) == []
    assert batches == []


def test_upload_all_posts_multipart_and_collects_outcomes() -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if b"broken.png" in request.content:
            return httpx.Response(502, json={"detail": {"code": "storage.upload_failed", "message": "Storage down"}})
        return httpx.Response(201, json={"success": True, "data": {"id": "a1"}})

    recorder = Recorder(respond)
    zone = UploadZone(_api(recorder), lambda files: None)
    zone.drop([DroppedFile("ok.png", b"1"), DroppedFile("broken.png", b"2")])

    outcomes = asyncio.run(zone.upload_all())

    assert [(outcome.asset, outcome.error) for outcome in outcomes] == [({"id": "a1"}, None), (None, "Storage down")]
    assert recorder.requests[0].headers["Content-Type"].startswith("multipart/form-data")
    assert zone.pending == []


# -- company search ------------------------------------------------------------


def test_company_search_debounces_and_cancels_stale_queries() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={"data": [{"name": "Trusty Oy"}]}))
    published: List[list] = []
    search = CompanySearch(_api(recorder), debounce=0.01, on_results=published.append)

    async def scenario() -> None:
        search.set_query("Tru")
        search.set_query("Trus")
        search.set_query("Trust")
        await search.wait()

    asyncio.run(scenario())

    assert len(recorder.requests) == 1
    assert recorder.requests[0].url.params["query"] == "Trust"
    assert recorder.requests[0].url.params["limit"] == "5"
    assert "Authorization" not in recorder.requests[0].headers
    assert published == [[{"name": "Trusty Oy"}]]


def test_company_search_short_query_and_manual_mode_publish_empty() -> None:
    recorder = Recorder()
    published: List[list] = []
    search = CompanySearch(_api(recorder), debounce=0.01, on_results=published.append)

    async def scenario() -> None:
        search.set_query("ab")
        search.set_manual_mode(True)
        search.set_query("Trusty")
        await search.wait()

    asyncio.run(scenario())

    assert recorder.requests == []
    assert published == [[], [], []]


def test_company_search_failure_publishes_empty() -> None:
    recorder = Recorder(lambda request: httpx.Response(502, json={"detail": {"message": "registry down"}}))
    search = CompanySearch(_api(recorder), debounce=0)

    async def scenario() -> None:
        search.set_query("Trusty")
        await search.wait()

    asyncio.run(scenario())

    assert search.results == []
    assert search.loading is False


# -- languages -----------------------------------------------------------------


def test_language_list_falls_back_to_static_set() -> None:
    failing = LanguageList(_api(lambda request: httpx.Response(500, json={})))
    empty = LanguageList(_api(lambda request: httpx.Response(200, json={"data": []})))

    assert [item["code"] for item in asyncio.run(failing.refresh())] == ["fi", "en", "sv"]
    assert [item["code"] for item in asyncio.run(empty.refresh())] == ["fi", "en", "sv"]


def test_language_list_keeps_enabled_entries() -> None:
    data = [{"code": "de", "enabled": True}, {"code": "et", "enabled": False}]
    languages = LanguageList(_api(lambda request: httpx.Response(200, json={"data": data})))

    assert [item["code"] for item in asyncio.run(languages.refresh())] == ["de"]


def test_change_stream_triggers_one_coalesced_refresh() -> None:
    stream_body = ": keep-alive\n\n" + "".join(
        f"data: {json.dumps(event)}\n\n"
        for event in (
            {"event": "ready"},
            {"event": "INSERT", "code": "de"},
            {"event": "UPDATE", "code": "de"},
        )
    )

    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/languages/changes":
            return httpx.Response(200, text=stream_body, headers={"Content-Type": "text/event-stream"})
        return httpx.Response(200, json={"data": [{"code": "de", "enabled": True}]})

    recorder = Recorder(respond)
    languages = LanguageList(_api(recorder), debounce=0.01)

    async def scenario() -> None:
        await languages.follow_changes()
        await languages.wait()

    asyncio.run(scenario())

    assert recorder.paths() == ["/api/languages/changes", "/api/languages"]
    assert [item["code"] for item in languages.languages] == ["de"]


# -- calculator ----------------------------------------------------------------


def test_local_estimate_matches_reference() -> None:
    result = estimate(20000, 30)

    assert (result.advance, result.feesMid, result.freedWorkingCapital, result.daysImproved) == (16000, 600, 15400, 28)


@pytest.mark.parametrize("invoices, days", [(20000, 30), (1250, 1), (7333.5, 44.5)])
def test_local_estimate_agrees_with_server(invoices: float, days: float) -> None:
    assert estimate(invoices, days) == calculator_service.compute_factoring(invoices, days)


def test_save_requires_contact_details() -> None:
    calculator = FactoringCalculator(api=_api(Recorder()), monthly_invoices=20000, avg_days=30, email="cfo@x.fi")

    with pytest.raises(ValueError):
        asyncio.run(calculator.save())


def test_save_posts_inputs_and_result() -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={"success": True}))
    calculator = FactoringCalculator(
        api=_api(recorder), monthly_invoices=20000, avg_days=30, email="cfo@x.fi", company_name="X Oy"
    )

    asyncio.run(calculator.save(source_page="/fi/rahoitus/factoring"))

    body = json.loads(recorder.requests[0].content)
    assert body["inputs"] == {"monthlyInvoices": 20000, "avgDays": 30}
    assert body["result"]["freedWorkingCapital"] == 15400
    assert body["sourcePage"] == "/fi/rahoitus/factoring"


def test_chat_is_capped_and_errors_count_as_turns() -> None:
    calls = {"count": 0}

    def respond(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 2:
            return httpx.Response(502, json={"detail": {"message": "unavailable"}})
        return httpx.Response(200, json={"text": f"answer {calls['count']}"})

    calculator = FactoringCalculator(api=_api(respond), monthly_invoices=10000, avg_days=45)

    async def scenario() -> list:
        return [await calculator.ask(f"question {index}") for index in range(MAX_CHAT_TURNS + 1)]

    replies = asyncio.run(scenario())

    assert replies[1] == CHAT_ERROR_MESSAGE
    assert replies[-1] is None
    assert calls["count"] == MAX_CHAT_TURNS
    assert calculator.chat_exhausted
    assert len(calculator.chat) == MAX_CHAT_TURNS * 2


# -- admin ---------------------------------------------------------------------


def test_create_user_form_validation() -> None:
    errors = CreateUserForm(email="not-an-email", password="12345").validate()

    assert set(errors) == {"email", "password"}
    assert CreateUserForm(email="ok@example.com", password="123456").validate() == {}


def test_invalid_form_is_rejected_before_any_request() -> None:
    recorder = Recorder()
    users = AdminUsersClient(_api(recorder))

    with pytest.raises(FormValidationError) as excinfo:
        asyncio.run(users.create(CreateUserForm(email="", password="secret123")))

    assert "email" in excinfo.value.errors
    assert recorder.requests == []


def test_bulk_user_delete_aggregates_failures() -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/me"):
            return httpx.Response(400, json={"detail": {"code": "admin.users.self_delete", "message": "No."}})
        return httpx.Response(200, json={"success": True})

    recorder = Recorder(respond)
    result = asyncio.run(AdminUsersClient(_api(recorder)).bulk_delete(["u1", "me", "u2"]))

    assert (result.succeeded, result.failed) == (2, 1)
    assert result.errors == [("me", "No.")]
    assert result.summary == "Deleted 2, failed 1."
    assert [request.method for request in recorder.requests] == ["DELETE"] * 3


def test_media_filter_params_repeat_type_facet() -> None:
    params = MediaFilter(search=" logo ", types=["image/png", "video/mp4"], is_generated=False).to_params()

    assert params == [("search", "logo"), ("type", "image/png"), ("type", "video/mp4"), ("isGenerated", "false")]
    assert MediaFilter(types=["all", "image/png"]).to_params() == []


def test_media_client_list_and_bulk_delete() -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/media/delete":
            asset_id = json.loads(request.content)["id"]
            if asset_id == "bad":
                return httpx.Response(502, json={"detail": {"message": "storage"}})
            return httpx.Response(200, json={"success": True, "id": asset_id})
        return httpx.Response(200, json={"data": [{"id": "a"}], "total": 1})

    recorder = Recorder(respond)
    media = AdminMediaClient(_api(recorder))

    async def scenario():
        listed = await media.list(MediaFilter(types=["image/png", "image/jpeg"]))
        result = await media.bulk_delete(["a", "bad", "c"])
        return listed, result

    listed, result = asyncio.run(scenario())

    assert listed == [{"id": "a"}]
    assert recorder.requests[0].url.params.get_list("type") == ["image/png", "image/jpeg"]
    assert (result.succeeded, result.failed) == (2, 1)
