import asyncio
import json
from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from llm import llm_service
from models.language import Language
from services import language_service
from services.language_service import LanguageChange, LanguageChangeFeed, LanguageServiceError
from web.routers.languages import router as languages_router
from web.routers.languages import stream_language_changes


@pytest.fixture()
def published(monkeypatch: pytest.MonkeyPatch) -> List[LanguageChange]:
    events: List[LanguageChange] = []
    monkeypatch.setattr(language_service.change_feed, "publish", events.append)
    return events


def test_static_languages_when_table_is_empty(db_session) -> None:
    codes = [item["code"] for item in language_service.list_enabled_languages(db_session)]

    assert codes == ["fi", "en", "sv"]


def test_static_languages_when_nothing_is_enabled(db_session) -> None:
    db_session.add(Language(code="de", name="German", enabled=False))
    db_session.commit()

    codes = [item["code"] for item in language_service.list_enabled_languages(db_session)]

    assert codes == ["fi", "en", "sv"]


def test_enabled_languages_sorted_by_code(db_session) -> None:
    db_session.add_all(
        [
            Language(code="sv", name="Swedish", native_name="Svenska"),
            Language(code="de", name="German", enabled=False),
            Language(code="en", name="English", native_name="English"),
        ]
    )
    db_session.commit()

    rows = language_service.list_enabled_languages(db_session)

    assert [row["code"] for row in rows] == ["en", "sv"]


def test_create_language_translates_native_name(db_session, published, monkeypatch) -> None:
    monkeypatch.setattr(llm_service, "translate_language_name", lambda name: "Deutsch")

    language = language_service.create_language(db_session, code=" DE ", name="German")

    assert language.code == "de"
    assert language.native_name == "Deutsch"
    assert [(event.event, event.code) for event in published] == [("INSERT", "de")]
    assert published[0].record["native_name"] == "Deutsch"


def test_create_language_falls_back_to_name(db_session, published, monkeypatch) -> None:
    monkeypatch.setattr(llm_service, "translate_language_name", lambda name: None)

    language = language_service.create_language(db_session, code="et", name="Estonian")

    assert language.native_name == "Estonian"


def test_create_duplicate_language_is_conflict(db_session, published, monkeypatch) -> None:
    monkeypatch.setattr(llm_service, "translate_language_name", lambda name: None)
    language_service.create_language(db_session, code="de", name="German")

    with pytest.raises(LanguageServiceError) as excinfo:
        language_service.create_language(db_session, code="DE", name="German")

    assert excinfo.value.status_code == 409
    assert len(published) == 1


def test_update_and_delete_publish_changes(db_session, published) -> None:
    db_session.add(Language(code="de", name="German", native_name="Deutsch"))
    db_session.commit()

    updated = language_service.update_language(db_session, "de", {"enabled": False})
    language_service.delete_language(db_session, "de")

    assert updated.enabled is False
    assert [(event.event, event.code) for event in published] == [("UPDATE", "de"), ("DELETE", "de")]
    assert published[1].record is None


def test_delete_unknown_language_is_404(db_session, published) -> None:
    with pytest.raises(LanguageServiceError) as excinfo:
        language_service.delete_language(db_session, "xx")

    assert excinfo.value.status_code == 404
    assert published == []


def test_change_feed_delivers_to_subscribers() -> None:
    feed = LanguageChangeFeed()

    async def scenario() -> LanguageChange:
        stream = feed.subscribe()
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        assert feed.subscriber_count == 1
        feed.publish(LanguageChange("UPDATE", "sv", {"code": "sv"}))
        change = await asyncio.wait_for(pending, timeout=1)
        await stream.aclose()
        return change

    change = asyncio.run(scenario())

    assert change.event == "UPDATE"
    assert change.as_payload()["code"] == "sv"
    assert feed.subscriber_count == 0


def test_change_feed_drops_oldest_when_subscriber_lags() -> None:
    feed = LanguageChangeFeed(max_queue=1)

    async def scenario() -> List[str]:
        stream = feed.subscribe()
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        for code in ("a", "b", "c"):
            feed.publish(LanguageChange("INSERT", code))
        await asyncio.sleep(0)
        received = [(await asyncio.wait_for(pending, timeout=1)).code]
        await stream.aclose()
        return received

    assert asyncio.run(scenario()) == ["c"]


def test_change_stream_route_sends_server_sent_events() -> None:
    feed = language_service.change_feed

    async def scenario() -> List[str]:
        response = await stream_language_changes()
        assert response.media_type == "text/event-stream"
        body = response.body_iterator
        chunks = [await body.__anext__()]
        pending = asyncio.ensure_future(body.__anext__())
        await asyncio.sleep(0)
        feed.publish(LanguageChange("DELETE", "de"))
        chunks.append(await asyncio.wait_for(pending, timeout=1))
        await body.aclose()
        return chunks

    ready, deleted = asyncio.run(scenario())

    assert ready == 'data: {"event": "ready"}\n\n'
    assert deleted.startswith("data: ") and deleted.endswith("\n\n")
    payload = json.loads(deleted[len("data: "):])
    assert payload["event"] == "DELETE"
    assert payload["code"] == "de"
    assert feed.subscriber_count == 0


def test_languages_api_admin_crud(
    make_client: Callable[..., TestClient], create_user, auth_header, published, monkeypatch
) -> None:
    monkeypatch.setattr(llm_service, "translate_language_name", lambda name: "Norsk")
    admin = create_user(is_admin=True, role="admin")
    visitor = create_user()
    client = make_client(languages_router)
    headers = auth_header(admin)

    forbidden = client.post("/api/languages", headers=auth_header(visitor), json={"code": "no", "name": "Norwegian"})
    assert forbidden.status_code == 403

    created = client.post("/api/languages", headers=headers, json={"code": "no", "name": "Norwegian"})
    assert created.status_code == 201
    assert created.json()["data"]["native_name"] == "Norsk"

    public = client.get("/api/languages").json()["data"]
    assert [item["code"] for item in public] == ["no"]

    patched = client.patch("/api/languages/no", headers=headers, json={"name": "Norwegian Bokmål"})
    assert patched.json()["data"]["name"] == "Norwegian Bokmål"

    deleted = client.delete("/api/languages", headers=headers, params={"code": "no"})
    assert deleted.json() == {"data": {"code": "no", "deleted": True}}
    assert [item["code"] for item in client.get("/api/languages").json()["data"]] == ["fi", "en", "sv"]
    assert [event.event for event in published] == ["INSERT", "UPDATE", "DELETE"]
