import json
import uuid
from typing import Any, Callable, Dict, List

import pytest
from fastapi.testclient import TestClient

from llm import llm_service
from models.company import Company
from services.conversation_service import normalize_advisor_payload
from web.routers.onboarding import router as onboarding_router


def test_normalize_expands_flat_json_fields() -> None:
    normalized = normalize_advisor_payload(
        {
            "nextQuestion": "Mihin tarvitsette rahoitusta?",
            "optionType": "checkbox",
            "optionsJson": json.dumps(["Käyttöpääoma", {"label": "Investointi", "value": "capex"}]),
            "cfoGuidance": "Kerro ensin tarve.",
            "done": False,
        }
    )

    assert normalized["optionType"] == "multi"
    assert normalized["options"] == [
        {"label": "Käyttöpääoma", "value": "Käyttöpääoma"},
        {"label": "Investointi", "value": "capex"},
    ]
    assert normalized["cfoGuidance"] == "Kerro ensin tarve."
    assert normalized["recommendation"] is None


def test_normalize_defaults_option_type_from_options() -> None:
    assert normalize_advisor_payload({"nextQuestion": "Q", "options": ["a"]})["optionType"] == "single"
    assert normalize_advisor_payload({"nextQuestion": "Q"})["optionType"] == "text_input"


def test_normalize_drops_malformed_nested_json_and_untitled_items() -> None:
    normalized = normalize_advisor_payload(
        {
            "done": True,
            "collectedJson": "{not json",
            "recommendation": {
                "items": [{"title": "Yrityslaina", "summary": "Vakuudeton"}, {"summary": "no title"}],
                "comparison": "Laina on edullisin.",
            },
        }
    )

    assert normalized["collected"] is None
    items = normalized["recommendation"]["items"]
    assert [item["title"] for item in items] == ["Yrityslaina"]
    assert items[0]["type"] == "business_loan_unsecured"
    assert normalized["recommendation"]["comparison"] == "Laina on edullisin."


@pytest.fixture()
def owned_company(create_user, db_session):
    owner = create_user(role="seller")
    company = Company(name="Advisor Oy", business_id="2331972-7", owner_id=owner.id, main_business_line="Retail")
    db_session.add(company)
    db_session.commit()
    return owner, company


class AdvisorStub:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.replies: List[Dict[str, Any]] = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        default = {"nextQuestion": "Paljonko rahoitusta tarvitaan?", "options": ["50k", "100k"]}
        raw = self.replies.pop(0) if self.replies else default
        if "error" in raw:
            return raw
        return kwargs["normalizer"](raw)


@pytest.fixture()
def advisor(monkeypatch: pytest.MonkeyPatch) -> AdvisorStub:
    stub = AdvisorStub()
    monkeypatch.setattr(llm_service, "run_advisor_turn", stub)
    return stub


@pytest.fixture()
def conversation_client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client(onboarding_router)


def test_conversation_requires_login(conversation_client: TestClient) -> None:
    response = conversation_client.post("/api/onboarding/conversation", json={"companyId": str(uuid.uuid4())})

    assert response.status_code == 401


def test_conversation_requires_company(conversation_client: TestClient, create_user, auth_header) -> None:
    user = create_user()

    response = conversation_client.post("/api/onboarding/conversation", headers=auth_header(user), json={})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "conversation.company_required"


def test_conversation_rejects_foreign_company(
    conversation_client: TestClient, owned_company, create_user, auth_header, advisor
) -> None:
    _, company = owned_company
    stranger = create_user(role="buyer")

    response = conversation_client.post(
        "/api/onboarding/conversation", headers=auth_header(stranger), json={"companyId": str(company.id)}
    )

    assert response.status_code == 403
    assert advisor.calls == []


def test_conversation_turn_forwards_context(
    conversation_client: TestClient, owned_company, auth_header, advisor
) -> None:
    owner, company = owned_company

    response = conversation_client.post(
        "/api/onboarding/conversation",
        headers=auth_header(owner),
        json={
            "locale": "sv",
            "companyId": str(company.id),
            "userMessage": "Snabb analys",
            "history": [{"role": "assistant", "content": "Vilken analys?", "timestamp": 1}],
            "avoidQuestions": ["Vilken analys?"],
            "analysisType": "quick",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["nextQuestion"] == "Paljonko rahoitusta tarvitaan?"
    assert body["optionType"] == "single"
    call = advisor.calls[0]
    assert call["locale"] == "sv"
    assert call["analysis_type"] == "quick"
    assert call["company_context"]["industry"] == "Retail"
    assert call["avoid_questions"] == ["Vilken analys?"]
    assert call["current_recommendations"] is None


def test_follow_up_sends_current_recommendations(
    conversation_client: TestClient, owned_company, auth_header, advisor
) -> None:
    owner, company = owned_company
    advisor.replies.append(
        {
            "cfoGuidance": "Leasing sopii paremmin.",
            "updatedRecommendations": {"items": [{"type": "leasing", "title": "Leasing"}]},
            "done": True,
        }
    )
    current = {"items": [{"type": "business_loan_unsecured", "title": "Yrityslaina"}], "comparison": None}

    response = conversation_client.post(
        "/api/onboarding/conversation",
        headers=auth_header(owner),
        json={
            "companyId": str(company.id),
            "userMessage": "Entä leasing?",
            "isRecommendationFollowUp": True,
            "currentRecommendations": current,
        },
    )

    assert response.status_code == 200
    assert response.json()["updatedRecommendations"]["items"][0]["title"] == "Leasing"
    assert advisor.calls[0]["current_recommendations"]["items"][0]["title"] == "Yrityslaina"


def test_advisor_failure_maps_to_502(
    conversation_client: TestClient, owned_company, auth_header, advisor
) -> None:
    owner, company = owned_company
    advisor.replies.append({"error": "timeout"})

    response = conversation_client.post(
        "/api/onboarding/conversation", headers=auth_header(owner), json={"companyId": str(company.id)}
    )

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "conversation.upstream_failed"
