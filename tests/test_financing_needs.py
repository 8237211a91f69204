from typing import Callable

import pytest
from fastapi.testclient import TestClient

from llm import llm_service
from models.company import Company
from models.financing import FinancingNeed
from services import financing_needs_service
from services.financing_needs_service import _coerce_amount, describe_questionnaire
from web.routers.financing import router as financing_router

QUESTIONNAIRE = {
    "summary": "Käyttöpääomaa kasvuun",
    "answers": [{"key": "amount", "value": "150 000 €"}, {"key": "horizon", "value": "6 kk"}],
}


@pytest.mark.parametrize(
    "value,expected",
    [
        (150000, 150000.0),
        ("150 000 €", 150000.0),
        ("1,250,000", 1250000.0),
        ("2,5", 2.5),
        ("noin 80000 euroa", 80000.0),
        ("ei tiedossa", None),
        (None, None),
    ],
)
def test_coerce_amount(value, expected) -> None:
    assert _coerce_amount(value) == expected


def test_describe_questionnaire_joins_summary_and_answers() -> None:
    assert describe_questionnaire(QUESTIONNAIRE) == "Käyttöpääomaa kasvuun. amount: 150 000 €; horizon: 6 kk"
    assert describe_questionnaire({}) == "Financing needs collected from the onboarding conversation."


@pytest.fixture()
def owner_and_company(create_user, db_session):
    owner = create_user(role="seller")
    company = Company(name="Rahoitus Oy", owner_id=owner.id)
    db_session.add(company)
    db_session.commit()
    return owner, company


def test_create_need_applies_parsed_details(owner_and_company, db_session, monkeypatch) -> None:
    owner, company = owner_and_company
    monkeypatch.setattr(
        llm_service,
        "parse_financing_description",
        lambda description: {
            "amount": "150 000",
            "currency": "eur",
            "purpose": "working capital",
            "time_horizon": "6 months",
            "urgency": "HIGH",
        },
    )

    need = financing_needs_service.create_need(
        db_session, company_id=company.id, questionnaire=QUESTIONNAIRE, user_id=str(owner.id)
    )

    assert need.amount == 150000.0
    assert need.currency == "EUR"
    assert need.purpose == "working capital"
    assert need.time_horizon == "6 months"
    assert need.urgency == "high"
    assert need.requirements["answers"][0] == {"key": "amount", "value": "150 000 €"}


def test_create_need_survives_enrichment_failure(owner_and_company, db_session, monkeypatch) -> None:
    owner, company = owner_and_company

    def boom(description):
        raise RuntimeError("model offline")

    monkeypatch.setattr(llm_service, "parse_financing_description", boom)

    need = financing_needs_service.create_need(
        db_session, company_id=company.id, questionnaire=QUESTIONNAIRE, user_id=str(owner.id)
    )

    assert need.id is not None
    assert need.amount is None
    assert need.currency == "EUR"
    assert db_session.query(FinancingNeed).count() == 1


def test_create_need_ignores_invalid_urgency(owner_and_company, db_session, monkeypatch) -> None:
    owner, company = owner_and_company
    monkeypatch.setattr(llm_service, "parse_financing_description", lambda description: {"urgency": "asap"})

    need = financing_needs_service.create_need(
        db_session, company_id=company.id, questionnaire=QUESTIONNAIRE, user_id=str(owner.id)
    )

    assert need.urgency is None


def test_financing_needs_api_roundtrip(
    make_client: Callable[..., TestClient], owner_and_company, auth_header, monkeypatch
) -> None:
    owner, company = owner_and_company
    monkeypatch.setattr(llm_service, "parse_financing_description", lambda description: {})
    client = make_client(financing_router)
    headers = auth_header(owner)

    created = client.post(
        "/api/financing-needs",
        headers=headers,
        json={"companyId": str(company.id), "questionnaire": QUESTIONNAIRE},
    )
    assert created.status_code == 201
    assert created.json()["data"]["createdBy"] == str(owner.id)

    listed = client.get("/api/financing-needs", headers=headers, params={"companyId": str(company.id)})
    assert listed.status_code == 200
    assert [item["id"] for item in listed.json()["data"]] == [created.json()["data"]["id"]]


def test_financing_needs_forbidden_for_other_users(
    make_client: Callable[..., TestClient], owner_and_company, create_user, auth_header
) -> None:
    _, company = owner_and_company
    stranger = create_user(role="buyer")
    client = make_client(financing_router)

    response = client.post(
        "/api/financing-needs",
        headers=auth_header(stranger),
        json={"companyId": str(company.id), "questionnaire": QUESTIONNAIRE},
    )

    assert response.status_code == 403
