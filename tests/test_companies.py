import json
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from models.company import Company, FinancialMetric
from services import company_registry
from services.company_registry import CompanyRegistryError
from web.routers.companies import router as companies_router
from web.routers.financial_metrics import router as metrics_router

YTJ_RECORD = {
    "businessId": {"value": "2331972-7", "registrationDate": "2010-06-01"},
    "names": [{"name": "Trusty Testi Oy", "type": "1"}],
    "companyForms": [
        {
            "descriptions": [
                {"languageCode": "3", "description": "Limited company"},
                {"languageCode": "1", "description": "Osakeyhtiö"},
            ]
        }
    ],
    "mainBusinessLine": {
        "descriptions": [
            {"languageCode": "3", "description": "Software"},
            {"languageCode": "1", "description": "Ohjelmistojen suunnittelu"},
        ]
    },
    "addresses": [
        {
            "street": "Mannerheimintie 1",
            "postCode": "00100",
            "postOffices": [{"languageCode": "2", "city": "HELSINGFORS"}, {"languageCode": "1", "city": "HELSINKI"}],
        }
    ],
    "website": {"url": "https://testi.fi"},
}


def test_parse_company_prefers_finnish_descriptions() -> None:
    parsed = company_registry.parse_company(YTJ_RECORD)

    assert parsed == {
        "name": "Trusty Testi Oy",
        "businessId": "2331972-7",
        "registrationDate": "2010-06-01",
        "type": "Osakeyhtiö",
        "address": {"street": "Mannerheimintie 1", "postCode": "00100", "city": "HELSINKI"},
        "mainBusinessLine": "Ohjelmistojen suunnittelu",
        "website": "https://testi.fi",
    }


def test_parse_company_tolerates_sparse_record() -> None:
    parsed = company_registry.parse_company({"businessId": {"value": "1"}, "names": []})

    assert parsed["name"] == ""
    assert parsed["address"] is None
    assert parsed["type"] is None
    assert parsed["mainBusinessLine"] is None


def test_search_sends_name_and_limit() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"totalResults": 2, "companies": [YTJ_RECORD, YTJ_RECORD]})

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url="https://registry.test/v3")
    results = company_registry.search_companies("  Trusty ", limit=1, client=client)

    assert seen["path"] == "/v3/companies"
    assert seen["params"] == {"name": "Trusty", "maxResults": "1"}
    assert [item["businessId"] for item in results] == ["2331972-7"]


def test_search_short_query_skips_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("registry should not be queried")

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url="https://registry.test")

    assert company_registry.search_companies("ab", client=client) == []


@pytest.mark.parametrize("status_code", [429, 500])
def test_search_raises_on_http_errors(status_code: int) -> None:
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(status_code, json={})),
        base_url="https://registry.test",
    )

    with pytest.raises(CompanyRegistryError) as excinfo:
        company_registry.search_companies("Trusty", client=client)

    assert excinfo.value.status_code == status_code


def test_search_endpoint_is_public_and_maps_failures(make_client: Callable[..., TestClient], monkeypatch) -> None:
    client = make_client(companies_router)
    monkeypatch.setattr(
        company_registry, "search_companies", lambda query, limit=5: [company_registry.parse_company(YTJ_RECORD)]
    )

    ok = client.get("/api/companies/search", params={"query": "Trusty"})
    assert ok.status_code == 200
    assert ok.json()["data"][0]["address"]["city"] == "HELSINKI"

    def failing(query, limit=5):
        raise CompanyRegistryError("Registry unavailable")

    monkeypatch.setattr(company_registry, "search_companies", failing)
    failed = client.get("/api/companies/search", params={"query": "Trusty"})
    assert failed.status_code == 502
    assert failed.json()["detail"]["code"] == "companies.registry_failed"


def test_upsert_creates_then_updates_by_business_id(
    make_client: Callable[..., TestClient], create_user, auth_header, db_session
) -> None:
    user = create_user(role="seller")
    client = make_client(companies_router)
    headers = auth_header(user)

    first = client.post("/api/companies", headers=headers, json={"name": "Testi Oy", "businessId": "2331972-7"})
    second = client.post(
        "/api/companies",
        headers=headers,
        json={"name": "Testi Oy Ab", "businessId": "2331972-7", "city": "Espoo"},
    )

    assert first.json()["created"] is True
    assert second.json()["created"] is False
    assert second.json()["data"]["id"] == first.json()["data"]["id"]
    assert second.json()["data"]["city"] == "Espoo"
    db_session.expire_all()
    assert db_session.query(Company).count() == 1

    listed = client.get("/api/companies", headers=headers).json()["data"]
    assert [item["name"] for item in listed] == ["Testi Oy Ab"]


def test_companies_require_authentication(make_client: Callable[..., TestClient]) -> None:
    client = make_client(companies_router)

    response = client.get("/api/companies")

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "auth.required"


def _company_with_metrics(db_session, owner) -> Company:
    company = Company(name="Metrics Oy", owner_id=owner.id)
    db_session.add(company)
    db_session.flush()
    for year, revenue, profit in ((2021, 1.0e6, 5.0e4), (2023, 1.4e6, 9.0e4), (2022, 1.2e6, 7.0e4)):
        db_session.add(
            FinancialMetric(company_id=company.id, fiscal_year=year, revenue=revenue, operating_profit=profit)
        )
    db_session.commit()
    return company


def test_financial_metrics_ordering_and_chart(
    make_client: Callable[..., TestClient], create_user, auth_header, db_session
) -> None:
    owner = create_user(role="seller")
    company = _company_with_metrics(db_session, owner)
    client = make_client(metrics_router)

    response = client.get(
        "/api/financial-metrics/list",
        headers=auth_header(owner),
        params={"companyId": str(company.id), "direction": "asc", "chart": "true"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert [row["fiscalYear"] for row in payload["data"]] == [2021, 2022, 2023]
    chart = payload["chart"]
    assert chart["labels"] == ["2021", "2022", "2023"]
    revenue = chart["datasets"][0]
    assert revenue["label"] == "Revenue"
    assert revenue["data"] == [1.0e6, 1.2e6, 1.4e6]
    assert revenue["style"]["color"] == "#e5c07b"


def test_financial_metrics_default_is_newest_first_without_chart(
    make_client: Callable[..., TestClient], create_user, auth_header, db_session
) -> None:
    owner = create_user(role="seller")
    company = _company_with_metrics(db_session, owner)
    client = make_client(metrics_router)

    payload = client.get(
        "/api/financial-metrics/list", headers=auth_header(owner), params={"companyId": str(company.id)}
    ).json()

    assert [row["fiscalYear"] for row in payload["data"]] == [2023, 2022, 2021]
    assert payload["chart"] is None


def test_financial_metrics_hidden_from_other_users(
    make_client: Callable[..., TestClient], create_user, auth_header, db_session
) -> None:
    owner = create_user(role="seller")
    stranger = create_user(role="buyer")
    company = _company_with_metrics(db_session, owner)
    client = make_client(metrics_router)

    response = client.get(
        "/api/financial-metrics/list", headers=auth_header(stranger), params={"companyId": str(company.id)}
    )

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "companies.forbidden"


def test_company_context_includes_enrichment_summary() -> None:
    from services.company_service import company_context

    company = Company(name="Ctx Oy", business_id="1", city="Oulu")
    company.metadata = {"summary": json.dumps({"employees": 12})}

    context = company_context(company)

    assert context["name"] == "Ctx Oy"
    assert context["city"] == "Oulu"
    assert json.loads(context["enrichment"]) == {"employees": 12}
