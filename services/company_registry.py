"""Client for the public Finnish business registry (PRH/YTJ open data)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.env import env_float, env_str

logger = logging.getLogger(__name__)

REGISTRY_BASE_URL = env_str("COMPANY_REGISTRY_BASE_URL", "https://avoindata.prh.fi/opendata-ytj-api/v3")
REGISTRY_TIMEOUT = env_float("COMPANY_REGISTRY_TIMEOUT_SECONDS", 30.0, minimum=1.0)
MIN_QUERY_LENGTH = 3
_HEADERS = {"Accept": "application/json", "User-Agent": "TrustyPlatform/1.0"}
_FINNISH = "1"


class CompanyRegistryError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _pick_localized(entries: List[Dict[str, Any]], key: str) -> str:
    for entry in entries:
        if str(entry.get("languageCode")) == _FINNISH and entry.get(key):
            return str(entry[key])
    return str(entries[0].get(key) or "") if entries else ""


def parse_company(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize one YTJ v3 record into the flat shape the forms consume."""

    business = raw.get("businessId") or {}
    names = raw.get("names") or []
    forms = raw.get("companyForms") or []
    lines = raw.get("mainBusinessLine") or {}
    addresses = raw.get("addresses") or []

    address = None
    if addresses:
        first = addresses[0]
        address = {
            "street": first.get("street") or "",
            "postCode": first.get("postCode") or "",
            "city": _pick_localized(first.get("postOffices") or [], "city"),
        }

    website = raw.get("website")
    if isinstance(website, dict):
        website = website.get("url")

    return {
        "name": (names[0].get("name") if names else "") or "",
        "businessId": business.get("value") if isinstance(business, dict) else str(business or ""),
        "registrationDate": (business.get("registrationDate") if isinstance(business, dict) else None)
        or raw.get("registrationDate"),
        "type": _pick_localized(forms[0].get("descriptions") or [], "description") if forms else None,
        "address": address,
        "mainBusinessLine": _pick_localized(lines.get("descriptions") or [], "description") or None,
        "website": website or None,
    }


def search_companies(query: str, *, limit: int = 5, client: Optional[httpx.Client] = None) -> List[Dict[str, Any]]:
    """Search the registry by name. Queries shorter than three characters return ``[]``.

    Raises:
        CompanyRegistryError: on transport errors or non-2xx responses.
    """

    term = (query or "").strip()
    if len(term) < MIN_QUERY_LENGTH:
        return []

    owns_client = client is None
    http = client or httpx.Client(base_url=REGISTRY_BASE_URL, headers=_HEADERS, timeout=REGISTRY_TIMEOUT)
    try:
        response = http.get("/companies", params={"name": term, "maxResults": max(1, min(limit, 50))})
    except httpx.HTTPError as exc:
        logger.warning("Company registry request failed: %s", exc)
        raise CompanyRegistryError(f"Registry unavailable: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    if response.status_code == 429:
        raise CompanyRegistryError("Too many registry requests, try again shortly.", 429)
    if response.status_code >= 400:
        raise CompanyRegistryError(f"Registry search failed (HTTP {response.status_code}).", response.status_code)

    payload = response.json()
    companies = payload.get("companies") if isinstance(payload, dict) else None
    if not isinstance(companies, list):
        return []
    return [parse_company(item) for item in companies[:limit]]


__all__ = ["CompanyRegistryError", "MIN_QUERY_LENGTH", "parse_company", "search_companies"]
