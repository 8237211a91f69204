"""Company records owned by platform users."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from models.company import Company
from models.user import User

logger = logging.getLogger(__name__)

_FIELD_MAP = (
    ("businessId", "business_id"),
    ("industry", "main_business_line"),
    ("registrationDate", "registration_date"),
    ("website", "website"),
    ("street", "street"),
    ("postCode", "post_code"),
    ("city", "city"),
    ("countryCode", "country_code"),
)


class CompanyServiceError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


def list_companies_for_user(db: Session, user_id: str) -> List[Company]:
    owner = uuid.UUID(str(user_id))
    return (
        db.query(Company)
        .filter(Company.owner_id == owner, Company.is_deleted.is_(False))
        .order_by(Company.created_at.desc())
        .all()
    )


def get_company_for_user(db: Session, company_id: uuid.UUID, user_id: str, *, is_admin: bool = False) -> Company:
    company = db.query(Company).filter(Company.id == company_id, Company.is_deleted.is_(False)).first()
    if company is None:
        raise CompanyServiceError("companies.not_found", "Company not found.", 404)
    if not is_admin and str(company.owner_id) != str(user_id):
        raise CompanyServiceError("companies.forbidden", "You do not have access to this company.", 403)
    return company


def upsert_company(db: Session, user_id: str, payload: Dict[str, Any]) -> Tuple[Company, bool]:
    """Create the caller's company or update the one with the same business id.

    Returns ``(company, created)``. The user's profile points at the company
    afterwards.
    """

    name = (payload.get("name") or "").strip()
    if not name:
        raise CompanyServiceError("companies.name_required", "Company name is required.")
    owner = uuid.UUID(str(user_id))
    business_id = (payload.get("businessId") or "").strip() or None

    company: Optional[Company] = None
    if business_id:
        company = (
            db.query(Company)
            .filter(Company.owner_id == owner, Company.business_id == business_id, Company.is_deleted.is_(False))
            .first()
        )
    created = company is None
    if company is None:
        user = db.query(User).filter(User.id == owner).first()
        company = Company(owner_id=owner, organization_id=user.organization_id if user else None)
        db.add(company)

    company.name = name
    for source, attr in _FIELD_MAP:
        value = payload.get(source)
        if value not in (None, ""):
            setattr(company, attr, value.strip() if isinstance(value, str) else value)
    db.flush()

    user = db.query(User).filter(User.id == owner).first()
    if user is not None and user.company_id is None:
        user.company_id = company.id
    db.commit()
    db.refresh(company)
    logger.info("%s company %s for user %s.", "Created" if created else "Updated", company.id, user_id)
    return company, created


def serialize_company(company: Company) -> Dict[str, Any]:
    return {
        "id": company.id,
        "name": company.name,
        "businessId": company.business_id,
        "industry": company.main_business_line,
        "registrationDate": company.registration_date,
        "website": company.website,
        "street": company.street,
        "postCode": company.post_code,
        "city": company.city,
        "countryCode": company.country_code,
        "organizationId": company.organization_id,
        "enrichmentStatus": company.enrichment_status,
        "createdAt": company.created_at,
    }


def company_context(company: Optional[Company]) -> Dict[str, Any]:
    """Compact company facts handed to the advisor prompt."""

    if company is None:
        return {}
    return {
        "name": company.name,
        "businessId": company.business_id,
        "industry": company.main_business_line,
        "city": company.city,
        "registrationDate": company.registration_date,
        "website": company.website,
        "enrichment": company.metadata.get("summary") if company.metadata else None,
    }


__all__ = [
    "CompanyServiceError",
    "company_context",
    "get_company_for_user",
    "list_companies_for_user",
    "serialize_company",
    "upsert_company",
]
