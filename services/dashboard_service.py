"""Role dashboards: one aggregate builder per role, picked through a registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.logging import get_logger
from core.roles import ROLE_LABELS, UserRole, parse_role
from models.company import Company
from models.deal import CompanyView, Deal, Nda, WatchlistEntry
from models.organization import Organization
from models.user import User

logger = get_logger(__name__)

PLATFORM_FEE_RATE = 0.03
BROKER_COMMISSION_RATE = 0.03


@dataclass(frozen=True)
class DashboardRequestContext:
    """Caller identity handed to each dashboard."""

    user_id: Optional[UUID]
    org_id: Optional[UUID]
    role: UserRole = UserRole.VISITOR


@dataclass
class DashboardView:
    role: UserRole
    stats: Dict[str, Any] = field(default_factory=dict)
    cards: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "roleLabel": ROLE_LABELS[self.role],
            "stats": self.stats,
            "cards": self.cards,
        }


_REGISTRY: Dict[UserRole, Type["RoleDashboard"]] = {}


def register(role: UserRole) -> Callable[[Type["RoleDashboard"]], Type["RoleDashboard"]]:
    def decorator(cls: Type["RoleDashboard"]) -> Type["RoleDashboard"]:
        cls.role = role
        _REGISTRY[role] = cls
        return cls

    return decorator


class RoleDashboard:
    role: ClassVar[UserRole]
    empty_stats: ClassVar[Dict[str, Any]] = {}
    cards: ClassVar[List[Dict[str, Any]]] = []

    def __init__(self, db: Session, context: DashboardRequestContext) -> None:
        self.db = db
        self.context = context

    def collect(self) -> Dict[str, Any]:
        raise NotImplementedError

    def build(self) -> DashboardView:
        try:
            stats = self.collect()
        except Exception as exc:
            logger.error("Error fetching %s dashboard stats: %s", self.role.value, exc, exc_info=True)
            try:
                self.db.rollback()
            except Exception:  # pragma: no cover - best effort
                pass
            stats = dict(self.empty_stats)
        return DashboardView(role=self.role, stats=stats, cards=[dict(card) for card in self.cards])

    def _active_org_deals(self):
        return (
            self.db.query(Deal)
            .join(Company, Company.id == Deal.company_id)
            .filter(Company.organization_id == self.context.org_id, Deal.status == "active")
        )


@register(UserRole.ADMIN)
class AdminDashboard(RoleDashboard):
    empty_stats = {"totalUsers": 0, "totalCompanies": 0, "totalDeals": 0, "activeDeals": 0, "platformRevenue": 0.0}

    def collect(self) -> Dict[str, Any]:
        db = self.db
        deal_values = db.query(Deal.actual_value, Deal.estimated_value).all()
        revenue = sum((actual or estimated or 0.0) * PLATFORM_FEE_RATE for actual, estimated in deal_values)
        return {
            "totalUsers": db.query(func.count(User.id)).scalar() or 0,
            "totalCompanies": db.query(func.count(Company.id)).filter(Company.is_deleted.is_(False)).scalar() or 0,
            "totalDeals": len(deal_values),
            "activeDeals": db.query(func.count(Deal.id)).filter(Deal.status == "active").scalar() or 0,
            "platformRevenue": round(revenue, 2),
        }


@register(UserRole.BROKER)
class BrokerDashboard(RoleDashboard):
    empty_stats = {"activeDeals": 0, "clients": 0, "estimatedCommission": 0.0}

    def collect(self) -> Dict[str, Any]:
        if self.context.org_id is None:
            return dict(self.empty_stats)
        deals = self._active_org_deals().all()
        clients = (
            self.db.query(func.count(Company.id))
            .filter(Company.organization_id == self.context.org_id, Company.is_deleted.is_(False))
            .scalar()
        )
        commission = sum((deal.estimated_value or 0.0) * BROKER_COMMISSION_RATE for deal in deals)
        return {"activeDeals": len(deals), "clients": clients or 0, "estimatedCommission": round(commission, 2)}


@register(UserRole.SELLER)
class SellerDashboard(RoleDashboard):
    empty_stats = {"companies": 0, "activeDeals": 0}

    def collect(self) -> Dict[str, Any]:
        if self.context.org_id is None:
            return dict(self.empty_stats)
        companies = (
            self.db.query(func.count(Company.id))
            .filter(Company.organization_id == self.context.org_id, Company.is_deleted.is_(False))
            .scalar()
        )
        return {"companies": companies or 0, "activeDeals": self._active_org_deals().count()}


@register(UserRole.BUYER)
class BuyerDashboard(RoleDashboard):
    empty_stats = {"watchlist": 0, "ndas": 0, "activeDeals": 0, "viewedCompanies": 0}

    def collect(self) -> Dict[str, Any]:
        user_id = self.context.user_id
        if user_id is None:
            return dict(self.empty_stats)
        db = self.db
        return {
            "watchlist": db.query(func.count(WatchlistEntry.id)).filter(WatchlistEntry.user_id == user_id).scalar() or 0,
            "ndas": db.query(func.count(Nda.id)).filter(Nda.buyer_id == user_id).scalar() or 0,
            "activeDeals": db.query(func.count(Deal.id))
            .filter(Deal.buyer_id == user_id, Deal.status == "active")
            .scalar()
            or 0,
            "viewedCompanies": db.query(func.count(func.distinct(CompanyView.company_id)))
            .filter(CompanyView.user_id == user_id)
            .scalar()
            or 0,
        }


@register(UserRole.PARTNER)
class PartnerDashboard(RoleDashboard):
    empty_stats = {
        "organizationType": "bank",
        "activeDeals": 0,
        "pendingAssessments": 0,
        "completedAssessments": 0,
        "approvalRate": 0,
        "averageRiskScore": 0,
        "totalFinancing": 0,
    }

    def collect(self) -> Dict[str, Any]:
        stats = dict(self.empty_stats)
        if self.context.org_id is not None:
            org_type = (
                self.db.query(Organization.type).filter(Organization.id == self.context.org_id).scalar()
            )
            if org_type:
                stats["organizationType"] = org_type
        return stats


@register(UserRole.VISITOR)
class VisitorDashboard(RoleDashboard):
    cards = [
        {
            "id": "sign-up",
            "title": "Luo tili",
            "description": "Rekisteröidy ja tutustu myynnissä oleviin yrityksiin.",
            "href": "/auth/sign-up",
        },
        {
            "id": "sell-company",
            "title": "Myy yrityksesi",
            "description": "Aloita myyjänä ja saa yrityksellesi arvonmääritys.",
            "href": "/auth/sign-up?role=seller",
        },
    ]

    def collect(self) -> Dict[str, Any]:
        return {}


def dashboard_for(role: UserRole) -> Type[RoleDashboard]:
    return _REGISTRY.get(role, VisitorDashboard)


def build_dashboard(db: Session, *, context: DashboardRequestContext) -> DashboardView:
    """Dispatch on the caller's role and return its dashboard payload."""

    role = parse_role(context.role.value if isinstance(context.role, UserRole) else context.role)
    return dashboard_for(role)(db, context).build()


__all__ = [
    "DashboardRequestContext",
    "DashboardView",
    "RoleDashboard",
    "build_dashboard",
    "dashboard_for",
]
