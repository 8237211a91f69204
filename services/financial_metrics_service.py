"""Yearly financial metrics and the chart datasets built from them."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from models.company import FinancialMetric
from services.chart_styles import METRIC_SERIES, series_style

ORDERABLE_COLUMNS = {
    "fiscal_year": FinancialMetric.fiscal_year,
    "revenue": FinancialMetric.revenue,
    "created_at": FinancialMetric.created_at,
}
DEFAULT_CHART_METRICS = ("revenue", "operating_profit", "net_profit")


def list_metrics(
    db: Session,
    company_id: uuid.UUID,
    *,
    order: str = "fiscal_year",
    direction: str = "desc",
) -> List[FinancialMetric]:
    column = ORDERABLE_COLUMNS.get(order, FinancialMetric.fiscal_year)
    ordering = column.asc() if (direction or "").lower() == "asc" else column.desc()
    return db.query(FinancialMetric).filter(FinancialMetric.company_id == company_id).order_by(ordering).all()


def serialize_metric(metric: FinancialMetric) -> Dict[str, Any]:
    return {
        "id": metric.id,
        "companyId": metric.company_id,
        "fiscalYear": metric.fiscal_year,
        "revenue": metric.revenue,
        "operatingProfit": metric.operating_profit,
        "netProfit": metric.net_profit,
        "totalAssets": metric.total_assets,
        "equity": metric.equity,
        "employees": metric.employees,
        "source": metric.source,
    }


def build_chart(metrics: Sequence[FinancialMetric], keys: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """Chronological labels plus one styled dataset per metric key."""

    ordered = sorted(metrics, key=lambda item: item.fiscal_year)
    labels = [str(item.fiscal_year) for item in ordered]
    datasets = []
    for index, key in enumerate(keys or DEFAULT_CHART_METRICS):
        label, _ = METRIC_SERIES.get(key, (key, None))
        datasets.append(
            {
                "label": label,
                "data": [getattr(item, key, None) for item in ordered],
                "style": series_style(key, index),
            }
        )
    return {"labels": labels, "datasets": datasets}


__all__ = ["build_chart", "list_metrics", "serialize_metric"]
