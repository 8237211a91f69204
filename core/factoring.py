"""Factoring estimate arithmetic shared by the calculator API and widget."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Union

Number = Union[Decimal, float, int]

ADVANCE_PCT = 80
FEE_RATE_LOW = Decimal("0.015")
FEE_RATE_MID = Decimal("0.03")
FEE_RATE_HIGH = Decimal("0.045")
FACTORING_CASH_DELAY_DAYS = 2


@dataclass(frozen=True)
class FactoringResult:
    advancePct: int
    advance: int
    feesLow: int
    feesMid: int
    feesHigh: int
    freedWorkingCapital: int
    daysImproved: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def round_half_up(value: Number) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_factoring(monthly_invoices: Number, avg_days: Number) -> FactoringResult:
    """Factoring estimate for one month of invoicing.

    Money amounts are rounded half up to whole euros. Days are not rounded.

    >>> compute_factoring(20000, 30).freedWorkingCapital
    15400
    >>> compute_factoring(20000, 30.5).daysImproved
    28.5
    """

    invoices = Decimal(str(monthly_invoices or 0))
    advance = round_half_up(invoices * ADVANCE_PCT / 100)
    fees_mid = round_half_up(invoices * FEE_RATE_MID)
    days = Decimal(str(avg_days or 0)) - FACTORING_CASH_DELAY_DAYS
    return FactoringResult(
        advancePct=ADVANCE_PCT,
        advance=advance,
        feesLow=round_half_up(invoices * FEE_RATE_LOW),
        feesMid=fees_mid,
        feesHigh=round_half_up(invoices * FEE_RATE_HIGH),
        freedWorkingCapital=max(advance - fees_mid, 0),
        daysImproved=float(max(days, Decimal(0))),
    )
