"""
Market share aggregation over saved tenders.

Only tenders with a positive value take part. "Our sector" tenders form
the subset whose share of the total is reported.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ValuedTender:
    """A saved tender reduced to what the aggregation needs."""

    id: str
    value: float | None
    in_subset: bool = False

    @property
    def counts(self) -> bool:
        """Whether this tender takes part in the calculation."""
        return self.value is not None and math.isfinite(self.value) and self.value > 0


@dataclass(frozen=True)
class MarketShareCalculation:
    """Totals and share computed from a tender collection."""

    total_value: float
    subset_value: float
    percentage: float
    tender_count: int
    subset_count: int

    @property
    def outside_value(self) -> float:
        return self.total_value - self.subset_value


def compute_market_share(tenders: Iterable[ValuedTender]) -> MarketShareCalculation:
    """Compute the subset's share of the total tender value.

    Tenders whose value is missing, zero or negative are ignored for both
    sums and counts. Sums use ``math.fsum`` so the result does not depend
    on input order.
    """
    valued = [t for t in tenders if t.counts]
    subset = [t for t in valued if t.in_subset]

    total_value = math.fsum(t.value for t in valued)
    subset_value = math.fsum(t.value for t in subset)

    percentage = (subset_value / total_value) * 100 if total_value > 0 else 0.0

    return MarketShareCalculation(
        total_value=total_value,
        subset_value=subset_value,
        percentage=percentage,
        tender_count=len(valued),
        subset_count=len(subset),
    )
