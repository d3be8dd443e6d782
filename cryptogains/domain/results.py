# cryptogains/domain/results.py
from dataclasses import dataclass, field, KW_ONLY
from fractions import Fraction
from typing import FrozenSet, Tuple

import logging

from .enums import HoldingTerm
from cryptogains.utils.date_utils import format_acquisition_date_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxEvent:
    date: str  # YYYY-MM-DD, disposal date
    amount: Fraction
    currency: str
    unit_sale_price: Fraction
    avg_unit_cost_basis: Fraction
    long_term: bool

    _: KW_ONLY
    acquisition_dates: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.amount, Fraction) or self.amount <= 0:
            raise ValueError(f"TaxEvent.amount must be a positive Fraction, got {self.amount!r}")
        if not isinstance(self.unit_sale_price, Fraction) or not isinstance(self.avg_unit_cost_basis, Fraction):
            raise TypeError("TaxEvent prices must be Fractions")
        if not isinstance(self.acquisition_dates, frozenset):
            object.__setattr__(self, "acquisition_dates", frozenset(self.acquisition_dates))

    @property
    def term(self) -> HoldingTerm:
        return HoldingTerm.from_long_term_flag(self.long_term)

    @property
    def proceeds(self) -> Fraction:
        return self.amount * self.unit_sale_price

    @property
    def cost_basis(self) -> Fraction:
        return self.amount * self.avg_unit_cost_basis

    @property
    def gain(self) -> Fraction:
        return self.proceeds - self.cost_basis


@dataclass(frozen=True)
class TaxEventSummary:
    """One report line: every tax event sharing a disposal date, currency and term."""
    date: str
    currency: str
    term: HoldingTerm

    amount: Fraction
    proceeds: Fraction
    cost_basis: Fraction

    _: KW_ONLY
    acquisition_dates: Tuple[str, ...] = ()
    event_count: int = 1

    @property
    def unit_sale_price(self) -> Fraction:
        return self.proceeds / self.amount

    @property
    def unit_cost_basis(self) -> Fraction:
        return self.cost_basis / self.amount

    @property
    def gain(self) -> Fraction:
        return self.proceeds - self.cost_basis

    @property
    def acquisition_date_range(self) -> str:
        return format_acquisition_date_range(self.acquisition_dates)


@dataclass
class TaxTotals:
    proceeds: Fraction = Fraction(0)
    cost_basis: Fraction = Fraction(0)

    @property
    def gain(self) -> Fraction:
        return self.proceeds - self.cost_basis
