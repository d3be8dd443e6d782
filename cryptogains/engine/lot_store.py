# cryptogains/engine/lot_store.py
import logging
from bisect import insort
from dataclasses import dataclass, field
from datetime import date
from fractions import Fraction
from itertools import count
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

_lot_sequence = count(1)


@dataclass
class Lot:
    currency: str
    amount: Fraction
    unit_cost_basis: Fraction  # USD per unit
    acquisition_date: date
    tag: str = ""
    # Insertion order, breaks ties between lots acquired on the same day
    sequence: int = field(default_factory=lambda: next(_lot_sequence), init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.amount, Fraction) or self.amount < 0:
            raise ValueError(f"Lot amount must be a non-negative Fraction: {self.amount!r}")
        if not isinstance(self.unit_cost_basis, Fraction) or self.unit_cost_basis < 0:
            raise ValueError(f"Lot unit_cost_basis must be a non-negative Fraction: {self.unit_cost_basis!r}")

    @property
    def acquisition_date_iso(self) -> str:
        return self.acquisition_date.isoformat()

    @property
    def total_cost_basis(self) -> Fraction:
        return self.amount * self.unit_cost_basis

    def consume(self, quantity: Fraction) -> None:
        """Reduces the lot by `quantity`. The amount never increases and never goes below zero."""
        if quantity < 0 or quantity > self.amount:
            raise ValueError(f"Cannot consume {quantity} from lot holding {self.amount} {self.currency}")
        self.amount -= quantity


def _consumption_sort_key(lot: Lot):
    return (lot.acquisition_date, lot.sequence)


class LotStore:
    """
    Live acquisition lots, one list per currency.

    Each list is kept ascending by (acquisition date, insertion order), so the
    lot consumed next is always the last element: the most recently acquired
    lot goes first and consumption walks back toward the earliest one.
    """

    def __init__(self):
        self._lots_by_currency: Dict[str, List[Lot]] = {}

    def add(self, lot: Lot) -> None:
        lots = self._lots_by_currency.setdefault(lot.currency, [])
        insort(lots, lot, key=_consumption_sort_key)
        logger.debug(f"Added lot {lot.amount} {lot.currency} @ {lot.unit_cost_basis} acquired {lot.acquisition_date_iso} ({lot.tag or 'no tag'}).")

    def peek_next(self, currency: str) -> Optional[Lot]:
        lots = self._lots_by_currency.get(currency)
        if not lots:
            return None
        return lots[-1]

    def remove_next(self, currency: str) -> Lot:
        lot = self._lots_by_currency[currency].pop()
        if lot.amount != 0:
            logger.warning(f"Removed lot of {lot.currency} acquired {lot.acquisition_date_iso} with non-zero amount {lot.amount}.")
        return lot

    def lots_for(self, currency: str) -> List[Lot]:
        """Live lots of `currency` in consumption order (next to be consumed first)."""
        return list(reversed(self._lots_by_currency.get(currency, [])))

    def total_amount(self, currency: str) -> Fraction:
        return sum((lot.amount for lot in self._lots_by_currency.get(currency, [])), Fraction(0))

    def currencies(self) -> List[str]:
        return sorted(c for c, lots in self._lots_by_currency.items() if lots)

    def __iter__(self) -> Iterator[Lot]:
        for currency in sorted(self._lots_by_currency):
            yield from self._lots_by_currency[currency]

    def __len__(self) -> int:
        return sum(len(lots) for lots in self._lots_by_currency.values())
