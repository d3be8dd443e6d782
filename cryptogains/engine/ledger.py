# cryptogains/engine/ledger.py
import logging
from dataclasses import dataclass, field
from datetime import date
from fractions import Fraction
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Set

import cryptogains.config as config
from cryptogains.domain.errors import (
    AmbiguousPriceError,
    InsufficientBalanceError,
    InvalidCurrencyError,
    InvalidQuantityError,
    LedgerInvariantError,
    MissingPriceError,
    NoRemainingLotsError,
)
from cryptogains.domain.results import TaxEvent
from cryptogains.engine.lot_store import Lot, LotStore
from cryptogains.utils.date_utils import is_long_term, parse_transaction_date
from cryptogains.utils.type_utils import parse_quantity

logger = logging.getLogger(__name__)


@dataclass
class _TermBucket:
    amount: Fraction = Fraction(0)
    cost_basis_sum: Fraction = Fraction(0)
    acquisition_dates: Set[str] = field(default_factory=set)

    def add(self, quantity: Fraction, lot: Lot) -> None:
        self.amount += quantity
        self.cost_basis_sum += quantity * lot.unit_cost_basis
        self.acquisition_dates.add(lot.acquisition_date_iso)

    def to_tax_event(self, disposal_date: str, currency: str, unit_sale_price: Fraction, long_term: bool) -> TaxEvent:
        return TaxEvent(
            date=disposal_date,
            amount=self.amount,
            currency=currency,
            unit_sale_price=unit_sale_price,
            avg_unit_cost_basis=self.cost_basis_sum / self.amount,
            long_term=long_term,
            acquisition_dates=frozenset(self.acquisition_dates),
        )


def derive_implied_unit_price(known_amount: Fraction, known_unit_price: Fraction, other_amount: Fraction) -> Fraction:
    """USD price per unit of the other leg of a trade: known_amount * known_unit_price / other_amount."""
    if other_amount == 0:
        raise InvalidQuantityError("Cannot derive an implied unit price for a trade leg with zero amount")
    return known_amount * known_unit_price / other_amount


class LotLedger:
    """
    Per-currency acquisition lots, running balances and the tax events emitted by disposals.

    Operations must be applied in transaction-log order. Every operation
    validates all of its inputs before changing any state, so a rejected call
    leaves the ledger exactly as it was.
    """

    def __init__(self, known_currencies: Optional[Iterable[str]] = None):
        currencies = config.KNOWN_CURRENCIES if known_currencies is None else known_currencies
        self.known_currencies: frozenset[str] = frozenset(currencies)
        self.lot_store = LotStore()
        self._balances: Dict[str, Fraction] = {currency: Fraction(0) for currency in self.known_currencies}
        self._tax_events: Dict[str, List[TaxEvent]] = {}

    @property
    def balances(self) -> Mapping[str, Fraction]:
        return MappingProxyType(self._balances)

    @property
    def tax_events(self) -> Mapping[str, List[TaxEvent]]:
        return MappingProxyType({d: list(events) for d, events in self._tax_events.items()})

    def all_tax_events(self) -> List[TaxEvent]:
        return [event for d in sorted(self._tax_events) for event in self._tax_events[d]]

    def _validate_currency(self, currency: str) -> str:
        if currency not in self.known_currencies:
            raise InvalidCurrencyError(f"Unknown currency {currency!r}. Known currencies: {', '.join(sorted(self.known_currencies))}")
        return currency

    def acquire(self, currency: str, amount, unit_cost_basis, acquisition_date, tag: str = "") -> Optional[Lot]:
        """
        Records a purchase as a new lot and raises the currency's balance.
        Returns the new lot, or None when the amount is zero (nothing to hold).
        """
        self._validate_currency(currency)
        amount_val = parse_quantity(amount, "amount")
        cost_basis_val = parse_quantity(unit_cost_basis, "unit cost basis")
        acq_date = parse_transaction_date(acquisition_date)
        return self._acquire_validated(currency, amount_val, cost_basis_val, acq_date, tag)

    def _acquire_validated(self, currency: str, amount: Fraction, unit_cost_basis: Fraction,
                           acquisition_date: date, tag: str) -> Optional[Lot]:
        if amount == 0:
            logger.debug(f"Ignoring zero-amount acquisition of {currency} on {acquisition_date.isoformat()} ({tag or 'no tag'}).")
            return None

        lot = Lot(
            currency=currency,
            amount=amount,
            unit_cost_basis=unit_cost_basis,
            acquisition_date=acquisition_date,
            tag=tag,
        )
        self.lot_store.add(lot)
        self._balances[currency] += amount
        logger.debug(f"Acquired {amount} {currency} @ {unit_cost_basis} USD on {acquisition_date.isoformat()}. Balance: {self._balances[currency]}")
        return lot

    def dispose(self, currency: str, amount, unit_sale_price, disposal_date, tag: str = "") -> List[TaxEvent]:
        """
        Records a sale. Lots are consumed most-recently-acquired first; the
        consumed quantities are split into a long-term and a short-term tax
        event (long-term first), each emitted only if non-empty.
        """
        self._validate_currency(currency)
        amount_val = parse_quantity(amount, "amount")
        sale_price_val = parse_quantity(unit_sale_price, "unit sale price")
        sale_date = parse_transaction_date(disposal_date)
        self._check_sufficient_balance(currency, amount_val, sale_date)
        return self._dispose_validated(currency, amount_val, sale_price_val, sale_date, tag)

    def _check_sufficient_balance(self, currency: str, amount: Fraction, disposal_date: date) -> None:
        available = self._balances[currency]
        if available - amount < 0:
            raise InsufficientBalanceError(
                f"Cannot dispose of {amount} {currency} on {disposal_date.isoformat()}: "
                f"only {available} {currency} held."
            )

    def _dispose_validated(self, currency: str, amount: Fraction, unit_sale_price: Fraction,
                           disposal_date: date, tag: str) -> List[TaxEvent]:
        self._balances[currency] -= amount

        long_term = _TermBucket()
        short_term = _TermBucket()
        quantity_remaining = amount

        while quantity_remaining > 0:
            current_lot = self.lot_store.peek_next(currency)
            if current_lot is None:
                raise NoRemainingLotsError(
                    f"No {currency} lots left for disposal on {disposal_date.isoformat()} "
                    f"with {quantity_remaining} still to dispose. Balance and lot store disagree."
                )

            bucket = long_term if is_long_term(current_lot.acquisition_date, disposal_date) else short_term

            if quantity_remaining < current_lot.amount:
                bucket.add(quantity_remaining, current_lot)
                current_lot.consume(quantity_remaining)
                quantity_remaining = Fraction(0)
                break

            quantity_from_this_lot = current_lot.amount
            bucket.add(quantity_from_this_lot, current_lot)
            current_lot.consume(quantity_from_this_lot)
            self.lot_store.remove_next(currency)
            quantity_remaining -= quantity_from_this_lot

        date_key = disposal_date.isoformat()
        emitted: List[TaxEvent] = []
        if long_term.amount > 0:
            emitted.append(long_term.to_tax_event(date_key, currency, unit_sale_price, long_term=True))
        if short_term.amount > 0:
            emitted.append(short_term.to_tax_event(date_key, currency, unit_sale_price, long_term=False))
        if emitted:
            self._tax_events.setdefault(date_key, []).extend(emitted)

        logger.debug(
            f"Disposed {amount} {currency} @ {unit_sale_price} USD on {date_key} ({tag or 'no tag'}): "
            f"long-term {long_term.amount}, short-term {short_term.amount}. Balance: {self._balances[currency]}"
        )
        return emitted

    def exchange(self, currency_a: str, currency_b: str, amount_a, amount_b,
                 price_a_usd: Optional[str], price_b_usd: Optional[str], trade_date) -> List[TaxEvent]:
        """
        Records a trade of `amount_a` of currency A for `amount_b` of currency B.

        Exactly one of the two USD unit prices is given; the other is backed out
        so both legs carry the same USD value. The trade becomes a disposal of A
        (tag "trade-to-B") followed by an acquisition of B (tag "trade-from-A").
        Returns the tax events of the disposal leg.
        """
        has_price_a = price_a_usd is not None and str(price_a_usd).strip() != ""
        has_price_b = price_b_usd is not None and str(price_b_usd).strip() != ""
        if has_price_a and has_price_b:
            raise AmbiguousPriceError(f"Trade {currency_a}->{currency_b}: give the USD price of only one side, got both.")
        if not has_price_a and not has_price_b:
            raise MissingPriceError(f"Trade {currency_a}->{currency_b}: a USD price for one side is required.")

        self._validate_currency(currency_a)
        self._validate_currency(currency_b)
        amount_a_val = parse_quantity(amount_a, "source amount")
        amount_b_val = parse_quantity(amount_b, "target amount")
        trade_date_val = parse_transaction_date(trade_date)

        if has_price_a:
            price_a_val = parse_quantity(price_a_usd, "source unit price")
            price_b_val = derive_implied_unit_price(amount_a_val, price_a_val, amount_b_val)
        else:
            price_b_val = parse_quantity(price_b_usd, "target unit price")
            price_a_val = derive_implied_unit_price(amount_b_val, price_b_val, amount_a_val)

        self._check_sufficient_balance(currency_a, amount_a_val, trade_date_val)

        logger.debug(f"Trade {amount_a_val} {currency_a} @ {price_a_val} -> {amount_b_val} {currency_b} @ {price_b_val} on {trade_date_val.isoformat()}.")
        events = self._dispose_validated(currency_a, amount_a_val, price_a_val, trade_date_val, f"trade-to-{currency_b}")
        self._acquire_validated(currency_b, amount_b_val, price_b_val, trade_date_val, f"trade-from-{currency_a}")
        return events

    def open_lots(self, currency: str) -> List[Lot]:
        self._validate_currency(currency)
        return self.lot_store.lots_for(currency)

    def check_balance_invariant(self) -> None:
        """Raises LedgerInvariantError if any balance differs from the sum of its live lots."""
        for currency, balance in self._balances.items():
            lot_total = self.lot_store.total_amount(currency)
            if lot_total != balance:
                raise LedgerInvariantError(f"{currency} balance {balance} does not match live lot total {lot_total}.")
