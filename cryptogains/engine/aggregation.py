# cryptogains/engine/aggregation.py
import logging
from collections import defaultdict
from fractions import Fraction
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from cryptogains.domain.enums import HoldingTerm
from cryptogains.domain.results import TaxEvent, TaxEventSummary, TaxTotals

logger = logging.getLogger(__name__)


def aggregate_tax_events(tax_events: Mapping[str, Iterable[TaxEvent]]) -> List[TaxEventSummary]:
    """
    Groups tax events into report lines: by disposal date, then currency, then
    term label ("long" sorts before "short"), all ascending.

    Within a group the proceeds and cost basis are summed exactly
    (amount x unit price, amount x average unit basis) and the acquisition
    dates are unioned. Per-unit figures and the gain are derived from the sums
    by TaxEventSummary.
    """
    summaries: List[TaxEventSummary] = []

    for disposal_date in sorted(tax_events):
        by_currency: Dict[str, List[TaxEvent]] = defaultdict(list)
        for event in tax_events[disposal_date]:
            by_currency[event.currency].append(event)

        for currency in sorted(by_currency):
            by_term: Dict[str, List[TaxEvent]] = defaultdict(list)
            for event in by_currency[currency]:
                by_term[event.term.value].append(event)

            for term_label in sorted(by_term):
                group = by_term[term_label]
                amount = Fraction(0)
                proceeds = Fraction(0)
                cost_basis = Fraction(0)
                acquisition_dates: Set[str] = set()
                for event in group:
                    amount += event.amount
                    proceeds += event.amount * event.unit_sale_price
                    cost_basis += event.amount * event.avg_unit_cost_basis
                    acquisition_dates |= event.acquisition_dates

                summaries.append(TaxEventSummary(
                    date=disposal_date,
                    currency=currency,
                    term=HoldingTerm(term_label),
                    amount=amount,
                    proceeds=proceeds,
                    cost_basis=cost_basis,
                    acquisition_dates=tuple(sorted(acquisition_dates)),
                    event_count=len(group),
                ))

    logger.info(f"Aggregated tax events on {len(tax_events)} disposal date(s) into {len(summaries)} report line(s).")
    return summaries


def aggregate_totals(summaries: Iterable[TaxEventSummary]) -> Tuple[Dict[HoldingTerm, TaxTotals], TaxTotals]:
    """Overall proceeds and cost basis per term, plus the grand total."""
    by_term: Dict[HoldingTerm, TaxTotals] = {term: TaxTotals() for term in HoldingTerm}
    overall = TaxTotals()
    for summary in summaries:
        term_totals = by_term[summary.term]
        term_totals.proceeds += summary.proceeds
        term_totals.cost_basis += summary.cost_basis
        overall.proceeds += summary.proceeds
        overall.cost_basis += summary.cost_basis
    return by_term, overall
