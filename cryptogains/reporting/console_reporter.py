# cryptogains/reporting/console_reporter.py
import logging
from fractions import Fraction
from itertools import groupby
from typing import List, Mapping

from cryptogains.domain.results import TaxEventSummary
from cryptogains.utils.type_utils import fraction_to_fixed
from cryptogains.reporting.reporting_utils import format_amount_with_currency, format_usd

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "Description",
    "Date acquired",
    "Date sold",
    "Proceeds",
    "Cost Basis",
    "Unit price",
    "Unit basis",
    "Gain (or loss)",
    "Term",
]


def format_summary_line(summary: TaxEventSummary) -> str:
    return "\t".join([
        format_amount_with_currency(summary.amount, summary.currency),
        summary.acquisition_date_range,
        summary.date,
        format_usd(summary.proceeds),
        format_usd(summary.cost_basis),
        format_usd(summary.unit_sale_price),
        format_usd(summary.unit_cost_basis),
        format_usd(summary.gain),
        summary.term.value,
    ])


def render_tax_report(summaries: List[TaxEventSummary], balances: Mapping[str, Fraction]) -> str:
    """
    Tab-separated sales report, one block per disposal date, followed by the final balances.
    `summaries` must already be in aggregation order.
    """
    lines: List[str] = ["\t".join(REPORT_COLUMNS), ""]

    for _, date_group in groupby(summaries, key=lambda s: s.date):
        for summary in date_group:
            lines.append(format_summary_line(summary))
        lines.append("")

    lines.append("Balances:")
    for currency in sorted(balances):
        lines.append(f"  {currency} {fraction_to_fixed(balances[currency], 2)}")

    return "\n".join(lines) + "\n"


def generate_console_tax_report(summaries: List[TaxEventSummary], balances: Mapping[str, Fraction]):
    logger.info(f"Generating console tax report with {len(summaries)} line(s)...")
    print(render_tax_report(summaries, balances), end="")
