# cryptogains/pipeline_runner.py
import logging
from typing import Iterable, List, Optional

from cryptogains.domain.results import TaxEventSummary
from cryptogains.engine.aggregation import aggregate_tax_events
from cryptogains.engine.ledger import LotLedger
from cryptogains.parsers.raw_models import RawTransactionRow
from cryptogains.parsers.row_dispatcher import apply_rows_to_ledger
from cryptogains.parsers.transactions_parser import parse_transactions_csv

logger = logging.getLogger(__name__)


class ProcessingOutput:
    """
    Encapsulates the results of the core processing pipeline.
    """
    def __init__(self,
                 ledger: LotLedger,
                 tax_event_summaries: List[TaxEventSummary],
                 rows_applied: int):
        self.ledger = ledger
        self.tax_event_summaries = tax_event_summaries
        self.rows_applied = rows_applied

    @property
    def balances(self):
        return self.ledger.balances

    @property
    def tax_events(self):
        return self.ledger.tax_events


def run_rows_pipeline(rows: Iterable[RawTransactionRow],
                      known_currencies: Optional[Iterable[str]] = None) -> ProcessingOutput:
    ledger = LotLedger(known_currencies)
    rows_applied = apply_rows_to_ledger(rows, ledger)
    ledger.check_balance_invariant()
    summaries = aggregate_tax_events(ledger.tax_events)
    return ProcessingOutput(ledger=ledger, tax_event_summaries=summaries, rows_applied=rows_applied)


def run_core_processing_pipeline(
    transactions_file_path: str,
    known_currencies: Optional[Iterable[str]] = None,
) -> ProcessingOutput:
    """
    Runs the core pipeline: parse the transaction log, replay it into a fresh
    ledger in file order, and group the resulting tax events for reporting.
    Any parsing or ledger error propagates to the caller.
    """
    logger.info("Starting parsing pipeline...")
    rows = parse_transactions_csv(transactions_file_path)

    logger.info("Replaying transactions into the ledger...")
    output = run_rows_pipeline(rows, known_currencies)

    event_count = sum(len(events) for events in output.tax_events.values())
    logger.info(f"Pipeline finished: {output.rows_applied} row(s) applied, {event_count} tax event(s) emitted.")
    return output

