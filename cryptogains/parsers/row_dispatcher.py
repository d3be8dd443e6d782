# cryptogains/parsers/row_dispatcher.py
import logging
from typing import Iterable

from cryptogains.domain.enums import TransactionRowType
from cryptogains.domain.errors import LedgerError, MalformedInputError
from cryptogains.engine.ledger import LotLedger
from .raw_models import RawTransactionRow

logger = logging.getLogger(__name__)


def apply_row_to_ledger(row: RawTransactionRow, ledger: LotLedger) -> TransactionRowType | None:
    """
    Turns one transaction-log row into the matching ledger call.
    Returns the row type applied, or None for a row with no buy, trade or sale section filled.
    """
    row_types = row.row_types()
    if len(row_types) > 1:
        raise MalformedInputError(
            f"line {row.line_number}: row double duty ({', '.join(t.value for t in row_types)})"
        )
    if not row_types:
        logger.debug(f"line {row.line_number}: no buy, trade or sale on {row.date}; skipping.")
        return None

    row_type = row_types[0]
    if row_type == TransactionRowType.BUY:
        ledger.acquire(row.buy_currency, row.buy_amount, row.buy_unit_basis, row.date, "")
    elif row_type == TransactionRowType.TRADE:
        # The log only records the source side's USD price.
        ledger.exchange(
            row.trade_source_currency, row.trade_target_currency,
            row.trade_source_amount, row.trade_target_amount,
            row.trade_unit_price, "",
            row.date,
        )
    elif row_type == TransactionRowType.SELL:
        ledger.dispose(row.sale_currency, row.sale_amount, row.sale_unit_price, row.date, "")
    return row_type


def apply_rows_to_ledger(rows: Iterable[RawTransactionRow], ledger: LotLedger) -> int:
    """
    Applies rows in file order and returns how many changed the ledger.
    The first failing row stops processing; its error is re-raised with the line number attached.
    """
    applied = 0
    for row in rows:
        try:
            if apply_row_to_ledger(row, ledger) is not None:
                applied += 1
        except LedgerError as e:
            e.add_note(f"while processing transaction log line {row.line_number}")
            raise
    logger.info(f"Applied {applied} transaction row(s) to the ledger.")
    return applied
