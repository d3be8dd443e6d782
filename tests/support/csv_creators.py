# tests/support/csv_creators.py
import csv
import io
from typing import Any, List, Optional

from cryptogains.parsers.raw_models import COLUMN_INDEX
from cryptogains.parsers.transactions_parser import EXPECTED_HEADER_ROW_1, EXPECTED_HEADER_ROW_2

ROW_WIDTH = len(EXPECTED_HEADER_ROW_2)


def _to_cell(item: Any) -> str:
    return "" if item is None else str(item)


def make_row(date: str, **columns: Any) -> List[str]:
    """
    Builds one 27-column data row. Keyword names are the RawTransactionRow
    field names, e.g. make_row("2020/01/01", buy_amount="1", buy_currency="BTC").
    """
    row = [""] * ROW_WIDTH
    row[COLUMN_INDEX["date"]] = date
    for name, value in columns.items():
        row[COLUMN_INDEX[name]] = _to_cell(value)
    return row


def buy_row(date: str, amount: str, currency: str, unit_basis: str) -> List[str]:
    return make_row(date, buy_amount=amount, buy_currency=currency, buy_unit_basis=unit_basis)


def trade_row(date: str, source_amount: str, source_currency: str,
              target_amount: str, target_currency: str, unit_price: str) -> List[str]:
    return make_row(
        date,
        trade_source_amount=source_amount, trade_source_currency=source_currency,
        trade_target_amount=target_amount, trade_target_currency=target_currency,
        trade_unit_price=unit_price,
    )


def sale_row(date: str, amount: str, currency: str, unit_price: str) -> List[str]:
    return make_row(date, sale_amount=amount, sale_currency=currency, sale_unit_price=unit_price)


def create_transactions_csv_string(data_rows: List[List[Any]],
                                   header_rows: Optional[List[List[str]]] = None) -> str:
    """
    Generates the transaction log as CSV text: the two header rows followed by `data_rows`.
    None values become empty cells.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    for header in (header_rows if header_rows is not None else [EXPECTED_HEADER_ROW_1, EXPECTED_HEADER_ROW_2]):
        writer.writerow(header)
    for row in data_rows:
        writer.writerow([_to_cell(item) for item in row])
    return output.getvalue()

