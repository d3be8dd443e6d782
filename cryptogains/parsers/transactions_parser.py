# cryptogains/parsers/transactions_parser.py
import csv
import logging
from typing import Iterable, Iterator, List, TextIO, Tuple

from pydantic import ValidationError

from cryptogains.domain.errors import MalformedInputError
from .raw_models import RawTransactionRow

logger = logging.getLogger(__name__)

EXPECTED_HEADER_ROW_1: List[str] = ",Buy,,,,,Trades,,,,,,,Transfers,,,,,,,Sales,,,,,,".split(",")
EXPECTED_HEADER_ROW_2: List[str] = (
    ",Amount,Currency,Unit basis,USD Value,,Amount,Source currency,Amount,Target currency,"
    "Unit price,Target amount after fees,,Amount,Currency,Source,Target,"
    "Fees (in addition to Amount),,,Amount,Currency,Unit price,Fees (in addition to Amount),USD Net,,URL"
).split(",")


def _non_blank_rows(lines: Iterable[List[str]]) -> Iterator[Tuple[int, List[str]]]:
    """
    Yields (line number, row) for every non-empty record. Blank lines are skipped.
    The line number is the reader's `line_num` when `lines` is a csv.reader, so it
    stays the physical line in the file.
    """
    record_count = 0
    for row in lines:
        record_count += 1
        if not row:
            continue
        yield getattr(lines, "line_num", record_count), row


def parse_transactions_rows(lines: Iterable[List[str]]) -> List[RawTransactionRow]:
    """
    Validates the two header rows and turns every following row into a RawTransactionRow.
    `lines` is what csv.reader yields. Raises MalformedInputError on the first problem.
    """
    iterator = _non_blank_rows(lines)

    _, header1 = next(iterator, (None, None))
    if header1 is None:
        raise MalformedInputError("malformed csv: file is empty")
    if header1 != EXPECTED_HEADER_ROW_1:
        raise MalformedInputError(f"malformed csv: unexpected first header row {header1!r}")

    _, header2 = next(iterator, (None, None))
    if header2 != EXPECTED_HEADER_ROW_2:
        raise MalformedInputError(f"malformed csv: unexpected second header row {header2!r}")

    expected_width = len(EXPECTED_HEADER_ROW_2)
    raw_rows: List[RawTransactionRow] = []
    for line_number, row in iterator:
        if len(row) != expected_width:
            raise MalformedInputError(f"line {line_number}: expected {expected_width} columns, got {len(row)}")
        if not row[0]:
            raise MalformedInputError(f"line {line_number}: invalid date")
        try:
            raw_rows.append(RawTransactionRow.from_csv_row(row, line_number))
        except ValidationError as e:
            raise MalformedInputError(f"line {line_number}: {e.errors()}") from e

    logger.info(f"Parsed {len(raw_rows)} transaction row(s).")
    return raw_rows


def read_transactions_csv(csvfile: TextIO) -> List[RawTransactionRow]:
    return parse_transactions_rows(csv.reader(csvfile))


def parse_transactions_csv(file_path: str, encoding='utf-8-sig') -> List[RawTransactionRow]:
    logger.info(f"Reading transaction log {file_path}")
    with open(file_path, mode='r', encoding=encoding, newline='') as csvfile:
        return read_transactions_csv(csvfile)
