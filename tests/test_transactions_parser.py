"""
Test Group: Transaction Log Parsing and Replay

Header validation, row width checks, amount cleanup, row classification
(buy / trade / sale, double duty) and replay of a full file through the
core pipeline.
"""

import io
import logging
from fractions import Fraction

import pytest

from cryptogains.domain.enums import TransactionRowType
from cryptogains.domain.errors import InsufficientBalanceError, InvalidCurrencyError, MalformedInputError
from cryptogains.engine.ledger import LotLedger
from cryptogains.parsers.raw_models import RawTransactionRow
from cryptogains.parsers.row_dispatcher import apply_row_to_ledger
from cryptogains.parsers.transactions_parser import (
    EXPECTED_HEADER_ROW_1,
    EXPECTED_HEADER_ROW_2,
    read_transactions_csv,
)
from cryptogains.pipeline_runner import run_core_processing_pipeline
from cryptogains.reporting.console_reporter import render_tax_report
from tests.support.csv_creators import (
    buy_row,
    create_transactions_csv_string,
    make_row,
    sale_row,
    trade_row,
)


def _read(csv_text: str):
    return read_transactions_csv(io.StringIO(csv_text, newline=""))


class TestHeaders:

    def test_header_rows_are_27_columns(self):
        assert len(EXPECTED_HEADER_ROW_1) == 27
        assert len(EXPECTED_HEADER_ROW_2) == 27

    def test_headers_only_file_has_no_rows(self):
        assert _read(create_transactions_csv_string([])) == []

    def test_empty_file_is_malformed(self):
        with pytest.raises(MalformedInputError):
            _read("")

    def test_wrong_first_header(self):
        bad = list(EXPECTED_HEADER_ROW_1)
        bad[1] = "Purchases"
        with pytest.raises(MalformedInputError, match="malformed csv"):
            _read(create_transactions_csv_string([], header_rows=[bad, EXPECTED_HEADER_ROW_2]))

    def test_missing_second_header(self):
        with pytest.raises(MalformedInputError, match="malformed csv"):
            _read(create_transactions_csv_string([], header_rows=[EXPECTED_HEADER_ROW_1]))


class TestRows:

    def test_buy_row_fields(self):
        row, = _read(create_transactions_csv_string([
            make_row("2020/01/01", buy_amount="1,000", buy_currency="XLM",
                     buy_unit_basis="$0.05", buy_usd_value="$50.00", url="https://example.invalid/tx"),
        ]))
        assert row.line_number == 3
        assert row.buy_amount == "1000"
        assert row.buy_unit_basis == "0.05"
        assert row.buy_usd_value == "50.00"
        assert row.url == "https://example.invalid/tx"
        assert row.row_types() == [TransactionRowType.BUY]

    def test_blank_lines_are_skipped(self):
        header = create_transactions_csv_string([])
        body = create_transactions_csv_string([buy_row("2020/01/01", "1", "BTC", "100")], header_rows=[])
        csv_text = header + "\r\n" + body + "\r\n\r\n" + body

        rows = _read(csv_text)

        assert [r.buy_amount for r in rows] == ["1", "1"]
        assert [r.line_number for r in rows] == [4, 7]

    def test_error_line_number_counts_blank_lines(self):
        header = create_transactions_csv_string([])
        body = create_transactions_csv_string([buy_row("", "1", "BTC", "100")], header_rows=[])
        with pytest.raises(MalformedInputError, match="line 5: invalid date"):
            _read(header + "\r\n\r\n" + body)

    def test_short_row_rejected(self):
        csv_text = create_transactions_csv_string([["2020/01/01", "1", "BTC", "100"]])
        with pytest.raises(MalformedInputError, match="line 3"):
            _read(csv_text)

    def test_empty_date_rejected(self):
        csv_text = create_transactions_csv_string([buy_row("", "1", "BTC", "100")])
        with pytest.raises(MalformedInputError, match="line 3: invalid date"):
            _read(csv_text)

    def test_transfer_only_row_is_not_a_ledger_row(self):
        row, = _read(create_transactions_csv_string([
            make_row("2020/01/01", transfer_amount="1", transfer_currency="BTC",
                     transfer_source="exchange", transfer_target="wallet"),
        ]))
        assert row.row_types() == []
        ledger = LotLedger()
        assert apply_row_to_ledger(row, ledger) is None
        assert ledger.balances["BTC"] == 0

    def test_double_duty_row_rejected(self):
        row = RawTransactionRow.from_csv_row(
            make_row("2020/01/01", buy_amount="1", buy_currency="BTC", buy_unit_basis="100",
                     sale_amount="1", sale_currency="BTC", sale_unit_price="200"),
            line_number=7,
        )
        assert row.row_types() == [TransactionRowType.BUY, TransactionRowType.SELL]
        with pytest.raises(MalformedInputError, match="line 7: row double duty"):
            apply_row_to_ledger(row, LotLedger())


class TestDispatch:

    def test_trade_row_uses_source_price(self):
        ledger = LotLedger()
        rows = _read(create_transactions_csv_string([
            buy_row("2020/01/01", "1", "BTC", "$7,000.00"),
            trade_row("2020/02/01", "0.5", "BTC", "25", "ETH", "$8,000.00"),
        ]))
        assert [apply_row_to_ledger(r, ledger) for r in rows] == [TransactionRowType.BUY, TransactionRowType.TRADE]

        eth_lot, = ledger.open_lots("ETH")
        assert eth_lot.unit_cost_basis == Fraction(160)
        assert eth_lot.tag == "trade-from-BTC"
        event, = ledger.tax_events["2020-02-01"]
        assert event.unit_sale_price == 8000
        assert event.gain == 500


class TestPipeline:

    def test_full_file_replay(self, write_transactions_file):
        path = write_transactions_file(create_transactions_csv_string([
            buy_row("2020/01/01", "0.5", "BTC", "100"),
            buy_row("2020/06/01", "0.5", "BTC", "200"),
            make_row("2020/06/15", transfer_amount="0.1", transfer_currency="BTC"),
            sale_row("2020/07/01", "0.6", "BTC", "300"),
        ]))
        output = run_core_processing_pipeline(path)

        assert output.rows_applied == 3
        assert output.balances["BTC"] == Fraction(2, 5)
        summary, = output.tax_event_summaries
        assert summary.date == "2020-07-01"
        assert summary.amount == Fraction(3, 5)
        assert summary.cost_basis == 110
        assert summary.unit_cost_basis == Fraction(550, 3)

    def test_ledger_error_carries_line_number(self, write_transactions_file):
        path = write_transactions_file(create_transactions_csv_string([
            buy_row("2020/01/01", "1", "BTC", "100"),
            sale_row("2020/02/01", "2", "BTC", "300"),
        ]))
        with pytest.raises(InsufficientBalanceError) as excinfo:
            run_core_processing_pipeline(path)
        assert any("line 4" in note for note in excinfo.value.__notes__)

    def test_extra_currency(self, write_transactions_file):
        path = write_transactions_file(create_transactions_csv_string([
            buy_row("2021/01/01", "1000", "DOGE", "0.01"),
        ]))
        with pytest.raises(InvalidCurrencyError):
            run_core_processing_pipeline(path)

        output = run_core_processing_pipeline(path, known_currencies=["BTC", "DOGE"])
        assert output.balances["DOGE"] == 1000

    def test_failing_row_is_not_logged_by_the_replay(self, write_transactions_file, caplog):
        path = write_transactions_file(create_transactions_csv_string([
            sale_row("2020/02/01", "1", "BTC", "300"),
        ]))
        with caplog.at_level(logging.DEBUG, logger="cryptogains"):
            with pytest.raises(InsufficientBalanceError) as excinfo:
                run_core_processing_pipeline(path)

        assert excinfo.value.__notes__ == ["while processing transaction log line 3"]
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_rerun_gives_identical_report(self, write_transactions_file):
        path = write_transactions_file(create_transactions_csv_string([
            buy_row("2019/01/01", "0.3", "BTC", "3500"),
            buy_row("2020/01/01", "1.2", "BTC", "7000"),
            buy_row("2020/01/01", "0.8", "BTC", "7100"),
            trade_row("2020/02/01", "0.5", "BTC", "20", "ETH", "9000"),
            sale_row("2020/07/01", "1.7", "BTC", "9100"),
            sale_row("2020/07/01", "5", "ETH", "240"),
            sale_row("2020/08/01", "5", "ETH", "390"),
        ]))

        reports = []
        for _ in range(2):
            output = run_core_processing_pipeline(path)
            reports.append(render_tax_report(output.tax_event_summaries, output.balances))

        assert reports[0] == reports[1]
        assert "  BTC 0.10" in reports[0].split("\n")
        assert "  ETH 10.00" in reports[0].split("\n")
