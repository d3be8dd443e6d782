"""
Test Support Module

CSV creators for building transaction logs in tests.
"""

from tests.support.csv_creators import (
    ROW_WIDTH,
    buy_row,
    create_transactions_csv_string,
    make_row,
    sale_row,
    trade_row,
)
