# tests/conftest.py
import os
import tempfile

import pytest

from cryptogains import config as app_config
from cryptogains.engine.ledger import LotLedger


@pytest.fixture
def ledger() -> LotLedger:
    """A fresh ledger accepting the default currency set."""
    return LotLedger(app_config.KNOWN_CURRENCIES)


@pytest.fixture
def temp_data_dir():
    """
    Creates a temporary directory for test input/output files.
    Yields the path to this directory.
    Cleans up the directory after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def write_transactions_file(temp_data_dir):
    """Returns a helper that writes CSV text to a file in the temp dir and returns its path."""
    def _write(csv_text: str, filename: str = "transactions.csv") -> str:
        path = os.path.join(temp_data_dir, filename)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(csv_text)
        return path
    return _write
