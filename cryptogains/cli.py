# cryptogains/cli.py
import argparse
from typing import List, Optional

import cryptogains.config as config


def parse_arguments(argv: Optional[List[str]] = None):
    """Parses command line arguments for the application."""
    parser = argparse.ArgumentParser(description="Capital gains from a cryptocurrency transaction log")

    parser.add_argument("transactions_file", help="Path to the transaction log CSV file (two header rows).")

    # Ledger options
    parser.add_argument("--currency", dest="extra_currencies", action="append", default=[], metavar="SYM",
                        help="Accept an additional currency symbol. May be given more than once.")

    # Reporting options
    parser.add_argument("--show-lots", action="store_true", help="Print the open lots left in the ledger after processing.")
    parser.add_argument("--pdf-output-file", type=str, default=None, help="Also write the report as a PDF to this path.")
    parser.add_argument("--log-level", default=config.DEFAULT_LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="Logging verbosity.")

    args = parser.parse_args(argv)
    args.known_currencies = sorted(config.KNOWN_CURRENCIES | {c.strip().upper() for c in args.extra_currencies if c.strip()})
    return args
