# cryptogains/config.py

from decimal import Decimal

# Currencies the ledger accepts unless extended on the command line
KNOWN_CURRENCIES: frozenset[str] = frozenset({
    "BTC",
    "ETH",
    "STORJ",
    "XLM",
    "XMR",
    "ZEC",
    "ADA",
    "ETC",
})

# Accepted textual date formats for transaction dates
ACCEPTED_DATE_FORMATS: tuple[str, ...] = ("%Y/%m/%d", "%Y-%m-%d")

# A lot held strictly longer than this many calendar days is long-term.
LONG_TERM_THRESHOLD_DAYS = 366

# Output/Reporting Precisions (display only, never used in ledger arithmetic)
OUTPUT_PRECISION_AMOUNTS: Decimal = Decimal("0.01")
QUANTITY_DISPLAY_PLACES = 8

# Logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = "WARNING"

# Shown on the PDF title block
TAXPAYER_NAME = "Satoshi Nakamoto"  # Placeholder - Please update
REPORT_VERSION = "v1.0"
