# cryptogains/reporting/reporting_utils.py
from decimal import Decimal
from fractions import Fraction
from typing import Optional

import cryptogains.config as config
from cryptogains.utils.type_utils import fraction_to_decimal, format_quantity


def _q(val: Optional[Fraction]) -> Decimal:
    """Round an exact value for total amounts (2 places, halves away from zero)."""
    if val is None:
        return Decimal('0.00')
    return fraction_to_decimal(val, config.OUTPUT_PRECISION_AMOUNTS)


def format_usd(val: Optional[Fraction]) -> str:
    """Dollar amount as shown in the report, e.g. $1234.50. A loss prints as $-12.00."""
    return f"${_q(val)}"


def format_amount_with_currency(amount: Fraction, currency: str) -> str:
    return f"{format_quantity(amount)} {currency}"
