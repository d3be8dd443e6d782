# cryptogains/utils/type_utils.py
from decimal import Decimal
from fractions import Fraction
from typing import Any

import cryptogains.config as config
from cryptogains.domain.errors import InvalidQuantityError


def clean_amount(value: Any) -> str:
    """
    Strips the currency symbol and thousands separators from a spreadsheet amount.
    "$1,234.50" -> "1234.50". None becomes "".
    """
    if value is None:
        return ""
    return str(value).replace("$", "").replace(",", "").strip()


def parse_quantity(value: Any, field_name: str = "quantity") -> Fraction:
    """
    Parses decimal text ("0.5", "10000", "1e-3") or a ratio ("1/3") into an exact Fraction.
    Rejects empty text, non-numeric text, non-finite values and negatives with InvalidQuantityError.
    Floats are rejected outright: they cannot carry an exact decimal value.
    """
    if isinstance(value, Fraction):
        result = value
    elif isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        try:
            result = Fraction(value)
        except (ValueError, OverflowError) as e:
            raise InvalidQuantityError(f"Invalid {field_name} {value!r}: {e}") from e
    elif isinstance(value, str):
        s_value = value.strip()
        if not s_value:
            raise InvalidQuantityError(f"Invalid {field_name}: empty value")
        try:
            result = Fraction(s_value)
        except (ValueError, ZeroDivisionError) as e:
            raise InvalidQuantityError(f"Invalid {field_name} {value!r}: not an exact decimal quantity") from e
    else:
        raise InvalidQuantityError(f"Invalid {field_name} {value!r} of type {type(value).__name__}")

    if result < 0:
        raise InvalidQuantityError(f"Invalid {field_name} {value!r}: must not be negative")
    return result


def fraction_to_fixed(value: Fraction, places: int) -> str:
    """
    Renders an exact value with a fixed number of decimal places.
    The last digit is rounded to nearest, halves away from zero. A negative value
    keeps its sign even when it rounds to zero (-0.001 -> "-0.00").
    """
    scale = 10 ** places
    magnitude = abs(value) * scale
    whole, remainder = divmod(magnitude.numerator, magnitude.denominator)
    if 2 * remainder >= magnitude.denominator:
        whole += 1
    sign = "-" if value < 0 else ""
    if places == 0:
        return f"{sign}{whole}"
    int_part, frac_part = divmod(whole, scale)
    return f"{sign}{int_part}.{frac_part:0{places}d}"


def fraction_to_decimal(value: Fraction, quantum: Decimal = config.OUTPUT_PRECISION_AMOUNTS) -> Decimal:
    """Rounds an exact value to the given quantum for display (e.g. Decimal('0.01'))."""
    places = abs(quantum.as_tuple().exponent)
    return Decimal(fraction_to_fixed(value, places))


def format_quantity(value: Fraction, places: int = config.QUANTITY_DISPLAY_PLACES) -> str:
    """Shows an asset amount with up to `places` decimals and no trailing zeros: 0.50000000 -> 0.5, 2.00000000 -> 2."""
    text = fraction_to_fixed(value, places)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
