"""
Test Fixtures Module

YAML-based ledger scenarios (ledger_scenarios.yaml): a list of ledger
operations applied in order, followed by the tax events, balances and open
lots expected afterwards, or the error the last operation must raise.

Exact amounts are written with the `!fraction` tag so they load as
fractions.Fraction rather than floats. Use load_yaml_spec() to read a file
and parse_ledger_scenarios() to turn it into LedgerScenarioSpec objects for
pytest.mark.parametrize.
"""

from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


FIXTURES_DIR = Path(__file__).parent


@dataclass
class OperationSpec:
    """One ledger call: acquire, dispose or exchange."""
    op: str
    date: str
    currency: Optional[str] = None
    amount: Optional[str] = None
    price: Optional[str] = None
    # exchange only
    currency_a: Optional[str] = None
    currency_b: Optional[str] = None
    amount_a: Optional[str] = None
    amount_b: Optional[str] = None
    price_a: Optional[str] = None
    price_b: Optional[str] = None


@dataclass
class ExpectedTaxEventSpec:
    date: str
    currency: str
    amount: Fraction
    unit_sale_price: Fraction
    avg_unit_cost_basis: Fraction
    long_term: bool
    gain: Optional[Fraction] = None
    acquisition_dates: Optional[List[str]] = None


@dataclass
class ExpectedLotSpec:
    acquisition_date: str
    amount: Fraction
    unit_cost_basis: Optional[Fraction] = None


@dataclass
class LedgerScenarioSpec:
    """A single ledger scenario parsed from YAML."""
    id: str
    description: str
    operations: List[OperationSpec]
    expected_tax_events: List[ExpectedTaxEventSpec]
    expected_balances: Dict[str, Fraction]
    expected_open_lots: Dict[str, List[ExpectedLotSpec]] = field(default_factory=dict)
    expected_error: Optional[str] = None
    notes: Optional[str] = None


def _fraction_constructor(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> Fraction:
    """YAML constructor for exact Fraction values."""
    value = loader.construct_scalar(node)
    return Fraction(str(value))


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_operation(op_dict: Dict) -> OperationSpec:
    return OperationSpec(
        op=op_dict["op"],
        date=str(op_dict["date"]),
        currency=op_dict.get("currency"),
        amount=_as_text(op_dict.get("amount")),
        price=_as_text(op_dict.get("price")),
        currency_a=op_dict.get("currency_a"),
        currency_b=op_dict.get("currency_b"),
        amount_a=_as_text(op_dict.get("amount_a")),
        amount_b=_as_text(op_dict.get("amount_b")),
        price_a=_as_text(op_dict.get("price_a")),
        price_b=_as_text(op_dict.get("price_b")),
    )


def _parse_expected_tax_event(event_dict: Dict) -> ExpectedTaxEventSpec:
    return ExpectedTaxEventSpec(
        date=str(event_dict["date"]),
        currency=event_dict["currency"],
        amount=Fraction(event_dict["amount"]),
        unit_sale_price=Fraction(event_dict["unit_sale_price"]),
        avg_unit_cost_basis=Fraction(event_dict["avg_unit_cost_basis"]),
        long_term=bool(event_dict["long_term"]),
        gain=Fraction(event_dict["gain"]) if "gain" in event_dict else None,
        acquisition_dates=event_dict.get("acquisition_dates"),
    )


def _parse_expected_lot(lot_dict: Dict) -> ExpectedLotSpec:
    return ExpectedLotSpec(
        acquisition_date=str(lot_dict["acquisition_date"]),
        amount=Fraction(lot_dict["amount"]),
        unit_cost_basis=Fraction(lot_dict["unit_cost_basis"]) if "unit_cost_basis" in lot_dict else None,
    )


def load_yaml_spec(filename: str) -> Dict[str, Any]:
    """
    Load a YAML test specification file.

    Args:
        filename: Name of the YAML file in the fixtures directory

    Returns:
        Parsed YAML content as a dictionary
    """
    filepath = FIXTURES_DIR / filename

    yaml.add_constructor("!fraction", _fraction_constructor, Loader=yaml.SafeLoader)

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_ledger_scenarios(spec_data: Dict[str, Any]) -> List[LedgerScenarioSpec]:
    """
    Parse ledger scenarios from loaded YAML.

    Args:
        spec_data: Loaded YAML dictionary

    Returns:
        List of LedgerScenarioSpec objects
    """
    scenarios = []
    for test_dict in spec_data.get("tests", []):
        expected = test_dict.get("expected", {})
        scenarios.append(LedgerScenarioSpec(
            id=test_dict["id"],
            description=test_dict.get("description", ""),
            operations=[_parse_operation(op) for op in test_dict.get("operations", [])],
            expected_tax_events=[_parse_expected_tax_event(e) for e in expected.get("tax_events", [])],
            expected_balances={k: Fraction(v) for k, v in expected.get("balances", {}).items()},
            expected_open_lots={
                currency: [_parse_expected_lot(lot) for lot in lots]
                for currency, lots in expected.get("open_lots", {}).items()
            },
            expected_error=expected.get("error"),
            notes=test_dict.get("notes"),
        ))
    return scenarios
