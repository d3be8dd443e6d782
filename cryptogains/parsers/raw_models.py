# cryptogains/parsers/raw_models.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cryptogains.domain.enums import TransactionRowType
from cryptogains.utils.type_utils import clean_amount

# Column positions in the transaction log, zero-based.
# Columns 5, 12, 18, 19 and 25 are spacer columns and carry nothing.
COLUMN_INDEX: Dict[str, int] = {
    "date": 0,
    # Buy
    "buy_amount": 1,
    "buy_currency": 2,
    "buy_unit_basis": 3,
    "buy_usd_value": 4,
    # Trades
    "trade_source_amount": 6,
    "trade_source_currency": 7,
    "trade_target_amount": 8,
    "trade_target_currency": 9,
    "trade_unit_price": 10,
    "trade_target_amount_after_fees": 11,
    # Transfers
    "transfer_amount": 13,
    "transfer_currency": 14,
    "transfer_source": 15,
    "transfer_target": 16,
    "transfer_fees": 17,
    # Sales
    "sale_amount": 20,
    "sale_currency": 21,
    "sale_unit_price": 22,
    "sale_fees": 23,
    "sale_usd_net": 24,
    "url": 26,
}

AMOUNT_FIELDS = (
    "buy_amount", "buy_unit_basis", "buy_usd_value",
    "trade_source_amount", "trade_target_amount", "trade_unit_price", "trade_target_amount_after_fees",
    "transfer_amount", "transfer_fees",
    "sale_amount", "sale_unit_price", "sale_fees", "sale_usd_net",
)


class RawTransactionRow(BaseModel):
    """
    One data row of the transaction log, as text.

    Amount columns are stored with "$" and "," removed but are otherwise left
    as text; the ledger parses them into exact quantities itself.
    """
    model_config = ConfigDict(frozen=True)

    line_number: int = Field(ge=1)
    date: str

    buy_amount: str = ""
    buy_currency: str = ""
    buy_unit_basis: str = ""
    buy_usd_value: str = ""

    trade_source_amount: str = ""
    trade_source_currency: str = ""
    trade_target_amount: str = ""
    trade_target_currency: str = ""
    trade_unit_price: str = ""
    trade_target_amount_after_fees: str = ""

    transfer_amount: str = ""
    transfer_currency: str = ""
    transfer_source: str = ""
    transfer_target: str = ""
    transfer_fees: str = ""

    sale_amount: str = ""
    sale_currency: str = ""
    sale_unit_price: str = ""
    sale_fees: str = ""
    sale_usd_net: str = ""

    url: Optional[str] = None

    @field_validator(*AMOUNT_FIELDS, mode="before")
    @classmethod
    def strip_currency_formatting(cls, v: Any) -> str:
        return clean_amount(v)

    @classmethod
    def from_csv_row(cls, row: List[str], line_number: int) -> "RawTransactionRow":
        values: Dict[str, Any] = {name: row[idx] for name, idx in COLUMN_INDEX.items() if idx < len(row)}
        values["url"] = values.get("url") or None
        values["line_number"] = line_number
        return cls.model_validate(values)

    @property
    def has_buy(self) -> bool:
        return any((self.buy_amount, self.buy_currency, self.buy_unit_basis))

    @property
    def has_trade(self) -> bool:
        return any((
            self.trade_source_amount, self.trade_source_currency, self.trade_unit_price,
            self.trade_target_amount, self.trade_target_currency, self.trade_target_amount_after_fees,
        ))

    @property
    def has_sale(self) -> bool:
        return any((self.sale_amount, self.sale_currency, self.sale_unit_price, self.sale_fees))

    def row_types(self) -> List[TransactionRowType]:
        """Sections this row fills, in column order. A well-formed row fills at most one."""
        types = []
        if self.has_buy:
            types.append(TransactionRowType.BUY)
        if self.has_trade:
            types.append(TransactionRowType.TRADE)
        if self.has_sale:
            types.append(TransactionRowType.SELL)
        return types
