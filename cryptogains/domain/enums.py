# cryptogains/domain/enums.py
from enum import Enum


class HoldingTerm(Enum):
    """Tax classification of a disposal bucket. Values are the report labels."""
    LONG = "long"
    SHORT = "short"

    @classmethod
    def from_long_term_flag(cls, long_term: bool) -> "HoldingTerm":
        return cls.LONG if long_term else cls.SHORT


class TransactionRowType(Enum):
    BUY = "buy"
    TRADE = "trade"
    SELL = "sell"
