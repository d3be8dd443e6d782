# cryptogains/reporting/diagnostic_reports.py
import logging

from cryptogains.engine.ledger import LotLedger
from cryptogains.utils.type_utils import fraction_to_fixed, format_quantity

logger = logging.getLogger(__name__)


def print_open_lots_diagnostic(ledger: LotLedger):
    """Prints the live lots of every currency, next lot to be consumed first."""
    print("\n--- Open Lots (Diagnostic) ---")
    currencies = sorted(ledger.lot_store.currencies())
    if not currencies:
        print("  No open lots.")
        return

    for currency in currencies:
        lots = ledger.open_lots(currency)
        if not lots:
            continue
        print(f"\n  {currency}: {len(lots)} lot(s), balance {format_quantity(ledger.balances[currency])}")
        for idx, lot in enumerate(lots):
            print(
                f"    {idx+1}. Acquired {lot.acquisition_date_iso}, "
                f"Qty: {format_quantity(lot.amount)}, "
                f"Basis/Unit USD: {fraction_to_fixed(lot.unit_cost_basis, 2)}, "
                f"Total Basis USD: {fraction_to_fixed(lot.total_cost_basis, 2)}"
                + (f", Tag: {lot.tag}" if lot.tag else "")
            )
