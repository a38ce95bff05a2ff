"""
Sales Ledger Verification Script

Verifies data integrity of the Excel sales ledger.
Run from project root: python scripts/verify.py
Start a fresh run with: python scripts/verify.py --reset

Version: 1.0.0
"""

import argparse
from datetime import datetime

import pandas as pd

from kitchenpos.services.ledger_manager import LedgerManager


def verify_ledger() -> bool:
    """Verify ledger integrity after a simulation."""
    ledger_file = LedgerManager().ledger_file

    print("=" * 60)
    print("SALES LEDGER VERIFICATION REPORT")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"File: {ledger_file}")
    print("=" * 60)

    if not ledger_file.exists():
        print("\nLedger file not found!")
        print("   Run the simulation first: python scripts/simulate.py")
        return False

    df = pd.read_excel(ledger_file, engine="openpyxl")
    print("\nFile loaded successfully!")

    print("\nSTATISTICS:")
    print(f"   Completed Orders: {len(df)}")
    print(f"   Columns: {len(df.columns)}")

    missing = [col for col in LedgerManager.LEDGER_COLUMNS if col not in df.columns]
    if missing:
        print(f"\nMissing Columns: {missing}")
    else:
        print("\nAll required columns present")

    ok = not missing
    if "order_id" in df.columns:
        duplicates = df["order_id"].duplicated().sum()
        if duplicates > 0:
            print(f"\n{duplicates} duplicate order IDs found!")
            ok = False
        else:
            print("No duplicate order IDs")

    if "order_status" in df.columns:
        not_completed = (df["order_status"] != "COMPLETION").sum()
        if not_completed:
            print(f"\n{not_completed} rows are not COMPLETION orders!")
            ok = False

    if "total_amount" in df.columns and len(df) > 0:
        print("\nREVENUE:")
        print(f"   Total: {df['total_amount'].sum():.2f}")
        print(f"   Average: {df['total_amount'].mean():.2f}")

    print("\nRECENT ORDERS:")
    print("-" * 60)
    if len(df) > 0:
        cols = [c for c in ["order_id", "order_table_id", "total_amount", "exported_at"] if c in df.columns]
        print(df[cols].tail(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("VERIFICATION COMPLETE" if ok else "VERIFICATION FAILED")
    print("=" * 60)

    return ok


def reset_ledger() -> None:
    """Remove the ledger so the next simulation starts from an empty file."""
    ledger = LedgerManager()
    if ledger.clear():
        print(f"Removed {ledger.ledger_file}")
    else:
        print("Nothing to remove")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sales Ledger Verification")
    parser.add_argument("--reset", action="store_true", help="Delete the ledger instead of verifying it")
    args = parser.parse_args()

    if args.reset:
        reset_ledger()
        raise SystemExit(0)
    raise SystemExit(0 if verify_ledger() else 1)
