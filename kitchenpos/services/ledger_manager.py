"""
Sales Ledger Manager with Concurrency Control

Appends completed orders to an Excel ledger. Writers from several Celery
worker processes are serialized through a file lock.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
from filelock import FileLock, Timeout

from kitchenpos.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class LedgerManager:
    """Process-safe Excel ledger of completed orders."""

    LEDGER_COLUMNS = [
        "order_id",
        "order_table_id",
        "order_status",
        "ordered_time",
        "line_items",
        "total_amount",
        "exported_at",
    ]

    def __init__(self, data_directory: str | Path | None = None,
                 filename: str | None = None,
                 lock_timeout: int | None = None):
        self.data_dir = Path(data_directory or settings.data_directory)
        self.ledger_file = self.data_dir / (filename or settings.ledger_filename)
        self.lock_file = self.data_dir / f"{self.ledger_file.name}.lock"
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.ledger_lock_timeout

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.data_dir.exists():
            self.data_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.data_dir}")

    def _load_or_create_df(self) -> pd.DataFrame:
        if self.ledger_file.exists():
            return pd.read_excel(self.ledger_file, engine="openpyxl")
        return pd.DataFrame(columns=self.LEDGER_COLUMNS)

    def append_order(self, order_data: dict[str, Any]) -> dict[str, Any]:
        """
        Append one completed order to the ledger.

        An order already present in the ledger is skipped so that task
        retries never duplicate rows.
        """
        self._ensure_data_dir()

        order_id = order_data.get("order_id", 0)
        result = {
            "success": False,
            "message": "",
            "order_id": order_id,
            "exported_at": None,
        }

        try:
            with FileLock(str(self.lock_file), timeout=self.lock_timeout):
                logger.debug(f"Lock acquired for Order #{order_id}")

                df = self._load_or_create_df()
                if not df.empty and order_id in set(df["order_id"].tolist()):
                    result["success"] = True
                    result["message"] = f"Order #{order_id} already in ledger"
                    return result

                export_time = datetime.now().isoformat()
                new_row = {
                    "order_id": order_id,
                    "order_table_id": order_data.get("order_table_id"),
                    "order_status": order_data.get("order_status"),
                    "ordered_time": order_data.get("ordered_time"),
                    "line_items": order_data.get("line_items"),
                    "total_amount": order_data.get("total_amount"),
                    "exported_at": export_time,
                }

                if df.empty:
                    df = pd.DataFrame([new_row], columns=self.LEDGER_COLUMNS)
                else:
                    df = pd.concat([df, pd.DataFrame([new_row])], ignore_index=True)
                df.to_excel(str(self.ledger_file), index=False, engine="openpyxl")

                logger.info(f"Order #{order_id} appended to sales ledger")

                result["success"] = True
                result["message"] = f"Order #{order_id} exported"
                result["exported_at"] = export_time

        except Timeout:
            result["message"] = f"Lock timeout ({self.lock_timeout}s)"
            logger.error(f"Lock timeout for Order #{order_id}")

        return result

    def read_all(self) -> list[dict[str, Any]]:
        """Get every ledger row."""
        if not self.ledger_file.exists():
            return []
        df = pd.read_excel(self.ledger_file, engine="openpyxl")
        return df.to_dict("records")

    def clear(self) -> bool:
        """Delete the ledger and its lock file."""
        removed = False
        for f in (self.ledger_file, self.lock_file):
            if f.exists():
                f.unlink()
                removed = True
        logger.info("Sales ledger cleared")
        return removed
