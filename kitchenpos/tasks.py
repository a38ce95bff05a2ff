"""
Celery Tasks
Background tasks for the sales ledger.
"""

import logging
import time

from kitchenpos.celery_worker import celery_app
from kitchenpos.services.ledger_manager import LedgerManager

logger = logging.getLogger(__name__)


class LedgerLockTimeout(Exception):
    """Raised so Celery retries an export that could not get the ledger lock."""


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(LedgerLockTimeout,),
    retry_backoff=True
)
def export_order_to_ledger(self, order_data: dict) -> dict:
    """
    Append a completed order to the sales ledger.

    Args:
        order_data: Serialized order (see OrderService.ledger_payload)

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    order_id = order_data.get('order_id', 'unknown')

    logger.info(f"Task {task_id}: Exporting order #{order_id}")
    start_time = time.time()

    result = LedgerManager().append_order(order_data)

    elapsed = round(time.time() - start_time, 3)
    result['task_id'] = task_id
    result['processing_time_seconds'] = elapsed

    if not result['success']:
        logger.warning(f"Task {task_id}: Order #{order_id} failed - {result['message']}")
        raise LedgerLockTimeout(result['message'])

    logger.info(f"Task {task_id}: Order #{order_id} completed in {elapsed}s")
    return result
