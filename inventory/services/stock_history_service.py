"""Append-only ledger of product stock transitions."""
import logging

from inventory.models.stock_history import ChangeType
from inventory.repositories.base import InventoryRepository

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


def classify_change(old_stock: int, new_stock: int) -> ChangeType:
    """Classify a stock transition.

    Any move from zero to a positive quantity counts as INITIAL, whether the
    product was just created or restocked after running out.
    """
    change = new_stock - old_stock
    if old_stock == 0 and new_stock > 0:
        return ChangeType.INITIAL
    if change > 0:
        return ChangeType.INCREASE
    if change < 0:
        return ChangeType.DECREASE
    return ChangeType.UPDATE


def log_change(repo: InventoryRepository, product_id: str, product_name: str, old_stock: int, new_stock: int):
    change_type = classify_change(old_stock, new_stock)
    with repo.transaction():
        entry = repo.add_history(
            product_id=product_id,
            product_name=product_name,
            old_stock=old_stock,
            new_stock=new_stock,
            change=new_stock - old_stock,
            change_type=change_type,
        )
    logger.info(
        "Stock %s for product %s: %d -> %d (%+d)",
        change_type.value, product_id, old_stock, new_stock, new_stock - old_stock,
    )
    return entry


def list_history(repo: InventoryRepository, product_id: str | None = None, limit: int = DEFAULT_HISTORY_LIMIT) -> list:
    return repo.list_history(product_id=product_id, limit=limit)
