import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from inventory.models.product import StockStatus, stock_status, utcnow
from inventory.models.stock_history import ChangeType
from inventory.repositories.base import InventoryRepository, Storage

logger = logging.getLogger(__name__)


@dataclass
class ProductRecord:
    name: str
    sku: str
    price: float
    stock: int
    min_stock: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def stock_status(self) -> StockStatus:
        return stock_status(self.stock, self.min_stock)


@dataclass(frozen=True)
class StockHistoryRecord:
    id: int
    product_id: str
    product_name: str
    old_stock: int
    new_stock: int
    change: int
    change_type: ChangeType
    created_at: datetime = field(default_factory=utcnow)


class MemoryRepository(InventoryRepository):
    """Volatile store kept in process memory; lost on restart."""

    backend = "memory"

    def __init__(self):
        # Insertion ordered: iteration order is creation order.
        self._products: dict[str, ProductRecord] = {}
        self._history: list[StockHistoryRecord] = []
        self._next_history_id = 1
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def transaction(self):
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                snapshot = self._snapshot()
            self._depth += 1
            try:
                yield
            except Exception:
                if outermost:
                    self._restore(snapshot)
                    logger.debug("Memory transaction rolled back")
                raise
            finally:
                self._depth -= 1

    def _snapshot(self):
        products = {pid: replace(p) for pid, p in self._products.items()}
        return products, len(self._history), self._next_history_id

    def _restore(self, snapshot) -> None:
        products, history_len, next_id = snapshot
        self._products = products
        del self._history[history_len:]
        self._next_history_id = next_id

    def list_products(self) -> list[ProductRecord]:
        with self._lock:
            return list(reversed(self._products.values()))

    def get_product(self, product_id: str) -> ProductRecord | None:
        return self._products.get(product_id)

    def get_product_by_sku(self, sku: str) -> ProductRecord | None:
        with self._lock:
            return next((p for p in self._products.values() if p.sku == sku), None)

    def add_product(self, *, name: str, sku: str, price: float, stock: int, min_stock: int) -> ProductRecord:
        product = ProductRecord(name=name, sku=sku, price=price, stock=stock, min_stock=min_stock)
        with self._lock:
            self._products[product.id] = product
        return product

    def save_product(self, product: ProductRecord, changes: dict[str, Any]) -> ProductRecord:
        if not changes:
            return product
        with self._lock:
            for attr, value in changes.items():
                setattr(product, attr, value)
            product.updated_at = utcnow()
            self._products[product.id] = product
        return product

    def delete_product(self, product: ProductRecord) -> None:
        with self._lock:
            self._products.pop(product.id, None)

    def add_history(
        self,
        *,
        product_id: str,
        product_name: str,
        old_stock: int,
        new_stock: int,
        change: int,
        change_type: str,
    ) -> StockHistoryRecord:
        with self._lock:
            entry = StockHistoryRecord(
                id=self._next_history_id,
                product_id=product_id,
                product_name=product_name,
                old_stock=old_stock,
                new_stock=new_stock,
                change=change,
                change_type=ChangeType(change_type),
            )
            self._next_history_id += 1
            self._history.append(entry)
        return entry

    def list_history(self, product_id: str | None = None, limit: int | None = None) -> list[StockHistoryRecord]:
        with self._lock:
            entries = [e for e in reversed(self._history) if not product_id or e.product_id == product_id]
        if limit is not None:
            entries = entries[:limit]
        return entries


class MemoryStorage(Storage):
    """Every request shares the one repository this storage owns."""

    backend = "memory"

    def __init__(self):
        self.repository = MemoryRepository()

    def init(self) -> None:
        logger.warning("Using volatile in-memory storage; data is lost on restart")

    @contextmanager
    def open(self):
        yield self.repository
