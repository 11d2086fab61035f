"""Storage capability shared by the persistent and the volatile backends.

The product and ledger services only talk to :class:`InventoryRepository`,
so either backend can be selected at startup without touching them.
"""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any


class InventoryRepository(ABC):
    backend: str = ""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Unit of work around a product write and its ledger entry.

        Re-entrant: only the outermost block commits or rolls back.
        """

    # --- Products ---

    @abstractmethod
    def list_products(self) -> list[Any]:
        """All products, newest-created first."""

    @abstractmethod
    def get_product(self, product_id: str) -> Any | None: ...

    @abstractmethod
    def get_product_by_sku(self, sku: str) -> Any | None:
        """Look up by an already normalized (uppercase) SKU."""

    @abstractmethod
    def add_product(self, *, name: str, sku: str, price: float, stock: int, min_stock: int) -> Any: ...

    @abstractmethod
    def save_product(self, product: Any, changes: dict[str, Any]) -> Any: ...

    @abstractmethod
    def delete_product(self, product: Any) -> None: ...

    # --- Stock history ---

    @abstractmethod
    def add_history(
        self,
        *,
        product_id: str,
        product_name: str,
        old_stock: int,
        new_stock: int,
        change: int,
        change_type: str,
    ) -> Any: ...

    @abstractmethod
    def list_history(self, product_id: str | None = None, limit: int | None = None) -> list[Any]:
        """Entries newest first, optionally for one product and truncated to ``limit``."""


class Storage(ABC):
    """Owns a backend for the lifetime of the app and hands out repositories."""

    backend: str = ""

    def init(self) -> None:
        pass

    def close(self) -> None:
        pass

    @abstractmethod
    def open(self) -> AbstractContextManager[InventoryRepository]: ...
