from inventory.models.product import StockStatus


def summarize(products: list) -> dict:
    """Dashboard totals over a snapshot of products.

    Low-stock and out-of-stock are disjoint: a product at zero is only ever
    out of stock, whatever its threshold.
    """
    low_stock = [p for p in products if p.stock_status == StockStatus.LOW_STOCK]
    out_of_stock = [p for p in products if p.stock_status == StockStatus.OUT_OF_STOCK]

    return {
        "total_products": len(products),
        "total_inventory_value": sum((p.price * p.stock for p in products), 0.0),
        "low_stock_count": len(low_stock),
        "out_of_stock_count": len(out_of_stock),
        "low_stock_items": low_stock,
        "out_of_stock_items": out_of_stock,
    }
