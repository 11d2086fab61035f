import logging
import math

from inventory.exceptions import ConflictError, NotFoundError, ValidationError
from inventory.models.product import NAME_MAX_LENGTH, SKU_MAX_LENGTH
from inventory.repositories.base import InventoryRepository
from inventory.schemas.product import ProductCreate, ProductUpdate
from inventory.services import stock_history_service

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = ("price", "stock", "min_stock")


def normalize_sku(sku: str) -> str:
    return sku.strip().upper()


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Product name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Product name cannot exceed {NAME_MAX_LENGTH} characters")
    return name


def _clean_sku(sku: str) -> str:
    sku = normalize_sku(sku)
    if not sku:
        raise ValidationError("SKU is required")
    if len(sku) > SKU_MAX_LENGTH:
        raise ValidationError(f"SKU cannot exceed {SKU_MAX_LENGTH} characters")
    return sku


def _check_non_negative(values: dict) -> None:
    present = [values[f] for f in NUMERIC_FIELDS if values.get(f) is not None]
    if any(not math.isfinite(v) for v in present):
        raise ValidationError("Values must be finite numbers")
    if any(v < 0 for v in present):
        raise ValidationError("Values cannot be negative")


def list_products(repo: InventoryRepository) -> list:
    return repo.list_products()


def get_product(repo: InventoryRepository, product_id: str):
    product = repo.get_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(repo: InventoryRepository, data: ProductCreate):
    if not data.name or not data.sku or data.price is None or data.stock is None or data.min_stock is None:
        raise ValidationError("All fields are required")
    _check_non_negative(data.model_dump())
    name = _clean_name(data.name)
    sku = _clean_sku(data.sku)

    with repo.transaction():
        if repo.get_product_by_sku(sku) is not None:
            logger.warning("Rejected product %s: SKU already exists", sku)
            raise ConflictError("SKU must be unique")
        product = repo.add_product(
            name=name,
            sku=sku,
            price=data.price,
            stock=data.stock,
            min_stock=data.min_stock,
        )
        stock_history_service.log_change(repo, product.id, product.name, 0, product.stock)

    logger.info("Created product %s (%s) with stock %d", product.id, product.sku, product.stock)
    return product


def update_product(repo: InventoryRepository, product_id: str, data: ProductUpdate):
    # null and absent fields both mean "leave unchanged"
    update_data = data.model_dump(exclude_none=True)

    with repo.transaction():
        product = get_product(repo, product_id)
        _check_non_negative(update_data)
        if "name" in update_data:
            update_data["name"] = _clean_name(update_data["name"])
        if "sku" in update_data:
            update_data["sku"] = _clean_sku(update_data["sku"])

        if "sku" in update_data and update_data["sku"] != product.sku:
            existing = repo.get_product_by_sku(update_data["sku"])
            if existing is not None and existing.id != product.id:
                logger.warning("Rejected SKU change on %s: %s already exists", product.id, update_data["sku"])
                raise ConflictError("SKU must be unique")

        old_stock = product.stock
        repo.save_product(product, update_data)

        if "stock" in update_data and update_data["stock"] != old_stock:
            stock_history_service.log_change(repo, product.id, product.name, old_stock, product.stock)

    logger.info("Updated product %s: %s", product_id, ", ".join(sorted(update_data)) or "no changes")
    return product


def delete_product(repo: InventoryRepository, product_id: str) -> None:
    with repo.transaction():
        product = get_product(repo, product_id)
        repo.delete_product(product)
    logger.info("Deleted product %s", product_id)
