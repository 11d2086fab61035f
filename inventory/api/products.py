from fastapi import APIRouter, Depends, Query, Request

from inventory.database import get_repository
from inventory.repositories.base import InventoryRepository
from inventory.schemas.analytics import AnalyticsSummary
from inventory.schemas.product import MessageOut, ProductCreate, ProductOut, ProductUpdate
from inventory.schemas.stock_history import StockHistoryOut
from inventory.services import analytics_service, product_service, stock_history_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=list[ProductOut])
def list_products(repo: InventoryRepository = Depends(get_repository)):
    return product_service.list_products(repo)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, repo: InventoryRepository = Depends(get_repository)):
    return product_service.create_product(repo, data)


# Fixed paths are registered before /{product_id} so they are not captured by it.

@router.get("/analytics/summary", response_model=AnalyticsSummary)
def analytics_summary(repo: InventoryRepository = Depends(get_repository)):
    products = product_service.list_products(repo)
    return analytics_service.summarize(products)


@router.get("/stock-history", response_model=list[StockHistoryOut])
def stock_history(
    request: Request,
    limit: int | None = Query(None, ge=1),
    product_id: str | None = Query(None, alias="productId"),
    repo: InventoryRepository = Depends(get_repository),
):
    if limit is None:
        limit = request.app.state.settings.HISTORY_DEFAULT_LIMIT
    return stock_history_service.list_history(repo, product_id=product_id, limit=limit)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, repo: InventoryRepository = Depends(get_repository)):
    return product_service.get_product(repo, product_id)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: str, data: ProductUpdate, repo: InventoryRepository = Depends(get_repository)):
    return product_service.update_product(repo, product_id, data)


@router.delete("/{product_id}", response_model=MessageOut)
def delete_product(product_id: str, repo: InventoryRepository = Depends(get_repository)):
    product_service.delete_product(repo, product_id)
    return {"message": "Product deleted successfully"}
