from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shared.common import DomainError, PaginationParams
from shared.config.database import get_db
from shared.messaging import CacheService, EventPublisher, get_cache, get_event_publisher
from shared.security import require_admin
from .schemas import ProductCreate, ProductPage, ProductResponse, ProductUpdate
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


def rejected(exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": exc.message, "errors": [exc.message]},
    )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    try:
        return await ProductService.create_product(db, publisher, product)
    except DomainError as e:
        return rejected(e)


@router.get("", response_model=ProductPage)
async def list_products(
    page_number: int = Query(default=1, ge=1, alias="pageNumber"),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    search_term: str | None = Query(default=None, alias="searchTerm"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_descending: bool = Query(default=False, alias="sortDescending"),
    db: AsyncSession = Depends(get_db),
):
    params = PaginationParams(
        page_number=page_number,
        page_size=page_size,
        search_term=search_term,
        sort_by=sort_by,
        sort_descending=sort_descending,
    )
    return await ProductService.list_products(db, params)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
):
    product = await ProductService.get_product(db, cache, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.put("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_admin)])
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    try:
        product = await ProductService.update_product(db, cache, publisher, product_id, payload)
    except DomainError as e:
        return rejected(e)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    if not await ProductService.delete_product(db, cache, publisher, product_id):
        raise HTTPException(status_code=404, detail="Product not found")
