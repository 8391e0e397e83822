from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shared.common import ErrorKind, PaginationParams, Result
from shared.config.database import get_db
from shared.config.settings import ORDER_RATE_LIMIT
from shared.messaging import CacheService, EventPublisher, get_cache, get_event_publisher
from shared.security import CurrentUser, get_current_user, limiter, require_admin
from .models import OrderStatus
from .schemas import MessageResponse, OrderCreate, OrderPage, OrderResponse, OrderStatusUpdate
from .service import OrderService

# Every order endpoint needs an authenticated caller
router = APIRouter(prefix="/orders", tags=["Orders"], dependencies=[Depends(get_current_user)])


def get_order_service(
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    cache: CacheService = Depends(get_cache),
) -> OrderService:
    return OrderService(db, publisher, cache)


def bad_request(result: Result) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": result.first_error, "errors": result.errors},
    )


def failure_response(result: Result) -> JSONResponse:
    if result.error_kind == ErrorKind.NOT_FOUND:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": result.first_error})
    return bad_request(result)


def ensure_access(user: CurrentUser, owner_id: str) -> None:
    if not user.can_access(owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this order")


@router.get("", response_model=OrderPage, dependencies=[Depends(require_admin)])
async def list_orders(
    page_number: int = Query(default=1, ge=1, alias="pageNumber"),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    search_term: str | None = Query(default=None, alias="searchTerm"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_descending: bool = Query(default=False, alias="sortDescending"),
    service: OrderService = Depends(get_order_service),
):
    params = PaginationParams(
        page_number=page_number,
        page_size=page_size,
        search_term=search_term,
        sort_by=sort_by,
        sort_descending=sort_descending,
    )
    result = await service.get_orders(params)
    return result.data


@router.get("/my-orders", response_model=list[OrderResponse])
async def my_orders(
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    result = await service.get_user_orders(user.user_id)
    return result.data


@router.get("/status/{order_status}", response_model=list[OrderResponse], dependencies=[Depends(require_admin)])
async def orders_by_status(order_status: str, service: OrderService = Depends(get_order_service)):
    try:
        parsed = OrderStatus.parse(order_status)
    except ValueError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": str(e), "errors": [str(e)]},
        )
    result = await service.get_orders_by_status(parsed)
    return result.data


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    result = await service.get_order(order_id)
    if not result.succeeded:
        return failure_response(result)
    ensure_access(user, result.data.user_id)
    return result.data


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ORDER_RATE_LIMIT)
async def create_order(
    request: Request,  # REQUIRED: slowapi needs this to check IP/Headers
    payload: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    result = await service.create_order(user.user_id, payload)
    if not result.succeeded:
        # A missing product is a rejected order, not a missing resource.
        return bad_request(result)
    return result.data


@router.put("/{order_id}/status", response_model=OrderResponse, dependencies=[Depends(require_admin)])
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    result = await service.update_status(order_id, payload)
    if not result.succeeded:
        return failure_response(result)
    return result.data


@router.post("/{order_id}/cancel", response_model=MessageResponse)
async def cancel_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    # Ownership is checked before the workflow runs; the workflow itself is caller-agnostic.
    existing = await service.get_order(order_id)
    if not existing.succeeded:
        return failure_response(existing)
    ensure_access(user, existing.data.user_id)

    result = await service.cancel_order(order_id)
    if not result.succeeded:
        return failure_response(result)
    return MessageResponse(message=result.message)
