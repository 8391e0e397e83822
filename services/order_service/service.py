"""
Order workflow: placing, re-statusing and cancelling orders.

Every mutating operation runs as one unit of work on the request's session. Stock is
reserved (or restored) line by line inside that unit of work, so either every line is
applied together with the order header or nothing is. A concurrent stock update is
detected through the product version column and the whole unit of work is re-run.
Events are published only after the commit and are never allowed to fail the call.
"""
import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from services.product_service.repository import ProductRepository
from services.product_service.service import product_cache_key
from shared.common import (
    DomainError,
    ErrorKind,
    OrderNotFoundError,
    PaginatedList,
    PaginationParams,
    ProductNotFoundError,
    Result,
    ValidationFailedError,
)
from shared.config.settings import ORDER_MAX_RESERVATION_ATTEMPTS
from shared.messaging import (
    ORDER_CANCELLED,
    ORDER_CREATED,
    ORDER_STATUS_UPDATED,
    CacheService,
    EventPublisher,
)
from shared.observability import (
    ecomm_order_cancellations_total,
    ecomm_order_create_duration_seconds,
    ecomm_order_failures_total,
    ecomm_orders_created_total,
    ecomm_stock_conflict_retries_total,
)
from .models import Order, OrderStatus, generate_order_number
from .repository import OrderRepository
from .schemas import OrderCreate, OrderStatusUpdate

logger = structlog.get_logger(__name__)

CREATE_FAILED = "An error occurred while creating the order"
CANCEL_FAILED = "An error occurred while cancelling the order"
UPDATE_FAILED = "An error occurred while updating the order status"


class OrderService:
    def __init__(
        self,
        db: AsyncSession,
        publisher: EventPublisher,
        cache: CacheService,
        max_attempts: int = ORDER_MAX_RESERVATION_ATTEMPTS,
    ):
        self.db = db
        self.publisher = publisher
        self.cache = cache
        self.max_attempts = max(1, max_attempts)

    # --- READS ---

    async def get_order(self, order_id: int) -> Result[Order]:
        order = await OrderRepository.get_order(self.db, order_id)
        if not order:
            return Result.failure("Order not found", ErrorKind.NOT_FOUND)
        return Result.success(order)

    async def get_orders(self, params: PaginationParams) -> Result[PaginatedList[Order]]:
        items, total = await OrderRepository.list_orders(self.db, params)
        return Result.success(PaginatedList(list(items), total, params.page_number, params.page_size))

    async def get_user_orders(self, user_id: str) -> Result[list[Order]]:
        return Result.success(list(await OrderRepository.list_by_user(self.db, user_id)))

    async def get_orders_by_status(self, status: OrderStatus) -> Result[list[Order]]:
        return Result.success(list(await OrderRepository.list_by_status(self.db, status)))

    # --- WORKFLOW ---

    async def create_order(self, user_id: str, data: OrderCreate) -> Result[Order]:
        log = logger.bind(user_id=user_id)
        with ecomm_order_create_duration_seconds.time():
            try:
                self._validate(data)
                order = await self._retry_on_conflict(lambda: self._place_order(user_id, data), "create")
            except DomainError as exc:
                return self._rejected("create", exc, log)
            except SQLAlchemyError:
                log.exception("order_create_failed")
                return self._failed("create", CREATE_FAILED, ErrorKind.TRANSIENT)
            except Exception:
                log.exception("order_create_failed_unexpectedly")
                return self._failed("create", CREATE_FAILED, ErrorKind.UNKNOWN)

        ecomm_orders_created_total.inc()
        log.info("order_created", order_id=order.id, order_number=order.order_number)

        # Committed: from here on the caller going away must not lose the notification.
        await asyncio.shield(self._after_commit(
            ORDER_CREATED,
            {
                "orderId": order.id,
                "orderNumber": order.order_number,
                "userId": order.user_id,
                "totalAmount": order.total_amount,
            },
            [item.product_id for item in order.items],
        ))

        try:
            created = await OrderRepository.get_order(self.db, order.id)
        except SQLAlchemyError:
            # Already committed; answer with what was written rather than fail the call.
            log.warning("order_reload_failed", order_id=order.id, exc_info=True)
            created = None
        return Result.success(created or order, "Order created successfully")

    async def update_status(self, order_id: int, data: OrderStatusUpdate) -> Result[Order]:
        # Admins may move an order to any status.
        log = logger.bind(order_id=order_id)
        try:
            async with self._unit_of_work():
                order = await OrderRepository.get_order(self.db, order_id, for_update=True)
                if not order:
                    raise OrderNotFoundError(order_id)
                previous = order.change_status(data.status, data.notes)
        except DomainError as exc:
            return self._rejected("update_status", exc, log)
        except SQLAlchemyError:
            log.exception("order_status_update_failed")
            return self._failed("update_status", UPDATE_FAILED, ErrorKind.TRANSIENT)
        except Exception:
            log.exception("order_status_update_failed_unexpectedly")
            return self._failed("update_status", UPDATE_FAILED, ErrorKind.UNKNOWN)

        log.info("order_status_updated", previous_status=previous.label, new_status=data.status.label)
        await asyncio.shield(self._after_commit(
            ORDER_STATUS_UPDATED,
            {
                "orderId": order.id,
                "orderNumber": order.order_number,
                "previousStatus": previous.label,
                "newStatus": data.status.label,
            },
        ))
        return Result.success(order, "Order status updated successfully")

    async def cancel_order(self, order_id: int) -> Result[None]:
        log = logger.bind(order_id=order_id)
        try:
            order, restored = await self._retry_on_conflict(lambda: self._cancel(order_id, log), "cancel")
        except DomainError as exc:
            return self._rejected("cancel", exc, log)
        except SQLAlchemyError:
            log.exception("order_cancel_failed")
            return self._failed("cancel", CANCEL_FAILED, ErrorKind.TRANSIENT)
        except Exception:
            log.exception("order_cancel_failed_unexpectedly")
            return self._failed("cancel", CANCEL_FAILED, ErrorKind.UNKNOWN)

        ecomm_order_cancellations_total.inc()
        log.info("order_cancelled", order_number=order.order_number)
        await asyncio.shield(self._after_commit(
            ORDER_CANCELLED,
            {"orderId": order.id, "orderNumber": order.order_number},
            restored,
        ))
        return Result.success(message="Order cancelled successfully")

    # --- UNITS OF WORK ---

    async def _place_order(self, user_id: str, data: OrderCreate) -> Order:
        async with self._unit_of_work():
            order = Order(
                order_number=generate_order_number(),
                user_id=user_id,
                shipping_address=data.shipping_address,
                notes=data.notes,
                status=OrderStatus.PENDING,
                total_amount=Decimal("0"),
            )
            # Caller order is kept: it only decides which failure is reported first.
            for line in data.items:
                product = await ProductRepository.reserve(self.db, line.product_id, line.quantity)
                order.add_item(product, line.quantity)

            await OrderRepository.add_order(self.db, order)
        return order

    async def _cancel(self, order_id: int, log) -> tuple[Order, list[int]]:
        restored = []
        async with self._unit_of_work():
            order = await OrderRepository.get_order(self.db, order_id, for_update=True)
            if not order:
                raise OrderNotFoundError(order_id)
            order.ensure_cancellable()

            for item in order.items:
                try:
                    await ProductRepository.restore(self.db, item.product_id, item.quantity)
                except ProductNotFoundError:
                    # Product removed since the order was placed: nothing to give back.
                    log.warning("stock_restore_skipped", product_id=item.product_id, quantity=item.quantity)
                    continue
                restored.append(item.product_id)

            order.status = OrderStatus.CANCELLED
        return order, restored

    @asynccontextmanager
    async def _unit_of_work(self):
        """Commit everything done in the block, or roll all of it back."""
        try:
            yield
            await self.db.commit()
        except BaseException:
            await self.db.rollback()
            raise

    async def _retry_on_conflict(self, operation, name: str):
        attempt = 1
        while True:
            try:
                return await operation()
            except StaleDataError:
                if attempt >= self.max_attempts:
                    raise
                attempt += 1
                ecomm_stock_conflict_retries_total.inc()
                logger.warning("concurrent_update_retry", operation=name, attempt=attempt)

    # --- HELPERS ---

    @staticmethod
    def _validate(data: OrderCreate) -> None:
        if not data.items:
            raise ValidationFailedError("Order must have at least one item")
        if any(line.quantity <= 0 for line in data.items):
            raise ValidationFailedError("Quantity must be greater than 0")

    async def _after_commit(self, topic: str, payload: dict, product_ids=()) -> None:
        await self.publisher.publish(topic, payload)
        if product_ids:
            await self.cache.invalidate(*(product_cache_key(pid) for pid in dict.fromkeys(product_ids)))

    @staticmethod
    def _rejected(operation: str, exc: DomainError, log) -> Result:
        ecomm_order_failures_total.labels(operation=operation, reason=exc.kind.value).inc()
        log.info("order_operation_rejected", operation=operation, reason=exc.kind.value, error=exc.message)
        return Result.failure(exc.message, exc.kind)

    @staticmethod
    def _failed(operation: str, message: str, kind: ErrorKind) -> Result:
        ecomm_order_failures_total.labels(operation=operation, reason=kind.value).inc()
        return Result.failure(message, kind)
