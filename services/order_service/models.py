import enum
import secrets
from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Integer, Numeric, SmallInteger, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from shared.common import AlreadyCancelledError, InvalidTransitionError
from shared.config.database import ORDER_SCHEMA, PRODUCT_SCHEMA, AuditMixin, Base, utcnow
from services.product_service.models import Product


class OrderStatus(enum.IntEnum):
    PENDING = 0
    CONFIRMED = 1
    PROCESSING = 2
    SHIPPED = 3
    DELIVERED = 4
    CANCELLED = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        """Accepts a member, its ordinal (int or numeric string) or its name in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid order status: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise ValueError(f"Invalid order status: {value!r}")


# Statuses from which an order can no longer be cancelled (besides CANCELLED itself).
NON_CANCELLABLE = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})


class OrderStatusType(TypeDecorator):
    """Stores OrderStatus as its ordinal so sorting by status follows the lifecycle."""

    impl = SmallInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else int(value)

    def process_result_value(self, value, dialect):
        return None if value is None else OrderStatus(value)


def generate_order_number() -> str:
    # ORD-<yyyymmdd>-<8 random upper hex chars>
    return f"ORD-{utcnow():%Y%m%d}-{secrets.token_hex(4).upper()}"


class Order(AuditMixin, Base):
    __tablename__ = "orders"
    __table_args__ = {"schema": ORDER_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    status = Column(OrderStatusType(), nullable=False, default=OrderStatus.PENDING, index=True)
    total_amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    shipping_address = Column(String(500), nullable=True)
    notes = Column(String(1000), nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )

    def add_item(self, product: Product, quantity: int) -> "OrderItem":
        """Append a line priced at the product's current price and grow the running total."""
        item = OrderItem(product=product, quantity=quantity, unit_price=product.price)
        self.items.append(item)
        self.total_amount = (self.total_amount or Decimal("0")) + item.total_price
        return item

    def ensure_cancellable(self) -> None:
        if self.status in NON_CANCELLABLE:
            raise InvalidTransitionError("Cannot cancel shipped or delivered orders")
        if self.status == OrderStatus.CANCELLED:
            raise AlreadyCancelledError()

    def change_status(self, new_status: OrderStatus, notes: str | None = None) -> OrderStatus:
        """Unconditional status change (admin override); returns the previous status."""
        previous = self.status
        self.status = new_status
        if notes:
            self.notes = notes
        return previous


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = {"schema": ORDER_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey(f"{ORDER_SCHEMA}.orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey(f"{PRODUCT_SCHEMA}.products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(18, 2), nullable=False) # price snapshot at order time

    order = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="selectin")

    @property
    def total_price(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product is not None else None
