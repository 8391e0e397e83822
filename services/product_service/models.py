from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String

from shared.config.database import PRODUCT_SCHEMA, AuditMixin, Base


class Product(AuditMixin, Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        {"schema": PRODUCT_SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(2000), nullable=True)
    sku = Column(String(50), unique=True, nullable=True)
    price = Column(Numeric(18, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    # Bumped on every UPDATE; a concurrent stock write makes the flush fail
    # with StaleDataError instead of silently overwriting.
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
