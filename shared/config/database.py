from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from shared.config.settings import DATABASE_URL, DB_ECHO

PRODUCT_SCHEMA = "product_schema"
ORDER_SCHEMA = "order_schema"

engine = create_async_engine(DATABASE_URL, echo=DB_ECHO)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditMixin:
    """Creation/update timestamps shared by every aggregate root.

    Filled on the write path by column defaults, so no service code touches them.
    """

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def create_schemas(conn) -> None:
    if conn.dialect.name == "postgresql":
        await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {PRODUCT_SCHEMA}"))
        await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {ORDER_SCHEMA}"))
    await conn.run_sync(Base.metadata.create_all)
