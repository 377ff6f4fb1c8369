from sqlalchemy import Table, Column, String, Integer, Boolean, Enum, DateTime, JSON, MetaData, Numeric, Text
from sqlalchemy.sql import func

from storefront.domain.models import OrderStatus

metadata = MetaData()


users_tbl = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("phone", String(32), unique=True, nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("nickname", String(255), nullable=False),
    Column("name", String(255), nullable=False, default=""),
    Column("address", String(1024), nullable=False, default=""),
    Column("is_admin", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


categories_tbl = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), unique=True, nullable=False)
)


products_tbl = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("price", Numeric(12, 2), nullable=False, default=0),
    Column("old_price", Numeric(12, 2), nullable=True),
    Column("discount", String(64), nullable=True),
    Column("description", Text, nullable=True),
    Column("category", String(255), nullable=True),
    Column("categories", JSON, nullable=False, default=list),
    Column("images", JSON, nullable=False, default=list)
)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("status", Enum(OrderStatus), nullable=False, default=OrderStatus.NEW),
    Column("items", JSON, nullable=False),  # снимок товаров, а не ссылки на products
    Column("order_info", JSON, nullable=False),
    Column("total", Numeric(12, 2), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)
