from decimal import Decimal
from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.domain.models import Order, OrderInfo, OrderLine, OrderStatus, Product, User
from storefront.infrastructure.db_schema import orders_tbl, products_tbl, categories_tbl, users_tbl
from storefront.application.interfaces import OrderRepository, CatalogRepository, UserRepository
from storefront.application.manage_products import ProductDTO


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(
        self, user_id: int, items: List[OrderLine], order_info: OrderInfo, total: Decimal
    ) -> Order:
        now = datetime.now(timezone.utc)
        stmt = insert(orders_tbl).values(
            user_id=user_id,
            status=OrderStatus.NEW,
            items=[line.model_dump(mode="json", by_alias=True) for line in items],
            order_info=order_info.model_dump(mode="json"),
            total=total,
            created_at=now
        )
        result = await self._session.execute(stmt)
        return Order(
            id=result.inserted_primary_key[0],
            user_id=user_id,
            status=OrderStatus.NEW,
            items=items,
            order_info=order_info,
            total=total,
            created_at=now
        )

    async def list_by_user(self, user_id: int) -> List[Order]:
        result = await self._session.execute(
            select(orders_tbl)
            .where(orders_tbl.c.user_id == user_id)
            .order_by(orders_tbl.c.created_at.desc(), orders_tbl.c.id.desc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def list_all(self) -> List[Order]:
        result = await self._session.execute(
            select(orders_tbl).order_by(orders_tbl.c.created_at.desc(), orders_tbl.c.id.desc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def update_status(self, order_id: int, status: OrderStatus) -> None:
        stmt = (
            update(orders_tbl)
            .where(orders_tbl.c.id == order_id)
            .values(status=status)
        )
        await self._session.execute(stmt)

    def _to_domain(self, row) -> Order:
        """Трансформация DB → Domain"""
        return Order(
            id=row.id,
            user_id=row.user_id,
            status=OrderStatus(row.status),
            items=row.items or [],
            order_info=row.order_info or {},
            total=row.total,
            created_at=row.created_at
        )


class SQLAlchemyCatalogRepository(CatalogRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_products(self) -> List[Product]:
        result = await self._session.execute(select(products_tbl).order_by(products_tbl.c.id))
        return [
            Product(
                id=row.id,
                name=row.name,
                price=str(row.price if row.price is not None else ""),
                old_price="" if row.old_price is None else str(row.old_price),
                discount=row.discount or "",
                description=row.description or "",
                category=row.category or "",
                categories=row.categories or [],
                images=row.images or []
            )
            for row in result.fetchall()
        ]

    async def list_categories(self) -> List[str]:
        result = await self._session.execute(select(categories_tbl.c.name).order_by(categories_tbl.c.id))
        return [row.name for row in result.fetchall()]

    async def create_product(self, dto: ProductDTO) -> int:
        result = await self._session.execute(insert(products_tbl).values(**self._values(dto)))
        return result.inserted_primary_key[0]

    async def update_product(self, product_id: int, dto: ProductDTO) -> bool:
        result = await self._session.execute(
            update(products_tbl)
            .where(products_tbl.c.id == product_id)
            .values(**self._values(dto))
        )
        return result.rowcount > 0

    async def delete_product(self, product_id: int) -> None:
        await self._session.execute(delete(products_tbl).where(products_tbl.c.id == product_id))

    @staticmethod
    def _values(dto: ProductDTO) -> dict:
        return {
            "name": dto.name,
            "price": dto.price,
            "old_price": dto.old_price,
            "discount": dto.discount or None,
            "description": dto.description or None,
            "category": dto.category or None,
            "categories": list(dto.categories),
            "images": list(dto.images),
        }


class SQLAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.id == user_id)
        )
        row = result.fetchone()
        if not row:
            return None
        return User(
            id=row.id,
            phone=row.phone,
            nickname=row.nickname or row.phone,
            name=row.name or "",
            address=row.address or "",
            is_admin=bool(row.is_admin)
        )

    async def update_profile(self, user_id: int, name: str, address: str) -> None:
        stmt = (
            update(users_tbl)
            .where(users_tbl.c.id == user_id)
            .values(name=name, address=address)
        )
        await self._session.execute(stmt)
