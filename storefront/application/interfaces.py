from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, List

from storefront.application.manage_products import ProductDTO
from storefront.domain.models import NewOrder, Order, OrderInfo, OrderLine, OrderStatus, Product, ProductDraft, User


# Клиентская сторона: внешние сервисы и локальное хранилище


class KeyValueStorage(ABC):
    """Локальное хранилище устройства (корзина, токен сессии)"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass


class CatalogService(ABC):
    @abstractmethod
    async def list_products(self) -> List[Product]:
        pass

    @abstractmethod
    async def list_categories(self) -> List[str]:
        pass


class OrderService(ABC):
    @abstractmethod
    async def create_order(self, order: NewOrder) -> None:
        pass

    @abstractmethod
    async def list_my_orders(self) -> List[Order]:
        pass

    @abstractmethod
    async def list_all_orders(self) -> List[Order]:
        pass

    @abstractmethod
    async def set_order_status(self, order_id: int, status: OrderStatus) -> None:
        pass


class ProductAdminService(ABC):
    """Управление товарами каталога, только для администратора"""

    @abstractmethod
    async def create_product(self, draft: ProductDraft) -> int:
        pass

    @abstractmethod
    async def update_product(self, product_id: int, draft: ProductDraft) -> None:
        pass

    @abstractmethod
    async def delete_product(self, product_id: int) -> None:
        pass


class ProfileService(ABC):
    @abstractmethod
    async def update_profile(self, name: str, address: str) -> None:
        pass


class AuthService(ABC):
    @abstractmethod
    async def login(self, phone: str, password: str) -> str:
        """Возвращает токен сессии"""

    @abstractmethod
    async def register(self, phone: str, password: str, nickname: str) -> str:
        pass

    @abstractmethod
    async def me(self) -> User:
        pass


# Серверная сторона: репозитории и Unit of Work


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(
        self, user_id: int, items: List[OrderLine], order_info: OrderInfo, total: Decimal
    ) -> Order:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[Order]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Order]:
        pass

    @abstractmethod
    async def update_status(self, order_id: int, status: OrderStatus) -> None:
        pass


class CatalogRepository(ABC):
    @abstractmethod
    async def list_products(self) -> List[Product]:
        pass

    @abstractmethod
    async def list_categories(self) -> List[str]:
        pass

    @abstractmethod
    async def create_product(self, dto: ProductDTO) -> int:
        pass

    @abstractmethod
    async def update_product(self, product_id: int, dto: ProductDTO) -> bool:
        """False, если товара с таким id нет"""
        pass

    @abstractmethod
    async def delete_product(self, product_id: int) -> None:
        pass


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    async def update_profile(self, user_id: int, name: str, address: str) -> None:
        pass
