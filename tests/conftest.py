"""
Общие фикстуры тестов: хранилище в памяти, каталог, пользователи и
подменённые внешние сервисы.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from storefront.application.cart_store import CartStore
from storefront.application.catalog import CatalogSnapshot
from storefront.application.interfaces import CatalogService, OrderService, ProfileService
from storefront.application.notifications import Notifier
from storefront.application.order_lists import OrderLists
from storefront.domain.models import Product, User
from storefront.infrastructure.storage import InMemoryStorage


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def storage():
    """Хранилище в памяти; set/delete обёрнуты, чтобы считать записи."""
    storage = InMemoryStorage()
    storage.set = AsyncMock(wraps=storage.set)
    storage.delete = AsyncMock(wraps=storage.delete)
    return storage


@pytest.fixture
def products():
    return [
        Product(id=1, name="Лимонад", price="10,50", categories=["Напитки"]),
        Product(id=5, name="Торт", price="15.00", description="Шоколадный", category="Десерты"),
        Product(id=7, name="Пирожное", price="3.20", categories=["Десерты"], images=["a.jpg"]),
    ]


@pytest.fixture
def catalog_service(products):
    service = AsyncMock(spec=CatalogService)
    service.list_products.return_value = products
    service.list_categories.return_value = ["Напитки", "Десерты"]
    return service


@pytest_asyncio.fixture
async def catalog(catalog_service):
    snapshot = CatalogSnapshot(catalog_service)
    await snapshot.reload()
    return snapshot


@pytest.fixture
def cart(storage):
    return CartStore(storage)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier(clock):
    return Notifier(ttl=2.5, clock=clock)


@pytest.fixture
def order_service():
    service = AsyncMock(spec=OrderService)
    service.list_my_orders.return_value = []
    service.list_all_orders.return_value = []
    return service


@pytest.fixture
def profile_service():
    return AsyncMock(spec=ProfileService)


@pytest.fixture
def order_lists(order_service, notifier):
    return OrderLists(order_service, notifier)


@pytest.fixture
def user():
    return User(id=10, phone="79990001122", nickname="masha", name="Мария", address="ул. Ленина, 1")


@pytest.fixture
def admin():
    return User(id=1, phone="79995550000", nickname="boss", is_admin=True)
