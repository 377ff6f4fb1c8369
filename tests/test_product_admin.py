"""
Unit Tests: SaveProductUseCase, RemoveProductUseCase

- создание и правка товара, перечитывание каталога
- удаление убирает строку из корзины
- права администратора и повторные нажатия
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from storefront.application.interfaces import ProductAdminService
from storefront.application.product_admin import (
    CATALOG_NOT_REFRESHED_MESSAGE, RemoveProductUseCase, SaveProductUseCase
)
from storefront.domain.exceptions import NetworkTimeout, ValidationError
from storefront.domain.models import CartRow, ProductDraft


@pytest.fixture
def product_admin():
    service = AsyncMock(spec=ProductAdminService)
    service.create_product.return_value = 12
    return service


@pytest.fixture
def save(product_admin, catalog, notifier):
    return SaveProductUseCase(product_admin, catalog, notifier)


@pytest.fixture
def remove(product_admin, catalog, cart, notifier):
    return RemoveProductUseCase(product_admin, catalog, cart, notifier)


def messages(notifier):
    return [n.message for n in notifier.active()]


class TestSaveProduct:

    @pytest.mark.asyncio
    async def test_new_product_is_created(self, save, product_admin, catalog_service, notifier, admin):
        draft = ProductDraft(name="Морс", price="7,40")
        catalog_service.list_products.reset_mock()

        assert await save(admin, draft) is True

        product_admin.create_product.assert_awaited_once_with(draft)
        product_admin.update_product.assert_not_awaited()
        catalog_service.list_products.assert_awaited_once()
        assert messages(notifier) == ["Товар добавлен"]
        assert not save.is_saving

    @pytest.mark.asyncio
    async def test_existing_product_is_updated(self, save, product_admin, notifier, admin):
        draft = ProductDraft(name="Торт медовый", price="18")

        assert await save(admin, draft, product_id=5) is True

        product_admin.update_product.assert_awaited_once_with(5, draft)
        assert messages(notifier) == ["Товар обновлён"]

    @pytest.mark.asyncio
    async def test_rejected_draft_is_notified(self, save, product_admin, catalog_service, notifier, admin):
        product_admin.create_product.side_effect = ValidationError("Введите название товара")
        catalog_service.list_products.reset_mock()

        assert await save(admin, ProductDraft()) is False

        assert messages(notifier) == ["Введите название товара"]
        catalog_service.list_products.assert_not_awaited()
        assert not save.is_saving

    @pytest.mark.asyncio
    async def test_catalog_reload_failure_after_save(self, save, catalog_service, notifier, admin):
        catalog_service.list_products.side_effect = NetworkTimeout()

        assert await save(admin, ProductDraft(name="Морс")) is True

        assert messages(notifier) == [CATALOG_NOT_REFRESHED_MESSAGE, "Товар добавлен"]

    @pytest.mark.asyncio
    async def test_non_admin_is_ignored(self, save, product_admin, user):
        assert await save(user, ProductDraft(name="Морс")) is False
        assert await save(None, ProductDraft(name="Морс")) is False

        product_admin.create_product.assert_not_awaited()


class TestRemoveProduct:

    @pytest.mark.asyncio
    async def test_delete_prunes_cart_row(self, remove, product_admin, catalog_service, products, cart, storage, notifier, admin):
        await cart.load("cart:79995550000")
        await cart.set_qty(5, 2)
        await cart.set_qty(7, 1)
        catalog_service.list_products.return_value = [p for p in products if p.id != 5]

        assert await remove(admin, 5) is True

        product_admin.delete_product.assert_awaited_once_with(5)
        assert cart.rows == [CartRow(product_id=7, qty=1)]
        assert json.loads(storage.data["cart:79995550000"]) == [{"productId": 7, "qty": 1}]
        assert messages(notifier) == ["Товар удалён"]
        assert not remove.is_pending(5)

    @pytest.mark.asyncio
    async def test_product_not_in_cart_leaves_cart_untouched(self, remove, cart, storage, admin):
        await cart.set_qty(7, 1)
        storage.set.reset_mock()

        assert await remove(admin, 5) is True

        storage.set.assert_not_awaited()
        assert cart.rows == [CartRow(product_id=7, qty=1)]

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_cart(self, remove, product_admin, cart, notifier, admin):
        await cart.set_qty(5, 2)
        product_admin.delete_product.side_effect = NetworkTimeout()

        assert await remove(admin, 5) is False

        assert cart.rows == [CartRow(product_id=5, qty=2)]
        assert messages(notifier) == ["Сервер не отвечает. Попробуйте ещё раз."]
        assert not remove.is_pending(5)

    @pytest.mark.asyncio
    async def test_only_one_delete_per_product(self, remove, product_admin, admin):
        release = asyncio.Event()

        async def slow_delete(product_id):
            if product_id == 5:
                await release.wait()

        product_admin.delete_product.side_effect = slow_delete

        first = asyncio.create_task(remove(admin, 5))
        await asyncio.sleep(0)
        assert remove.is_pending(5)

        assert await remove(admin, 5) is False
        assert await remove(admin, 7) is True

        release.set()
        assert await first is True
        assert product_admin.delete_product.await_count == 2

    @pytest.mark.asyncio
    async def test_non_admin_is_ignored(self, remove, product_admin, user):
        assert await remove(user, 5) is False

        product_admin.delete_product.assert_not_awaited()
