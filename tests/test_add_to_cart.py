"""
Unit Tests: AddToCartUseCase
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from storefront.application.add_to_cart import AddToCartUseCase
from storefront.domain.exceptions import AuthRequired


@pytest.fixture
def add_to_cart(cart):
    return AddToCartUseCase(cart)


@pytest.mark.asyncio
async def test_adds_one_item(add_to_cart, cart, user):
    assert await add_to_cart(user, 5) is True
    assert await add_to_cart(user, 5) is True

    assert cart.get_qty(5) == 2
    assert not add_to_cart.is_pending(5)


@pytest.mark.asyncio
async def test_guest_must_log_in(add_to_cart, cart):
    with pytest.raises(AuthRequired):
        await add_to_cart(None, 5)

    assert cart.rows == []


@pytest.mark.asyncio
async def test_repeat_for_same_product_while_saving_is_dropped(add_to_cart, cart, storage, user):
    release = asyncio.Event()
    write = storage.set

    async def slow_set(key, value):
        await release.wait()
        await write(key, value)

    storage.set = AsyncMock(side_effect=slow_set)

    first = asyncio.create_task(add_to_cart(user, 5))
    await asyncio.sleep(0)
    assert add_to_cart.is_pending(5)

    assert await add_to_cart(user, 5) is False

    release.set()
    assert await first is True
    assert cart.get_qty(5) == 1


@pytest.mark.asyncio
async def test_different_products_are_independent(add_to_cart, cart, storage, user):
    release = asyncio.Event()
    write = storage.set

    async def slow_set(key, value):
        await release.wait()
        await write(key, value)

    storage.set = AsyncMock(side_effect=slow_set)

    first = asyncio.create_task(add_to_cart(user, 5))
    second = asyncio.create_task(add_to_cart(user, 7))
    await asyncio.sleep(0)
    assert add_to_cart.is_pending(5) and add_to_cart.is_pending(7)

    release.set()
    assert await asyncio.gather(first, second) == [True, True]
    assert cart.get_qty(5) == 1
    assert cart.get_qty(7) == 1


@pytest.mark.asyncio
async def test_failed_save_frees_product(add_to_cart, storage, user):
    storage.set = AsyncMock(side_effect=OSError("disk"))

    with pytest.raises(OSError):
        await add_to_cart(user, 5)

    assert not add_to_cart.is_pending(5)
