"""
Unit Tests: SubmitOrderUseCase

- снимок корзины по каталогу, сумма, отправка
- ошибки: проверка формы, сеть, повторное нажатие
- что происходит после подтверждения заказа
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from storefront.application.submit_order import (
    CART_NOT_CLEARED_MESSAGE, ORDER_PLACED_MESSAGE, Confirmed, Failed, Idle, OrderForm, SubmitOrderUseCase, Submitting, build_snapshot
)
from storefront.domain.exceptions import AuthRequired, NetworkTimeout, ServerError
from storefront.domain.models import CartRow, OrderStatus, Product


@pytest.fixture
def submit(cart, catalog, order_service, profile_service, order_lists, notifier, user):
    use_case = SubmitOrderUseCase(cart, catalog, order_service, profile_service, order_lists, notifier)
    use_case.form.prefill(user)
    return use_case


def sent_order(order_service):
    return order_service.create_order.await_args.args[0]


class TestBuildSnapshot:

    def test_lines_copy_product_fields(self, products):
        lines = build_snapshot([CartRow(product_id=7, qty=2)], products)

        assert len(lines) == 1
        assert lines[0].name == "Пирожное"
        assert lines[0].price == "3.20"
        assert lines[0].images == ["a.jpg"]
        assert lines[0].qty == 2

    def test_rows_missing_from_catalog_are_dropped(self, products):
        rows = [CartRow(product_id=404, qty=1), CartRow(product_id=1, qty=1)]

        assert [line.id for line in build_snapshot(rows, products)] == [1]


class TestOrderForm:

    def test_missing_fields_ignores_whitespace(self):
        form = OrderForm(name="  ", phone="7999", address="")

        assert form.missing_fields() == ["name", "address"]

    def test_prefill_keeps_typed_values_when_profile_empty(self, user):
        form = OrderForm(name="Иван", address="дом 2")

        form.prefill(user.model_copy(update={"name": "", "address": ""}))

        assert form.name == "Иван"
        assert form.address == "дом 2"
        assert form.phone == "79990001122"


class TestSubmitOrder:

    @pytest.mark.asyncio
    async def test_confirmed_order_snapshot_total_and_cleared_cart(self, submit, cart, order_service, notifier, user):
        await cart.set_qty(5, 3)

        state = await submit(user)

        assert isinstance(state, Confirmed)
        order = sent_order(order_service)
        assert order.status == OrderStatus.NEW
        assert order.total == Decimal("45.00")
        assert [(line.id, line.qty) for line in order.items] == [(5, 3)]
        assert order.order_info.name == "Мария"
        assert order.order_info.nickname == "masha"
        assert cart.rows == []
        assert [n.message for n in notifier.active()] == [ORDER_PLACED_MESSAGE]

    @pytest.mark.asyncio
    async def test_stale_rows_excluded_from_items_and_total(self, submit, cart, order_service, user):
        await cart.set_qty(404, 2)
        await cart.set_qty(1, 2)

        await submit(user)

        order = sent_order(order_service)
        assert [line.id for line in order.items] == [1]
        assert order.total == Decimal("21.00")

    @pytest.mark.asyncio
    async def test_sent_items_do_not_follow_catalog_changes(self, submit, cart, catalog_service, catalog, order_service, user):
        await cart.set_qty(5, 1)
        await submit(user)

        catalog_service.list_products.return_value = [Product(id=5, name="Торт новый", price="99")]
        await catalog.reload()

        order = sent_order(order_service)
        assert order.items[0].name == "Торт"
        assert order.items[0].price == "15.00"
        assert order.total == Decimal("15.00")

    @pytest.mark.asyncio
    async def test_profile_updated_before_order(self, submit, cart, profile_service, order_service, user):
        await cart.set_qty(5, 1)
        submit.form.address = "пр. Мира, 5"

        await submit(user)

        profile_service.update_profile.assert_awaited_once_with(name="Мария", address="пр. Мира, 5")
        assert sent_order(order_service).order_info.address == "пр. Мира, 5"

    @pytest.mark.asyncio
    async def test_missing_fields_fail_without_network(self, submit, cart, order_service, profile_service, notifier, user):
        await cart.set_qty(5, 1)
        submit.form.address = " "

        state = await submit(user)

        assert state == Failed(reason="Заполните имя, телефон и адрес")
        profile_service.update_profile.assert_not_awaited()
        order_service.create_order.assert_not_awaited()
        assert cart.rows == [CartRow(product_id=5, qty=1)]
        assert [n.is_error for n in notifier.active()] == [True]

    @pytest.mark.asyncio
    async def test_network_failure_keeps_cart_and_notifies_once(self, submit, cart, order_service, notifier, user):
        await cart.set_qty(5, 2)
        order_service.create_order.side_effect = NetworkTimeout()

        state = await submit(user)

        assert isinstance(state, Failed)
        assert state.reason == "Сервер не отвечает. Попробуйте ещё раз."
        assert cart.rows == [CartRow(product_id=5, qty=2)]
        assert [n.message for n in notifier.active()] == ["Сервер не отвечает. Попробуйте ещё раз."]
        assert not submit.is_submitting

    @pytest.mark.asyncio
    async def test_profile_failure_aborts_submission(self, submit, cart, profile_service, order_service, user):
        await cart.set_qty(5, 1)
        profile_service.update_profile.side_effect = ServerError()

        state = await submit(user)

        assert isinstance(state, Failed)
        order_service.create_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_and_allows_retry(self, submit, cart, profile_service, order_service, notifier, user):
        await cart.set_qty(5, 1)
        profile_service.update_profile.side_effect = OSError("connection reset")

        state = await submit(user)

        assert isinstance(state, Failed)
        assert state.reason == "Ошибка. Попробуйте ещё раз."
        assert [n.message for n in notifier.active()] == ["Ошибка. Попробуйте ещё раз."]
        assert not submit.is_submitting
        order_service.create_order.assert_not_awaited()

        profile_service.update_profile.side_effect = None
        assert isinstance(await submit(user), Confirmed)
        order_service.create_order.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cart_write_failure_after_order_keeps_confirmation(self, submit, cart, storage, order_service, notifier, user):
        await cart.set_qty(5, 2)
        storage.set = AsyncMock(side_effect=OSError("disk full"))

        state = await submit(user)

        assert isinstance(state, Confirmed)
        assert [n.message for n in notifier.active()] == [CART_NOT_CLEARED_MESSAGE]
        assert submit.form.comment == ""
        order_service.create_order.assert_awaited_once()
        order_service.list_my_orders.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_press_while_submitting_is_ignored(self, submit, cart, order_service, user):
        await cart.set_qty(5, 1)
        release = asyncio.Event()

        async def slow_create(order):
            await release.wait()

        order_service.create_order.side_effect = slow_create

        first = asyncio.create_task(submit(user))
        await asyncio.sleep(0)
        assert isinstance(submit.state, Submitting)

        second = await submit(user)
        assert isinstance(second, Submitting)

        release.set()
        assert isinstance(await first, Confirmed)
        assert order_service.create_order.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_cart_order_is_sent(self, submit, order_service, user):
        state = await submit(user)

        assert isinstance(state, Confirmed)
        order = sent_order(order_service)
        assert order.items == []
        assert order.total == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_comment_reset_contacts_kept(self, submit, cart, user):
        await cart.set_qty(5, 1)
        submit.form.comment = "домофон 12"

        await submit(user)

        assert submit.form.comment == ""
        assert submit.form.name == "Мария"
        assert submit.form.address == "ул. Ленина, 1"

    @pytest.mark.asyncio
    async def test_admin_lists_reloaded_after_order(self, cart, catalog, order_service, profile_service, order_lists, notifier, admin):
        submit = SubmitOrderUseCase(cart, catalog, order_service, profile_service, order_lists, notifier)
        submit.form = OrderForm(name="Админ", phone="79995550000", address="офис")

        await submit(admin)

        order_service.list_my_orders.assert_awaited_once()
        order_service.list_all_orders.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_user_lists_reloaded_after_order(self, submit, order_service, user):
        await submit(user)

        order_service.list_my_orders.assert_awaited_once()
        order_service.list_all_orders.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_refresh_failure_does_not_undo_confirmation(self, submit, order_service, cart, user):
        await cart.set_qty(5, 1)
        order_service.list_my_orders.side_effect = NetworkTimeout()

        state = await submit(user)

        assert isinstance(state, Confirmed)
        assert cart.rows == []

    @pytest.mark.asyncio
    async def test_guest_is_asked_to_log_in(self, submit, order_service):
        with pytest.raises(AuthRequired):
            await submit(None)

        assert submit.state == Idle()
        order_service.create_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset_returns_to_idle(self, submit, user):
        await submit(user)

        submit.reset()

        assert submit.state == Idle()
