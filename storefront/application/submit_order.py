import logging
from typing import Iterable, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict

from storefront.application.cart_store import CartStore
from storefront.application.catalog import CatalogSnapshot
from storefront.application.interfaces import OrderService, ProfileService
from storefront.application.notifications import Notifier
from storefront.application.order_lists import OrderLists
from storefront.domain.exceptions import AuthRequired, DomainException, ValidationError, user_message
from storefront.domain.models import CartRow, NewOrder, OrderInfo, OrderLine, OrderStatus, Product, User
from storefront.domain.money import find_product, snapshot_total

logger = logging.getLogger(__name__)

ORDER_PLACED_MESSAGE = "Заказ оформлен! Скоро свяжемся."
CART_NOT_CLEARED_MESSAGE = "Заказ оформлен, но корзину не удалось очистить. Не отправляйте его повторно."


class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["idle"] = "idle"


class Submitting(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["submitting"] = "submitting"


class Confirmed(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["confirmed"] = "confirmed"
    order: NewOrder


class Failed(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["failed"] = "failed"
    reason: str


SubmissionState = Union[Idle, Submitting, Confirmed, Failed]


class OrderForm(BaseModel):
    """Поля формы оформления; имя, телефон и адрес сохраняются между заказами"""
    name: str = ""
    phone: str = ""
    address: str = ""
    comment: str = ""

    def missing_fields(self) -> List[str]:
        return [f for f in ("name", "phone", "address") if not getattr(self, f).strip()]

    def prefill(self, user: User) -> None:
        self.name = user.name or self.name
        self.phone = user.phone or self.phone
        self.address = user.address or self.address


def build_snapshot(cart: Iterable[CartRow], catalog: Iterable[Product]) -> List[OrderLine]:
    """Копирует поля товаров в строки заказа; строки без товара в каталоге выпадают"""
    catalog = list(catalog)
    lines = []
    for row in cart:
        product = find_product(catalog, row.product_id)
        if product is None:
            logger.info(f"Товар {row.product_id} больше нет в каталоге, строка не попадёт в заказ")
            continue
        lines.append(OrderLine(**product.model_dump(), qty=row.qty))
    return lines


class SubmitOrderUseCase:
    def __init__(
        self,
        cart: CartStore,
        catalog: CatalogSnapshot,
        orders: OrderService,
        profiles: ProfileService,
        order_lists: OrderLists,
        notifier: Notifier,
    ):
        self._cart = cart
        self._catalog = catalog
        self._orders = orders
        self._profiles = profiles
        self._order_lists = order_lists
        self._notifier = notifier
        self.state: SubmissionState = Idle()
        self.form = OrderForm()

    @property
    def is_submitting(self) -> bool:
        return isinstance(self.state, Submitting)

    def reset(self) -> None:
        if not self.is_submitting:
            self.state = Idle()

    async def __call__(self, user: Optional[User]) -> SubmissionState:
        if self.is_submitting:
            logger.info("Заказ уже отправляется, повтор пропущен")
            return self.state
        if user is None:
            raise AuthRequired()

        self.state = Submitting()
        try:
            order = await self._submit(user)
        except DomainException as e:
            logger.error(f"Ошибка оформления заказа: {e}")
            return self._fail(e)
        except Exception as e:
            logger.exception(f"Непредвиденная ошибка оформления заказа: {e!r}")
            return self._fail(e)

        self.state = Confirmed(order=order)
        await self._after_confirmed(user)
        return self.state

    def _fail(self, error: Exception) -> Failed:
        message = user_message(error)
        self.state = Failed(reason=message)
        self._notifier.error(message)
        return self.state

    async def _submit(self, user: User) -> NewOrder:
        # 1. Проверка обязательных полей, формат не проверяется
        if self.form.missing_fields():
            raise ValidationError("Заполните имя, телефон и адрес")

        # 2. Контакты профиля синхронизируются с последним адресом доставки
        await self._profiles.update_profile(name=self.form.name, address=self.form.address)

        # 3. Снимок корзины по текущему каталогу
        items = build_snapshot(self._cart.rows, self._catalog.products)

        # 4. Сумма по снимку
        order = NewOrder(
            status=OrderStatus.NEW,
            items=items,
            order_info=OrderInfo(
                name=self.form.name,
                phone=self.form.phone,
                address=self.form.address,
                comment=self.form.comment,
                nickname=user.nickname,
            ),
            total=snapshot_total(items),
        )

        # 5. Отправка
        await self._orders.create_order(order)
        logger.info(f"Заказ пользователя {user.id} создан: {len(items)} позиций на {order.total}")
        return order

    async def _after_confirmed(self, user: User) -> None:
        # заказ уже создан: ошибки ниже не отменяют подтверждение
        try:
            await self._cart.clear()
        except Exception as e:
            logger.error(f"Заказ создан, но корзину не удалось очистить: {e!r}")
            self._notifier.error(CART_NOT_CLEARED_MESSAGE)
        else:
            self._notifier.notify(ORDER_PLACED_MESSAGE)
        self.form.comment = ""

        try:
            await self._order_lists.load_my_orders(user)
            if user.is_admin:
                await self._order_lists.load_all_orders(user)
        except Exception as e:
            logger.warning(f"Не удалось обновить списки заказов после оформления: {e!r}")
