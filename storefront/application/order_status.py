import logging
from typing import Optional

from storefront.application.guards import InFlightGuard
from storefront.application.interfaces import OrderService
from storefront.application.notifications import Notifier
from storefront.application.order_lists import OrderLists
from storefront.domain.exceptions import user_message
from storefront.domain.models import OrderStatus, User

logger = logging.getLogger(__name__)

LIST_NOT_REFRESHED_MESSAGE = "Статус изменён, но список заказов не обновился. Обновите его вручную."


class SetOrderStatusUseCase:
    """Смена статуса заказа администратором, не больше одного запроса на заказ.

    Граф переходов проверяет сервер; после успеха список всех заказов
    перечитывается целиком.
    """

    def __init__(self, orders: OrderService, order_lists: OrderLists, notifier: Notifier):
        self._orders = orders
        self._order_lists = order_lists
        self._notifier = notifier
        self._pending = InFlightGuard()

    def is_pending(self, order_id: int) -> bool:
        return self._pending.is_pending(order_id)

    async def __call__(self, user: Optional[User], order_id: int, status: OrderStatus) -> bool:
        """True, если сервер принял новый статус; ошибка перечитывания списка на это не влияет"""
        if user is None or not user.is_admin:
            return False
        status = OrderStatus(status)
        if not self._pending.try_acquire(order_id):
            logger.info(f"Статус заказа {order_id} уже меняется, повтор пропущен")
            return False

        try:
            try:
                await self._orders.set_order_status(order_id, status)
            except Exception as e:
                logger.error(f"Ошибка смены статуса заказа {order_id}: {e!r}")
                self._notifier.error(user_message(e))
                return False
            logger.info(f"Заказ {order_id} переведён в {status.value}")

            try:
                await self._order_lists.load_all_orders(user)
            except Exception as e:
                logger.warning(f"Статус заказа {order_id} изменён, но список не обновился: {e!r}")
                self._notifier.error(LIST_NOT_REFRESHED_MESSAGE)
            return True
        finally:
            self._pending.release(order_id)
