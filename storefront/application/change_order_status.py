import logging

from storefront.domain.models import OrderStatus
from storefront.domain.exceptions import InvalidStatusTransitionError, OrderNotFoundError

logger = logging.getLogger(__name__)


class ChangeOrderStatusUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: int, status: OrderStatus) -> None:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError(f"Заказ {order_id} не найден")

            if not order.can_transition_to(status):
                logger.warning(f"Заказ {order_id} не может перейти {order.status.value} -> {status.value}")
                raise InvalidStatusTransitionError(order.status.value, status.value)

            await uow.orders.update_status(order_id, status)
            await uow.commit()

        logger.info(f"Заказ {order_id} отмечен {status.value}")
