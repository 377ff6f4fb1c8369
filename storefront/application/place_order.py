import logging
from decimal import Decimal
from typing import List
from pydantic import BaseModel

from storefront.domain.models import Order, OrderInfo, OrderLine


logger = logging.getLogger(__name__)


class PlaceOrderDTO(BaseModel):
    user_id: int
    items: List[OrderLine]
    order_info: OrderInfo
    total: Decimal


class PlaceOrderUseCase:
    """Запись заказа на сервере: одна транзакция, статус всегда new"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: PlaceOrderDTO) -> Order:
        logger.info(f"Создание заказа для пользователя {dto.user_id}: {len(dto.items)} позиций на {dto.total}")

        async with self._uow() as uow:
            order = await uow.orders.create(
                user_id=dto.user_id,
                items=dto.items,
                order_info=dto.order_info,
                total=dto.total
            )
            await uow.commit()

        logger.info(f"Заказ создан: {order.id}")
        return order
