from typing import List

from storefront.domain.models import Order


class GetUserOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> List[Order]:
        async with self._uow() as uow:
            return await uow.orders.list_by_user(user_id)


class GetAllOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[Order]:
        async with self._uow() as uow:
            return await uow.orders.list_all()
