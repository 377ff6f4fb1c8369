import logging
from typing import Optional

from storefront.domain.models import User

logger = logging.getLogger(__name__)


class GetProfileUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> Optional[User]:
        async with self._uow() as uow:
            return await uow.users.get_by_id(user_id)


class UpdateProfileUseCase:
    """Контакты профиля обновляются при каждом оформлении заказа"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int, name: str, address: str) -> None:
        async with self._uow() as uow:
            await uow.users.update_profile(user_id, name=name, address=address)
            await uow.commit()
        logger.info(f"Профиль пользователя {user_id} обновлён")
