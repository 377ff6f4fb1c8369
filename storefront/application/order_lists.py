import logging
from typing import List, Optional

from storefront.application.guards import InFlightGuard
from storefront.application.interfaces import OrderService
from storefront.application.notifications import Notifier
from storefront.domain.exceptions import DomainException
from storefront.domain.models import Order, User

logger = logging.getLogger(__name__)

MY_ORDERS = "my"
ALL_ORDERS = "all"


class OrderLists:
    """Списки заказов: свои и (для администратора) все"""

    def __init__(self, orders: OrderService, notifier: Notifier):
        self._orders = orders
        self._notifier = notifier
        self._refreshing = InFlightGuard()
        self.my_orders: List[Order] = []
        self.all_orders: List[Order] = []

    def is_refreshing(self, which: str) -> bool:
        return self._refreshing.is_pending(which)

    async def load_my_orders(self, user: Optional[User]) -> List[Order]:
        if user is None:
            self.my_orders = []
        else:
            self.my_orders = list(await self._orders.list_my_orders())
        return self.my_orders

    async def load_all_orders(self, user: Optional[User]) -> List[Order]:
        if user is None or not user.is_admin:
            self.all_orders = []
        else:
            self.all_orders = list(await self._orders.list_all_orders())
        return self.all_orders

    async def refresh_my_orders(self, user: Optional[User]) -> bool:
        return await self._refresh(MY_ORDERS, self.load_my_orders, user)

    async def refresh_all_orders(self, user: Optional[User]) -> bool:
        return await self._refresh(ALL_ORDERS, self.load_all_orders, user)

    async def _refresh(self, which: str, load, user: Optional[User]) -> bool:
        if not self._refreshing.try_acquire(which):
            return False
        try:
            await load(user)
            return True
        except DomainException as e:
            logger.error(f"Ошибка обновления списка заказов {which}: {e}")
            self._notifier.error(e.message)
            return False
        finally:
            self._refreshing.release(which)
