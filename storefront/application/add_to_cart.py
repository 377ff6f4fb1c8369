import logging
from typing import Optional

from storefront.application.cart_store import CartStore
from storefront.application.guards import InFlightGuard
from storefront.domain.exceptions import AuthRequired
from storefront.domain.models import User

logger = logging.getLogger(__name__)


class AddToCartUseCase:
    def __init__(self, cart: CartStore):
        self._cart = cart
        self._pending = InFlightGuard()

    def is_pending(self, product_id: int) -> bool:
        return self._pending.is_pending(product_id)

    async def __call__(self, user: Optional[User], product_id: int) -> bool:
        """Добавляет одну штуку товара. False, если добавление этого товара уже идёт"""
        if user is None:
            raise AuthRequired()
        if not self._pending.try_acquire(product_id):
            logger.info(f"Товар {product_id} уже добавляется, повтор пропущен")
            return False

        try:
            await self._cart.inc_qty(product_id, 1)
            return True
        finally:
            self._pending.release(product_id)
