import logging
from typing import Optional

from storefront.application.cart_store import CartStore
from storefront.application.catalog import CatalogSnapshot
from storefront.application.guards import InFlightGuard
from storefront.application.interfaces import ProductAdminService
from storefront.application.notifications import Notifier
from storefront.domain.exceptions import user_message
from storefront.domain.models import ProductDraft, User

logger = logging.getLogger(__name__)

CATALOG_NOT_REFRESHED_MESSAGE = "Изменения сохранены, но каталог не обновился. Обновите его вручную."


async def _reload_catalog(catalog: CatalogSnapshot, notifier: Notifier) -> None:
    try:
        await catalog.reload()
    except Exception as e:
        logger.warning(f"Каталог не перечитан после изменения товара: {e!r}")
        notifier.error(CATALOG_NOT_REFRESHED_MESSAGE)


class SaveProductUseCase:
    """Создание или правка товара администратором.

    Пока сохранение идёт, повторное нажатие игнорируется. После ответа
    сервера каталог перечитывается целиком.
    """

    def __init__(self, products: ProductAdminService, catalog: CatalogSnapshot, notifier: Notifier):
        self._products = products
        self._catalog = catalog
        self._notifier = notifier
        self._saving = InFlightGuard()

    @property
    def is_saving(self) -> bool:
        return self._saving.is_pending()

    async def __call__(self, user: Optional[User], draft: ProductDraft, product_id: Optional[int] = None) -> bool:
        if user is None or not user.is_admin:
            return False
        if not self._saving.try_acquire():
            return False

        try:
            try:
                if product_id is None:
                    product_id = await self._products.create_product(draft)
                    message = "Товар добавлен"
                else:
                    await self._products.update_product(product_id, draft)
                    message = "Товар обновлён"
            except Exception as e:
                logger.error(f"Ошибка сохранения товара {product_id}: {e!r}")
                self._notifier.error(user_message(e))
                return False

            logger.info(f"Товар {product_id} сохранён")
            await _reload_catalog(self._catalog, self._notifier)
            self._notifier.notify(message)
            return True
        finally:
            self._saving.release()


class RemoveProductUseCase:
    """Удаление товара администратором.

    Заказы хранят снимок товаров и не меняются. Из активной корзины
    строка с удалённым товаром убирается, чтобы не висела без цены.
    """

    def __init__(
        self,
        products: ProductAdminService,
        catalog: CatalogSnapshot,
        cart: CartStore,
        notifier: Notifier,
    ):
        self._products = products
        self._catalog = catalog
        self._cart = cart
        self._notifier = notifier
        self._pending = InFlightGuard()

    def is_pending(self, product_id: int) -> bool:
        return self._pending.is_pending(product_id)

    async def __call__(self, user: Optional[User], product_id: int) -> bool:
        if user is None or not user.is_admin:
            return False
        if not self._pending.try_acquire(product_id):
            logger.info(f"Товар {product_id} уже удаляется")
            return False

        try:
            try:
                await self._products.delete_product(product_id)
            except Exception as e:
                logger.error(f"Ошибка удаления товара {product_id}: {e!r}")
                self._notifier.error(user_message(e))
                return False

            logger.info(f"Товар {product_id} удалён")
            await _reload_catalog(self._catalog, self._notifier)
            self._notifier.notify("Товар удалён")

            if self._cart.get_qty(product_id):
                try:
                    await self._cart.set_qty(product_id, 0)
                except Exception as e:
                    logger.warning(f"Не удалось убрать товар {product_id} из корзины: {e!r}")
                    self._notifier.error(user_message(e))
            return True
        finally:
            self._pending.release(product_id)
