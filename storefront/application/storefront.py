import logging
from typing import Optional

from storefront.application.add_to_cart import AddToCartUseCase
from storefront.application.cart_store import CartStore
from storefront.application.catalog import CatalogSnapshot
from storefront.application.identity import IdentityTransitionManager, TokenStore
from storefront.application.interfaces import AuthService, CatalogService, KeyValueStorage, OrderService, ProductAdminService, ProfileService
from storefront.application.notifications import Notifier
from storefront.application.order_lists import OrderLists
from storefront.application.order_status import SetOrderStatusUseCase
from storefront.application.product_admin import RemoveProductUseCase, SaveProductUseCase
from storefront.application.submit_order import SubmissionState, SubmitOrderUseCase
from storefront.domain.exceptions import AuthRequired, DomainException
from storefront.domain.models import OrderStatus, ProductDraft, User

logger = logging.getLogger(__name__)


class Storefront:
    """Состояние витрины на одну сессию работы пользователя.

    Создаётся при старте и передаётся потребителям явно; корзина и списки
    заказов подменяются при смене пользователя через IdentityTransitionManager.
    Флаг auth_prompt поднимается, когда гость пытается сделать то, что требует
    входа, и интерфейс должен показать окно авторизации.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        tokens: TokenStore,
        auth: AuthService,
        catalog_service: CatalogService,
        orders: OrderService,
        profiles: ProfileService,
        products: ProductAdminService,
        notifier: Optional[Notifier] = None,
    ):
        self.notifier = notifier or Notifier()
        self.cart = CartStore(storage)
        self.catalog = CatalogSnapshot(catalog_service)
        self.identity = IdentityTransitionManager(auth, self.cart, tokens)
        self.order_lists = OrderLists(orders, self.notifier)
        self._add_to_cart = AddToCartUseCase(self.cart)
        self._submit_order = SubmitOrderUseCase(
            self.cart, self.catalog, orders, profiles, self.order_lists, self.notifier
        )
        self._set_order_status = SetOrderStatusUseCase(orders, self.order_lists, self.notifier)
        self._save_product = SaveProductUseCase(products, self.catalog, self.notifier)
        self._remove_product = RemoveProductUseCase(products, self.catalog, self.cart, self.notifier)
        self.auth_prompt = False

    @property
    def user(self) -> Optional[User]:
        return self.identity.current_user

    @property
    def order_form(self):
        return self._submit_order.form

    @property
    def submission(self) -> SubmissionState:
        return self._submit_order.state

    async def start(self) -> None:
        await self.reload_catalog()
        user = await self.identity.restore()
        if user is not None:
            self.order_form.prefill(user)
            await self._load_order_lists(user)

    async def reload_catalog(self) -> bool:
        try:
            await self.catalog.reload()
            return True
        except DomainException as e:
            logger.error(f"Не удалось загрузить каталог: {e}")
            self.notifier.error(e.message)
            return False

    async def login(self, phone: str, password: str) -> Optional[User]:
        try:
            user = await self.identity.login(phone, password)
        except DomainException as e:
            self.notifier.error(e.message)
            return None

        self.auth_prompt = False
        self.order_form.prefill(user)
        self.notifier.notify(f"Добро пожаловать, {user.nickname or 'пользователь'}!")
        await self._load_order_lists(user)
        return user

    async def register(self, phone: str, password: str, nickname: str) -> Optional[User]:
        try:
            user = await self.identity.register(phone, password, nickname)
        except DomainException as e:
            self.notifier.error(e.message)
            return None

        self.auth_prompt = False
        self.order_form.name = ""
        self.order_form.address = ""
        self.order_form.comment = ""
        self.order_form.phone = user.phone
        self.notifier.notify("Регистрация успешна!")
        await self._load_order_lists(user)
        return user

    async def logout(self) -> None:
        await self.identity.logout()
        self.order_lists.my_orders = []
        self.order_lists.all_orders = []
        self.notifier.notify("Вы вышли")

    async def add_to_cart(self, product_id: int) -> bool:
        try:
            return await self._add_to_cart(self.user, product_id)
        except AuthRequired:
            self.auth_prompt = True
            return False

    def is_adding(self, product_id: int) -> bool:
        return self._add_to_cart.is_pending(product_id)

    async def change_qty(self, product_id: int, delta: int) -> None:
        await self.cart.inc_qty(product_id, delta)

    async def set_qty(self, product_id: int, qty: int) -> None:
        await self.cart.set_qty(product_id, qty)

    async def submit_order(self) -> SubmissionState:
        try:
            return await self._submit_order(self.user)
        except AuthRequired:
            self.auth_prompt = True
            return self._submit_order.state

    async def set_order_status(self, order_id: int, status: OrderStatus) -> bool:
        return await self._set_order_status(self.user, order_id, status)

    def is_status_pending(self, order_id: int) -> bool:
        return self._set_order_status.is_pending(order_id)

    async def save_product(self, draft: ProductDraft, product_id: Optional[int] = None) -> bool:
        """Без product_id создаёт новый товар"""
        return await self._save_product(self.user, draft, product_id)

    @property
    def is_saving_product(self) -> bool:
        return self._save_product.is_saving

    async def delete_product(self, product_id: int) -> bool:
        return await self._remove_product(self.user, product_id)

    def is_deleting_product(self, product_id: int) -> bool:
        return self._remove_product.is_pending(product_id)

    async def refresh_my_orders(self) -> bool:
        return await self.order_lists.refresh_my_orders(self.user)

    async def refresh_all_orders(self) -> bool:
        return await self.order_lists.refresh_all_orders(self.user)

    async def _load_order_lists(self, user: User) -> None:
        try:
            await self.order_lists.load_my_orders(user)
            if user.is_admin:
                await self.order_lists.load_all_orders(user)
        except DomainException as e:
            logger.warning(f"Не удалось загрузить заказы: {e}")
