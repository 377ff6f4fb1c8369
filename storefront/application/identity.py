import logging
from typing import Awaitable, Callable, List, Optional

from storefront.application.cart_store import CartStore, cart_key_for
from storefront.application.interfaces import AuthService, KeyValueStorage
from storefront.domain.exceptions import DomainException, ValidationError
from storefront.domain.models import User

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"

IdentityListener = Callable[[Optional[User]], Awaitable[None]]


def normalize_phone(raw) -> str:
    return "".join(ch for ch in str(raw or "").strip() if ch.isdigit())


class TokenStore:
    """Токен сессии в локальном хранилище"""

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    async def get(self) -> Optional[str]:
        return await self._storage.get(TOKEN_KEY)

    async def set(self, token: Optional[str]) -> None:
        if token:
            await self._storage.set(TOKEN_KEY, token)
        else:
            await self._storage.delete(TOKEN_KEY)

    async def clear(self) -> None:
        await self._storage.delete(TOKEN_KEY)


class IdentityTransitionManager:
    """Следит за сменой пользователя и перезагружает корзину под новый ключ.

    Подписчики узнают о смене пользователя только после того, как корзина для
    нового ключа загружена, чтобы не показывать чужую корзину.
    """

    def __init__(self, auth: AuthService, cart: CartStore, tokens: TokenStore):
        self._auth = auth
        self._cart = cart
        self._tokens = tokens
        self._user: Optional[User] = None
        self._loaded_key: Optional[str] = None
        self._listeners: List[IdentityListener] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    def subscribe(self, listener: IdentityListener) -> None:
        self._listeners.append(listener)

    async def restore(self) -> Optional[User]:
        """Поднимает профиль по сохранённому токену при старте"""
        user = None
        if await self._tokens.get():
            try:
                user = await self._auth.me()
            except DomainException as e:
                logger.warning(f"Не удалось восстановить сессию: {e}")
        await self.transition(user)
        return user

    async def login(self, phone: str, password: str) -> User:
        phone = normalize_phone(phone)
        if not phone or not password:
            raise ValidationError("Введите телефон и пароль")

        token = await self._auth.login(phone, password)
        return await self._start_session(token)

    async def register(self, phone: str, password: str, nickname: str) -> User:
        phone = normalize_phone(phone)
        nickname = (nickname or "").strip()
        if not phone or not password:
            raise ValidationError("Введите телефон и пароль")
        if not nickname:
            raise ValidationError("Введите никнейм")

        token = await self._auth.register(phone, password, nickname)
        return await self._start_session(token, fresh_cart=True)

    async def logout(self) -> None:
        await self._tokens.clear()
        await self.transition(None)

    async def transition(self, user: Optional[User]) -> None:
        key = cart_key_for(user)
        if key != self._loaded_key:
            logger.info(f"Смена корзины: {self._loaded_key} -> {key}")
            await self._cart.load(key)
            self._loaded_key = key
        self._user = user
        for listener in self._listeners:
            await listener(user)

    async def _start_session(self, token: str, fresh_cart: bool = False) -> User:
        await self._tokens.set(token)
        user = await self._auth.me()
        if fresh_cart:
            # новый аккаунт начинает с пустой корзины, даже если под этим телефоном что-то осталось
            key = cart_key_for(user)
            await self._cart.start_empty(key)
            self._loaded_key = key
        await self.transition(user)
        return user
