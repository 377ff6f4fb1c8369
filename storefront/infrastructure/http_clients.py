import asyncio
import httpx
import logging
from typing import List, Optional
from pydantic import BaseModel, ValidationError as PydanticValidationError

from storefront.application.identity import TokenStore
from storefront.application.interfaces import AuthService, CatalogService, OrderService, ProductAdminService, ProfileService
from storefront.domain.exceptions import (
    Conflict, DomainException, Forbidden, NetworkTimeout, ServerError, Unauthorized, ValidationError
)
from storefront.domain.models import NewOrder, Order, OrderStatus, Product, ProductDraft, User
from storefront.domain.money import parse_price

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 8.0

_MESSAGES = {
    "PHONE_EXISTS": "Номер уже зарегистрирован",
    "INVALID_CREDENTIALS": "Неверный телефон или пароль",
    "exists": "Такая категория уже есть",
    "phone/password required": "Заполните все поля",
    "phone/password/nickname required": "Заполните все поля",
    "name required": "Введите название товара",
}


def _parse(model: type[BaseModel], payload):
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        logger.error(f"Некорректный ответ сервера для {model.__name__}: {e}")
        raise ServerError(code="bad_response") from e


def product_payload(draft: ProductDraft) -> dict:
    """Форма администратора -> тело запроса; цены отправляются числом"""
    return {
        "name": draft.name,
        "price": str(parse_price(draft.price)),
        "old_price": str(parse_price(draft.old_price)) if draft.old_price.strip() else None,
        "discount": draft.discount or None,
        "description": draft.description or None,
        "category": draft.primary_category() or None,
        "categories": list(draft.categories),
        "images": list(draft.images),
    }


def error_for_response(status_code: int, code: str) -> DomainException:
    """Код ошибки API -> исключение с сообщением для пользователя"""
    message = _MESSAGES.get(code)
    if status_code == 401 or code in ("NO_TOKEN", "BAD_TOKEN"):
        return Unauthorized(message, code=code)
    if status_code == 403 or code == "forbidden":
        return Forbidden(message, code=code)
    if status_code == 409:
        return Conflict(message, code=code)
    if status_code in (400, 422) and message:
        return ValidationError(message, code=code)
    return ServerError(message, code=code)


class HTTPStorefrontClient(AuthService, CatalogService, OrderService, ProductAdminService, ProfileService):
    """Клиент API витрины.

    Каждый запрос ограничен таймаутом; ответ 401 стирает сохранённый токен,
    какой бы запрос его ни получил.
    """

    def __init__(
        self,
        base_url: str,
        tokens: TokenStore,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._tokens = tokens
        self._timeout = timeout
        self._transport = transport

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        token = await self._tokens.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            async with httpx.AsyncClient(base_url=self._base_url, transport=self._transport) as client:
                response = await asyncio.wait_for(
                    client.request(method, path, json=payload, headers=headers, timeout=self._timeout),
                    timeout=self._timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"{method} {path}: сервер не ответил за {self._timeout} с")
            raise NetworkTimeout(code="timeout") from e
        except httpx.RequestError as e:
            logger.error(f"{method} {path}: ошибка подключения: {e}")
            raise ServerError(code="network") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            if response.status_code == 401:
                await self._tokens.clear()
            code = str(data.get("error") or data.get("detail") or data.get("message") or "request failed")
            logger.warning(f"{method} {path}: {response.status_code} {code}")
            raise error_for_response(response.status_code, code)

        return data

    # Auth

    async def login(self, phone: str, password: str) -> str:
        data = await self._request("POST", "/api/auth/login", {"phone": phone, "password": password})
        return self._token_from(data)

    async def register(self, phone: str, password: str, nickname: str) -> str:
        data = await self._request(
            "POST", "/api/auth/register", {"phone": phone, "password": password, "nickname": nickname}
        )
        return self._token_from(data)

    async def me(self) -> User:
        data = await self._request("GET", "/api/me")
        return _parse(User, data.get("user"))

    @staticmethod
    def _token_from(data: dict) -> str:
        token = data.get("token")
        if not token:
            raise ServerError(code="bad_response")
        return token

    # Catalog

    async def list_products(self) -> List[Product]:
        data = await self._request("GET", "/api/products")
        return [_parse(Product, p) for p in data.get("products") or []]

    async def list_categories(self) -> List[str]:
        data = await self._request("GET", "/api/categories")
        return [c if isinstance(c, str) else c.get("name", "") for c in data.get("categories") or []]

    # Orders

    async def create_order(self, order: NewOrder) -> None:
        await self._request("POST", "/api/orders", order.model_dump(mode="json", by_alias=True))

    async def list_my_orders(self) -> List[Order]:
        data = await self._request("GET", "/api/orders")
        return [_parse(Order, o) for o in data.get("orders") or []]

    async def list_all_orders(self) -> List[Order]:
        data = await self._request("GET", "/api/admin/orders")
        return [_parse(Order, o) for o in data.get("orders") or []]

    async def set_order_status(self, order_id: int, status: OrderStatus) -> None:
        await self._request("PATCH", f"/api/admin/orders/{order_id}", {"status": OrderStatus(status).value})

    # Products (admin)

    async def create_product(self, draft: ProductDraft) -> int:
        data = await self._request("POST", "/api/admin/products", product_payload(draft))
        if not data.get("id"):
            raise ServerError(code="bad_response")
        return int(data["id"])

    async def update_product(self, product_id: int, draft: ProductDraft) -> None:
        await self._request("PUT", f"/api/admin/products/{product_id}", product_payload(draft))

    async def delete_product(self, product_id: int) -> None:
        await self._request("DELETE", f"/api/admin/products/{product_id}")

    # Profile

    async def update_profile(self, name: str, address: str) -> None:
        await self._request("PUT", "/api/me", {"name": name, "address": address})
