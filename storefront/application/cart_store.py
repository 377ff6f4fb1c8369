import json
import logging
from typing import Iterable, List, Optional
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from storefront.application.interfaces import KeyValueStorage
from storefront.domain.models import CartRow, Product, User
from storefront.domain.money import cart_count, cart_total

logger = logging.getLogger(__name__)

GUEST_CART_KEY = "cart:guest"
LEGACY_CART_KEY = "cart"

_rows_adapter = TypeAdapter(List[CartRow])


def cart_key_for(user: Optional[User]) -> str:
    if user is not None and user.phone:
        return f"cart:{user.phone}"
    return GUEST_CART_KEY


def is_legacy_cart(parsed) -> bool:
    """Старая корзина: плоский список товаров, повторы означают количество"""
    if not isinstance(parsed, list) or not parsed:
        return False
    first = parsed[0]
    return not (isinstance(first, dict) and "qty" in first)


def migrate_cart(parsed) -> List[CartRow]:
    """Приводит сохранённые данные к списку строк {productId, qty}.

    Повторное применение к уже мигрированным данным возвращает их без изменений.
    """
    if not isinstance(parsed, list):
        return []

    legacy = is_legacy_cart(parsed)
    counts: dict[int, int] = {}
    for item in parsed:
        if not isinstance(item, dict):
            continue
        if legacy:
            candidate = {"productId": item.get("id"), "qty": 1}
            if not candidate["productId"]:
                continue
        else:
            candidate = item
        try:
            row = CartRow.model_validate(candidate)
        except PydanticValidationError:
            logger.warning(f"Пропущена некорректная строка корзины: {candidate!r}")
            continue
        counts[row.product_id] = counts.get(row.product_id, 0) + row.qty

    return [CartRow(product_id=product_id, qty=qty) for product_id, qty in counts.items()]


def _decode(raw: str):
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Повреждённые данные корзины, считаем что корзины нет")
        return None


class CartStore:
    """Активная корзина в памяти и её копия в локальном хранилище.

    Каждое изменение сразу меняет корзину в памяти и сохраняет её целиком до
    возврата из вызова. Внутренней блокировки нет: вызывающий код не должен
    запускать два изменения одного товара, не дождавшись первого.
    """

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage
        self._key = GUEST_CART_KEY
        self._rows: List[CartRow] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def rows(self) -> List[CartRow]:
        return list(self._rows)

    @property
    def count(self) -> int:
        return cart_count(self._rows)

    def total(self, catalog: Iterable[Product]):
        return cart_total(self._rows, catalog)

    def get_qty(self, product_id: int) -> int:
        for row in self._rows:
            if row.product_id == product_id:
                return row.qty
        return 0

    async def load(self, key: str) -> List[CartRow]:
        raw = await self._storage.get(key)
        parsed = _decode(raw) if raw is not None else None

        if parsed is not None:
            rows = migrate_cart(parsed)
            if is_legacy_cart(parsed):
                logger.info(f"Корзина {key} в старом формате, мигрирована")
                await self._storage.set(key, self._dump(rows))
            return self._activate(key, rows)

        legacy_raw = await self._storage.get(LEGACY_CART_KEY)
        if legacy_raw is not None:
            legacy = _decode(legacy_raw)
            rows = migrate_cart(legacy) if legacy is not None else []
            await self._storage.set(key, self._dump(rows))
            await self._storage.delete(LEGACY_CART_KEY)
            logger.info(f"Старая корзина перенесена в {key}: {len(rows)} строк")
            return self._activate(key, rows)

        return self._activate(key, [])

    async def start_empty(self, key: str) -> None:
        """Делает активной пустую корзину под key, затирая то, что там лежало"""
        self._activate(key, [])
        await self._storage.set(key, self._dump([]))

    async def set_qty(self, product_id: int, qty: int) -> None:
        qty = max(0, int(qty or 0))
        if qty == 0:
            rows = [r for r in self._rows if r.product_id != product_id]
        elif any(r.product_id == product_id for r in self._rows):
            rows = [
                CartRow(product_id=product_id, qty=qty) if r.product_id == product_id else r
                for r in self._rows
            ]
        else:
            rows = [*self._rows, CartRow(product_id=product_id, qty=qty)]
        await self._save(rows)

    async def inc_qty(self, product_id: int, delta: int = 1) -> None:
        await self.set_qty(product_id, self.get_qty(product_id) + delta)

    async def clear(self) -> None:
        await self._save([])

    async def _save(self, rows: List[CartRow]) -> None:
        self._rows = rows
        await self._storage.set(self._key, self._dump(rows))

    def _activate(self, key: str, rows: List[CartRow]) -> List[CartRow]:
        self._key = key
        self._rows = rows
        return list(rows)

    @staticmethod
    def _dump(rows: List[CartRow]) -> str:
        return _rows_adapter.dump_json(rows, by_alias=True).decode()
