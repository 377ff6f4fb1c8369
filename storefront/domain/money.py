"""Расчёт цен и количества в корзине.

Все функции чистые и никогда не бросают исключений: корзина и каталог приходят
из независимых источников и могут не совпадать, а витрина не должна падать
из-за плохих данных.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional

from storefront.domain.models import CartRow, OrderLine, Product


CENTS = Decimal("0.01")
ZERO = Decimal("0")

# Ведущее число, как у parseFloat: "10.50 руб" -> 10.50, "abc" -> не число
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def parse_price(raw) -> Decimal:
    if raw is None or isinstance(raw, bool):
        return ZERO
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else ZERO
    match = _NUMBER_PREFIX.match(str(raw).replace(",", ".", 1))
    if not match:
        return ZERO
    return Decimal(match.group(1))


def find_product(catalog: Iterable[Product], product_id) -> Optional[Product]:
    for product in catalog:
        if product.id == product_id:
            return product
    return None


def row_subtotal(row: CartRow, catalog: Iterable[Product]) -> Decimal:
    product = find_product(catalog, row.product_id)
    if product is None:
        return ZERO
    return parse_price(product.price) * row.qty


def cart_total(cart: Iterable[CartRow], catalog: Iterable[Product]) -> Decimal:
    catalog = list(catalog)
    total = sum((row_subtotal(row, catalog) for row in cart), ZERO)
    return _to_cents(total)


def snapshot_total(lines: Iterable[OrderLine]) -> Decimal:
    """Сумма по снимку заказа, а не по текущим ценам каталога"""
    total = sum((parse_price(line.price) * line.qty for line in lines), ZERO)
    return _to_cents(total)


def _to_cents(value: Decimal) -> Decimal:
    try:
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # мусорная цена длиннее точности Decimal
        return ZERO.quantize(CENTS)


def cart_count(cart: Iterable[CartRow]) -> int:
    return sum(row.qty for row in cart)
