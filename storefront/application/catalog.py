import asyncio
import logging
from typing import List, Optional

from storefront.application.interfaces import CatalogService
from storefront.domain.models import Product
from storefront.domain.money import find_product

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class CatalogSnapshot:
    """Неизменяемый снимок каталога до следующей явной перезагрузки"""

    def __init__(self, catalog_service: CatalogService):
        self._service = catalog_service
        self._products: tuple[Product, ...] = ()
        self._categories: tuple[str, ...] = ()

    @property
    def products(self) -> tuple[Product, ...]:
        return self._products

    @property
    def categories(self) -> tuple[str, ...]:
        return self._categories

    async def reload(self) -> None:
        """Перезагружает каталог целиком; при ошибке снимок становится пустым"""
        try:
            categories, products = await asyncio.gather(
                self._service.list_categories(),
                self._service.list_products(),
            )
        except Exception:
            self._products = ()
            self._categories = ()
            raise
        self._categories = tuple(
            c if isinstance(c, str) else c.get("name", "") for c in categories or []
        )
        self._products = tuple(products or [])
        logger.info(f"Каталог загружен: {len(self._products)} товаров, {len(self._categories)} категорий")

    def product(self, product_id: int) -> Optional[Product]:
        return find_product(self._products, product_id)

    def filter(self, category: str = ALL_CATEGORIES, search: str = "") -> List[Product]:
        products = list(self._products)
        if category != ALL_CATEGORIES:
            products = [p for p in products if category in p.all_categories()]

        query = search.strip().lower()
        if query:
            products = [p for p in products if query in f"{p.name} {p.description}".lower()]
        return products
