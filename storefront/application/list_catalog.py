from typing import List

from storefront.domain.models import Product


class ListProductsUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[Product]:
        async with self._uow() as uow:
            return await uow.catalog.list_products()


class ListCategoriesUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[str]:
        async with self._uow() as uow:
            return await uow.catalog.list_categories()
