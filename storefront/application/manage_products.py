import logging
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel

from storefront.domain.exceptions import ProductNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ProductDTO(BaseModel):
    name: str
    price: Decimal = Decimal("0")
    old_price: Optional[Decimal] = None
    discount: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    categories: List[str] = []
    images: List[str] = []


def _require_name(dto: ProductDTO) -> ProductDTO:
    name = dto.name.strip()
    if not name:
        raise ValidationError(code="name required")
    return dto.model_copy(update={"name": name})


class CreateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: ProductDTO) -> int:
        dto = _require_name(dto)
        async with self._uow() as uow:
            product_id = await uow.catalog.create_product(dto)
            await uow.commit()

        logger.info(f"Товар {product_id} добавлен: {dto.name}")
        return product_id


class UpdateProductUseCase:
    """Карточка товара заменяется целиком; уже оформленные заказы не меняются"""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: int, dto: ProductDTO) -> None:
        dto = _require_name(dto)
        async with self._uow() as uow:
            if not await uow.catalog.update_product(product_id, dto):
                raise ProductNotFoundError(f"Товар {product_id} не найден")
            await uow.commit()

        logger.info(f"Товар {product_id} обновлён")


class DeleteProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: int) -> None:
        async with self._uow() as uow:
            await uow.catalog.delete_product(product_id)
            await uow.commit()

        logger.info(f"Товар {product_id} удалён")
