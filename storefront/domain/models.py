from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class OrderStatus(str, Enum):
    NEW = "new"
    IN_WORK = "in_work"
    DONE = "done"
    CANCELED = "canceled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DONE, OrderStatus.CANCELED)


_STATUS_LABELS = {
    OrderStatus.NEW: "Новый",
    OrderStatus.IN_WORK: "В работе",
    OrderStatus.DONE: "Готово",
    OrderStatus.CANCELED: "Отменён",
}


class Product(BaseModel):
    """Value Object — товар из каталога"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    price: str = ""
    old_price: str = Field("", alias="oldPrice")
    discount: str = ""
    description: str = ""
    category: str = ""
    categories: list[str] = []
    images: list[str] = []

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        """Старый формат: одна картинка в поле image, мусорные reviews/rating"""
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if k not in ("reviews", "rating")}
        image = data.pop("image", None)
        if not data.get("images") and image:
            data["images"] = [image]
        for key in ("price", "oldPrice", "old_price", "discount", "description", "category"):
            if key in data:
                data[key] = "" if data[key] is None else str(data[key])
        return data

    def all_categories(self) -> list[str]:
        if self.categories:
            return list(self.categories)
        return [self.category] if self.category else []


class CartRow(BaseModel):
    """Строка корзины: товар и количество (всегда >= 1)"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_id: int = Field(alias="productId")
    qty: int = Field(ge=1)


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    phone: str = ""
    nickname: str = ""
    name: str = ""
    address: str = ""
    is_admin: bool = Field(False, alias="isAdmin")


class OrderInfo(BaseModel):
    name: str
    phone: str
    address: str
    comment: str = ""
    nickname: str = ""


class OrderLine(Product):
    """Снимок товара на момент оформления заказа"""
    qty: int


class NewOrder(BaseModel):
    """Заказ, отправляемый клиентом на сервер"""
    status: OrderStatus = OrderStatus.NEW
    items: list[OrderLine]
    order_info: OrderInfo
    total: Decimal


class Order(BaseModel):
    """Domain Entity — заказ"""
    id: int
    user_id: int
    status: OrderStatus
    items: list[OrderLine]
    order_info: OrderInfo
    total: Decimal
    created_at: Optional[datetime] = None

    def can_transition_to(self, status: OrderStatus) -> bool:
        """Бизнес-правило: из done и canceled выйти нельзя"""
        if status == self.status:
            return True
        return not self.status.is_terminal


class ProductDraft(BaseModel):
    """Товар из формы администратора: цены в том виде, как их ввели"""
    name: str = ""
    price: str = ""
    old_price: str = ""
    discount: str = ""
    description: str = ""
    category: str = ""
    categories: list[str] = []
    images: list[str] = []

    @classmethod
    def from_product(cls, product: Product) -> "ProductDraft":
        return cls(**product.model_dump(include=set(cls.model_fields)))

    def primary_category(self) -> str:
        return self.category or (self.categories[0] if self.categories else "")
