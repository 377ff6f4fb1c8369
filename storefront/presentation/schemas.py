from decimal import Decimal
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

from storefront.domain.models import OrderInfo, OrderLine, OrderStatus, Product, User


class CreateOrderRequest(BaseModel):
    status: Optional[str] = None  # сервер всегда создаёт заказ в статусе new
    items: List[OrderLine] = []
    order_info: OrderInfo
    total: Decimal = Decimal("0")


class CreateOrderResponse(BaseModel):
    ok: bool = True
    id: int


class UpdateStatusRequest(BaseModel):
    status: OrderStatus


class UpdateProfileRequest(BaseModel):
    name: str = ""
    address: str = ""


class OkResponse(BaseModel):
    ok: bool = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    items: List[OrderLine]
    order_info: OrderInfo
    total: Decimal
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, order):
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            items=order.items,
            order_info=order.order_info,
            total=order.total,
            created_at=order.created_at
        )


class OrdersResponse(BaseModel):
    orders: List[OrderResponse]


class ProductsResponse(BaseModel):
    products: List[Product]


class CategoriesResponse(BaseModel):
    categories: List[str]


class UserResponse(BaseModel):
    user: User


class ErrorResponse(BaseModel):
    detail: str


class ProductRequest(BaseModel):
    name: str = ""
    price: Optional[Decimal] = None
    old_price: Optional[Decimal] = None
    discount: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    categories: List[str] = []
    images: List[str] = []


class CreateProductResponse(BaseModel):
    ok: bool = True
    id: int
