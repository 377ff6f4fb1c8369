from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.presentation.deps import get_current_claims, require_admin
from storefront.presentation.schemas import (
    CategoriesResponse, CreateOrderRequest, CreateOrderResponse, CreateProductResponse, ErrorResponse,
    OkResponse, OrderResponse, OrdersResponse, ProductRequest, ProductsResponse, UpdateProfileRequest,
    UpdateStatusRequest, UserResponse
)
from storefront.application.change_order_status import ChangeOrderStatusUseCase
from storefront.application.get_orders import GetAllOrdersUseCase, GetUserOrdersUseCase
from storefront.application.list_catalog import ListCategoriesUseCase, ListProductsUseCase
from storefront.application.manage_products import (
    CreateProductUseCase, DeleteProductUseCase, ProductDTO, UpdateProductUseCase
)
from storefront.application.place_order import PlaceOrderDTO, PlaceOrderUseCase
from storefront.application.profile import GetProfileUseCase, UpdateProfileUseCase
from storefront.domain.exceptions import (
    InvalidStatusTransitionError, OrderNotFoundError, ProductNotFoundError, ValidationError
)
from storefront.infrastructure.security import TokenClaims
from storefront.infrastructure.unit_of_work import UnitOfWork

router = APIRouter()


# Фабрики для создания use cases
def get_unit_of_work(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(lambda: db)


def get_place_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return PlaceOrderUseCase(uow)


def get_user_orders_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetUserOrdersUseCase(uow)


def get_all_orders_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetAllOrdersUseCase(uow)


def get_change_status_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return ChangeOrderStatusUseCase(uow)


def get_profile_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetProfileUseCase(uow)


def get_update_profile_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return UpdateProfileUseCase(uow)


def get_list_products_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return ListProductsUseCase(uow)


def get_list_categories_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return ListCategoriesUseCase(uow)


def get_create_product_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return CreateProductUseCase(uow)


def get_update_product_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return UpdateProductUseCase(uow)


def get_delete_product_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return DeleteProductUseCase(uow)


@router.get("/products", response_model=ProductsResponse)
async def list_products(use_case: ListProductsUseCase = Depends(get_list_products_use_case)):
    """Каталог товаров"""
    return ProductsResponse(products=await use_case())


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories(use_case: ListCategoriesUseCase = Depends(get_list_categories_use_case)):
    return CategoriesResponse(categories=await use_case())


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
async def get_me(
    claims: TokenClaims = Depends(get_current_claims),
    use_case: GetProfileUseCase = Depends(get_profile_use_case)
):
    """Профиль текущего пользователя"""
    user = await use_case(claims.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    return UserResponse(user=user)


@router.put("/me", response_model=OkResponse)
async def update_me(
    request: UpdateProfileRequest,
    claims: TokenClaims = Depends(get_current_claims),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case)
):
    await use_case(claims.id, name=request.name, address=request.address)
    return OkResponse()


@router.get("/orders", response_model=OrdersResponse)
async def list_my_orders(
    claims: TokenClaims = Depends(get_current_claims),
    use_case: GetUserOrdersUseCase = Depends(get_user_orders_use_case)
):
    """Заказы текущего пользователя, новые сверху"""
    orders = await use_case(claims.id)
    return OrdersResponse(orders=[OrderResponse.from_domain(o) for o in orders])


@router.post("/orders", response_model=CreateOrderResponse)
async def create_order(
    request: CreateOrderRequest,
    claims: TokenClaims = Depends(get_current_claims),
    use_case: PlaceOrderUseCase = Depends(get_place_order_use_case)
):
    """Создать новый заказ"""
    dto = PlaceOrderDTO(
        user_id=claims.id,
        items=request.items,
        order_info=request.order_info,
        total=request.total
    )
    order = await use_case(dto)
    return CreateOrderResponse(id=order.id)


@router.get("/admin/orders", response_model=OrdersResponse)
async def list_all_orders(
    _claims: TokenClaims = Depends(require_admin),
    use_case: GetAllOrdersUseCase = Depends(get_all_orders_use_case)
):
    orders = await use_case()
    return OrdersResponse(orders=[OrderResponse.from_domain(o) for o in orders])


@router.patch(
    "/admin/orders/{order_id}",
    response_model=OkResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def update_order_status(
    order_id: int,
    request: UpdateStatusRequest,
    _claims: TokenClaims = Depends(require_admin),
    use_case: ChangeOrderStatusUseCase = Depends(get_change_status_use_case)
):
    """Сменить статус заказа"""
    try:
        await use_case(order_id, request.status)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=e.code)
    return OkResponse()


def _product_dto(request: ProductRequest) -> ProductDTO:
    data = request.model_dump()
    data["price"] = request.price or 0
    return ProductDTO(**data)


@router.post(
    "/admin/products",
    response_model=CreateProductResponse,
    responses={400: {"model": ErrorResponse}}
)
async def create_product(
    request: ProductRequest,
    _claims: TokenClaims = Depends(require_admin),
    use_case: CreateProductUseCase = Depends(get_create_product_use_case)
):
    try:
        product_id = await use_case(_product_dto(request))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.code)
    return CreateProductResponse(id=product_id)


@router.put(
    "/admin/products/{product_id}",
    response_model=OkResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_product(
    product_id: int,
    request: ProductRequest,
    _claims: TokenClaims = Depends(require_admin),
    use_case: UpdateProductUseCase = Depends(get_update_product_use_case)
):
    """Заменить карточку товара целиком"""
    try:
        await use_case(product_id, _product_dto(request))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.code)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="not found")
    return OkResponse()


@router.delete("/admin/products/{product_id}", response_model=OkResponse)
async def delete_product(
    product_id: int,
    _claims: TokenClaims = Depends(require_admin),
    use_case: DeleteProductUseCase = Depends(get_delete_product_use_case)
):
    """Удалить товар; заказы хранят свой снимок и не меняются"""
    await use_case(product_id)
    return OkResponse()
