import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from order_management.presentation.schemas import (
    CreateOrderRequest, UpdateOrderStatusRequest, OrderResponse,
    CreateCustomerRequest, UpdateCustomerRequest, CustomerResponse,
    CreateProductRequest, UpdateProductRequest, ProductResponse,
    ErrorResponse, MessageResponse
)
from order_management.application.create_order import CreateOrderUseCase, CreateOrderDTO, OrderLineDTO
from order_management.application.update_order_status import UpdateOrderStatusUseCase, UpdateOrderStatusDTO
from order_management.application.get_order import GetOrderUseCase
from order_management.application.list_orders import ListOrdersUseCase, ListOrdersDTO
from order_management.application.delete_order import DeleteOrderUseCase
from order_management.application.order_numbers import OrderNumberGenerator
from order_management.application.customers import (
    CreateCustomerUseCase, GetCustomerUseCase, UpdateCustomerUseCase, DeleteCustomerUseCase,
    CreateCustomerDTO, UpdateCustomerDTO
)
from order_management.application.products import (
    CreateProductUseCase, GetProductUseCase, UpdateProductUseCase, DeleteProductUseCase,
    CreateProductDTO, UpdateProductDTO
)
from order_management.domain.exceptions import (
    ValidationError, NotFoundError, ConflictError, InfrastructureError
)
from order_management.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR = "internal server error"
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse}
}


# Фабрики для создания use cases
def get_unit_of_work(request: Request) -> UnitOfWork:
    return UnitOfWork(request.app.state.session_factory)


def get_create_order_use_case(request: Request, uow: UnitOfWork = Depends(get_unit_of_work)):
    return CreateOrderUseCase(
        uow,
        OrderNumberGenerator(uow),
        require_existing_customer=request.app.state.require_existing_customer,
        max_attempts=request.app.state.order_number_max_attempts
    )


def get_update_order_status_use_case(request: Request, uow: UnitOfWork = Depends(get_unit_of_work)):
    return UpdateOrderStatusUseCase(uow, strict=request.app.state.strict_status_transitions)


def get_get_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetOrderUseCase(uow)


def get_list_orders_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return ListOrdersUseCase(uow)


def get_delete_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return DeleteOrderUseCase(uow)


def _internal_error(e: InfrastructureError) -> HTTPException:
    logger.error(f"Ошибка инфраструктуры: {e}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("/orders", response_model=List[OrderResponse], responses=ERROR_RESPONSES)
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    customer: Optional[str] = None,
    category: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case)
):
    """Список заказов с фильтрами и пагинацией"""
    try:
        views = await use_case(ListOrdersDTO(
            status=status_filter, customer=customer, category=category, page=page, limit=limit
        ))
        return [OrderResponse.from_view(view) for view in views]
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.post(
    "/orders",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    status_code=status.HTTP_201_CREATED
)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case)
):
    """Создать новый заказ"""
    try:
        dto = CreateOrderDTO(
            customer=request.customer,
            products=(
                [OrderLineDTO(product_id=line.product_id, quantity=line.quantity) for line in request.products]
                if request.products is not None else None
            ),
            notes=request.notes
        )
        view = await use_case(dto)
        return OrderResponse.from_view(view)

    except (ValidationError, NotFoundError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.get("/orders/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def get_order(
    order_id: str,
    use_case: GetOrderUseCase = Depends(get_get_order_use_case)
):
    """Получить заказ по ID"""
    try:
        view = await use_case(order_id)
        return OrderResponse.from_view(view)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.put("/orders/{order_id}/status", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case)
):
    """Сменить статус заказа"""
    try:
        dto = UpdateOrderStatusDTO(order_id=order_id, status=request.status, version=request.version)
        view = await use_case(dto)
        return OrderResponse.from_view(view)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.delete("/orders/{order_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def delete_order(
    order_id: str,
    use_case: DeleteOrderUseCase = Depends(get_delete_order_use_case)
):
    """Удалить заказ"""
    try:
        await use_case(order_id)
        return MessageResponse(message="Order deleted successfully")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.post(
    "/customers",
    response_model=CustomerResponse,
    responses=ERROR_RESPONSES,
    status_code=status.HTTP_201_CREATED
)
async def create_customer(request: CreateCustomerRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Создать покупателя"""
    try:
        customer = await CreateCustomerUseCase(uow)(CreateCustomerDTO(
            name=request.name,
            email=request.email,
            phone=request.phone,
            address=request.address.to_domain() if request.address else None
        ))
        return CustomerResponse.from_domain(customer)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.get("/customers/{customer_id}", response_model=CustomerResponse, responses=ERROR_RESPONSES)
async def get_customer(customer_id: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Получить покупателя по ID"""
    try:
        customer = await GetCustomerUseCase(uow)(customer_id)
        return CustomerResponse.from_domain(customer)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.put("/customers/{customer_id}", response_model=CustomerResponse, responses=ERROR_RESPONSES)
async def update_customer(
    customer_id: str,
    request: UpdateCustomerRequest,
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Изменить покупателя"""
    try:
        dto = UpdateCustomerDTO(**request.model_dump(exclude_unset=True))
        customer = await UpdateCustomerUseCase(uow)(customer_id, dto)
        return CustomerResponse.from_domain(customer)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.delete("/customers/{customer_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def delete_customer(customer_id: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Удалить покупателя"""
    try:
        await DeleteCustomerUseCase(uow)(customer_id)
        return MessageResponse(message="Customer deleted successfully")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.post(
    "/products",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    status_code=status.HTTP_201_CREATED
)
async def create_product(request: CreateProductRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Создать товар"""
    try:
        product = await CreateProductUseCase(uow)(CreateProductDTO(**request.model_dump()))
        return ProductResponse.from_domain(product)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.get("/products/{product_id}", response_model=ProductResponse, responses=ERROR_RESPONSES)
async def get_product(product_id: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Получить товар по ID"""
    try:
        product = await GetProductUseCase(uow)(product_id)
        return ProductResponse.from_domain(product)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.put("/products/{product_id}", response_model=ProductResponse, responses=ERROR_RESPONSES)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Изменить товар"""
    try:
        dto = UpdateProductDTO(**request.model_dump(exclude_unset=True))
        product = await UpdateProductUseCase(uow)(product_id, dto)
        return ProductResponse.from_domain(product)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)


@router.delete("/products/{product_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def delete_product(product_id: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Удалить товар"""
    try:
        await DeleteProductUseCase(uow)(product_id)
        return MessageResponse(message="Product deleted successfully")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InfrastructureError as e:
        raise _internal_error(e)
