from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from order_management.domain.models import OrderStatus, OrderView, Customer, Product, Address

# Деньги храним как Decimal, в JSON отдаем числом
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderLineRequest(CamelModel):
    product_id: Any = None
    quantity: Any = None


class CreateOrderRequest(CamelModel):
    customer: Optional[str] = None
    products: Optional[List[OrderLineRequest]] = None
    notes: Optional[str] = None


class UpdateOrderStatusRequest(CamelModel):
    status: Any = None
    version: Optional[int] = None


class CustomerSummaryResponse(CamelModel):
    id: str
    name: str
    email: str


class ProductSummaryResponse(CamelModel):
    id: str
    name: str
    price: Money
    category: str


class OrderLineResponse(CamelModel):
    product_id: str
    product: Optional[ProductSummaryResponse] = None
    quantity: int
    price: Money


class OrderResponse(CamelModel):
    id: str
    order_number: str
    customer_id: str
    customer: Optional[CustomerSummaryResponse] = None
    products: List[OrderLineResponse]
    total_amount: Money
    status: OrderStatus
    notes: Optional[str] = None
    version: int
    order_date: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: OrderView):
        order = view.order
        return cls(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            customer=CustomerSummaryResponse(**view.customer.model_dump()) if view.customer else None,
            products=[
                OrderLineResponse(
                    product_id=item.product_id,
                    product=(
                        ProductSummaryResponse(**view.products[item.product_id].model_dump())
                        if item.product_id in view.products else None
                    ),
                    quantity=item.quantity,
                    price=item.unit_price
                )
                for item in order.items
            ],
            total_amount=order.total_amount,
            status=order.status,
            notes=order.notes,
            version=order.version,
            order_date=order.order_date,
            created_at=order.created_at,
            updated_at=order.updated_at
        )


class AddressSchema(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    def to_domain(self) -> Address:
        return Address(**self.model_dump())


class CreateCustomerRequest(CamelModel):
    name: str
    email: str
    phone: str
    address: Optional[AddressSchema] = None


class UpdateCustomerRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None


class CustomerResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    address: Optional[AddressSchema] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, customer: Customer):
        return cls(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            address=AddressSchema(**customer.address.model_dump()) if customer.address else None,
            created_at=customer.created_at,
            updated_at=customer.updated_at
        )


class CreateProductRequest(CamelModel):
    name: str
    category: str
    description: str
    price: Decimal
    stock: int = 0
    is_active: bool = True


class UpdateProductRequest(CamelModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    stock: Optional[int] = None
    is_active: Optional[bool] = None


class ProductResponse(CamelModel):
    id: str
    name: str
    category: str
    description: str
    price: Money
    stock: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, product: Product):
        return cls(**product.model_dump())


class ErrorResponse(BaseModel):
    error: str


class MessageResponse(BaseModel):
    message: str
