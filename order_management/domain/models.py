from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class OrderStatus(str, Enum):
    PLACED = "placed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


# Пределы колонок Integer и Numeric(12, 2)
MAX_QUANTITY = 2_147_483_647
MAX_MONEY_AMOUNT = Decimal("9999999999.99")

# Terminal statuses have no entry
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PLACED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
}


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Customer(BaseModel):
    """Domain Entity: покупатель"""
    id: str
    name: str
    email: str
    phone: str
    address: Optional[Address] = None
    created_at: datetime
    updated_at: datetime


class Product(BaseModel):
    """Domain Entity: товар каталога"""
    id: str
    name: str
    category: str
    description: str
    price: Decimal
    stock: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class OrderLineItem(BaseModel):
    """Value Object: позиция заказа с зафиксированной ценой"""
    product_id: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    """Domain Entity: заказ"""
    id: str
    order_number: str
    customer_id: str
    items: list[OrderLineItem]
    total_amount: Decimal
    status: OrderStatus
    notes: Optional[str] = None
    version: int = 1
    order_date: datetime
    created_at: datetime
    updated_at: datetime

    def can_transition_to(self, target: OrderStatus) -> bool:
        """Бизнес-правило: placed -> shipped -> delivered, отмена только из placed или shipped"""
        return target in ALLOWED_TRANSITIONS.get(self.status, frozenset())


class CustomerSummary(BaseModel):
    id: str
    name: str
    email: str


class ProductSummary(BaseModel):
    id: str
    name: str
    price: Decimal
    category: str


class OrderView(BaseModel):
    """Read model: заказ с данными покупателя и товаров для отображения"""
    order: Order
    customer: Optional[CustomerSummary] = None
    products: dict[str, ProductSummary] = {}
