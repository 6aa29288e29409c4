from abc import ABC, abstractmethod
from typing import Optional, List
from order_management.domain.models import Order, OrderStatus, Customer, Product


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[OrderStatus] = None,
        customer_id: Optional[str] = None,
        category: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> List[Order]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus, expected_version: Optional[int] = None) -> bool:
        pass

    @abstractmethod
    async def delete(self, order_id: str) -> bool:
        pass


class CustomerRepository(ABC):
    """Customer Accessor"""

    @abstractmethod
    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def get_many(self, customer_ids: List[str]) -> List[Customer]:
        pass

    @abstractmethod
    async def create(self, customer: Customer) -> None:
        pass

    @abstractmethod
    async def update(self, customer: Customer) -> None:
        pass

    @abstractmethod
    async def delete(self, customer_id: str) -> bool:
        pass


class ProductRepository(ABC):
    """Catalog Accessor"""

    @abstractmethod
    async def get_by_id(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_many(self, product_ids: List[str]) -> List[Product]:
        pass

    @abstractmethod
    async def create(self, product: Product) -> None:
        pass

    @abstractmethod
    async def update(self, product: Product) -> None:
        pass

    @abstractmethod
    async def delete(self, product_id: str) -> bool:
        pass


class CounterRepository(ABC):
    @abstractmethod
    async def next_value(self, name: str, seed: int = 0) -> int:
        pass

