from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from order_management.domain.models import Order, OrderStatus, OrderLineItem, Customer, Address, Product
from order_management.domain.exceptions import DuplicateOrderNumberError, DuplicateEmailError
from order_management.infrastructure.db_schema import (
    orders_tbl, order_items_tbl, customers_tbl, products_tbl, order_number_counters_tbl
)
from order_management.application.interfaces import (
    OrderRepository, CustomerRepository, ProductRepository, CounterRepository
)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite возвращает naive datetime, считаем его UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        if not row:
            return None
        items = await self._load_items([row.id])
        return self._to_domain(row, items.get(row.id, []))

    async def list(
        self,
        status: Optional[OrderStatus] = None,
        customer_id: Optional[str] = None,
        category: Optional[str] = None,
        offset: int = 0,
        limit: int = 10
    ) -> List[Order]:
        stmt = select(orders_tbl)
        if status is not None:
            stmt = stmt.where(orders_tbl.c.status == status)
        if customer_id:
            stmt = stmt.where(orders_tbl.c.customer_id == customer_id)
        if category:
            # Категория берется из текущей записи товара
            with_category = (
                select(order_items_tbl.c.order_id)
                .join(products_tbl, products_tbl.c.id == order_items_tbl.c.product_id)
                .where(products_tbl.c.category == category)
            )
            stmt = stmt.where(orders_tbl.c.id.in_(with_category))
        stmt = (
            stmt.order_by(orders_tbl.c.created_at.desc(), orders_tbl.c.order_number.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = (await self._session.execute(stmt)).fetchall()
        items = await self._load_items([row.id for row in rows])
        return [self._to_domain(row, items.get(row.id, [])) for row in rows]

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(orders_tbl))
        return result.scalar_one()

    async def create(self, order: Order) -> None:
        stmt = insert(orders_tbl).values(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            total_amount=order.total_amount,
            status=order.status,
            notes=order.notes,
            version=order.version,
            order_date=order.order_date,
            created_at=order.created_at,
            updated_at=order.updated_at
        )
        try:
            await self._session.execute(stmt)
        except IntegrityError as e:
            # id генерируется uuid4, конфликтовать может только order_number
            raise DuplicateOrderNumberError(order.order_number) from e

        await self._session.execute(
            insert(order_items_tbl),
            [
                {
                    "order_id": order.id,
                    "position": position,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price
                }
                for position, item in enumerate(order.items)
            ]
        )

    async def update_status(self, order_id: str, status: OrderStatus, expected_version: Optional[int] = None) -> bool:
        stmt = update(orders_tbl).where(orders_tbl.c.id == order_id)
        if expected_version is not None:
            stmt = stmt.where(orders_tbl.c.version == expected_version)
        stmt = stmt.values(
            status=status,
            version=orders_tbl.c.version + 1,
            updated_at=datetime.now(timezone.utc)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete(self, order_id: str) -> bool:
        await self._session.execute(
            delete(order_items_tbl).where(order_items_tbl.c.order_id == order_id)
        )
        result = await self._session.execute(
            delete(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        return result.rowcount > 0

    async def _load_items(self, order_ids: List[str]) -> dict[str, List[OrderLineItem]]:
        if not order_ids:
            return {}
        result = await self._session.execute(
            select(order_items_tbl)
            .where(order_items_tbl.c.order_id.in_(order_ids))
            .order_by(order_items_tbl.c.order_id, order_items_tbl.c.position)
        )
        items: dict[str, List[OrderLineItem]] = {}
        for row in result.fetchall():
            items.setdefault(row.order_id, []).append(
                OrderLineItem(product_id=row.product_id, quantity=row.quantity, unit_price=row.unit_price)
            )
        return items

    def _to_domain(self, row, items: List[OrderLineItem]) -> Order:
        """Трансформация DB → Domain"""
        return Order(
            id=row.id,
            order_number=row.order_number,
            customer_id=row.customer_id,
            items=items,
            total_amount=row.total_amount,
            status=OrderStatus(row.status),
            notes=row.notes,
            version=row.version,
            order_date=_utc(row.order_date),
            created_at=_utc(row.created_at),
            updated_at=_utc(row.updated_at)
        )


class SQLAlchemyCustomerRepository(CustomerRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        result = await self._session.execute(
            select(customers_tbl).where(customers_tbl.c.id == customer_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_many(self, customer_ids: List[str]) -> List[Customer]:
        if not customer_ids:
            return []
        result = await self._session.execute(
            select(customers_tbl).where(customers_tbl.c.id.in_(customer_ids))
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, customer: Customer) -> None:
        stmt = insert(customers_tbl).values(id=customer.id, **self._values(customer))
        try:
            await self._session.execute(stmt)
        except IntegrityError as e:
            raise DuplicateEmailError(customer.email) from e

    async def update(self, customer: Customer) -> None:
        stmt = (
            update(customers_tbl)
            .where(customers_tbl.c.id == customer.id)
            .values(**self._values(customer))
        )
        try:
            await self._session.execute(stmt)
        except IntegrityError as e:
            raise DuplicateEmailError(customer.email) from e

    async def delete(self, customer_id: str) -> bool:
        result = await self._session.execute(
            delete(customers_tbl).where(customers_tbl.c.id == customer_id)
        )
        return result.rowcount > 0

    def _values(self, customer: Customer) -> dict:
        return {
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "address": customer.address.model_dump() if customer.address else None,
            "created_at": customer.created_at,
            "updated_at": customer.updated_at
        }

    def _to_domain(self, row) -> Customer:
        return Customer(
            id=row.id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            address=Address(**row.address) if row.address else None,
            created_at=_utc(row.created_at),
            updated_at=_utc(row.updated_at)
        )


class SQLAlchemyProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        result = await self._session.execute(
            select(products_tbl).where(products_tbl.c.id == product_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_many(self, product_ids: List[str]) -> List[Product]:
        if not product_ids:
            return []
        result = await self._session.execute(
            select(products_tbl).where(products_tbl.c.id.in_(product_ids))
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def create(self, product: Product) -> None:
        await self._session.execute(
            insert(products_tbl).values(id=product.id, **self._values(product))
        )

    async def update(self, product: Product) -> None:
        await self._session.execute(
            update(products_tbl)
            .where(products_tbl.c.id == product.id)
            .values(**self._values(product))
        )

    async def delete(self, product_id: str) -> bool:
        result = await self._session.execute(
            delete(products_tbl).where(products_tbl.c.id == product_id)
        )
        return result.rowcount > 0

    def _values(self, product: Product) -> dict:
        return {
            "name": product.name,
            "category": product.category,
            "description": product.description,
            "price": product.price,
            "stock": product.stock,
            "is_active": product.is_active,
            "created_at": product.created_at,
            "updated_at": product.updated_at
        }

    def _to_domain(self, row) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            category=row.category,
            description=row.description,
            price=row.price,
            stock=row.stock,
            is_active=row.is_active,
            created_at=_utc(row.created_at),
            updated_at=_utc(row.updated_at)
        )


class SQLAlchemyCounterRepository(CounterRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def next_value(self, name: str, seed: int = 0) -> int:
        """Атомарно увеличивает счетчик; при первом обращении стартует с seed + 1"""
        dialect_insert = postgresql.insert if self._session.bind.dialect.name == "postgresql" else sqlite.insert
        # Одновременное первое обращение не падает на первичном ключе: второй INSERT превращается в UPDATE
        await self._session.execute(
            dialect_insert(order_number_counters_tbl)
            .values(name=name, value=seed + 1)
            .on_conflict_do_update(
                index_elements=[order_number_counters_tbl.c.name],
                set_={"value": order_number_counters_tbl.c.value + 1}
            )
        )
        result = await self._session.execute(
            select(order_number_counters_tbl.c.value).where(order_number_counters_tbl.c.name == name)
        )
        return result.scalar_one()
