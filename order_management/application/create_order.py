import logging
from pydantic import BaseModel
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional
import uuid

from order_management.domain.models import Order, OrderStatus, OrderLineItem, OrderView, MAX_QUANTITY, MAX_MONEY_AMOUNT
from order_management.domain.exceptions import (
    ValidationError, ProductNotFoundError, CustomerNotFoundError, DuplicateOrderNumberError, ConflictError
)
from order_management.application.order_views import build_order_view


logger = logging.getLogger(__name__)


class OrderLineDTO(BaseModel):
    product_id: Any = None
    quantity: Any = None


class CreateOrderDTO(BaseModel):
    customer: Optional[str] = None
    products: Optional[List[OrderLineDTO]] = None
    notes: Optional[str] = None


def _is_valid_line(line: OrderLineDTO) -> bool:
    if not isinstance(line.product_id, str) or not line.product_id.strip():
        return False
    # bool является подклассом int, но количеством не считается
    if not isinstance(line.quantity, int) or isinstance(line.quantity, bool):
        return False
    return 1 <= line.quantity <= MAX_QUANTITY


class CreateOrderUseCase:
    def __init__(
        self,
        unit_of_work,
        order_number_generator,
        require_existing_customer: bool = False,
        max_attempts: int = 2
    ):
        self._uow = unit_of_work
        self._order_numbers = order_number_generator
        self._require_existing_customer = require_existing_customer
        self._max_attempts = max(1, max_attempts)

    async def __call__(self, order_data: CreateOrderDTO) -> OrderView:
        self._validate(order_data)
        logger.info(f"Создание заказа для покупателя {order_data.customer}, позиций: {len(order_data.products)}")

        # 1. Проверка покупателя и каталога, фиксация цен
        async with self._uow() as uow:
            if self._require_existing_customer:
                customer = await uow.customers.get_by_id(order_data.customer)
                if not customer:
                    raise CustomerNotFoundError(order_data.customer)

            items = []
            total_amount = Decimal("0")
            for line in order_data.products:
                product = await uow.products.get_by_id(line.product_id)
                if not product:
                    raise ProductNotFoundError(line.product_id)
                item = OrderLineItem(product_id=product.id, quantity=line.quantity, unit_price=product.price)
                items.append(item)
                total_amount += item.subtotal

            if total_amount > MAX_MONEY_AMOUNT:
                raise ValidationError(f"order total must not exceed {MAX_MONEY_AMOUNT}")

        logger.info(f"Сумма заказа: {total_amount}")

        # 2. Номер заказа и сохранение, при дубликате номера повтор
        for attempt in range(1, self._max_attempts + 1):
            order = self._build_order(order_data, items, total_amount, await self._order_numbers())
            try:
                async with self._uow() as uow:
                    await uow.orders.create(order)
                    await uow.commit()
            except DuplicateOrderNumberError:
                logger.warning(
                    f"Номер заказа {order.order_number} уже занят (попытка {attempt}/{self._max_attempts})"
                )
                continue

            logger.info(f"Заказ создан: {order.id} ({order.order_number})")
            async with self._uow() as uow:
                return await build_order_view(uow, order)

        raise ConflictError(f"could not assign a unique order number after {self._max_attempts} attempts")

    def _validate(self, order_data: CreateOrderDTO) -> None:
        if not order_data.customer or not order_data.customer.strip():
            raise ValidationError("customer required")
        if not order_data.products:
            raise ValidationError("products required")
        for index, line in enumerate(order_data.products):
            if not _is_valid_line(line):
                raise ValidationError(f"each product must have productId and quantity (item {index})")

    def _build_order(
        self, order_data: CreateOrderDTO, items: List[OrderLineItem], total_amount: Decimal, order_number: str
    ) -> Order:
        now = datetime.now(timezone.utc)
        return Order(
            id=str(uuid.uuid4()),
            order_number=order_number,
            customer_id=order_data.customer,
            items=items,
            total_amount=total_amount,
            status=OrderStatus.PLACED,
            notes=order_data.notes,
            version=1,
            order_date=now,
            created_at=now,
            updated_at=now
        )
