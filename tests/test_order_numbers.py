"""Tests for order number generation."""

import re
from datetime import datetime, timezone

from order_management.application.order_numbers import OrderNumberGenerator, format_order_number
from order_management.application.create_order import CreateOrderUseCase, CreateOrderDTO, OrderLineDTO

ORDER_NUMBER_RE = re.compile(r"^ORD-\d+-\d{4,}$")


class TestFormatOrderNumber:
    def test_uses_epoch_millis_and_padded_sequence(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_order_number(1, now) == "ORD-1704067200000-0001"

    def test_keeps_millisecond_precision(self):
        now = datetime(2024, 1, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)
        assert format_order_number(42, now) == "ORD-1704067200123-0042"

    def test_sequence_above_four_digits_widens(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_order_number(12345, now).endswith("-12345")


class TestOrderNumberGenerator:
    async def test_first_number_is_count_plus_one(self, uow):
        fixed = datetime(2024, 5, 1, tzinfo=timezone.utc)
        generator = OrderNumberGenerator(uow, clock=lambda: fixed)

        number = await generator()

        assert number == format_order_number(1, fixed)
        assert ORDER_NUMBER_RE.match(number)

    async def test_sequence_increments_on_each_call(self, uow):
        generator = OrderNumberGenerator(uow)

        numbers = [await generator() for _ in range(3)]

        assert [n.rsplit("-", 1)[1] for n in numbers] == ["0001", "0002", "0003"]
        assert len(set(numbers)) == 3

    async def test_counter_seeded_from_existing_orders(self, uow, make_product, make_customer):
        product = await make_product()
        customer = await make_customer()
        create = CreateOrderUseCase(uow, OrderNumberGenerator(uow))
        for _ in range(2):
            await create(CreateOrderDTO(
                customer=customer.id, products=[OrderLineDTO(product_id=product.id, quantity=1)]
            ))

        # Новый счетчик под другим именем начинается после уже сохраненных заказов
        async with uow() as session:
            existing = await session.orders.count()
            value = await session.counters.next_value("other", seed=existing)
            await session.commit()

        assert value == 3

    async def test_existing_counter_row_ignores_seed(self, uow):
        # Так же отрабатывает проигравший при одновременном первом обращении
        async with uow() as session:
            first = await session.counters.next_value("orders", seed=0)
            await session.commit()
        async with uow() as session:
            second = await session.counters.next_value("orders", seed=10)
            await session.commit()

        assert (first, second) == (1, 2)
