"""Tests for the order builder."""

import re
from decimal import Decimal

import pytest

from order_management.application.create_order import CreateOrderUseCase, CreateOrderDTO, OrderLineDTO
from order_management.application.order_numbers import OrderNumberGenerator
from order_management.application.products import UpdateProductUseCase, UpdateProductDTO
from order_management.application.get_order import GetOrderUseCase
from order_management.domain.exceptions import (
    ValidationError, ProductNotFoundError, CustomerNotFoundError, ConflictError, DuplicateOrderNumberError
)
from order_management.domain.models import OrderStatus, MAX_QUANTITY


class FixedOrderNumbers:
    """Returns the given order numbers in sequence."""

    def __init__(self, *numbers):
        self._numbers = list(numbers)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self._numbers.pop(0)


def line(product_id, quantity):
    return OrderLineDTO(product_id=product_id, quantity=quantity)


@pytest.fixture
def create_order(uow):
    return CreateOrderUseCase(uow, OrderNumberGenerator(uow))


class TestCreateOrder:
    async def test_scenario_total_and_status(self, create_order, make_customer, make_product):
        customer = await make_customer()
        p1 = await make_product(price="10.00", name="P1")
        p2 = await make_product(price="5.50", name="P2")

        view = await create_order(CreateOrderDTO(
            customer=customer.id, products=[line(p1.id, 2), line(p2.id, 3)]
        ))

        order = view.order
        assert order.total_amount == Decimal("36.50")
        assert order.status == OrderStatus.PLACED
        assert re.match(r"^ORD-\d+-\d{4}$", order.order_number)
        assert order.version == 1
        assert [(i.product_id, i.quantity, i.unit_price) for i in order.items] == [
            (p1.id, 2, Decimal("10.00")),
            (p2.id, 3, Decimal("5.50")),
        ]

    async def test_result_is_enriched(self, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product(name="Hammer", category="tools")

        view = await create_order(CreateOrderDTO(customer=customer.id, products=[line(product.id, 1)]))

        assert view.customer.name == "Alice Smith"
        assert view.customer.email == "alice@example.com"
        assert view.products[product.id].name == "Hammer"
        assert view.products[product.id].category == "tools"

    async def test_total_equals_sum_of_line_items(self, create_order, make_customer, make_product):
        customer = await make_customer()
        prices = ["0.10", "0.20", "19.99", "3.33"]
        products = [await make_product(price=price, name=f"P{i}") for i, price in enumerate(prices)]

        view = await create_order(CreateOrderDTO(
            customer=customer.id,
            products=[line(product.id, quantity) for quantity, product in enumerate(products, start=1)]
        ))

        order = view.order
        assert order.total_amount == sum(item.quantity * item.unit_price for item in order.items)
        assert order.total_amount == Decimal("73.79")

    async def test_same_product_twice_keeps_both_lines(self, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product(price="2.50")

        view = await create_order(CreateOrderDTO(
            customer=customer.id, products=[line(product.id, 1), line(product.id, 4)]
        ))

        assert [item.quantity for item in view.order.items] == [1, 4]
        assert view.order.total_amount == Decimal("12.50")

    async def test_price_snapshot_survives_catalog_change(self, uow, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product(price="10.00")
        view = await create_order(CreateOrderDTO(customer=customer.id, products=[line(product.id, 2)]))

        await UpdateProductUseCase(uow)(product.id, UpdateProductDTO(price=Decimal("99.99")))
        stored = await GetOrderUseCase(uow)(view.order.id)

        assert stored.order.items[0].unit_price == Decimal("10.00")
        assert stored.order.total_amount == Decimal("20.00")
        # Данные товара для отображения берутся текущие
        assert stored.products[product.id].price == Decimal("99.99")

    async def test_notes_are_stored(self, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product()

        view = await create_order(CreateOrderDTO(
            customer=customer.id, products=[line(product.id, 1)], notes="leave at the door"
        ))

        assert view.order.notes == "leave at the door"

    async def test_unknown_customer_allowed_by_default(self, create_order, make_product):
        product = await make_product()

        view = await create_order(CreateOrderDTO(customer="no-such-customer", products=[line(product.id, 1)]))

        assert view.order.customer_id == "no-such-customer"
        assert view.customer is None

    async def test_unknown_customer_rejected_in_strict_mode(self, uow, make_product, count_orders):
        product = await make_product()
        create_order = CreateOrderUseCase(uow, OrderNumberGenerator(uow), require_existing_customer=True)

        with pytest.raises(CustomerNotFoundError, match="customer not found: ghost"):
            await create_order(CreateOrderDTO(customer="ghost", products=[line(product.id, 1)]))
        assert await count_orders() == 0

    async def test_order_numbers_are_unique(self, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product()

        numbers = set()
        for _ in range(10):
            view = await create_order(CreateOrderDTO(customer=customer.id, products=[line(product.id, 1)]))
            numbers.add(view.order.order_number)

        assert len(numbers) == 10


class TestValidation:
    @pytest.mark.parametrize("customer", [None, "", "   "])
    async def test_customer_required(self, create_order, customer):
        with pytest.raises(ValidationError, match="^customer required$"):
            await create_order(CreateOrderDTO(customer=customer, products=[line("p", 1)]))

    @pytest.mark.parametrize("products", [None, []])
    async def test_products_required(self, create_order, products):
        with pytest.raises(ValidationError, match="^products required$"):
            await create_order(CreateOrderDTO(customer="c1", products=products))

    async def test_customer_checked_before_products(self, create_order):
        with pytest.raises(ValidationError, match="customer required"):
            create_order._validate(CreateOrderDTO(customer=None, products=None))

    @pytest.mark.parametrize("product_id,quantity", [
        (None, 1),
        ("", 1),
        ("p1", None),
        ("p1", 0),
        ("p1", -2),
        ("p1", 1.5),
        ("p1", "2"),
        ("p1", True),
        ("p1", MAX_QUANTITY + 1),
        ("p1", 10 ** 20),
    ])
    async def test_each_line_needs_product_and_quantity(self, create_order, product_id, quantity):
        with pytest.raises(ValidationError, match="each product must have productId and quantity"):
            await create_order(CreateOrderDTO(customer="c1", products=[line(product_id, quantity)]))

    async def test_offending_item_is_named(self, create_order):
        with pytest.raises(ValidationError, match=r"\(item 1\)"):
            await create_order(CreateOrderDTO(customer="c1", products=[line("p1", 1), line("p2", 0)]))

    async def test_largest_quantity_is_accepted(self, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product(price="0.01")

        view = await create_order(CreateOrderDTO(customer=customer.id, products=[line(product.id, MAX_QUANTITY)]))

        assert view.order.items[0].quantity == MAX_QUANTITY
        assert view.order.total_amount == Decimal("21474836.47")

    async def test_total_above_money_column_is_rejected(self, create_order, make_customer, make_product, count_orders):
        customer = await make_customer()
        product = await make_product(price="10.00")

        with pytest.raises(ValidationError, match="order total must not exceed"):
            await create_order(CreateOrderDTO(customer=customer.id, products=[line(product.id, MAX_QUANTITY)]))

        assert await count_orders() == 0

    async def test_validation_runs_before_lookup(self, create_order, count_orders):
        # Несуществующий товар в первой позиции не важен: вторая позиция невалидна
        with pytest.raises(ValidationError):
            await create_order(CreateOrderDTO(customer="c1", products=[line("missing", 1), line("p2", 0)]))
        assert await count_orders() == 0


class TestAtomicity:
    async def test_missing_product_aborts_whole_order(self, create_order, make_customer, make_product, count_orders):
        customer = await make_customer()
        product = await make_product()
        before = await count_orders()

        with pytest.raises(ProductNotFoundError, match="product not found: missing-id"):
            await create_order(CreateOrderDTO(
                customer=customer.id, products=[line(product.id, 1), line("missing-id", 1)]
            ))

        assert await count_orders() == before

    async def test_failed_order_does_not_consume_order_number(self, create_order, make_customer, make_product):
        customer = await make_customer()
        product = await make_product()

        with pytest.raises(ProductNotFoundError):
            await create_order(CreateOrderDTO(customer=customer.id, products=[line("missing", 1)]))
        view = await create_order(CreateOrderDTO(customer=customer.id, products=[line(product.id, 1)]))

        assert view.order.order_number.endswith("-0001")


class TestDuplicateOrderNumber:
    async def test_retries_once_with_new_number(self, uow, make_customer, make_product, count_orders):
        customer = await make_customer()
        product = await make_product()
        dto = CreateOrderDTO(customer=customer.id, products=[line(product.id, 1)])
        await CreateOrderUseCase(uow, FixedOrderNumbers("ORD-1-0001"))(dto)

        numbers = FixedOrderNumbers("ORD-1-0001", "ORD-2-0002")
        view = await CreateOrderUseCase(uow, numbers)(dto)

        assert view.order.order_number == "ORD-2-0002"
        assert numbers.calls == 2
        assert await count_orders() == 2

    async def test_conflict_after_second_collision(self, uow, make_customer, make_product, count_orders):
        customer = await make_customer()
        product = await make_product()
        dto = CreateOrderDTO(customer=customer.id, products=[line(product.id, 1)])
        await CreateOrderUseCase(uow, FixedOrderNumbers("ORD-1-0001"))(dto)

        numbers = FixedOrderNumbers("ORD-1-0001", "ORD-1-0001")
        with pytest.raises(ConflictError) as exc_info:
            await CreateOrderUseCase(uow, numbers)(dto)

        assert not isinstance(exc_info.value, DuplicateOrderNumberError)
        assert numbers.calls == 2
        assert await count_orders() == 1
