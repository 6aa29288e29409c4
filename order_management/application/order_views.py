from typing import List

from order_management.domain.models import Order, OrderView, CustomerSummary, ProductSummary


async def build_order_views(uow, orders: List[Order]) -> List[OrderView]:
    """Подтягивает данные покупателей и товаров для отображения.

    Удаленные покупатель или товар дают None: заказ хранит только ссылку.
    """
    customer_ids = sorted({order.customer_id for order in orders})
    product_ids = sorted({item.product_id for order in orders for item in order.items})

    customers = {
        customer.id: CustomerSummary(id=customer.id, name=customer.name, email=customer.email)
        for customer in await uow.customers.get_many(customer_ids)
    }
    products = {
        product.id: ProductSummary(
            id=product.id, name=product.name, price=product.price, category=product.category
        )
        for product in await uow.products.get_many(product_ids)
    }

    return [
        OrderView(
            order=order,
            customer=customers.get(order.customer_id),
            products={
                item.product_id: products[item.product_id]
                for item in order.items
                if item.product_id in products
            }
        )
        for order in orders
    ]


async def build_order_view(uow, order: Order) -> OrderView:
    views = await build_order_views(uow, [order])
    return views[0]
