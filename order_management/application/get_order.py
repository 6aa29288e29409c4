from order_management.domain.models import OrderView
from order_management.domain.exceptions import OrderNotFoundError
from order_management.application.order_views import build_order_view


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str) -> OrderView:
        async with self._uow() as uow:
            order = await uow.orders.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError(order_id)
            return await build_order_view(uow, order)
