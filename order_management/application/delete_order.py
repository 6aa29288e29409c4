import logging

from order_management.domain.exceptions import OrderNotFoundError

logger = logging.getLogger(__name__)


class DeleteOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str) -> None:
        async with self._uow() as uow:
            deleted = await uow.orders.delete(order_id)
            if not deleted:
                raise OrderNotFoundError(order_id)
            await uow.commit()
        logger.info(f"Заказ {order_id} удален")
