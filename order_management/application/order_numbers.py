import logging
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)

ORDER_NUMBER_COUNTER = "orders"


def format_order_number(sequence: int, now: datetime) -> str:
    """ORD-<epochMillis>-<sequence, минимум 4 цифры>"""
    epoch_millis = int(now.timestamp() * 1000)
    return f"ORD-{epoch_millis}-{sequence:04d}"


class OrderNumberGenerator:
    """Номер заказа из явного счетчика в БД.

    Счетчик увеличивается в отдельной транзакции, поэтому повторный вызов
    после конфликта уникальности всегда получает новое значение. При первом
    обращении счетчик стартует с количества уже сохраненных заказов.
    """

    def __init__(self, unit_of_work, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self._uow = unit_of_work
        self._clock = clock

    async def __call__(self) -> str:
        async with self._uow() as uow:
            existing = await uow.orders.count()
            sequence = await uow.counters.next_value(ORDER_NUMBER_COUNTER, seed=existing)
            await uow.commit()

        order_number = format_order_number(sequence, self._clock())
        logger.debug(f"Сгенерирован номер заказа {order_number}")
        return order_number
