import logging
from pydantic import BaseModel
from typing import Any, Optional

from order_management.domain.models import OrderStatus, OrderView
from order_management.domain.exceptions import (
    ValidationError, OrderNotFoundError, IllegalTransitionError, VersionConflictError
)
from order_management.application.order_views import build_order_view

logger = logging.getLogger(__name__)


class UpdateOrderStatusDTO(BaseModel):
    order_id: str
    status: Any = None
    version: Optional[int] = None


def parse_status(value: Any) -> OrderStatus:
    if value is None or value == "":
        raise ValidationError("status required")
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"invalid status. must be one of: {', '.join(OrderStatus.values())}")


class UpdateOrderStatusUseCase:
    """Смена статуса заказа.

    strict=True: переход только по таблице ALLOWED_TRANSITIONS.
    strict=False: принимается любой известный статус, как в исходной системе.
    Без version в нестрогом режиме действует last writer wins, в строгом
    запись сверяется с прочитанной версией. С version оптимистическая блокировка.
    """

    def __init__(self, unit_of_work, strict: bool = True):
        self._uow = unit_of_work
        self._strict = strict

    async def __call__(self, dto: UpdateOrderStatusDTO) -> OrderView:
        target = parse_status(dto.status)

        async with self._uow() as uow:
            order = await uow.orders.get_by_id(dto.order_id)
            if not order:
                raise OrderNotFoundError(dto.order_id)

            if dto.version is not None and dto.version != order.version:
                raise VersionConflictError(order.id, dto.version, order.version)

            if self._strict and not order.can_transition_to(target):
                logger.warning(f"Заказ {order.id}: недопустимый переход {order.status.value} -> {target.value}")
                raise IllegalTransitionError(order.status, target)

            # В строгом режиме запись привязана к проверенному статусу
            expected_version = dto.version
            if expected_version is None and self._strict:
                expected_version = order.version

            updated = await uow.orders.update_status(order.id, target, expected_version=expected_version)
            if not updated:
                # Заказ удалили или изменили между чтением и записью
                current = await uow.orders.get_by_id(order.id)
                if not current:
                    raise OrderNotFoundError(order.id)
                raise VersionConflictError(order.id, expected_version, current.version)
            await uow.commit()
            logger.info(f"Заказ {order.id} переведен {order.status.value} -> {target.value}")

            order = await uow.orders.get_by_id(order.id)
            return await build_order_view(uow, order)
