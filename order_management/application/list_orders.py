from pydantic import BaseModel
from typing import List, Optional

from order_management.domain.models import OrderView
from order_management.domain.exceptions import ValidationError
from order_management.application.order_views import build_order_views
from order_management.application.update_order_status import parse_status

MAX_PAGE_SIZE = 100


class ListOrdersDTO(BaseModel):
    status: Optional[str] = None
    customer: Optional[str] = None
    category: Optional[str] = None
    page: int = 1
    limit: int = 10


class ListOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, query: ListOrdersDTO) -> List[OrderView]:
        if query.page < 1:
            raise ValidationError("page must be >= 1")
        if not 1 <= query.limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        status = parse_status(query.status) if query.status else None

        async with self._uow() as uow:
            orders = await uow.orders.list(
                status=status,
                customer_id=query.customer,
                category=query.category,
                offset=(query.page - 1) * query.limit,
                limit=query.limit
            )
            return await build_order_views(uow, orders)
