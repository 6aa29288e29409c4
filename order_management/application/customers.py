import logging
from pydantic import BaseModel
from datetime import datetime, timezone
from typing import Optional
import uuid

from order_management.domain.models import Customer, Address
from order_management.domain.exceptions import ValidationError, CustomerNotFoundError

logger = logging.getLogger(__name__)


class CreateCustomerDTO(BaseModel):
    name: str
    email: str
    phone: str
    address: Optional[Address] = None


class UpdateCustomerDTO(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None


def _validate(customer: Customer) -> None:
    for field in ("name", "email", "phone"):
        if not getattr(customer, field).strip():
            raise ValidationError(f"{field} required")
    if "@" not in customer.email:
        raise ValidationError("email is invalid")


class CreateCustomerUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: CreateCustomerDTO) -> Customer:
        now = datetime.now(timezone.utc)
        customer = Customer(
            id=str(uuid.uuid4()),
            name=dto.name,
            email=dto.email.strip().lower(),
            phone=dto.phone,
            address=dto.address,
            created_at=now,
            updated_at=now
        )
        _validate(customer)

        async with self._uow() as uow:
            await uow.customers.create(customer)
            await uow.commit()
        logger.info(f"Покупатель создан: {customer.id}")
        return customer


class GetCustomerUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, customer_id: str) -> Customer:
        async with self._uow() as uow:
            customer = await uow.customers.get_by_id(customer_id)
            if not customer:
                raise CustomerNotFoundError(customer_id)
            return customer


class UpdateCustomerUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, customer_id: str, dto: UpdateCustomerDTO) -> Customer:
        changes = dto.model_dump(exclude_unset=True)
        if changes.get("email"):
            changes["email"] = changes["email"].strip().lower()
        if "address" in changes:
            changes["address"] = dto.address

        async with self._uow() as uow:
            customer = await uow.customers.get_by_id(customer_id)
            if not customer:
                raise CustomerNotFoundError(customer_id)
            for field in ("name", "email", "phone"):
                if field in changes and changes[field] is None:
                    raise ValidationError(f"{field} required")
            customer = customer.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
            _validate(customer)
            await uow.customers.update(customer)
            await uow.commit()
        logger.info(f"Покупатель обновлен: {customer_id}")
        return customer


class DeleteCustomerUseCase:
    """Удаление покупателя. Ссылки в существующих заказах остаются как есть."""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, customer_id: str) -> None:
        async with self._uow() as uow:
            deleted = await uow.customers.delete(customer_id)
            if not deleted:
                raise CustomerNotFoundError(customer_id)
            await uow.commit()
        logger.info(f"Покупатель удален: {customer_id}")
