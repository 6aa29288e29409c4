import logging
from pydantic import BaseModel
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
import uuid

from order_management.domain.models import Product, MAX_MONEY_AMOUNT
from order_management.domain.exceptions import ValidationError, ProductNotFoundError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CreateProductDTO(BaseModel):
    name: str
    category: str
    description: str
    price: Decimal
    stock: int = 0
    is_active: bool = True


class UpdateProductDTO(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    stock: Optional[int] = None
    is_active: Optional[bool] = None


def _validate(product: Product) -> None:
    for field in ("name", "category", "description"):
        if not getattr(product, field).strip():
            raise ValidationError(f"{field} required")
    if product.price <= 0:
        raise ValidationError("price must be greater than 0")
    if product.price != product.price.quantize(CENT):
        raise ValidationError("price must have at most 2 decimal places")
    if product.price > MAX_MONEY_AMOUNT:
        raise ValidationError(f"price must not exceed {MAX_MONEY_AMOUNT}")
    if product.stock < 0:
        raise ValidationError("stock must be >= 0")


class CreateProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, dto: CreateProductDTO) -> Product:
        now = datetime.now(timezone.utc)
        product = Product(id=str(uuid.uuid4()), created_at=now, updated_at=now, **dto.model_dump())
        _validate(product)

        async with self._uow() as uow:
            await uow.products.create(product)
            await uow.commit()
        logger.info(f"Товар создан: {product.id}, цена {product.price}")
        return product


class GetProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str) -> Product:
        async with self._uow() as uow:
            product = await uow.products.get_by_id(product_id)
            if not product:
                raise ProductNotFoundError(product_id)
            return product


class UpdateProductUseCase:
    """Изменение товара. Цены в уже созданных заказах не меняются."""

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str, dto: UpdateProductDTO) -> Product:
        changes = {key: value for key, value in dto.model_dump(exclude_unset=True).items() if value is not None}

        async with self._uow() as uow:
            product = await uow.products.get_by_id(product_id)
            if not product:
                raise ProductNotFoundError(product_id)
            product = product.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
            _validate(product)
            await uow.products.update(product)
            await uow.commit()
        logger.info(f"Товар обновлен: {product_id}")
        return product


class DeleteProductUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str) -> None:
        async with self._uow() as uow:
            deleted = await uow.products.delete(product_id)
            if not deleted:
                raise ProductNotFoundError(product_id)
            await uow.commit()
        logger.info(f"Товар удален: {product_id}")
