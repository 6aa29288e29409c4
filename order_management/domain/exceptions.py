class DomainException(Exception):
    pass


class ValidationError(DomainException):
    pass


class NotFoundError(DomainException):
    pass


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order not found: {order_id}")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"product not found: {product_id}")


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"customer not found: {customer_id}")


class ConflictError(DomainException):
    pass


class DuplicateOrderNumberError(ConflictError):
    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"duplicate order number: {order_number}")


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"customer with email {email} already exists")


class IllegalTransitionError(ConflictError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"illegal transition {current.value} -> {target.value}")


class VersionConflictError(ConflictError):
    def __init__(self, order_id: str, expected: int, actual: int | None = None):
        self.order_id = order_id
        self.expected = expected
        self.actual = actual
        msg = f"order {order_id} was modified concurrently (expected version {expected})"
        if actual is not None:
            msg = f"order {order_id} version mismatch: expected {expected}, current {actual}"
        super().__init__(msg)


class InfrastructureError(DomainException):
    pass
