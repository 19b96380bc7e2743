from configurations.base_features.exceptions.base_exceptions import LocalBaseException, InvalidQuantityError


class InsufficientQuantityError(LocalBaseException):
    """Raised when an issue would take an item below zero"""
    def __init__(self, item_code, requested, available):
        self.item_code = item_code
        self.requested = requested
        self.available = available
        super().__init__(
            exception_type="insufficient_quantity",
            status_code=400,
            kwargs={"item_code": item_code, "requested": requested, "available": available},
        )


class NotReversibleError(LocalBaseException):
    """Raised when a movement is not an ISSUE or was already reversed"""
    def __init__(self, movement_id, reason):
        self.movement_id = movement_id
        super().__init__(
            exception_type="not_reversible",
            status_code=409,
            kwargs={"movement_id": movement_id, "reason": reason},
        )


__all__ = ["InsufficientQuantityError", "InvalidQuantityError", "NotReversibleError"]
