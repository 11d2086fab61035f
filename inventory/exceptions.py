class InventoryError(Exception):
    """Base class for errors the API turns into a JSON ``{"message": ...}`` response."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """A required field is missing, negative, blank or too long."""

    status_code = 400


class ConflictError(InventoryError):
    """The SKU is already used by another product."""

    status_code = 400


class NotFoundError(InventoryError):
    status_code = 404
