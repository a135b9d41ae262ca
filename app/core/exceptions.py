from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    reason = "Error"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidTypeError(ServiceError):
    """Type string is not one of the recycle-bin types. Raised before touching storage."""

    reason = "InvalidType"

    def __init__(self, type_key: str) -> None:
        super().__init__(f"Invalid type '{type_key}'", status.HTTP_400_BAD_REQUEST)
        self.type_key = type_key


class InvalidRequestError(ServiceError):
    reason = "InvalidRequest"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    reason = "NotFound"

    def __init__(self, message: str = "Item not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class NotDeletedError(ServiceError):
    """Row exists but is active, so it cannot be restored or permanently deleted."""

    reason = "NotDeleted"

    def __init__(self, message: str = "Item is not in the recycle bin") -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class ConflictError(ServiceError):
    """Restoring the row would collide with an active row on a unique key."""

    reason = "Conflict"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class ReferencedError(ServiceError):
    """The database refused a permanent delete because other rows still point at the row."""

    reason = "Referenced"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
