from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_content(self) -> dict[str, Any]:
        return {'detail': self.message}


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    """Malformed request data (segment, contact, seat type). Never retried automatically."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    """
    Inventory conflict surfaced to the caller for re-selection.

    Codes: SEAT_HELD, SEAT_TAKEN, INTENTS_EXPIRED, BOARDING_STARTED, ORDER_NOT_PENDING
    """

    def __init__(self, message: str, *, code: str = 'CONFLICT', **extra: Any) -> None:
        self.code = code
        self.extra = extra
        super().__init__(message, 409)

    def to_content(self) -> dict[str, Any]:
        return {'detail': self.message, 'code': self.code, **self.extra}


class ScopeError(CustomBaseError):
    """Promo code not applicable; carries the failing rule as reason."""

    def __init__(self, message: str, *, reason: str) -> None:
        self.reason = reason
        super().__init__(message, 422)

    def to_content(self) -> dict[str, Any]:
        return {'detail': self.message, 'reason': self.reason}


class GatewayError(CustomBaseError):
    """Payment provider unreachable or refused; `extra` lets the caller retry the order."""

    def __init__(self, message: str, **extra: Any) -> None:
        self.extra = extra
        super().__init__(message, 502)

    def to_content(self) -> dict[str, Any]:
        return {'detail': self.message, **self.extra}


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class LockBusyError(CustomBaseError):
    """Named advisory lock held by another process; callers skip, never queue."""

    def __init__(self, lock_name: str) -> None:
        self.lock_name = lock_name
        super().__init__(f'Lock busy: {lock_name}', 423)
