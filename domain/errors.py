from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "validation_error"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    USER_NOT_FOUND = "user_not_found"
    DECK_NOT_FOUND = "deck_not_found"
    CARD_NOT_FOUND = "card_not_found"
    TOKEN_NOT_FOUND = "token_not_found"
    EMAIL_CONFLICT = "email_conflict"
    LOGIN_CONFLICT = "login_conflict"
    DECK_CONFLICT = "deck_conflict"
    DECK_LIMIT = "deck_limit_exceeded"
    CARD_LIMIT = "card_limit_exceeded"
    INTERNAL_ERROR = "internal_error"


class DomainError(Exception):
    """Base for every failure a workflow may raise."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationFailed(DomainError):
    code = ErrorCode.VALIDATION_ERROR
    message = "Check the submitted data"


class Unauthorized(DomainError):
    code = ErrorCode.UNAUTHORIZED
    message = "Not authenticated"


class Forbidden(DomainError):
    code = ErrorCode.FORBIDDEN
    message = "Access denied"


class NotFound(DomainError):
    message = "Resource not found"


class UserNotFound(NotFound):
    code = ErrorCode.USER_NOT_FOUND


class DeckNotFound(NotFound):
    code = ErrorCode.DECK_NOT_FOUND


class CardNotFound(NotFound):
    code = ErrorCode.CARD_NOT_FOUND


class TokenNotFound(NotFound):
    code = ErrorCode.TOKEN_NOT_FOUND


class Conflict(DomainError):
    message = "Resource already exists"


class EmailConflict(Conflict):
    code = ErrorCode.EMAIL_CONFLICT


class LoginConflict(Conflict):
    code = ErrorCode.LOGIN_CONFLICT


class DeckConflict(Conflict):
    code = ErrorCode.DECK_CONFLICT


class LimitExceeded(DomainError):
    message = "Limit reached"


class DeckLimitExceeded(LimitExceeded):
    code = ErrorCode.DECK_LIMIT


class CardLimitExceeded(LimitExceeded):
    code = ErrorCode.CARD_LIMIT
