from http import HTTPStatus
from typing import Optional


class OrderServiceError(Exception):
    """Base for every error the order operations raise on purpose.

    Carries the HTTP status it maps to, a stable machine-readable ``code``,
    a human ``message`` and free-form ``details`` for diagnostics.
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        code: Optional[str] = None,
        message: str = "",
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.code = code or HTTPStatus(self.status_code).name
        self.message = message
        self.details = details if details is not None else message

    @property
    def status_name(self) -> str:
        return HTTPStatus(self.status_code).name


class NotFoundError(OrderServiceError):
    status_code = HTTPStatus.NOT_FOUND


class BadRequestError(OrderServiceError):
    status_code = HTTPStatus.BAD_REQUEST


class BusinessRuleError(BadRequestError):
    """The operation is not allowed for the order's current state."""


class InternalError(OrderServiceError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
