"""
业务异常
服务层只抛出这些异常，由 main.py 中的异常处理器统一转换为HTTP响应
"""
from typing import Optional


class AppError(Exception):
    """业务异常基类"""
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class BillingCycleNotFound(NotFoundError):
    default_detail = "Billing cycle not found"


class CustomerNotFound(NotFoundError):
    default_detail = "Customer not found"


class ServiceNotFound(NotFoundError):
    default_detail = "Service not found"


class PartyNotFound(NotFoundError):
    default_detail = "Party not found"


class UserNotFound(NotFoundError):
    default_detail = "User not found"


class ValidationError(AppError):
    status_code = 400
    default_detail = "Invalid request"


class InvalidBillingPeriod(ValidationError):
    default_detail = "Invalid billing period"


class PaymentValidationError(ValidationError):
    default_detail = "Invalid payment"


class OrderValidationError(ValidationError):
    default_detail = "Invalid order"


class ConflictError(AppError):
    status_code = 409
    default_detail = "Conflict"


class DuplicateError(ConflictError):
    default_detail = "Record already exists"


class ConcurrentUpdateError(ConflictError):
    default_detail = "Record was modified by another request, please retry"


class AuthenticationError(AppError):
    status_code = 401
    default_detail = "Authentication required"


class PermissionDeniedError(AppError):
    status_code = 403
    default_detail = "Admin privileges required"
