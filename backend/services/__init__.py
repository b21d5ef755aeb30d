"""
Services layer for business logic.
Keeps route handlers thin; every service receives the request's Session.
"""

from services.errors import (
    ServiceError,
    NotFoundError,
    BusinessRuleError,
    InvalidTransitionError,
    PermissionDeniedError,
)
from services.users import AuthService, UserService
from services.farmers import FarmerService
from services.buyers import BuyerService
from services.products import ProductService
from services.cart import CartService
from services.orders import OrderService
from services.payments import PaymentService
from services.logistics import LogisticsService

__all__ = [
    "ServiceError",
    "NotFoundError",
    "BusinessRuleError",
    "InvalidTransitionError",
    "PermissionDeniedError",
    "AuthService",
    "UserService",
    "FarmerService",
    "BuyerService",
    "ProductService",
    "CartService",
    "OrderService",
    "PaymentService",
    "LogisticsService",
]
