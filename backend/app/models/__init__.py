"""
数据库模型
"""
from app.models.customer import Customer
from app.models.service import Service
from app.models.customer_service_price import CustomerServicePrice
from app.models.party import Party
from app.models.order import Order
from app.models.billing_cycle import BillingCycle
from app.models.payment import Payment
from app.models.user import User, UserSession
from app.models.operation_log import OperationLog

__all__ = [
    "Customer",
    "Service",
    "CustomerServicePrice",
    "Party",
    "Order",
    "BillingCycle",
    "Payment",
    "User",
    "UserSession",
    "OperationLog",
]
