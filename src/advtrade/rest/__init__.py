"""REST managers built on the signed request executor."""

from .accounts import AccountsManager
from .executor import ApiRequestError, RequestExecutor
from .fees import FeesManager, TransactionSummary
from .orders import OrderRejectedError, OrderSide, OrdersManager, OrderStatus
from .public import Granularity, PublicManager

__all__ = [
    "AccountsManager",
    "ApiRequestError",
    "FeesManager",
    "Granularity",
    "OrderRejectedError",
    "OrderSide",
    "OrderStatus",
    "OrdersManager",
    "PublicManager",
    "RequestExecutor",
    "TransactionSummary",
]
