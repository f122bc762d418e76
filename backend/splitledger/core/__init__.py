"""Core business logic: split allocation, balances and the stores around them."""

from .split_service import SplitAllocator
from .balance_service import BalanceAggregator
from .user_directory import UserDirectory
from .expense_service import ExpenseService

__all__ = [
    "SplitAllocator",
    "BalanceAggregator",
    "UserDirectory",
    "ExpenseService",
]
