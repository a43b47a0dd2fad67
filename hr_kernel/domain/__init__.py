"""
Pure domain layer.

Value objects and time abstractions with NO dependencies on the ORM,
the database, or the system clock (except SystemClock).
"""

from hr_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from hr_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from hr_kernel.domain.values import Currency, Money

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
]
