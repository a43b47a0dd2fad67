"""
HR Kernel

Shared foundation for the payroll engines and HR modules:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Decimal-only Money/Currency value objects and injectable clocks
- SQLAlchemy declarative base and session management
"""

__version__ = "0.1.0"
