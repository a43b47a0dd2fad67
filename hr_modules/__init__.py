"""
HR Modules.

Thin orchestration layers over the HR kernel, engines and policy config.
Each module contains:
- Domain models (the nouns)
- Configuration schema (service settings)
- ORM persistence models
- A gateway (capability interface to employee/attendance/payroll data)
- A service facade that fetches, calls the engines and persists

Modules:
- Payroll: monthly payroll runs, GOSI reporting, EOSB, leave days

Actual calculation logic lives in ``hr_engines``.
"""
