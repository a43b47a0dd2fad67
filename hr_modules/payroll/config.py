"""
Payroll Service Configuration.

Service-level settings for ``PayrollService``.  The statutory parameters
(GOSI rates, overtime multiplier, thresholds, calendar) come from the
YAML policy set resolved through ``hr_config.get_active_policy``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from hr_config import DEFAULT_POLICY_NAME, PolicySet, get_active_policy
from hr_kernel.domain.currency import CurrencyRegistry
from hr_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.config")


@dataclass
class PayrollConfig:
    """
    Configuration schema for the payroll module.

    Defaults to the Saudi policy set.  Override at instantiation:

        config = PayrollConfig(
            reject_invalid_payroll=False,
            policy=get_active_policy("sa_default", config_dir=custom_dir),
        )
    """

    policy_name: str = DEFAULT_POLICY_NAME
    policy: PolicySet | None = None

    # Payroll currency; defaults to the policy currency
    currency: str | None = None

    # Refuse to persist payrolls with hard validation errors (negative net)
    reject_invalid_payroll: bool = True

    # Persist accepted calculations during a monthly run
    persist_results: bool = True

    # Employee statuses eligible for a monthly run
    eligible_statuses: frozenset[str] = field(
        default_factory=lambda: frozenset({"active"})
    )

    def __post_init__(self):
        if self.policy is None:
            self.policy = get_active_policy(self.policy_name)
        if self.currency is None:
            self.currency = self.policy.currency
        self.currency = CurrencyRegistry.validate(self.currency)
        if not self.eligible_statuses:
            raise ValueError("eligible_statuses cannot be empty")

        logger.info(
            "payroll_config_initialized",
            extra={
                "policy_id": self.policy.policy_id,
                "policy_version": self.policy.version,
                "currency": self.currency,
                "reject_invalid_payroll": self.reject_invalid_payroll,
                "persist_results": self.persist_results,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the default Saudi policy."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict, config_dir: Path | None = None) -> Self:
        """Create config from a dictionary (e.g., loaded from database/file)."""
        logger.info(
            "payroll_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        data = dict(data)
        if "eligible_statuses" in data:
            data["eligible_statuses"] = frozenset(data["eligible_statuses"])
        if config_dir is not None and "policy" not in data:
            data["policy"] = get_active_policy(
                data.get("policy_name", DEFAULT_POLICY_NAME), config_dir
            )
        return cls(**data)
