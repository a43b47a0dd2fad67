"""
hr_config -- single public entrypoint for payroll policy.

Responsibility:
    Provides the ONLY way to obtain payroll policy at runtime through
    ``get_active_policy()``.  No other component reads policy files
    directly.  Returns a frozen ``PolicySet`` holding the GOSI rates,
    payroll parameters, validation thresholds and calendar.

Architecture position:
    Configuration -- YAML-driven policy.  Sits above ``hr_kernel`` and
    ``hr_engines`` and below the payroll service in ``hr_modules``.  The
    kernel and the engines MUST NEVER import from ``hr_config``.

Invariants enforced:
    - Single entrypoint: all runtime policy flows through
      ``get_active_policy()``.
    - Deterministic: the same YAML always yields the same checksum.

Failure modes:
    - ``PolicyNotFoundError`` -- no ``<name>.yaml`` in the sets directory.
    - ``ValueError`` / ``KeyError`` -- malformed policy content.

Audit relevance:
    Every successful ``get_active_policy()`` call emits an
    ``HR_CONFIG_TRACE`` log entry with the policy id, version and
    checksum, tying every payroll run to the policy that governed it.
"""

from __future__ import annotations

from pathlib import Path

from hr_config.loader import load_policy_set
from hr_config.schema import PolicySet, RecurringHoliday
from hr_kernel.exceptions import PolicyNotFoundError
from hr_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default policy sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DEFAULT_POLICY_NAME = "sa_default"


def get_active_policy(
    name: str = DEFAULT_POLICY_NAME,
    config_dir: Path | None = None,
) -> PolicySet:
    """The ONLY public policy entrypoint.

    Args:
        name: Policy set name; resolves to ``<config_dir>/<name>.yaml``.
        config_dir: Override path to the policy sets directory.
            Defaults to hr_config/sets/.

    Returns:
        The parsed, checksummed ``PolicySet``.

    Raises:
        PolicyNotFoundError: If no policy file with that name exists.
    """
    sets_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.is_file():
        raise PolicyNotFoundError(name, str(sets_dir))

    policy = load_policy_set(path)

    _logger.info(
        "HR_CONFIG_TRACE",
        extra={
            "trace_type": "HR_CONFIG_TRACE",
            "policy_id": policy.policy_id,
            "policy_version": policy.version,
            "checksum": policy.checksum,
            "currency": policy.currency,
            "holiday_count": len(policy.recurring_holidays),
        },
    )
    return policy


__all__ = [
    "DEFAULT_POLICY_NAME",
    "PolicySet",
    "RecurringHoliday",
    "get_active_policy",
]
