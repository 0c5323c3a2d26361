"""
api-base: Success-Status Policies
==================================

What:  Callables mapping an operation name to the status code of a successful
       (no ``errors`` key) result.
Who:   Passed to ``ApiController`` as ``success_status``.

The controller itself has no opinion on success codes. A concrete endpoint
decides, for example ``create → 201`` and ``delete → 204``.
"""

from typing import Dict, Mapping, Optional

RESOURCE_STATUSES: Dict[str, int] = {
    "create": 201,
    "delete": 204,
}


class StatusPolicy:
    """
    Mapping-backed success-status policy.

    Usage:
        policy = StatusPolicy({"create": 201}, default=200)
        policy("create")   # 201
        policy("index")    # 200
    """

    def __init__(self, statuses: Mapping[str, int], default: int):
        self.statuses = dict(statuses)
        self.default = default

    def __call__(self, operation: str) -> int:
        return self.statuses.get(operation, self.default)

    def __repr__(self) -> str:
        return f"StatusPolicy({self.statuses!r}, default={self.default})"


def resource_status_policy(
    overrides: Optional[Mapping[str, int]] = None,
    default: int = 200,
) -> StatusPolicy:
    """Policy for conventional resource operations, with optional overrides."""
    statuses = dict(RESOURCE_STATUSES)
    if overrides:
        statuses.update(overrides)
    return StatusPolicy(statuses, default=default)
