from .access import AccessDecision, AccessReason, MembershipAssertion
from .metrics import CpuTimes, SystemMetrics

__all__ = [
    "AccessDecision",
    "AccessReason",
    "MembershipAssertion",
    "CpuTimes",
    "SystemMetrics",
]
