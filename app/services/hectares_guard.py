"""
Hectares accumulation guard for attendance records.

Compares the hectares reported in attendance records against the job's
planned surface. The check is advisory: callers attach the warning to
their response and persist the record regardless.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

LIMIT_APPLIED = "aplicadas"
LIMIT_THEORETICAL = "teóricas"


@dataclass
class HectaresSummary:
    """Accumulated hectares of a job against its planned surfaces."""
    total_hectares_done: float
    job_theoretical_hectares: Optional[float]
    job_applied_hectares: Optional[float]
    exceeds_theoretical: bool
    exceeds_applied: bool


@dataclass
class HectaresWarning:
    total_hectares_done: float
    limit_hectares: float
    limit_kind: str

    @property
    def message(self) -> str:
        return (
            f"Advertencia: Total de hectáreas ({self.total_hectares_done:.2f}) excede las "
            f"hectáreas {self.limit_kind} del trabajo ({self.limit_hectares:.2f})"
        )


def sum_hectares_done(values: Iterable[Optional[float]]) -> float:
    return sum(v for v in values if v)


def check_hectares_limit(
    total_hectares_done: float,
    applied_hectares: Optional[float],
    theoretical_hectares: Optional[float]
) -> Optional[HectaresWarning]:
    """
    Return a warning when the accumulated hectares exceed the job limit.

    Applied hectares are the limit when set; theoretical hectares are only
    consulted when the job has no applied surface.
    """
    if applied_hectares:
        limit, kind = applied_hectares, LIMIT_APPLIED
    elif theoretical_hectares:
        limit, kind = theoretical_hectares, LIMIT_THEORETICAL
    else:
        return None

    if total_hectares_done > limit:
        warning = HectaresWarning(
            total_hectares_done=total_hectares_done,
            limit_hectares=limit,
            limit_kind=kind,
        )
        logger.warning(warning.message)
        return warning
    return None


def build_hectares_summary(
    hectares_done: Iterable[Optional[float]],
    theoretical_hectares: Optional[float],
    applied_hectares: Optional[float]
) -> HectaresSummary:
    total = sum_hectares_done(hectares_done)
    return HectaresSummary(
        total_hectares_done=total,
        job_theoretical_hectares=theoretical_hectares,
        job_applied_hectares=applied_hectares,
        exceeds_theoretical=bool(theoretical_hectares) and total > theoretical_hectares,
        exceeds_applied=bool(applied_hectares) and total > applied_hectares,
    )
