"""
Lapse Extraction Service

Flags policies that have lapsed or are at risk of lapsing and turns them
into carrier-agnostic LapseCandidate rows for the triage table.

Each carrier declares one of:
- LapseSignal: an at-risk predicate over the raw status (exact status set
  and/or case-insensitive substrings) plus an ordered rule table that derives
  severity and the recommended action (first matching rule wins, anything
  else flagged falls to low / "Monitor")
- NoLapseSignal: the carrier's data carries no reliable at-risk signal, so it
  contributes no candidates

Display order: severity (critical, high, medium, low), then ascending
daysToLapse with unknown values last.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from persistency.models.enums import Severity
from persistency.models.schemas import LapseCandidate, NormalizedPolicy


MONITOR_ACTION = 'Monitor'


@dataclass(frozen=True)
class LapseRule:
    """
    One row of a carrier's severity table.

    Matches when any status equals one of `statuses` or contains one of the
    `contains` fragments (case-insensitive).
    """
    severity: Severity
    action: str
    statuses: FrozenSet[str] = frozenset()
    contains: Tuple[str, ...] = ()

    def matches(self, statuses: Sequence[str]) -> bool:
        for status in statuses:
            if status in self.statuses:
                return True
            lowered = status.lower()
            if any(fragment.lower() in lowered for fragment in self.contains):
                return True
        return False


@dataclass(frozen=True)
class LapseSignal:
    """
    A carrier's at-risk predicate and severity table.

    Attributes:
        rules: Severity rules evaluated top-down
        statuses: Statuses that flag a policy (exact match)
        contains: Status fragments that flag a policy (case-insensitive)
        days_from_paid_to: Estimate daysToLapse from the policy's secondary
            (paid-to) date plus the configured grace period
    """
    rules: Tuple[LapseRule, ...] = ()
    statuses: FrozenSet[str] = frozenset()
    contains: Tuple[str, ...] = ()
    days_from_paid_to: bool = False

    def is_at_risk(self, status: str) -> bool:
        status = (status or '').strip()
        if status in self.statuses:
            return True
        lowered = status.lower()
        return any(fragment.lower() in lowered for fragment in self.contains)

    def derive(self, statuses: Sequence[str]) -> Tuple[str, Severity]:
        """Return (action, severity) from the first matching rule."""
        for rule in self.rules:
            if rule.matches(statuses):
                return rule.action, rule.severity
        return MONITOR_ACTION, Severity.LOW


@dataclass(frozen=True)
class NoLapseSignal:
    """Declares that a carrier's roster has no usable at-risk indicator."""
    reason: str


LapseDeclaration = Union[LapseSignal, NoLapseSignal]


def days_to_lapse(paid_to: Optional[date], as_of: date, grace_period_days: int) -> Optional[int]:
    """
    Days left before a policy paid to `paid_to` lapses.

    Negative once the grace period has run out. None without a paid-to date,
    or when the paid-to date is a far-future placeholder such as 12/31/9999.
    """
    if paid_to is None:
        return None
    try:
        return (paid_to + timedelta(days=grace_period_days) - as_of).days
    except OverflowError:
        return None


def sort_lapse_candidates(candidates: Iterable[LapseCandidate]) -> List[LapseCandidate]:
    """Severity first, then soonest lapse; unknown daysToLapse sorts last."""
    return sorted(
        candidates,
        key=lambda c: (
            c.severity.rank,
            c.daysToLapse is None,
            c.daysToLapse if c.daysToLapse is not None else 0,
            c.carrier,
            c.id,
        ),
    )


def extract_lapse_candidates(
    policies: Iterable[NormalizedPolicy],
    carrier_key: str,
    declaration: LapseDeclaration,
    as_of: date,
    grace_period_days: int = 31,
) -> List[LapseCandidate]:
    """
    Flag one carrier's at-risk policies.

    Args:
        policies: The carrier's normalized (and scope-filtered) policies
        carrier_key: Registry key, used to build stable candidate ids
        declaration: The carrier's LapseSignal or NoLapseSignal
        as_of: Date daysToLapse is measured from
        grace_period_days: Grace period after the paid-to date

    Returns:
        Sorted LapseCandidate list; empty for NoLapseSignal carriers
    """
    if isinstance(declaration, NoLapseSignal):
        return []

    candidates = []
    for policy in policies:
        if not declaration.is_at_risk(policy.statusRaw):
            continue
        statuses = [policy.statusRaw]
        action, severity = declaration.derive(statuses)
        remaining = None
        if declaration.days_from_paid_to:
            remaining = days_to_lapse(policy.secondaryDate, as_of, grace_period_days)
        candidates.append(LapseCandidate(
            id=f"{carrier_key}-{policy.policyId}",
            carrier=policy.carrierName,
            insuredFirstName=policy.insuredFirstName,
            insuredLastName=policy.insuredLastName,
            phone=policy.phone,
            statuses=statuses,
            daysToLapse=remaining,
            action=action,
            severity=severity,
        ))
    return sort_lapse_candidates(candidates)


__all__ = [
    'MONITOR_ACTION',
    'LapseRule',
    'LapseSignal',
    'NoLapseSignal',
    'LapseDeclaration',
    'days_to_lapse',
    'sort_lapse_candidates',
    'extract_lapse_candidates',
]
