"""
Persistency Classification Service

Assigns every normalized policy exactly one ClassificationOutcome using the
rule set its carrier declares. The classifier is a pure, total function:

- Each carrier lists its positive, negative and neutral statuses explicitly
- Statuses outside the declared vocabulary fall to the carrier's declared
  default outcome; there is no implicit fallback
- Death-claim statuses are resolved by one shared predicate on the two dates
  the carrier feeds it: persisting only when the claim came more than
  24 months after the reference date

Rule sets validate themselves on construction: a status listed under two
outcomes is a configuration error, not a runtime surprise.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, Iterable, Optional

from persistency.models.enums import ClassificationOutcome
from persistency.models.schemas import NormalizedPolicy
from persistency.services.dates import months_between


# A death claim paid after this many months counts as a persisting policy
DEATH_CLAIM_PERSISTENCE_MONTHS: int = 24


def death_claim_outcome(
    reference_date: Optional[date],
    secondary_date: Optional[date],
    threshold_months: int = DEATH_CLAIM_PERSISTENCE_MONTHS,
) -> ClassificationOutcome:
    """
    Classify a death-claim record from its two resolved dates.

    Args:
        reference_date: Issue / policy / original effective date
        secondary_date: Paid-to or termination date
        threshold_months: Months the policy must have persisted beyond

    Returns:
        POSITIVE if more than `threshold_months` separate the dates, else
        NEGATIVE. Missing dates are insufficient evidence and give NEGATIVE.
    """
    if reference_date is None or secondary_date is None:
        return ClassificationOutcome.NEGATIVE
    if months_between(reference_date, secondary_date) > threshold_months:
        return ClassificationOutcome.POSITIVE
    return ClassificationOutcome.NEGATIVE


def _key(status: str, case_sensitive: bool) -> str:
    status = (status or '').strip()
    return status if case_sensitive else status.lower()


@dataclass(frozen=True)
class StatusRules:
    """
    One carrier's status vocabulary and its outcome mapping.

    Attributes:
        default: Outcome for statuses outside the declared vocabulary
        positive: Statuses that count as persisting
        negative: Statuses that count as not persisting
        neutral: Statuses excluded from the persistency percentage
        death_claim: Statuses resolved by the death-claim date rule
        case_sensitive: Whether status matching respects case
    """
    default: ClassificationOutcome
    positive: FrozenSet[str] = frozenset()
    negative: FrozenSet[str] = frozenset()
    neutral: FrozenSet[str] = frozenset()
    death_claim: FrozenSet[str] = frozenset()
    case_sensitive: bool = True
    _lookup: Dict[str, Optional[ClassificationOutcome]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        if not isinstance(self.default, ClassificationOutcome):
            raise TypeError(f"default outcome must be a ClassificationOutcome, got {self.default!r}")

        lookup: Dict[str, Optional[ClassificationOutcome]] = {}
        groups = (
            (self.positive, ClassificationOutcome.POSITIVE),
            (self.negative, ClassificationOutcome.NEGATIVE),
            (self.neutral, ClassificationOutcome.NEUTRAL),
            # None marks "decided by the death-claim rule"
            (self.death_claim, None),
        )
        for statuses, outcome in groups:
            for status in statuses:
                key = _key(status, self.case_sensitive)
                if key in lookup:
                    raise ValueError(f"Status '{status}' is declared under more than one outcome")
                lookup[key] = outcome
        object.__setattr__(self, '_lookup', lookup)

    @property
    def vocabulary(self) -> FrozenSet[str]:
        """Every declared status string."""
        return self.positive | self.negative | self.neutral | self.death_claim

    def is_declared(self, status: str) -> bool:
        return _key(status, self.case_sensitive) in self._lookup

    def is_death_claim(self, status: str) -> bool:
        key = _key(status, self.case_sensitive)
        return key in self._lookup and self._lookup[key] is None

    def classify(
        self,
        status_raw: str,
        reference_date: Optional[date] = None,
        secondary_date: Optional[date] = None,
    ) -> ClassificationOutcome:
        """
        Map a raw status (plus dates, for death claims) to an outcome.

        Never raises for an unknown status; the declared default applies.
        """
        key = _key(status_raw, self.case_sensitive)
        if key not in self._lookup:
            return self.default
        outcome = self._lookup[key]
        if outcome is None:
            return death_claim_outcome(reference_date, secondary_date)
        return outcome


def classify_policy(rules: StatusRules, policy: NormalizedPolicy) -> ClassificationOutcome:
    """Classify a normalized policy with its carrier's rules."""
    return rules.classify(policy.statusRaw, policy.referenceDate, policy.secondaryDate)


def classify_statuses(rules: StatusRules, statuses: Iterable[str]) -> Dict[str, ClassificationOutcome]:
    """
    Classify bare status strings (no dates), e.g. to audit a vocabulary.

    Death-claim statuses resolve to NEGATIVE here since no dates are given.
    """
    return {status: rules.classify(status) for status in statuses}


__all__ = [
    'DEATH_CLAIM_PERSISTENCE_MONTHS',
    'StatusRules',
    'death_claim_outcome',
    'classify_policy',
    'classify_statuses',
]
