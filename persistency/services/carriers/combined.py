"""
Combined Insurance adapter.

Plain CSV with snake_case headers and ISO effective dates. Its status
vocabulary is small; Lapse-Pending is the only at-risk signal.
"""

from persistency.models.enums import ClassificationOutcome, FileFormat, Severity
from persistency.services.carriers.base import CarrierConfig, ColumnMap
from persistency.services.classification import StatusRules
from persistency.services.lapse import LapseRule, LapseSignal


COMBINED = CarrierConfig(
    key='combined',
    name='Combined Insurance',
    file_format=FileFormat.DELIMITED,
    aliases=('combined insurance',),
    columns=ColumnMap(
        policy_id=('policy_number',),
        status=('status',),
        reference_date=('effective_date',),
        secondary_date=('termination_date', 'paid_to_date'),
        writing_agent_number=('agent_number',),
        writing_agent_name=('agent_name',),
        insured_first_name=('insured_first_name', 'first_name'),
        insured_last_name=('insured_last_name', 'last_name'),
        phone=('phone', 'insured_phone'),
    ),
    rules=StatusRules(
        default=ClassificationOutcome.NEGATIVE,
        positive=frozenset({'In-Force', 'Issued'}),
        negative=frozenset({'Terminated', 'Lapse-Pending'}),
    ),
    lapse=LapseSignal(
        statuses=frozenset({'Lapse-Pending'}),
        rules=(
            LapseRule(
                severity=Severity.CRITICAL,
                action='Policy is about to lapse - contact client immediately',
                statuses=frozenset({'Lapse-Pending'}),
            ),
        ),
    ),
)
