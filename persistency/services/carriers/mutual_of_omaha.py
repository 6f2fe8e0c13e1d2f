"""
Mutual of Omaha adapter.

Spreadsheet with a report title row and a run-date row above the header, so
the header is the third non-blank row. Data lives on the sheet whose name
contains "inforce". Statuses are matched case-insensitively.
"""

from persistency.models.enums import ClassificationOutcome, FileFormat, Severity
from persistency.services.carriers.base import CarrierConfig, ColumnMap
from persistency.services.classification import StatusRules
from persistency.services.lapse import LapseRule, LapseSignal


MUTUAL_OF_OMAHA = CarrierConfig(
    key='mutual-of-omaha',
    name='Mutual of Omaha',
    file_format=FileFormat.SPREADSHEET,
    header_row=2,
    sheet_keyword='inforce',
    aliases=('moo',),
    columns=ColumnMap(
        policy_id=('Policy Number',),
        status=('Policy Status',),
        reference_date=('Issue Date',),
        secondary_date=('Paid To Date',),
        writing_agent_number=('Writing Agent Number',),
        writing_agent_name=('Writing Agent Name',),
        insured_first_name=('Insured First Name',),
        insured_last_name=('Insured Last Name',),
        phone=('Phone Number',),
    ),
    rules=StatusRules(
        default=ClassificationOutcome.NEGATIVE,
        case_sensitive=False,
        positive=frozenset({'In Force', 'Grace Period', 'Paid Up'}),
        negative=frozenset({
            'Lapsed',
            'Lapse Pending',
            'Terminated',
            'Surrendered',
            'Not Taken',
            'Declined',
            'Withdrawn',
            'Cancelled',
        }),
        neutral=frozenset({'Pending', 'Approved'}),
        death_claim=frozenset({'Death Claim'}),
    ),
    lapse=LapseSignal(
        contains=('lapse pending', 'grace period'),
        days_from_paid_to=True,
        rules=(
            LapseRule(
                severity=Severity.CRITICAL,
                action='Policy is about to lapse - contact client immediately',
                contains=('lapse pending',),
            ),
            LapseRule(
                severity=Severity.HIGH,
                action='Notify client to pay outstanding premium',
                contains=('grace period',),
            ),
        ),
    ),
)
