"""
Spreadsheet "policy report" adapters (Aflac, Aetna).

Both carriers export the same workbook layout: a report banner on the first
row, upper-case headers on the second, and the data on a sheet whose name
contains "policy". They differ only in the carrier name they report under,
so both configs come from one factory.

STATUSCATEGORY drives classification. ORIGEFFDATE (falling back to
ISSUEDATE) is the reference date and TERMDATE feeds the death-claim rule.
The report carries no payment or lapse-warning signal.
"""

from persistency.models.enums import ClassificationOutcome, FileFormat
from persistency.services.carriers.base import CarrierConfig, ColumnMap
from persistency.services.classification import StatusRules
from persistency.services.lapse import NoLapseSignal


POLICY_REPORT_COLUMNS = ColumnMap(
    policy_id=('POLICYNUMBER', 'POLICYNO', 'POLICY'),
    status=('STATUSCATEGORY',),
    reference_date=('ORIGEFFDATE', 'ISSUEDATE'),
    secondary_date=('TERMDATE',),
    writing_agent_number=('AGENTID', 'AGENTNUMBER'),
    writing_agent_name=('AGENTNAME',),
    insured_first_name=('INSUREDFIRSTNAME', 'FIRSTNAME'),
    insured_last_name=('INSUREDLASTNAME', 'LASTNAME'),
    phone=('PHONE', 'INSUREDPHONE'),
)

POLICY_REPORT_RULES = StatusRules(
    default=ClassificationOutcome.NEUTRAL,
    case_sensitive=False,
    positive=frozenset({'Active', 'Inforce', 'In Force', 'Paid Up'}),
    negative=frozenset({
        'Terminated',
        'Lapsed',
        'Cancelled',
        'Not Taken',
        'Declined',
        'Withdrawn',
        'Surrendered',
    }),
    neutral=frozenset({'Pending'}),
    death_claim=frozenset({'Death Claim'}),
)


def policy_report_carrier(key: str, name: str) -> CarrierConfig:
    """Build a carrier config for the shared spreadsheet policy report."""
    return CarrierConfig(
        key=key,
        name=name,
        file_format=FileFormat.SPREADSHEET,
        header_row=1,
        sheet_keyword='policy',
        columns=POLICY_REPORT_COLUMNS,
        rules=POLICY_REPORT_RULES,
        lapse=NoLapseSignal(
            reason='STATUSCATEGORY reports only settled states; no payment or lapse-warning status'
        ),
    )


AFLAC = policy_report_carrier('aflac', 'Aflac')

AETNA = policy_report_carrier('aetna', 'Aetna')
