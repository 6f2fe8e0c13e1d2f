"""
American Amicable adapter.

CSV export where many cells are written as spreadsheet formulas, e.g.
`=("0104512345")` or `="AB1234"`, so spreadsheets keep leading zeros. The
escaping is removed before the CSV is split. Dates are MM/DD/YYYY.

A death claim counts as persisting when PaidtoDate is more than 24 months
after PolicyDate.
"""

import re

from persistency.models.enums import ClassificationOutcome, FileFormat, Severity
from persistency.services.carriers.base import CarrierConfig, ColumnMap
from persistency.services.classification import StatusRules
from persistency.services.lapse import LapseRule, LapseSignal


_FORMULA_WRAPPED = re.compile(r'=\(\s*("[^"\n]*")\s*\)')
_FORMULA_QUOTED = re.compile(r'(^|,)=(")', re.MULTILINE)


def strip_formula_escaping(text: str) -> str:
    """
    Turn `=("value")` and `="value"` cells back into plain quoted CSV values.

    Example:
        >>> strip_formula_escaping('=("0104"),="AB1",Active')
        '"0104","AB1",Active'
    """
    text = _FORMULA_WRAPPED.sub(r'\1', text)
    return _FORMULA_QUOTED.sub(r'\1\2', text)


PAYMENT_ACTION = 'Notify client to pay outstanding premium'
REQUIREMENTS_ACTION = 'Missing information - review with carrier to determine next steps'


AMERICAN_AMICABLE = CarrierConfig(
    key='american-amicable',
    name='American Amicable',
    file_format=FileFormat.DELIMITED,
    preprocess=strip_formula_escaping,
    aliases=('amam',),
    columns=ColumnMap(
        policy_id=('Policy',),
        status=('Status',),
        reference_date=('PolicyDate',),
        secondary_date=('PaidtoDate',),
        writing_agent_number=('WritingAgent',),
        writing_agent_name=('AgentName',),
        insured_first_name=('FirstName',),
        insured_last_name=('LastName',),
        phone=('Phone', 'PhoneNumber', 'Phone Number'),
    ),
    rules=StatusRules(
        default=ClassificationOutcome.NEGATIVE,
        positive=frozenset({'Active'}),
        death_claim=frozenset({'DeathClaim'}),
        negative=frozenset({
            'Declined',
            'Withdrawn',
            'Incomplete',
            'InfNotTaken',
            'Terminated',
            'NotTaken',
            'RPU',
            'Act-Ret Item',
            'Pending',
            'IssNotPaid',
            'NeedReqmnt',
            'Act-Pastdue',
        }),
    ),
    lapse=LapseSignal(
        statuses=frozenset({'Act-Pastdue', 'IssNotPaid', 'Pending', 'NeedReqmnt'}),
        days_from_paid_to=True,
        rules=(
            LapseRule(
                severity=Severity.HIGH,
                action=PAYMENT_ACTION,
                statuses=frozenset({'Act-Pastdue', 'IssNotPaid'}),
            ),
            LapseRule(
                severity=Severity.MEDIUM,
                action=REQUIREMENTS_ACTION,
                statuses=frozenset({'Pending', 'NeedReqmnt'}),
            ),
        ),
    ),
)
