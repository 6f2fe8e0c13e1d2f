"""
Transamerica adapter.

CSV whose status column is free display text. Only a curated whitelist
(positive) and blacklist (negative) is trusted; anything else is neutral and
appears as "Other" in the status breakdown, which shows at most seven labels.

At-risk policies are found by text: any display status mentioning a lapse or
a requested termination.
"""

from persistency.models.enums import ClassificationOutcome, FileFormat, Severity
from persistency.services.carriers.base import CarrierConfig, ColumnMap
from persistency.services.classification import StatusRules
from persistency.services.lapse import LapseRule, LapseSignal


TRANSAMERICA_RULES = StatusRules(
    default=ClassificationOutcome.NEUTRAL,
    positive=frozenset({
        'Active',
        'Active - Premium Paying',
        'Active - Paid Up',
        'Premium Paying',
        'Reinstated',
    }),
    negative=frozenset({
        'Lapsed',
        'Pending Lapse',
        'Terminated',
        'Requested Termination',
        'Surrendered',
        'Not Taken',
        'Declined',
        'Withdrawn',
        'Cancelled',
    }),
    neutral=frozenset({'Pending', 'Submitted', 'Approved - Pending Delivery'}),
    death_claim=frozenset({'Death Claim'}),
)


TRANSAMERICA = CarrierConfig(
    key='transamerica',
    name='Transamerica',
    file_format=FileFormat.DELIMITED,
    aliases=('ta',),
    columns=ColumnMap(
        policy_id=('Policy #', 'Policy Number'),
        status=('Policy Status Display', 'Policy Status'),
        reference_date=('Issue Date',),
        secondary_date=('Termination Date',),
        writing_agent_number=('Agent Writing Number', 'Writing Agent'),
        writing_agent_name=('Agent Name',),
        insured_first_name=('Insured First Name',),
        insured_last_name=('Insured Last Name',),
        phone=('Insured Phone',),
    ),
    rules=TRANSAMERICA_RULES,
    breakdown_vocabulary=TRANSAMERICA_RULES.vocabulary,
    breakdown_limit=7,
    lapse=LapseSignal(
        contains=('lapse', 'requested termination'),
        rules=(
            LapseRule(
                severity=Severity.CRITICAL,
                action='Policy is about to lapse - contact client immediately',
                contains=('pending lapse', 'lapse pending'),
            ),
            LapseRule(
                severity=Severity.HIGH,
                action='Client requested termination - contact client to conserve the policy',
                contains=('requested termination',),
            ),
        ),
    ),
)
