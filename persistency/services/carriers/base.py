"""
Carrier Adapter Base

A carrier adapter is a frozen CarrierConfig: the file layout, the column
names feeding each NormalizedPolicy field, the carrier's StatusRules and its
lapse declaration. One shared pipeline (`load_policies`) turns any carrier's
bytes into normalized policies using that configuration, so adding a carrier
means adding a config, not a code path.

Row-level problems never fail a file:
- Missing policy id or status: the row is skipped and counted
- Unparseable reference date: the policy is kept with referenceDate None
  (left out of time windows, still eligible for lapse extraction)
- Unparseable secondary date: secondaryDate None
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from persistency.models.enums import ClassificationOutcome, FileFormat
from persistency.models.schemas import NormalizedPolicy
from persistency.services.agent_scope import normalize_agent_number
from persistency.services.classification import StatusRules
from persistency.services.dates import parse_optional_date
from persistency.services.lapse import LapseDeclaration, LapseSignal
from persistency.services.tabular_reader import (
    RawRow,
    TextPreprocessor,
    read_rows,
)


OTHER_STATUS_LABEL = 'Other'

# Reasons kept per file for the log; the count is always exact
MAX_SKIP_REASONS = 5


class MalformedRecordError(ValueError):
    """A roster row missing a field every policy must have."""


@dataclass(frozen=True)
class ColumnMap:
    """
    Header labels feeding each NormalizedPolicy field.

    Each field lists candidate labels in priority order; the first one with a
    non-empty value wins. Matching ignores case and surrounding whitespace.
    """
    policy_id: Tuple[str, ...]
    status: Tuple[str, ...]
    reference_date: Tuple[str, ...]
    secondary_date: Tuple[str, ...] = ()
    writing_agent_number: Tuple[str, ...] = ()
    writing_agent_name: Tuple[str, ...] = ()
    insured_first_name: Tuple[str, ...] = ()
    insured_last_name: Tuple[str, ...] = ()
    phone: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CarrierConfig:
    """
    Everything the pipeline needs to know about one carrier.

    Attributes:
        key: Registry key, also the upload field name (e.g. 'american-amicable')
        name: Display name reported in results
        file_format: Format the carrier exports by default
        columns: Column mapping into NormalizedPolicy
        rules: Status vocabulary and outcome mapping
        lapse: LapseSignal, or NoLapseSignal when the data carries none
        header_row: Header index among non-blank rows
        sheet_keyword: Preferred sheet for multi-sheet workbooks
        preprocess: Text transform run before CSV splitting
        aliases: Other keys accepted for this carrier
        breakdown_limit: Most status labels shown individually; rest go to 'Other'
        breakdown_vocabulary: When set, labels outside it are reported as 'Other'
    """
    key: str
    name: str
    file_format: FileFormat
    columns: ColumnMap
    rules: StatusRules
    lapse: LapseDeclaration
    header_row: int = 0
    sheet_keyword: Optional[str] = None
    preprocess: Optional[TextPreprocessor] = None
    aliases: Tuple[str, ...] = ()
    breakdown_limit: Optional[int] = None
    breakdown_vocabulary: Optional[FrozenSet[str]] = None

    @property
    def default_outcome(self) -> ClassificationOutcome:
        return self.rules.default

    @property
    def has_lapse_signal(self) -> bool:
        return isinstance(self.lapse, LapseSignal)

    def breakdown_label(self, status: str) -> str:
        if self.breakdown_vocabulary is None or status in self.breakdown_vocabulary:
            return status
        return OTHER_STATUS_LABEL


@dataclass
class NormalizationReport:
    """Outcome of normalizing one file."""
    policies: List[NormalizedPolicy] = field(default_factory=list)
    skipped_rows: int = 0
    skip_reasons: List[str] = field(default_factory=list)

    @property
    def undated_policies(self) -> int:
        return sum(1 for policy in self.policies if policy.referenceDate is None)


# =============================================================================
# ROW NORMALIZATION
# =============================================================================

def _pick(lookup: Dict[str, str], candidates: Tuple[str, ...]) -> str:
    for label in candidates:
        value = lookup.get(label.strip().lower(), '')
        if value:
            return value
    return ''


def normalize_row(row: RawRow, config: CarrierConfig) -> NormalizedPolicy:
    """
    Project one raw row onto a NormalizedPolicy.

    Raises:
        MalformedRecordError: If the policy id or status is empty
    """
    lookup: Dict[str, str] = {}
    for label, value in row.items():
        lookup.setdefault(label.strip().lower(), (value or '').strip())

    columns = config.columns
    policy_id = _pick(lookup, columns.policy_id).strip('=()"')
    if not policy_id:
        raise MalformedRecordError(f"missing policy id (columns {list(columns.policy_id)})")
    status = _pick(lookup, columns.status)
    if not status:
        raise MalformedRecordError(f"policy {policy_id}: missing status")

    return NormalizedPolicy(
        policyId=policy_id,
        carrierName=config.name,
        statusRaw=status,
        referenceDate=parse_optional_date(_pick(lookup, columns.reference_date)),
        secondaryDate=parse_optional_date(_pick(lookup, columns.secondary_date)),
        writingAgentNumber=normalize_agent_number(_pick(lookup, columns.writing_agent_number)),
        writingAgentName=_pick(lookup, columns.writing_agent_name) or None,
        insuredFirstName=_pick(lookup, columns.insured_first_name),
        insuredLastName=_pick(lookup, columns.insured_last_name),
        phone=_pick(lookup, columns.phone) or None,
    )


def load_policies(
    config: CarrierConfig,
    content: bytes,
    file_format: Optional[FileFormat] = None,
    file_name: Optional[str] = None,
) -> NormalizationReport:
    """
    Read and normalize one carrier file.

    Args:
        config: The carrier's adapter configuration
        content: Raw file bytes
        file_format: Declared format; the carrier default when omitted
        file_name: Used in error messages

    Returns:
        NormalizationReport with the policies and the skipped-row tally

    Raises:
        MalformedFileError: If the file cannot be read or has no header row
    """
    report = NormalizationReport()
    rows = read_rows(
        content,
        file_format or config.file_format,
        header_row=config.header_row,
        sheet_keyword=config.sheet_keyword,
        preprocess=config.preprocess,
        carrier=config.name,
        file_name=file_name,
    )
    for row_number, row in enumerate(rows, start=1):
        try:
            report.policies.append(normalize_row(row, config))
        except MalformedRecordError as e:
            report.skipped_rows += 1
            if len(report.skip_reasons) < MAX_SKIP_REASONS:
                report.skip_reasons.append(f"data row {row_number}: {e}")
    return report


__all__ = [
    'OTHER_STATUS_LABEL',
    'MalformedRecordError',
    'ColumnMap',
    'CarrierConfig',
    'NormalizationReport',
    'normalize_row',
    'load_policies',
]
