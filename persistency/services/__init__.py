"""
Persistency Services Module

Business logic of the persistency engine. Every service is a pure,
request-scoped computation over the bytes handed to it; nothing is persisted.

Services:
- tabular_reader: CSV / spreadsheet bytes -> header-keyed rows
- dates: Date normalization and calendar-month arithmetic
- classification: Status rule tables and the death-claim exception
- carriers: Per-carrier adapter configs, registry and normalization pipeline
- agent_scope: Writing-agent allow-list filter and agent extraction
- aggregation: 3/6/9/All window results and status breakdowns
- lapse: At-risk predicates, severity tables and triage ordering
- analysis: Request orchestrator (sequential and thread fan-out)

All services are designed to be consumed by the API layer (persistency/api/).
"""

# =============================================================================
# Input Services
# Tabular reading and date normalization
# =============================================================================

from persistency.services.tabular_reader import (
    RawRow,
    MalformedFileError,
    read_rows,
    select_sheet,
)

from persistency.services.dates import (
    UnparseableDateError,
    parse_date,
    parse_optional_date,
    months_between,
    subtract_months,
)

# =============================================================================
# Domain Rules
# Classification, lapse extraction and agent scoping
# =============================================================================

from persistency.services.classification import (
    DEATH_CLAIM_PERSISTENCE_MONTHS,
    StatusRules,
    death_claim_outcome,
    classify_policy,
    classify_statuses,
)

from persistency.services.lapse import (
    LapseRule,
    LapseSignal,
    NoLapseSignal,
    days_to_lapse,
    extract_lapse_candidates,
    sort_lapse_candidates,
)

from persistency.services.agent_scope import (
    normalize_agent_number,
    filter_policies,
    apply_scope,
    extract_writing_agents,
)

# =============================================================================
# Carrier Adapters
# =============================================================================

from persistency.services.carriers import (
    CarrierConfig,
    ColumnMap,
    MalformedRecordError,
    UnknownCarrierError,
    get_carrier,
    list_carriers,
    load_policies,
    register_carrier,
)

# =============================================================================
# Aggregation and Orchestration
# =============================================================================

from persistency.services.aggregation import (
    aggregate,
    breakdown,
    analyze_windows,
)

from persistency.services.analysis import (
    NoInputError,
    analyze_carrier_file,
    analyze_files,
    analyze_files_async,
    extract_file_writing_agents,
)


__all__ = [
    # Input
    'RawRow',
    'MalformedFileError',
    'read_rows',
    'select_sheet',
    'UnparseableDateError',
    'parse_date',
    'parse_optional_date',
    'months_between',
    'subtract_months',
    # Domain rules
    'DEATH_CLAIM_PERSISTENCE_MONTHS',
    'StatusRules',
    'death_claim_outcome',
    'classify_policy',
    'classify_statuses',
    'LapseRule',
    'LapseSignal',
    'NoLapseSignal',
    'days_to_lapse',
    'extract_lapse_candidates',
    'sort_lapse_candidates',
    'normalize_agent_number',
    'filter_policies',
    'apply_scope',
    'extract_writing_agents',
    # Carriers
    'CarrierConfig',
    'ColumnMap',
    'MalformedRecordError',
    'UnknownCarrierError',
    'get_carrier',
    'list_carriers',
    'load_policies',
    'register_carrier',
    # Aggregation and orchestration
    'aggregate',
    'breakdown',
    'analyze_windows',
    'NoInputError',
    'analyze_carrier_file',
    'analyze_files',
    'analyze_files_async',
    'extract_file_writing_agents',
]
