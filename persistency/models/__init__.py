"""
Package initialization file for persistency models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from persistency.models directly.

Usage:
    from persistency.models import (
        ClassificationOutcome,
        NormalizedPolicy,
        PersistencyResult,
    )
"""

from persistency.models.enums import (
    ClassificationOutcome,
    TimeWindow,
    Severity,
    FileFormat,
    FilterMode,
)

from persistency.models.schemas import (
    NormalizedPolicy,
    WindowResult,
    StatusBreakdownEntry,
    StatusBreakdown,
    PersistencyResult,
    LapseCandidate,
    CarrierError,
    AnalysisResponse,
    AgentScope,
    CarrierFile,
    WritingAgent,
    WritingAgentExtraction,
    CarrierInfo,
)

__all__ = [
    # Enums
    'ClassificationOutcome',
    'TimeWindow',
    'Severity',
    'FileFormat',
    'FilterMode',
    # Schemas
    'NormalizedPolicy',
    'WindowResult',
    'StatusBreakdownEntry',
    'StatusBreakdown',
    'PersistencyResult',
    'LapseCandidate',
    'CarrierError',
    'AnalysisResponse',
    'AgentScope',
    'CarrierFile',
    'WritingAgent',
    'WritingAgentExtraction',
    'CarrierInfo',
]
