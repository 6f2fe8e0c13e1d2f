"""
Pydantic request/response models for the Persistency Analysis backend.

This module provides type-safe data validation and serialization for the
values produced within one analysis request: normalized policies, window
results, status breakdowns, lapse candidates and the response envelope.

Field names are camelCase to match the dashboard's JSON contract
({results, lapsePolicies}) without aliasing.

All models use Pydantic v2 syntax.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from persistency.models.enums import (
    ClassificationOutcome,
    FileFormat,
    FilterMode,
    Severity,
)


# =============================================================================
# Normalized Domain Models
# =============================================================================


class NormalizedPolicy(BaseModel):
    """
    Carrier-agnostic projection of one roster row.

    `policyId` and `statusRaw` are always present. `referenceDate` is None when
    the carrier's date could not be parsed; such policies are left out of
    time-windowed aggregation.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "policyId": "0104512345",
                "carrierName": "American Amicable",
                "statusRaw": "Active",
                "referenceDate": "2025-03-14",
                "secondaryDate": "2025-09-14",
                "writingAgentNumber": "AB1234",
                "writingAgentName": "Jane Agent",
                "insuredFirstName": "John",
                "insuredLastName": "Smith",
                "phone": "555-0100"
            }
        }
    )

    policyId: str = Field(..., min_length=1, description="Carrier-local policy identifier")
    carrierName: str = Field(..., description="Display name of the carrier")
    statusRaw: str = Field(..., min_length=1, description="Status in the carrier's own vocabulary")
    referenceDate: Optional[date] = Field(
        default=None,
        description="Date used for time-window bucketing (issue or original effective date)"
    )
    secondaryDate: Optional[date] = Field(
        default=None,
        description="Date used by exception rules (paid-to or termination date)"
    )
    writingAgentNumber: str = Field(default="", description="Writing agent number, escaping removed")
    writingAgentName: Optional[str] = Field(default=None, description="Writing agent display name")
    insuredFirstName: str = Field(default="", description="Insured first name")
    insuredLastName: str = Field(default="", description="Insured last name")
    phone: Optional[str] = Field(default=None, description="Insured phone number")


class WindowResult(BaseModel):
    """
    Persistency counts for one (carrier, time window).

    Only positive and negative outcomes enter the percentage; neutral
    outcomes are reported separately in `neutralCount`.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "positivePercentage": 60.0,
                "positiveCount": 60,
                "negativePercentage": 40.0,
                "negativeCount": 40,
                "neutralCount": 3,
                "totalPolicies": 103
            }
        }
    )

    positivePercentage: float = Field(default=0.0, ge=0.0, le=100.0)
    positiveCount: int = Field(default=0, ge=0)
    negativePercentage: float = Field(default=0.0, ge=0.0, le=100.0)
    negativeCount: int = Field(default=0, ge=0)
    neutralCount: int = Field(default=0, ge=0)
    totalPolicies: int = Field(default=0, ge=0, description="Dated policies inside the window")


class StatusBreakdownEntry(BaseModel):
    """Count and share of one status label inside a window."""
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0, le=100.0, description="Share of all policies in the window")


StatusBreakdown = Dict[str, StatusBreakdownEntry]


class PersistencyResult(BaseModel):
    """
    Dashboard numbers for one carrier.

    `persistencyRate` is the `All` window's positive percentage.
    """
    carrier: str = Field(..., description="Carrier display name")
    carrierKey: str = Field(..., description="Registry key of the carrier adapter")
    fileName: Optional[str] = Field(default=None, description="Uploaded file name")
    timeRanges: Dict[str, WindowResult] = Field(default_factory=dict)
    statusBreakdowns: Dict[str, StatusBreakdown] = Field(default_factory=dict)
    totalPolicies: int = Field(default=0, ge=0, description="Dated policies across all time")
    persistencyRate: float = Field(default=0.0, ge=0.0, le=100.0)
    skippedRows: int = Field(default=0, ge=0, description="Rows dropped for missing required fields")
    undatedPolicies: int = Field(default=0, ge=0, description="Policies without a parseable reference date")


class LapseCandidate(BaseModel):
    """
    A policy flagged as lapsing or at risk, ready for the triage table.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "combined-C100234",
                "carrier": "Combined Insurance",
                "insuredFirstName": "Mary",
                "insuredLastName": "Jones",
                "phone": None,
                "statuses": ["Lapse-Pending"],
                "daysToLapse": None,
                "action": "Policy is about to lapse - contact client immediately",
                "severity": "critical"
            }
        }
    )

    id: str = Field(..., description="Carrier key and policy id")
    carrier: str = Field(..., description="Carrier display name")
    insuredFirstName: str = Field(default="")
    insuredLastName: str = Field(default="")
    phone: Optional[str] = Field(default=None)
    statuses: List[str] = Field(default_factory=list)
    daysToLapse: Optional[int] = Field(default=None, description="Days until lapse; negative once past")
    action: str = Field(..., description="Recommended remediation")
    severity: Severity = Field(...)


class CarrierError(BaseModel):
    """File-level failure of one carrier's analysis."""
    carrier: str = Field(..., description="Carrier key as supplied by the caller")
    carrierName: Optional[str] = Field(default=None)
    fileName: Optional[str] = Field(default=None)
    message: str = Field(...)


class AnalysisResponse(BaseModel):
    """
    Response envelope for one analysis request.

    `errors` lists carriers whose files could not be analyzed; the remaining
    carriers' results are still returned.
    """
    results: List[PersistencyResult] = Field(default_factory=list)
    lapsePolicies: List[LapseCandidate] = Field(default_factory=list)
    errors: List[CarrierError] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================


class AgentScope(BaseModel):
    """Writing-agent allow-list computed by the hierarchy collaborator."""
    mode: FilterMode = Field(default=FilterMode.UNRESTRICTED)
    allowedAgentNumbers: List[str] = Field(default_factory=list)


class CarrierFile(BaseModel):
    """One uploaded roster file addressed to a carrier adapter."""
    carrierKey: str = Field(..., min_length=1)
    fileName: str = Field(default="")
    content: bytes = Field(..., repr=False)
    fileFormat: Optional[FileFormat] = Field(
        default=None,
        description="Declared format; inferred from the file name or the adapter when omitted"
    )


# =============================================================================
# Writing Agent / Registry Models
# =============================================================================


class WritingAgent(BaseModel):
    """A writing agent found in a roster."""
    agentNumber: str
    agentName: str


class WritingAgentExtraction(BaseModel):
    """Writing agents found in one uploaded roster."""
    carrier: str
    writingAgents: List[WritingAgent] = Field(default_factory=list)
    writingAgentsCount: int = Field(default=0, ge=0)


class CarrierInfo(BaseModel):
    """Public description of a registered carrier adapter."""
    key: str
    name: str
    fileFormat: FileFormat
    headerRow: int = Field(..., ge=0)
    sheetKeyword: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)
    defaultOutcome: ClassificationOutcome
    hasLapseSignal: bool
