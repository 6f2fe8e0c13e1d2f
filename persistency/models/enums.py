"""
Enumeration definitions for the Persistency Analysis backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, enabling automatic serialization in API
responses.
"""

from enum import Enum
from typing import Optional


class ClassificationOutcome(str, Enum):
    """
    Persistency outcome assigned to a single policy.

    - positive: Policy is persisting (in force, or a long-lived death claim)
    - negative: Policy did not persist (terminated, lapsed, not taken, ...)
    - neutral: Not yet decidable (e.g. still pending underwriting); excluded
      from the persistency percentage but kept in status breakdowns
    """
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TimeWindow(str, Enum):
    """
    Trailing reporting windows, keyed by months back from the as-of date.

    The set is fixed. `ALL` covers every policy with a parseable reference date.
    """
    THREE = "3"
    SIX = "6"
    NINE = "9"
    ALL = "All"

    @property
    def months(self) -> Optional[int]:
        """Months covered by the window, or None for ALL."""
        if self is TimeWindow.ALL:
            return None
        return int(self.value)


class Severity(str, Enum):
    """
    Lapse candidate severity tier, most urgent first.

    - critical: Policy is about to lapse
    - high: Premium is outstanding
    - medium: Requirements or paperwork missing
    - low: Flagged, monitor only
    """
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class FileFormat(str, Enum):
    """
    Layout of an uploaded roster file.

    - delimited: CSV text
    - spreadsheet: XLSX/XLS workbook
    """
    DELIMITED = "delimited"
    SPREADSHEET = "spreadsheet"

    @classmethod
    def from_filename(cls, file_name: str) -> Optional["FileFormat"]:
        """Infer the format from a file extension, or None if unrecognized."""
        lowered = (file_name or '').lower()
        if lowered.endswith(('.csv', '.txt')):
            return cls.DELIMITED
        if lowered.endswith(('.xlsx', '.xlsm', '.xls')):
            return cls.SPREADSHEET
        return None


class FilterMode(str, Enum):
    """
    Agent-scope filter mode.

    - unrestricted: Account owner view, every policy is visible
    - scoped: Only policies written by an allowed writing agent are visible
    """
    UNRESTRICTED = "unrestricted"
    SCOPED = "scoped"
