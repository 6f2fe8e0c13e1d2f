"""
Pytest Configuration and Shared Fixtures for Persistency Backend Tests.

This module provides fixtures and helpers shared by all backend tests:
- A fixed as-of date so time-window tests are deterministic
- Isolated Settings instances (no .env file)
- Roster builders per carrier layout (American Amicable CSV with formula
  escaping, Combined CSV, Aflac/Aetna policy report workbooks, Mutual of
  Omaha workbook with title rows, Transamerica CSV)
- Byte helpers simulating uploads: create_csv_bytes and create_xlsx_bytes

Async tests (thread fan-out path) run under pytest-asyncio and are marked
explicitly with @pytest.mark.asyncio.
"""

import io
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import pytest

from persistency.core.config import Settings, get_settings


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - slow: Marks tests as slow (deselect with -m "not slow")
    - e2e: Marks end-to-end tests that run whole analysis requests
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'e2e: marks end-to-end analysis tests'
    )


# ============================================================
# CONSTANTS
# ============================================================

# Reference "today" for every time-window test
AS_OF = date(2026, 6, 15)

AMAM_COLUMNS: List[str] = [
    'Policy', 'Status', 'PolicyDate', 'PaidtoDate', 'WritingAgent',
    'AgentName', 'FirstName', 'LastName', 'Phone',
]

COMBINED_COLUMNS: List[str] = [
    'policy_number', 'status', 'effective_date', 'termination_date',
    'agent_number', 'agent_name', 'insured_first_name', 'insured_last_name', 'phone',
]

POLICY_REPORT_COLUMNS: List[str] = [
    'POLICYNUMBER', 'STATUSCATEGORY', 'ORIGEFFDATE', 'ISSUEDATE', 'TERMDATE',
    'AGENTID', 'AGENTNAME', 'INSUREDFIRSTNAME', 'INSUREDLASTNAME', 'PHONE',
]

MUTUAL_OF_OMAHA_COLUMNS: List[str] = [
    'Policy Number', 'Policy Status', 'Issue Date', 'Paid To Date',
    'Writing Agent Number', 'Writing Agent Name', 'Insured First Name',
    'Insured Last Name', 'Phone Number',
]

TRANSAMERICA_COLUMNS: List[str] = [
    'Policy #', 'Policy Status Display', 'Issue Date', 'Termination Date',
    'Agent Writing Number', 'Agent Name', 'Insured First Name',
    'Insured Last Name', 'Insured Phone',
]


# ============================================================
# CORE FIXTURES
# ============================================================

@pytest.fixture
def as_of() -> date:
    """Fixed analysis date: 2026-06-15."""
    return AS_OF


@pytest.fixture
def settings() -> Settings:
    """Settings built from defaults only, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def sequential_settings() -> Settings:
    """Settings with the thread fan-out disabled."""
    return Settings(_env_file=None, parallel_carriers=False)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reset the cached Settings singleton around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_logger() -> logging.Logger:
    """Logger handed to the orchestrator in place of the request logger."""
    return logging.getLogger('persistency.tests')


# ============================================================
# ROSTER ROW BUILDERS
# ============================================================

def amam_row(
    policy: str,
    status: str,
    policy_date: str = '05/01/2026',
    paid_to: str = '06/01/2026',
    agent: str = 'AB1234',
    agent_name: str = 'Jane Agent',
    first: str = 'John',
    last: str = 'Smith',
    phone: str = '555-0100',
) -> Dict[str, str]:
    return {
        'Policy': policy, 'Status': status, 'PolicyDate': policy_date,
        'PaidtoDate': paid_to, 'WritingAgent': agent, 'AgentName': agent_name,
        'FirstName': first, 'LastName': last, 'Phone': phone,
    }


def combined_row(
    policy: str,
    status: str,
    effective: str = '2025-01-10',
    agent: str = 'C-77',
    agent_name: str = 'Carl Agent',
) -> Dict[str, str]:
    return {
        'policy_number': policy, 'status': status, 'effective_date': effective,
        'termination_date': '', 'agent_number': agent, 'agent_name': agent_name,
        'insured_first_name': 'Mary', 'insured_last_name': 'Jones', 'phone': '',
    }


def policy_report_row(
    policy: str,
    status: str,
    orig_eff: Any = '2026-04-01',
    issue: Any = '',
    term: Any = '',
    agent: str = 'AG100',
) -> Dict[str, Any]:
    return {
        'POLICYNUMBER': policy, 'STATUSCATEGORY': status, 'ORIGEFFDATE': orig_eff,
        'ISSUEDATE': issue, 'TERMDATE': term, 'AGENTID': agent, 'AGENTNAME': 'Pat Agent',
        'INSUREDFIRSTNAME': 'Sam', 'INSUREDLASTNAME': 'Lee', 'PHONE': '555-0111',
    }


def transamerica_row(policy: str, status: str, issue: str = '03/10/2026') -> Dict[str, str]:
    return {
        'Policy #': policy, 'Policy Status Display': status, 'Issue Date': issue,
        'Termination Date': '', 'Agent Writing Number': 'TA-9', 'Agent Name': 'Tia Agent',
        'Insured First Name': 'Ann', 'Insured Last Name': 'Ray', 'Insured Phone': '555-0199',
    }


# ============================================================
# FILE BUILDERS
# ============================================================

def create_csv_bytes(df: pd.DataFrame) -> bytes:
    """
    Convert DataFrame to CSV bytes for upload testing.

    Args:
        df: pandas DataFrame to convert

    Returns:
        bytes: UTF-8 encoded CSV content without the index
    """
    return df.to_csv(index=False).encode('utf-8')


def create_xlsx_bytes(sheets: Dict[str, List[List[Any]]]) -> bytes:
    """
    Build a workbook from raw cell grids, one per sheet.

    Grids are written verbatim (no header or index added), so title rows and
    blank rows can be placed exactly where a carrier's report puts them.

    Args:
        sheets: Sheet name -> list of rows, in workbook order

    Returns:
        bytes: .xlsx content written through openpyxl
    """
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        for sheet_name, grid in sheets.items():
            pd.DataFrame(grid).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buffer.getvalue()


def formula_escape(value: str) -> str:
    """American Amicable style cell: ="value"."""
    return f'="{value}"'


def create_amam_bytes(rows: List[Dict[str, str]], escape: bool = True) -> bytes:
    """
    American Amicable export; Policy and WritingAgent cells are formula-escaped.

    Written by hand since the export's `="value"` cells are not valid CSV quoting.
    """
    lines = [','.join(AMAM_COLUMNS)]
    for row in rows:
        cells = []
        for column in AMAM_COLUMNS:
            value = row.get(column, '')
            if escape and column in ('Policy', 'WritingAgent') and value:
                cells.append(formula_escape(value))
            else:
                cells.append(value)
        lines.append(','.join(cells))
    return ('\n'.join(lines) + '\n').encode('utf-8')


def create_policy_report_bytes(
    rows: List[Dict[str, Any]],
    sheet_name: str = 'Policy Detail',
    extra_sheets: Optional[Dict[str, List[List[Any]]]] = None,
) -> bytes:
    """Aflac / Aetna report: a title row, then the header on the second row."""
    grid: List[List[Any]] = [['Policy Status Report'] + [None] * (len(POLICY_REPORT_COLUMNS) - 1)]
    grid.append(list(POLICY_REPORT_COLUMNS))
    for row in rows:
        grid.append([row.get(column, '') for column in POLICY_REPORT_COLUMNS])
    sheets: Dict[str, List[List[Any]]] = dict(extra_sheets or {})
    sheets[sheet_name] = grid
    return create_xlsx_bytes(sheets)


def create_mutual_of_omaha_bytes(rows: List[List[Any]]) -> bytes:
    """Mutual of Omaha workbook: title row, run-date row, blank row, header."""
    width = len(MUTUAL_OF_OMAHA_COLUMNS)
    grid: List[List[Any]] = [
        ['Mutual of Omaha Inforce Report'] + [None] * (width - 1),
        ['Run Date: 06/14/2026'] + [None] * (width - 1),
        [None] * width,
        list(MUTUAL_OF_OMAHA_COLUMNS),
    ]
    grid.extend(rows)
    return create_xlsx_bytes({'Summary': [['Totals'], [len(rows)]], 'Inforce Detail': grid})


def create_transamerica_bytes(rows: List[Dict[str, str]]) -> bytes:
    return create_csv_bytes(pd.DataFrame(rows, columns=TRANSAMERICA_COLUMNS))


def create_combined_bytes(rows: List[Dict[str, str]]) -> bytes:
    return create_csv_bytes(pd.DataFrame(rows, columns=COMBINED_COLUMNS))


# ============================================================
# SAMPLE ROSTERS
# ============================================================

@pytest.fixture
def amam_recent_bytes() -> bytes:
    """100 American Amicable policies within 3 months: 60 Active, 40 Terminated."""
    rows = [amam_row(f'A{i:04d}', 'Active') for i in range(60)]
    rows += [amam_row(f'A{i:04d}', 'Terminated') for i in range(60, 100)]
    return create_amam_bytes(rows)


@pytest.fixture
def combined_old_bytes() -> bytes:
    """50 Combined policies older than 9 months: 25 In-Force, 25 Terminated."""
    rows = [combined_row(f'C{i:04d}', 'In-Force') for i in range(25)]
    rows += [combined_row(f'C{i:04d}', 'Terminated') for i in range(25, 50)]
    return create_combined_bytes(rows)


__all__ = [
    'AS_OF',
    'amam_row',
    'combined_row',
    'policy_report_row',
    'transamerica_row',
    'create_csv_bytes',
    'create_xlsx_bytes',
    'create_amam_bytes',
    'create_policy_report_bytes',
    'create_mutual_of_omaha_bytes',
    'create_transamerica_bytes',
    'create_combined_bytes',
]
