"""
FastAPI router module for persistency analysis.

Implements POST /analyze (multi-carrier persistency analysis) and
POST /writing-agents/extract (writing agents present in one roster).

POST /analyze takes a multipart form in which every file part is named after
the carrier adapter that should read it:

    american-amicable=<file>  combined=<file>  aflac=<file> ...

plus optional plain fields:
- filter_mode: "unrestricted" | "scoped" (the dashboard's "my" and
  "downline" are accepted as scoped)
- writing_agent_numbers: JSON array of allowed writing-agent numbers
- as_of: ISO date the trailing windows are measured from (default: today)

Response shape: { results, lapsePolicies, errors }. A carrier whose file
cannot be analyzed appears in `errors` while the others are still returned;
a request without files is rejected with 400.
"""

import json
import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from persistency.core.dependencies import AnalysisLoggerDep, SettingsDep
from persistency.models.enums import FilterMode
from persistency.models.schemas import (
    AgentScope,
    AnalysisResponse,
    CarrierFile,
    WritingAgentExtraction,
)
from persistency.services.analysis import (
    NoInputError,
    analyze_files_async,
    extract_file_writing_agents,
)
from persistency.services.carriers import UnknownCarrierError
from persistency.services.tabular_reader import MalformedFileError


# Configure logging
logger = logging.getLogger(__name__)


FILTER_MODE_FIELD = 'filter_mode'
AGENT_NUMBERS_FIELD = 'writing_agent_numbers'
AS_OF_FIELD = 'as_of'

# Dashboard filter values -> FilterMode
_FILTER_MODES: Dict[str, FilterMode] = {
    '': FilterMode.UNRESTRICTED,
    'all': FilterMode.UNRESTRICTED,
    'unrestricted': FilterMode.UNRESTRICTED,
    'scoped': FilterMode.SCOPED,
    'my': FilterMode.SCOPED,
    'downline': FilterMode.SCOPED,
}


# =============================================================================
# Form Parsing
# =============================================================================


def parse_filter_mode(value: Optional[str]) -> FilterMode:
    """
    Raises:
        HTTPException(400): For an unrecognized mode
    """
    key = (value or '').strip().lower()
    if key not in _FILTER_MODES:
        raise HTTPException(status_code=400, detail=f"Invalid filter_mode '{value}'")
    return _FILTER_MODES[key]


def parse_agent_numbers(value: Optional[str]) -> List[str]:
    """
    Raises:
        HTTPException(400): If the value is not a JSON array of strings
    """
    if value is None or not value.strip():
        return []
    try:
        numbers = json.loads(value)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="writing_agent_numbers must be a JSON array")
    if not isinstance(numbers, list) or not all(isinstance(n, (str, int)) for n in numbers):
        raise HTTPException(status_code=400, detail="writing_agent_numbers must be a JSON array of strings")
    return [str(n) for n in numbers]


def parse_as_of(value: Optional[str]) -> Optional[date]:
    """
    Raises:
        HTTPException(400): If the value is not an ISO date
    """
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid as_of date '{value}', expected YYYY-MM-DD")


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


# =============================================================================
# Endpoint Implementations
# =============================================================================


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    request: Request,
    settings: SettingsDep,
    log: AnalysisLoggerDep,
) -> AnalysisResponse:
    """
    Analyze one or more carrier rosters.

    Every file part is routed to the carrier adapter named by its field name.

    Returns:
        AnalysisResponse with per-carrier results, the merged lapse list and
        per-carrier errors

    Raises:
        HTTPException(400): No files, or an invalid filter_mode /
            writing_agent_numbers / as_of field
    """
    form = await request.form()

    files: List[CarrierFile] = []
    fields: Dict[str, str] = {}
    for name, value in form.multi_items():
        if isinstance(value, StarletteUploadFile):
            files.append(CarrierFile(
                carrierKey=name,
                fileName=value.filename or '',
                content=await value.read(),
            ))
        else:
            fields[name] = value

    scope = AgentScope(
        mode=parse_filter_mode(fields.get(FILTER_MODE_FIELD)),
        allowedAgentNumbers=parse_agent_numbers(fields.get(AGENT_NUMBERS_FIELD)),
    )
    as_of = parse_as_of(fields.get(AS_OF_FIELD))

    log.info(
        f"Analyze request: {len(files)} files "
        f"({', '.join(f.carrierKey for f in files) or 'none'}), scope={scope.mode.value}"
    )

    try:
        return await analyze_files_async(files, scope=scope, as_of=as_of, settings=settings, log=log)
    except NoInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("Error analyzing carrier files")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to analyze files: {str(e)}"
        )


@router.post("/writing-agents/extract", response_model=WritingAgentExtraction)
async def extract_writing_agents(
    settings: SettingsDep,
    carrier: str = Form(..., description="Carrier key of the roster"),
    file: UploadFile = File(..., description="Carrier roster file"),
) -> WritingAgentExtraction:
    """
    List the unique writing agents found in one roster.

    Raises:
        HTTPException(404): Unknown carrier key
        HTTPException(422): File cannot be read
    """
    carrier_file = CarrierFile(
        carrierKey=carrier,
        fileName=file.filename or '',
        content=await file.read(),
    )
    try:
        extraction = await run_in_threadpool(extract_file_writing_agents, carrier_file, settings)
    except UnknownCarrierError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MalformedFileError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info(f"Extracted {extraction.writingAgentsCount} writing agents from {extraction.carrier} roster")
    return extraction
