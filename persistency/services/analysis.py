"""
Persistency Analysis Orchestrator

Runs one analysis request end to end:

    carrier file -> Tabular Reader -> Carrier Adapter -> Agent-Scope Filter
                 -> Time-Window Aggregator + Lapse Extractor

and concatenates the per-carrier outcomes into one AnalysisResponse.

Error propagation:
- Row-level problems are absorbed by the adapter pipeline (counted in
  skippedRows / undatedPolicies)
- File-level problems (unknown carrier, unreadable or oversize file, timeout)
  fail only that carrier and are reported in `errors`; so does any unexpected
  exception raised while analyzing one carrier
- A request with no files raises NoInputError

Carriers share no state, so `analyze_files_async` may fan them out to worker
threads; `analyze_files` is the sequential equivalent. Both produce the same
response for the same input.

The logger is injected by the caller (the API passes a request-scoped
adapter); classification, date parsing and aggregation never log.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Union

from persistency.core.config import Settings, get_settings
from persistency.models.enums import FileFormat, TimeWindow
from persistency.models.schemas import (
    AgentScope,
    AnalysisResponse,
    CarrierError,
    CarrierFile,
    LapseCandidate,
    PersistencyResult,
    WritingAgentExtraction,
)
from persistency.services.agent_scope import apply_scope, extract_writing_agents
from persistency.services.aggregation import analyze_windows
from persistency.services.carriers import (
    CarrierConfig,
    UnknownCarrierError,
    get_carrier,
    load_policies,
)
from persistency.services.lapse import extract_lapse_candidates, sort_lapse_candidates
from persistency.services.tabular_reader import MalformedFileError


logger = logging.getLogger(__name__)

Logger = Union[logging.Logger, logging.LoggerAdapter]


class NoInputError(ValueError):
    """An analysis request carrying no files at all."""

    def __init__(self, message: str = "No files provided"):
        super().__init__(message)


@dataclass
class CarrierAnalysis:
    """Outcome of one carrier's unit of work."""
    result: PersistencyResult
    lapse_candidates: List[LapseCandidate] = field(default_factory=list)


# =============================================================================
# HELPERS
# =============================================================================

def resolve_file_format(carrier_file: CarrierFile, config: CarrierConfig) -> FileFormat:
    """Declared format, else the file extension, else the carrier's default."""
    if carrier_file.fileFormat is not None:
        return carrier_file.fileFormat
    return FileFormat.from_filename(carrier_file.fileName) or config.file_format


def _check_size(carrier_file: CarrierFile, config: CarrierConfig, settings: Settings) -> None:
    size = len(carrier_file.content)
    if size > settings.max_upload_bytes:
        raise MalformedFileError(
            config.name,
            carrier_file.fileName,
            f"file is {size} bytes, limit is {settings.max_upload_bytes}",
        )


def _carrier_name(carrier_key: str) -> Optional[str]:
    try:
        return get_carrier(carrier_key).name
    except UnknownCarrierError:
        return None


def carrier_error(carrier_file: CarrierFile, message: str) -> CarrierError:
    return CarrierError(
        carrier=carrier_file.carrierKey,
        carrierName=_carrier_name(carrier_file.carrierKey),
        fileName=carrier_file.fileName or None,
        message=message,
    )


def _assemble(outcomes: Sequence[CarrierAnalysis], errors: List[CarrierError]) -> AnalysisResponse:
    lapse_policies: List[LapseCandidate] = []
    for outcome in outcomes:
        lapse_policies.extend(outcome.lapse_candidates)
    return AnalysisResponse(
        results=[outcome.result for outcome in outcomes],
        lapsePolicies=sort_lapse_candidates(lapse_policies),
        errors=errors,
    )


# =============================================================================
# PER-CARRIER UNIT OF WORK
# =============================================================================

def analyze_carrier_file(
    carrier_file: CarrierFile,
    as_of: date,
    scope: Optional[AgentScope] = None,
    settings: Optional[Settings] = None,
    log: Optional[Logger] = None,
) -> CarrierAnalysis:
    """
    Analyze one carrier's roster.

    Args:
        carrier_file: Carrier key, file name and bytes
        as_of: Date the trailing windows and daysToLapse are measured from
        scope: Writing-agent allow-list; None means unrestricted
        settings: Upload limit and lapse grace period; the cached Settings by default
        log: Logger for progress and data-quality messages

    Returns:
        CarrierAnalysis with the dashboard numbers and this carrier's lapse candidates

    Raises:
        UnknownCarrierError: If no adapter is registered for the key
        MalformedFileError: If the file is too large or cannot be read
    """
    settings = settings or get_settings()
    log = log or logger

    config = get_carrier(carrier_file.carrierKey)
    _check_size(carrier_file, config, settings)
    file_format = resolve_file_format(carrier_file, config)
    log.info(
        f"Analyzing {config.name} file '{carrier_file.fileName}' "
        f"({len(carrier_file.content)} bytes, {file_format.value})"
    )

    report = load_policies(config, carrier_file.content, file_format, carrier_file.fileName)
    if report.skipped_rows:
        log.warning(
            f"{config.name}: skipped {report.skipped_rows} rows "
            f"(first reasons: {'; '.join(report.skip_reasons)})"
        )

    policies = apply_scope(report.policies, scope)
    undated = sum(1 for policy in policies if policy.referenceDate is None)
    if undated:
        log.warning(f"{config.name}: {undated} policies have no parseable reference date")

    time_ranges, breakdowns = analyze_windows(policies, config, as_of)
    all_time = time_ranges[TimeWindow.ALL.value]
    lapse_candidates = extract_lapse_candidates(
        policies,
        config.key,
        config.lapse,
        as_of,
        settings.lapse_grace_period_days,
    )

    log.info(
        f"{config.name}: {len(report.policies)} policies read, {len(policies)} in scope, "
        f"persistency {all_time.positivePercentage}%, {len(lapse_candidates)} lapse candidates"
    )

    result = PersistencyResult(
        carrier=config.name,
        carrierKey=config.key,
        fileName=carrier_file.fileName or None,
        timeRanges=time_ranges,
        statusBreakdowns=breakdowns,
        totalPolicies=all_time.totalPolicies,
        persistencyRate=all_time.positivePercentage,
        skippedRows=report.skipped_rows,
        undatedPolicies=undated,
    )
    return CarrierAnalysis(result=result, lapse_candidates=lapse_candidates)


# =============================================================================
# REQUEST-LEVEL ENTRY POINTS
# =============================================================================

def analyze_files(
    files: Sequence[CarrierFile],
    scope: Optional[AgentScope] = None,
    as_of: Optional[date] = None,
    settings: Optional[Settings] = None,
    log: Optional[Logger] = None,
) -> AnalysisResponse:
    """
    Analyze every file of a request, one carrier after another.

    Raises:
        NoInputError: If `files` is empty
    """
    if not files:
        raise NoInputError()
    settings = settings or get_settings()
    log = log or logger
    as_of = as_of or date.today()

    outcomes: List[CarrierAnalysis] = []
    errors: List[CarrierError] = []
    for carrier_file in files:
        try:
            outcomes.append(analyze_carrier_file(carrier_file, as_of, scope, settings, log))
        except (UnknownCarrierError, MalformedFileError) as e:
            log.warning(f"Carrier '{carrier_file.carrierKey}' failed: {e}")
            errors.append(carrier_error(carrier_file, str(e)))
        except Exception as e:
            log.exception(f"Carrier '{carrier_file.carrierKey}' failed unexpectedly: {e}")
            errors.append(carrier_error(carrier_file, str(e)))

    return _assemble(outcomes, errors)


async def _analyze_carrier_async(
    carrier_file: CarrierFile,
    as_of: date,
    scope: Optional[AgentScope],
    settings: Settings,
    log: Logger,
) -> Union[CarrierAnalysis, CarrierError]:
    timeout = settings.carrier_timeout_seconds
    try:
        work = asyncio.to_thread(analyze_carrier_file, carrier_file, as_of, scope, settings, log)
        return await asyncio.wait_for(work, timeout=timeout)
    except (UnknownCarrierError, MalformedFileError) as e:
        log.warning(f"Carrier '{carrier_file.carrierKey}' failed: {e}")
        return carrier_error(carrier_file, str(e))
    except asyncio.TimeoutError:
        log.error(f"Carrier '{carrier_file.carrierKey}' timed out after {timeout}s")
        return carrier_error(carrier_file, f"analysis timed out after {timeout} seconds")
    except Exception as e:
        log.exception(f"Carrier '{carrier_file.carrierKey}' failed unexpectedly: {e}")
        return carrier_error(carrier_file, str(e))


async def analyze_files_async(
    files: Sequence[CarrierFile],
    scope: Optional[AgentScope] = None,
    as_of: Optional[date] = None,
    settings: Optional[Settings] = None,
    log: Optional[Logger] = None,
) -> AnalysisResponse:
    """
    Analyze every file of a request off the event loop.

    With `parallel_carriers` enabled the carriers run concurrently on worker
    threads; otherwise one at a time. An optional `carrier_timeout_seconds`
    abandons a single carrier without affecting the others. Results keep the
    order of `files` either way.

    Raises:
        NoInputError: If `files` is empty
    """
    if not files:
        raise NoInputError()
    settings = settings or get_settings()
    log = log or logger
    as_of = as_of or date.today()

    if settings.parallel_carriers:
        settled = await asyncio.gather(*[
            _analyze_carrier_async(carrier_file, as_of, scope, settings, log)
            for carrier_file in files
        ])
    else:
        settled = []
        for carrier_file in files:
            settled.append(await _analyze_carrier_async(carrier_file, as_of, scope, settings, log))

    outcomes = [item for item in settled if isinstance(item, CarrierAnalysis)]
    errors = [item for item in settled if isinstance(item, CarrierError)]
    log.info(f"Analysis finished: {len(outcomes)} carriers analyzed, {len(errors)} failed")
    return _assemble(outcomes, errors)


def extract_file_writing_agents(
    carrier_file: CarrierFile,
    settings: Optional[Settings] = None,
) -> WritingAgentExtraction:
    """
    Unique writing agents in one roster.

    Raises:
        UnknownCarrierError: If no adapter is registered for the key
        MalformedFileError: If the file is too large or cannot be read
    """
    settings = settings or get_settings()
    config = get_carrier(carrier_file.carrierKey)
    _check_size(carrier_file, config, settings)
    report = load_policies(
        config,
        carrier_file.content,
        resolve_file_format(carrier_file, config),
        carrier_file.fileName,
    )
    agents = extract_writing_agents(report.policies)
    return WritingAgentExtraction(
        carrier=config.name,
        writingAgents=agents,
        writingAgentsCount=len(agents),
    )


__all__ = [
    'NoInputError',
    'CarrierAnalysis',
    'resolve_file_format',
    'carrier_error',
    'analyze_carrier_file',
    'analyze_files',
    'analyze_files_async',
    'extract_file_writing_agents',
]
