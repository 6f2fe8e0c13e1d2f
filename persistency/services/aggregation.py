"""
Time-Window Aggregation Service

Partitions one carrier's normalized policies into trailing windows (3, 6 and
9 months back from the as-of date, plus All) and computes:

- WindowResult: positive/negative counts and percentages. Neutral policies
  are counted separately and kept out of the percentage denominator.
- StatusBreakdown: count and share of every status label, relative to all
  policies in the window (neutral included). Carriers may cap the number of
  labels shown; the long tail is summed into "Other".

Window membership uses calendar-month subtraction (not 30-day months):
a policy belongs to window w when referenceDate >= as_of - w months.
Policies without a reference date belong to no window.

Percentages are rounded to 2 decimals; an empty denominator gives 0.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from persistency.models.enums import ClassificationOutcome, TimeWindow
from persistency.models.schemas import (
    NormalizedPolicy,
    StatusBreakdown,
    StatusBreakdownEntry,
    WindowResult,
)
from persistency.services.carriers.base import OTHER_STATUS_LABEL, CarrierConfig
from persistency.services.classification import classify_policy
from persistency.services.dates import subtract_months


FRAME_COLUMNS: List[str] = ['status', 'label', 'outcome', 'reference_date']


def percentage(part: int, whole: int) -> float:
    """part / whole as a percentage rounded to 2 decimals; 0.0 when whole is 0."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def window_cutoff(window: TimeWindow, as_of: date) -> Optional[date]:
    """Earliest reference date inside the window, or None for All."""
    if window.months is None:
        return None
    return subtract_months(as_of, window.months)


def build_policy_frame(policies: Iterable[NormalizedPolicy], config: CarrierConfig) -> pd.DataFrame:
    """
    Classify dated policies into a frame with one row per policy.

    Columns: status (raw), label (breakdown label), outcome (str value),
    reference_date (datetime64).
    """
    records = [
        {
            'status': policy.statusRaw,
            'label': config.breakdown_label(policy.statusRaw),
            'outcome': classify_policy(config.rules, policy).value,
            'reference_date': policy.referenceDate,
        }
        for policy in policies
        if policy.referenceDate is not None
    ]
    frame = pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)
    frame['reference_date'] = pd.to_datetime(frame['reference_date'])
    return frame


def select_window(frame: pd.DataFrame, window: TimeWindow, as_of: date) -> pd.DataFrame:
    cutoff = window_cutoff(window, as_of)
    if cutoff is None:
        return frame
    return frame[frame['reference_date'] >= pd.Timestamp(cutoff)]


def summarize_window(frame: pd.DataFrame) -> WindowResult:
    """Outcome counts and persistency percentages for one window's frame."""
    counts = frame['outcome'].value_counts()
    positive = int(counts.get(ClassificationOutcome.POSITIVE.value, 0))
    negative = int(counts.get(ClassificationOutcome.NEGATIVE.value, 0))
    neutral = int(counts.get(ClassificationOutcome.NEUTRAL.value, 0))
    classified = positive + negative

    return WindowResult(
        positivePercentage=percentage(positive, classified),
        positiveCount=positive,
        negativePercentage=percentage(negative, classified),
        negativeCount=negative,
        neutralCount=neutral,
        totalPolicies=len(frame),
    )


def summarize_statuses(frame: pd.DataFrame, limit: Optional[int] = None) -> StatusBreakdown:
    """
    Status label counts for one window's frame, largest first.

    Args:
        frame: Window frame from select_window
        limit: Most labels reported individually; the rest are added to "Other"

    Returns:
        Ordered dict of label -> StatusBreakdownEntry; shares are of all rows
    """
    total = len(frame)
    if total == 0:
        return {}

    counts = frame.groupby('label').size().reset_index(name='count')
    counts = counts.sort_values(['count', 'label'], ascending=[False, True])
    ordered: List[Tuple[str, int]] = [
        (str(label), int(count)) for label, count in zip(counts['label'], counts['count'])
    ]

    tally: Dict[str, int] = {}
    if limit is not None and len(ordered) > limit:
        for label, count in ordered[:limit]:
            tally[label] = count
        overflow = sum(count for _, count in ordered[limit:])
        tally[OTHER_STATUS_LABEL] = tally.get(OTHER_STATUS_LABEL, 0) + overflow
    else:
        tally = dict(ordered)

    return {
        label: StatusBreakdownEntry(count=count, percentage=percentage(count, total))
        for label, count in tally.items()
    }


def analyze_windows(
    policies: Iterable[NormalizedPolicy],
    config: CarrierConfig,
    as_of: date,
) -> Tuple[Dict[str, WindowResult], Dict[str, StatusBreakdown]]:
    """
    Window results and status breakdowns for every TimeWindow in one pass.

    Returns:
        (timeRanges, statusBreakdowns), both keyed "3", "6", "9", "All"
    """
    frame = build_policy_frame(policies, config)
    time_ranges: Dict[str, WindowResult] = {}
    breakdowns: Dict[str, StatusBreakdown] = {}
    for window in TimeWindow:
        window_frame = select_window(frame, window, as_of)
        time_ranges[window.value] = summarize_window(window_frame)
        breakdowns[window.value] = summarize_statuses(window_frame, config.breakdown_limit)
    return time_ranges, breakdowns


def aggregate(
    policies: Iterable[NormalizedPolicy],
    config: CarrierConfig,
    as_of: date,
) -> Dict[str, WindowResult]:
    """WindowResult per TimeWindow."""
    return analyze_windows(policies, config, as_of)[0]


def breakdown(
    policies: Iterable[NormalizedPolicy],
    config: CarrierConfig,
    as_of: date,
) -> Dict[str, StatusBreakdown]:
    """StatusBreakdown per TimeWindow."""
    return analyze_windows(policies, config, as_of)[1]


__all__ = [
    'percentage',
    'window_cutoff',
    'build_policy_frame',
    'select_window',
    'summarize_window',
    'summarize_statuses',
    'analyze_windows',
    'aggregate',
    'breakdown',
]
