"""
Test Module for the Time-Window Aggregator.

Validates:
- Calendar-month window boundaries relative to the as-of date
- Superset property: All >= 9 >= 6 >= 3 months
- Neutral policies excluded from persistency percentages but present in
  status breakdowns
- Rounding, 0/0 handling and breakdown ordering
- Carrier-configured "Other" bucket and label limits
"""

from datetime import date
from typing import List, Optional

import pytest

from persistency.models.enums import TimeWindow
from persistency.models.schemas import NormalizedPolicy
from persistency.services.aggregation import (
    aggregate,
    analyze_windows,
    breakdown,
    percentage,
    window_cutoff,
)
from persistency.services.carriers import AFLAC, COMBINED, OTHER_STATUS_LABEL, TRANSAMERICA
from persistency.tests.conftest import AS_OF

WINDOWS = ['3', '6', '9', 'All']


def make_policy(
    policy_id: str,
    status: str,
    reference: Optional[date],
    carrier: str = 'Test',
) -> NormalizedPolicy:
    return NormalizedPolicy(
        policyId=policy_id,
        carrierName=carrier,
        statusRaw=status,
        referenceDate=reference,
    )


def spread_policies() -> List[NormalizedPolicy]:
    """Combined policies spread over 2 years, alternating positive/negative."""
    policies = []
    for month in range(24):
        year, index = divmod(2026 * 12 + 5 - month, 12)
        status = 'In-Force' if month % 2 == 0 else 'Terminated'
        policies.append(make_policy(f'P{month}', status, date(year, index + 1, 10)))
    return policies


class TestHelpers:

    def test_percentage_rounds_to_two_decimals(self):
        assert percentage(1, 3) == 33.33
        assert percentage(2, 3) == 66.67

    def test_zero_denominator(self):
        assert percentage(0, 0) == 0.0

    def test_window_cutoffs(self):
        assert window_cutoff(TimeWindow.THREE, AS_OF) == date(2026, 3, 15)
        assert window_cutoff(TimeWindow.SIX, AS_OF) == date(2025, 12, 15)
        assert window_cutoff(TimeWindow.NINE, AS_OF) == date(2025, 9, 15)
        assert window_cutoff(TimeWindow.ALL, AS_OF) is None


class TestWindowResults:

    def test_keys(self):
        assert list(aggregate([], COMBINED, AS_OF)) == WINDOWS

    def test_empty_input_is_all_zero(self):
        for result in aggregate([], COMBINED, AS_OF).values():
            assert result.positiveCount == result.negativeCount == result.totalPolicies == 0
            assert result.positivePercentage == 0.0

    def test_window_boundary_is_inclusive(self):
        policies = [
            make_policy('IN', 'In-Force', date(2026, 3, 15)),
            make_policy('OUT', 'Terminated', date(2026, 3, 14)),
        ]
        results = aggregate(policies, COMBINED, AS_OF)
        assert results['3'].positiveCount == 1
        assert results['3'].negativeCount == 0
        assert results['6'].totalPolicies == 2

    def test_superset_property(self):
        results = aggregate(spread_policies(), COMBINED, AS_OF)
        totals = [results[w].totalPolicies for w in WINDOWS]
        assert totals == sorted(totals)
        for window in WINDOWS:
            assert results['All'].positiveCount >= results[window].positiveCount
            assert results['All'].negativeCount >= results[window].negativeCount

    def test_percentages(self):
        policies = [make_policy(f'P{i}', 'In-Force', date(2026, 5, 1)) for i in range(2)]
        policies.append(make_policy('N', 'Terminated', date(2026, 5, 1)))
        result = aggregate(policies, COMBINED, AS_OF)['3']
        assert result.positivePercentage == 66.67
        assert result.negativePercentage == 33.33

    def test_neutral_excluded_from_percentage(self):
        policies = [
            make_policy('P1', 'Active', date(2026, 5, 1)),
            make_policy('P2', 'Terminated', date(2026, 5, 1)),
            make_policy('P3', 'Pending', date(2026, 5, 1)),
            make_policy('P4', 'Unheard Of', date(2026, 5, 1)),
        ]
        result = aggregate(policies, AFLAC, AS_OF)['3']
        assert result.positiveCount == 1
        assert result.negativeCount == 1
        assert result.neutralCount == 2
        assert result.totalPolicies == 4
        assert result.positivePercentage == 50.0
        assert result.positiveCount + result.negativeCount <= result.totalPolicies

    def test_undated_policies_excluded_everywhere(self):
        policies = [
            make_policy('P1', 'In-Force', date(2026, 5, 1)),
            make_policy('P2', 'Terminated', None),
        ]
        results = aggregate(policies, COMBINED, AS_OF)
        assert results['All'].totalPolicies == 1
        assert results['All'].positivePercentage == 100.0


class TestStatusBreakdown:

    def test_neutral_statuses_included(self):
        policies = [
            make_policy('P1', 'Active', date(2026, 5, 1)),
            make_policy('P2', 'Pending', date(2026, 5, 1)),
        ]
        result = breakdown(policies, AFLAC, AS_OF)['3']
        assert set(result) == {'Active', 'Pending'}
        assert result['Pending'].percentage == 50.0

    def test_percentages_sum_to_100(self):
        statuses = ['In-Force'] * 5 + ['Terminated'] * 3 + ['Issued'] * 3
        policies = [make_policy(f'P{i}', s, date(2026, 5, 1)) for i, s in enumerate(statuses)]
        for window in breakdown(policies, COMBINED, AS_OF).values():
            assert sum(e.count for e in window.values()) == len(policies)
            assert abs(sum(e.percentage for e in window.values()) - 100) <= 0.1

    def test_ordered_by_count_then_label(self):
        statuses = ['Terminated', 'Issued', 'In-Force', 'In-Force', 'Issued', 'Zeta']
        policies = [make_policy(f'P{i}', s, date(2026, 5, 1)) for i, s in enumerate(statuses)]
        result = breakdown(policies, COMBINED, AS_OF)['All']
        assert list(result) == ['In-Force', 'Issued', 'Terminated', 'Zeta']

    def test_empty_window(self):
        policies = [make_policy('P1', 'In-Force', date(2024, 1, 1))]
        results = breakdown(policies, COMBINED, AS_OF)
        assert results['3'] == {}
        assert results['All']['In-Force'].count == 1

    def test_unlisted_free_text_goes_to_other(self):
        policies = [
            make_policy('T1', 'Active', date(2026, 5, 1)),
            make_policy('T2', 'Conversion In Progress', date(2026, 5, 1)),
            make_policy('T3', 'Awaiting Reinsurer', date(2026, 5, 1)),
        ]
        result = breakdown(policies, TRANSAMERICA, AS_OF)['3']
        assert result[OTHER_STATUS_LABEL].count == 2
        assert result['Active'].count == 1

    def test_long_tail_limited_to_seven_labels(self):
        labels = [
            'Active', 'Active - Premium Paying', 'Active - Paid Up', 'Premium Paying',
            'Reinstated', 'Lapsed', 'Terminated', 'Surrendered', 'Declined',
        ]
        policies = []
        for rank, label in enumerate(labels):
            for copy in range(len(labels) - rank):
                policies.append(make_policy(f'{rank}-{copy}', label, date(2026, 5, 1)))

        result = breakdown(policies, TRANSAMERICA, AS_OF)['All']
        assert list(result)[:7] == labels[:7]
        assert result[OTHER_STATUS_LABEL].count == 2 + 1
        assert len(result) == 8
        assert sum(e.count for e in result.values()) == len(policies)

    def test_limit_merges_into_existing_other(self):
        labels = [
            'Active', 'Active - Premium Paying', 'Active - Paid Up', 'Premium Paying',
            'Reinstated', 'Lapsed', 'Terminated', 'Surrendered',
        ]
        policies = [make_policy(f'O{i}', 'Mystery Text', date(2026, 5, 1)) for i in range(20)]
        for rank, label in enumerate(labels):
            policies.append(make_policy(f'L{rank}', label, date(2026, 5, 1)))

        result = breakdown(policies, TRANSAMERICA, AS_OF)['All']
        assert list(result)[0] == OTHER_STATUS_LABEL
        assert len(result) == 7
        assert result[OTHER_STATUS_LABEL].count == 20 + 2
        assert sum(e.count for e in result.values()) == len(policies)


class TestAnalyzeWindows:

    def test_matches_separate_calls(self):
        policies = spread_policies()
        time_ranges, breakdowns = analyze_windows(policies, COMBINED, AS_OF)
        assert time_ranges == aggregate(policies, COMBINED, AS_OF)
        assert breakdowns == breakdown(policies, COMBINED, AS_OF)

    @pytest.mark.parametrize('window,expected', [('3', 3), ('6', 6), ('9', 9), ('All', 24)])
    def test_monthly_spread_counts(self, window, expected):
        results = aggregate(spread_policies(), COMBINED, AS_OF)
        assert results[window].totalPolicies == expected
