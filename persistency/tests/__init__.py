"""
Test suite for the Persistency Analysis backend.

Modules:
- test_dates: Date Normalizer and calendar-month arithmetic
- test_tabular_reader: CSV / spreadsheet row extraction
- test_classification: Status rules, death-claim exception, totality
- test_carriers: Carrier adapters and registry
- test_aggregation: Time windows and status breakdowns
- test_lapse: Lapse predicates, severity tables and ordering
- test_agent_scope: Writing-agent filtering and extraction
- test_analysis: Request orchestration, end to end
- test_api: HTTP surface
"""
