"""
Persistency Analysis Backend Package.

FastAPI service layer for multi-carrier policy persistency analysis.
Normalizes carrier roster exports, classifies each policy's persistency
outcome, aggregates trailing time windows and extracts lapse candidates.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Reader, date, carrier, classification, aggregation and lapse services
"""

__version__ = "1.0.0"
