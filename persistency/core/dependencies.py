"""
FastAPI dependency injection module for the Persistency Analysis backend.

Provides reusable dependencies for configuration access and for the
request-scoped logger handed to the analysis pipeline. Keeping both behind
dependencies lets tests override them without patching module globals.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_analysis_logger: Builds a LoggerAdapter tagged with a request id
- SettingsDep: Type alias for injecting Settings into endpoints
- AnalysisLoggerDep: Type alias for injecting the request logger into endpoints

Usage Examples:
    @router.post("/analyze")
    async def analyze(
        settings: SettingsDep,
        log: AnalysisLoggerDep,
    ) -> AnalysisResponse:
        ...
"""

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends

from persistency.core.config import Settings, get_settings


ANALYSIS_LOGGER_NAME = 'persistency.analysis'


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the request id it was created for."""

    def process(self, msg, kwargs):
        return f"[{self.extra['request_id']}] {msg}", kwargs


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:

        app.dependency_overrides[get_settings_dependency] = lambda: Settings(...)

    Returns:
        Settings: The cached Settings instance.
    """
    return get_settings()


def get_analysis_logger() -> logging.LoggerAdapter:
    """
    Build the logger injected into one analysis request.

    Returns:
        RequestLoggerAdapter wrapping the analysis logger with a fresh request id.
    """
    return RequestLoggerAdapter(
        logging.getLogger(ANALYSIS_LOGGER_NAME),
        {'request_id': uuid4().hex[:12]},
    )


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

AnalysisLoggerDep = Annotated[logging.LoggerAdapter, Depends(get_analysis_logger)]
