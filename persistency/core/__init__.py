"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

This module re-exports key components from submodules so callers can write:

    from persistency.core import get_settings, SettingsDep

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    get_settings_dependency: FastAPI dependency returning Settings
    get_analysis_logger: FastAPI dependency returning the request logger
    SettingsDep: Type alias for Settings dependency injection
    AnalysisLoggerDep: Type alias for request logger dependency injection
"""

from persistency.core.config import Settings, get_settings

from persistency.core.dependencies import (
    get_settings_dependency,
    get_analysis_logger,
    SettingsDep,
    AnalysisLoggerDep,
)

__all__ = [
    'Settings',
    'get_settings',
    'get_settings_dependency',
    'get_analysis_logger',
    'SettingsDep',
    'AnalysisLoggerDep',
]
