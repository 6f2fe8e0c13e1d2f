"""
Carrier adapter registry.

Each carrier module defines one CarrierConfig; this package indexes them by
key and alias. Lookups normalize the key the way the dashboard builds it
from a carrier name ("American Amicable" -> "american-amicable").
"""

import re
from typing import Dict, List

from persistency.services.carriers.base import (
    OTHER_STATUS_LABEL,
    CarrierConfig,
    ColumnMap,
    MalformedRecordError,
    NormalizationReport,
    load_policies,
    normalize_row,
)
from persistency.services.carriers.american_amicable import AMERICAN_AMICABLE
from persistency.services.carriers.combined import COMBINED
from persistency.services.carriers.policy_report import AETNA, AFLAC
from persistency.services.carriers.mutual_of_omaha import MUTUAL_OF_OMAHA
from persistency.services.carriers.transamerica import TRANSAMERICA


class UnknownCarrierError(KeyError):
    """No adapter is registered under the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unsupported carrier '{self.key}'"


_SEPARATORS = re.compile(r'[\s_]+')

_CARRIERS: Dict[str, CarrierConfig] = {}
_ALIASES: Dict[str, str] = {}


def normalize_carrier_key(value: str) -> str:
    """
    Example:
        >>> normalize_carrier_key(' American_Amicable ')
        'american-amicable'
    """
    return _SEPARATORS.sub('-', (value or '').strip().lower())


def register_carrier(config: CarrierConfig) -> CarrierConfig:
    """
    Add a carrier adapter to the registry.

    Raises:
        ValueError: If the key or an alias is already taken
    """
    names = [config.key] + list(config.aliases)
    for name in names:
        key = normalize_carrier_key(name)
        if key in _ALIASES:
            raise ValueError(f"Carrier key '{key}' is already registered to '{_ALIASES[key]}'")
    _CARRIERS[config.key] = config
    for name in names:
        _ALIASES[normalize_carrier_key(name)] = config.key
    return config


def get_carrier(key: str) -> CarrierConfig:
    """
    Look up an adapter by key or alias.

    Raises:
        UnknownCarrierError: If nothing is registered under the key
    """
    normalized = normalize_carrier_key(key)
    if normalized not in _ALIASES:
        raise UnknownCarrierError(key)
    return _CARRIERS[_ALIASES[normalized]]


def list_carriers() -> List[CarrierConfig]:
    """Registered adapters in registration order."""
    return list(_CARRIERS.values())


for _config in (AMERICAN_AMICABLE, COMBINED, AFLAC, AETNA, MUTUAL_OF_OMAHA, TRANSAMERICA):
    register_carrier(_config)


__all__ = [
    'OTHER_STATUS_LABEL',
    'CarrierConfig',
    'ColumnMap',
    'MalformedRecordError',
    'NormalizationReport',
    'UnknownCarrierError',
    'load_policies',
    'normalize_row',
    'normalize_carrier_key',
    'register_carrier',
    'get_carrier',
    'list_carriers',
    'AMERICAN_AMICABLE',
    'COMBINED',
    'AFLAC',
    'AETNA',
    'MUTUAL_OF_OMAHA',
    'TRANSAMERICA',
]
