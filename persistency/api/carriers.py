"""
FastAPI router module for the carrier adapter registry.

Implements GET /carriers, the list of carriers the analysis endpoint accepts
as upload field names.
"""

from typing import List

from fastapi import APIRouter

from persistency.models.schemas import CarrierInfo
from persistency.services.carriers import CarrierConfig, list_carriers


router = APIRouter()


def describe_carrier(config: CarrierConfig) -> CarrierInfo:
    return CarrierInfo(
        key=config.key,
        name=config.name,
        fileFormat=config.file_format,
        headerRow=config.header_row,
        sheetKeyword=config.sheet_keyword,
        aliases=list(config.aliases),
        defaultOutcome=config.default_outcome,
        hasLapseSignal=config.has_lapse_signal,
    )


@router.get("/carriers", response_model=List[CarrierInfo])
async def get_carriers() -> List[CarrierInfo]:
    """
    List registered carrier adapters.

    Returns:
        One CarrierInfo per carrier, in registration order
    """
    return [describe_carrier(config) for config in list_carriers()]
