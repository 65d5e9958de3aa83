"""
Mortgage rate API route.

Routes:
    GET /api/mortgage-rate - Current 30-year fixed rate estimate as JSON
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from mortgage_calculator.config import RATE_SOURCE_NAME
from mortgage_calculator.dependencies import get_rate_provider
from mortgage_calculator.logging_config import get_logger
from mortgage_calculator.utils.rates import RateProvider, fallback_rate_data, get_mortgage_rate

# Module logger for rate lookups
logger = get_logger(__name__)

router = APIRouter()


@router.get("/api/mortgage-rate")
def mortgage_rate(provider: RateProvider = Depends(get_rate_provider)):
    """
    Return the current mortgage rate estimate.

    Always answers with a usable rate: the scraped value when available,
    otherwise the fallback estimate. Unexpected failures return 500 with an
    error message alongside the fallback payload.
    """
    try:
        rate_data = get_mortgage_rate(provider)
        return JSONResponse(rate_data.model_dump(exclude_none=True))
    except Exception as e:
        logger.error(f"{RATE_SOURCE_NAME} rate lookup failed: {e}")
        payload = fallback_rate_data(note=None).model_dump(exclude_none=True)
        payload["error"] = f"Failed to fetch mortgage rate from {RATE_SOURCE_NAME}"
        return JSONResponse(payload, status_code=500)
