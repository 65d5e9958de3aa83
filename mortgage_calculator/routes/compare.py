"""
Property comparison routes.

Routes:
    GET /compare      - Compare page, selected ids passed as repeated ?ids=
    GET /api/compare  - Comparison data as JSON
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from mortgage_calculator import config
from mortgage_calculator.dependencies import get_property_store
from mortgage_calculator.logging_config import get_logger
from mortgage_calculator.utils.amortization import format_currency
from mortgage_calculator.utils.compare import compare_properties
from mortgage_calculator.utils.properties import PropertyStore

# Module logger for comparison views
logger = get_logger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=config.TEMPLATES_DIR)
templates.env.filters["currency"] = format_currency


@router.get("/compare")
def compare_page(
    request: Request,
    ids: List[str] = Query(default=[]),
    store: PropertyStore = Depends(get_property_store)
):
    properties = store.list()
    comparison = compare_properties(properties, ids)
    logger.debug(f"Comparing {len(comparison['properties'])} of {len(properties)} properties")
    return templates.TemplateResponse(request, "compare.html", {
        "title": "Compare Properties",
        "active_tab": "compare",
        "all_properties": properties,
        "property_count": len(properties),
        "max_properties": config.MAX_PROPERTIES,
        "comparison": comparison,
    })


@router.get("/api/compare")
def compare_api(ids: List[str] = Query(default=[]), store: PropertyStore = Depends(get_property_store)):
    comparison = compare_properties(store.list(), ids)
    summary = comparison["summary"]
    return JSONResponse({
        "selectedIds": comparison["selected_ids"],
        "properties": [p.model_dump(mode="json", by_alias=True) for p in comparison["properties"]],
        "summary": {
            "lowestPayment": summary["lowest_payment"],
            "highestPayment": summary["highest_payment"],
            "paymentDifference": summary["payment_difference"],
        } if summary else None,
    })
