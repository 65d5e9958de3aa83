"""
Calculator routes for the Mortgage Calculator application.

This module serves the mortgage calculator form and runs calculations:
- Form page prefilled from query parameters (used by "Load" on saved properties)
- Suggested interest rate from the rate provider
- Form submission with field-level validation messages
- JSON calculation endpoint

Routes:
    GET  /               - Calculator page
    POST /calculate      - Submit the calculator form
    POST /api/calculate  - Calculate from a JSON body
"""

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from mortgage_calculator import config
from mortgage_calculator.dependencies import get_property_store, get_rate_provider
from mortgage_calculator.logging_config import get_logger
from mortgage_calculator.utils.amortization import (
    MORTGAGE_FIELDS,
    calculate_from_values,
    down_payment_amount,
    format_currency,
    parse_number,
    validate_mortgage_inputs,
)
from mortgage_calculator.utils.properties import PropertyStore
from mortgage_calculator.utils.rates import MortgageRateData, RateProvider, fallback_rate_data, get_mortgage_rate

# Module logger for calculator operations
logger = get_logger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=config.TEMPLATES_DIR)
templates.env.filters["currency"] = format_currency

GENERAL_ERROR = "An error occurred during calculation. Please try again."

# Breakdown keys as exposed by the JSON API
BREAKDOWN_KEYS = {
    "principal": "principal",
    "down_payment_amount": "downPaymentAmount",
    "monthly_rate": "monthlyRate",
    "term_months": "termMonths",
    "monthly_mortgage": "monthlyMortgage",
    "monthly_tax": "monthlyTax",
    "monthly_insurance": "monthlyInsurance",
    "total_monthly": "totalMonthly",
}


def get_suggested_rate(provider: RateProvider) -> MortgageRateData:
    """Rate used to prefill the form. Never raises."""
    try:
        return get_mortgage_rate(provider)
    except Exception as e:
        logger.error(f"Suggested rate lookup failed: {e}")
        return fallback_rate_data()


def display_down_payment(form: Dict[str, str]) -> str:
    """Read-only down payment amount shown next to the percentage field."""
    home_price = parse_number(form.get("homePrice"))
    percent = parse_number(form.get("downPaymentPercent"))
    if home_price is None or percent is None:
        return ""
    return f"{down_payment_amount(home_price, percent):.2f}"


def render_calculator(
    request: Request,
    store: PropertyStore,
    form: Dict[str, str],
    rate_data: MortgageRateData = None,
    errors: Dict[str, str] = None,
    result: dict = None,
    save_error: str = None,
    status_code: int = 200
):
    """Render the calculator page with the given form state."""
    properties = store.list()
    return templates.TemplateResponse(request, "calculator.html", {
        "title": "Mortgage Calculator",
        "active_tab": "calculator",
        "form": form,
        "down_payment_display": display_down_payment(form),
        "rate_data": rate_data,
        "errors": errors or {},
        "result": result,
        "save_error": save_error,
        "property_count": len(properties),
        "max_properties": config.MAX_PROPERTIES,
        "can_save_more": len(properties) < config.MAX_PROPERTIES,
    }, status_code=status_code)


@router.get("/")
def calculator_page(
    request: Request,
    store: PropertyStore = Depends(get_property_store),
    provider: RateProvider = Depends(get_rate_provider)
):
    """
    Calculator page.

    Any calculator field present in the query string prefills the form.
    Without an interestRate parameter the suggested market rate is used.
    """
    form = {field: request.query_params.get(field, "") for field in MORTGAGE_FIELDS}
    form["name"] = request.query_params.get("name", "")
    if not form["downPaymentPercent"]:
        form["downPaymentPercent"] = f"{config.DEFAULT_DOWN_PAYMENT_PERCENT:g}"

    rate_data = get_suggested_rate(provider)
    if not form["interestRate"]:
        form["interestRate"] = f"{rate_data.rate:g}"

    logger.debug(f"Calculator page requested (suggested rate {rate_data.rate}% from {rate_data.source})")
    return render_calculator(request, store, form, rate_data=rate_data)


@router.post("/calculate")
async def calculate_submit(request: Request, store: PropertyStore = Depends(get_property_store)):
    """
    Handle calculator form submission.

    Validation errors re-render the form with a message under each invalid
    field. On success the monthly payment breakdown is shown along with the
    form for saving it as a property.
    """
    submitted = await request.form()
    form = {field: str(submitted.get(field, "")) for field in MORTGAGE_FIELDS}
    form["name"] = str(submitted.get("name", ""))

    values, errors = validate_mortgage_inputs(form)
    if errors:
        logger.info(f"Calculation rejected, invalid fields: {', '.join(errors)}")
        return render_calculator(request, store, form, errors=errors)

    # Artificial pause so the UI can show its calculating state
    await asyncio.sleep(config.CALCULATION_DELAY_SECONDS)

    try:
        result = calculate_from_values(values)
    except ArithmeticError as e:
        logger.error(f"Calculation failed: {e}")
        return render_calculator(request, store, form, errors={"general": GENERAL_ERROR})

    logger.info(f"Monthly payment calculated: ${format_currency(result['total_monthly'])}")
    return render_calculator(request, store, form, result=result)


@router.post("/api/calculate")
def calculate_api(payload: Dict[str, Any] = Body(...)):
    """
    Calculate the monthly payment from a JSON body.

    Expects homePrice, interestRate, downPaymentPercent, annualTaxAmount and
    annualInsuranceAmount. Returns 422 with per-field errors when invalid.
    """
    values, errors = validate_mortgage_inputs(payload)
    if errors:
        return JSONResponse({"errors": errors}, status_code=422)

    try:
        result = calculate_from_values(values)
    except ArithmeticError as e:
        logger.error(f"Calculation failed: {e}")
        return JSONResponse({"errors": {"general": GENERAL_ERROR}}, status_code=422)

    return JSONResponse({BREAKDOWN_KEYS[key]: value for key, value in result.items()})
