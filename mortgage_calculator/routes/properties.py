"""
Saved property routes for the Mortgage Calculator application.

Users can keep up to three named calculations, rename or delete them, and
load one back into the calculator.

Routes:
    GET    /properties               - Saved properties page
    POST   /properties/save          - Save the calculator form as a property
    POST   /properties/{id}/rename   - Rename a saved property
    POST   /properties/{id}/delete   - Delete a saved property
    GET    /properties/{id}/load     - Load a saved property into the calculator

    JSON API:
    GET    /api/properties           - List saved properties
    POST   /api/properties           - Save a property
    PATCH  /api/properties/{id}      - Update fields of a saved property
    DELETE /api/properties/{id}      - Delete a saved property
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field

from mortgage_calculator import config
from mortgage_calculator.dependencies import get_property_store
from mortgage_calculator.logging_config import get_logger
from mortgage_calculator.routes.calculator import GENERAL_ERROR, render_calculator
from mortgage_calculator.utils.amortization import (
    MORTGAGE_FIELDS,
    calculate_from_values,
    format_currency,
    validate_mortgage_inputs,
)
from mortgage_calculator.utils.properties import NewProperty, PropertyStore, SavedProperty

# Module logger for saved property operations
logger = get_logger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=config.TEMPLATES_DIR)
templates.env.filters["currency"] = format_currency

LIMIT_MESSAGE = (
    f"Maximum of {config.MAX_PROPERTIES} saved properties allowed. "
    "Please delete an existing property first."
)
SAVE_FAILED_MESSAGE = "Failed to save property. Please try again."


class PropertyUpdateRequest(BaseModel):
    """Request model for a partial property update."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    name: Optional[str] = None
    home_price: Optional[float] = Field(default=None, alias="homePrice")
    interest_rate: Optional[float] = Field(default=None, alias="interestRate")
    down_payment_percent: Optional[float] = Field(default=None, alias="downPaymentPercent")
    annual_tax_amount: Optional[float] = Field(default=None, alias="annualTaxAmount")
    annual_insurance_amount: Optional[float] = Field(default=None, alias="annualInsuranceAmount")
    monthly_payment: Optional[float] = Field(default=None, alias="monthlyPayment")


def property_to_json(prop: SavedProperty) -> dict:
    return prop.model_dump(mode="json", by_alias=True)


def form_number(value: float) -> str:
    """Exact text for a stored number: 300000.0 -> "300000", 3456.789 -> "3456.789"."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def property_form_values(prop: SavedProperty) -> dict:
    """Calculator query parameters that reproduce a saved property."""
    return {
        "name": prop.name,
        "homePrice": form_number(prop.home_price),
        "interestRate": form_number(prop.interest_rate),
        "downPaymentPercent": form_number(prop.down_payment_percent),
        "annualTaxAmount": form_number(prop.annual_tax_amount),
        "annualInsuranceAmount": form_number(prop.annual_insurance_amount),
    }


@router.get("/properties")
def properties_page(request: Request, store: PropertyStore = Depends(get_property_store)):
    """
    Saved properties page.

    An ?edit=<id> query parameter shows the rename form for that property.
    """
    properties = store.list()
    logger.debug(f"Loaded {len(properties)} saved properties")
    return templates.TemplateResponse(request, "properties.html", {
        "title": "Saved Properties",
        "active_tab": "properties",
        "properties": properties,
        "property_count": len(properties),
        "max_properties": config.MAX_PROPERTIES,
        "editing_id": request.query_params.get("edit"),
    })


@router.post("/properties/save")
async def save_property_form(request: Request, store: PropertyStore = Depends(get_property_store)):
    """
    Save the submitted calculator inputs as a named property.

    The monthly payment is recalculated from the submitted inputs rather than
    trusted from the page.
    """
    submitted = await request.form()
    form = {field: str(submitted.get(field, "")) for field in MORTGAGE_FIELDS}
    form["name"] = str(submitted.get("name", ""))

    values, errors = validate_mortgage_inputs(form)
    if errors:
        return render_calculator(request, store, form, errors=errors, status_code=400)

    try:
        result = calculate_from_values(values)
    except ArithmeticError as e:
        logger.error(f"Calculation failed while saving property: {e}")
        return render_calculator(request, store, form, errors={"general": GENERAL_ERROR}, status_code=400)

    name = form["name"].strip()
    if not name:
        return render_calculator(request, store, form, result=result,
                                 save_error="Property name is required", status_code=400)

    if not store.can_save_more():
        logger.warning(f"Property limit reached ({config.MAX_PROPERTIES}), rejected save of '{name}'")
        return render_calculator(request, store, form, result=result,
                                 save_error=LIMIT_MESSAGE, status_code=400)

    saved = store.save(NewProperty(
        name=name,
        home_price=values["homePrice"],
        interest_rate=values["interestRate"],
        down_payment_percent=values["downPaymentPercent"],
        annual_tax_amount=values["annualTaxAmount"],
        annual_insurance_amount=values["annualInsuranceAmount"],
        monthly_payment=result["total_monthly"],
    ))
    if not saved:
        return render_calculator(request, store, form, result=result,
                                 save_error=SAVE_FAILED_MESSAGE, status_code=500)

    return RedirectResponse("/properties", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/properties/{property_id}/rename")
def rename_property_form(
    property_id: str,
    name: str = Form(""),
    store: PropertyStore = Depends(get_property_store)
):
    """Rename a property. Blank names leave the current name in place."""
    new_name = name.strip()
    if new_name:
        store.update(property_id, {"name": new_name})
    else:
        logger.debug(f"Ignoring blank rename for property {property_id}")
    return RedirectResponse("/properties", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/properties/{property_id}/delete")
def delete_property_form(property_id: str, store: PropertyStore = Depends(get_property_store)):
    store.delete(property_id)
    return RedirectResponse("/properties", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/properties/{property_id}/load")
def load_property(property_id: str, store: PropertyStore = Depends(get_property_store)):
    """Open the calculator prefilled with a saved property's inputs."""
    prop = store.get(property_id)
    if not prop:
        logger.warning(f"Property {property_id} not found for loading")
        return RedirectResponse("/properties", status_code=status.HTTP_303_SEE_OTHER)

    logger.info(f"Property loaded into calculator: {prop.name} (ID: {property_id})")
    return RedirectResponse(f"/?{urlencode(property_form_values(prop))}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/api/properties")
def list_properties_api(store: PropertyStore = Depends(get_property_store)):
    properties = store.list()
    return JSONResponse({
        "properties": [property_to_json(p) for p in properties],
        "count": len(properties),
        "maxProperties": config.MAX_PROPERTIES,
        "canSaveMore": len(properties) < config.MAX_PROPERTIES,
    })


@router.post("/api/properties")
def save_property_api(data: NewProperty, store: PropertyStore = Depends(get_property_store)):
    """
    Save a property from a JSON body.

    Returns:
        JSON response with the stored property, 400 when the limit is reached
    """
    if not store.can_save_more():
        logger.warning(f"Property limit reached ({config.MAX_PROPERTIES}), rejected save of '{data.name}'")
        return JSONResponse({"error": LIMIT_MESSAGE}, status_code=400)

    saved = store.save(data)
    if not saved:
        return JSONResponse({"error": SAVE_FAILED_MESSAGE}, status_code=500)

    return JSONResponse({"success": True, "property": property_to_json(saved)}, status_code=201)


@router.patch("/api/properties/{property_id}")
def update_property_api(
    property_id: str,
    data: PropertyUpdateRequest,
    store: PropertyStore = Depends(get_property_store)
):
    """Merge the provided fields into a saved property."""
    updates = data.model_dump(exclude_unset=True)
    if "name" in updates:
        updates["name"] = (updates["name"] or "").strip()
        if not updates["name"]:
            return JSONResponse({"error": "Property name cannot be empty"}, status_code=400)
    updates = {key: value for key, value in updates.items() if value is not None}

    if store.get(property_id) is None:
        return JSONResponse({"error": "Property not found"}, status_code=404)

    if not store.update(property_id, updates):
        return JSONResponse({"error": "Failed to update property"}, status_code=500)

    return JSONResponse({"success": True, "property": property_to_json(store.get(property_id))})


@router.delete("/api/properties/{property_id}")
def delete_property_api(property_id: str, store: PropertyStore = Depends(get_property_store)):
    """Delete a saved property. Unknown ids succeed without changing anything."""
    if not store.delete(property_id):
        return JSONResponse({"error": "Failed to delete property"}, status_code=500)
    return JSONResponse({"success": True})
