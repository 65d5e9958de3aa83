"""
Amortization calculations for the Mortgage Calculator.

This module holds the pure calculation logic behind the calculator form:
- Field-level validation of raw form/JSON input
- Fixed-rate monthly payment (principal & interest) for a 30-year loan
- Monthly property tax and insurance components

Formula:
    P = home_price * (1 - down_payment_percent / 100)
    r = interest_rate / 100 / 12
    monthly_mortgage = P * r * (1 + r)^n / ((1 + r)^n - 1)
    total_monthly = monthly_mortgage + annual_tax / 12 + annual_insurance / 12

Intermediate values are never rounded; only displayed values are formatted.
"""

import math
from typing import Any, Dict, Mapping, Optional, Tuple

from mortgage_calculator.config import LOAN_TERM_MONTHS

# Form field names, in the order they are validated and displayed
MORTGAGE_FIELDS = [
    "homePrice",
    "interestRate",
    "annualTaxAmount",
    "annualInsuranceAmount",
    "downPaymentPercent",
]

FIELD_LABELS = {
    "homePrice": "Home price",
    "interestRate": "Interest rate",
    "annualTaxAmount": "Annual tax amount",
    "annualInsuranceAmount": "Annual insurance amount",
    "downPaymentPercent": "Down payment percentage",
}

# Range checks: (predicate, message shown when the predicate fails)
FIELD_RULES = {
    "homePrice": (lambda v: v > 0, "Home price must be greater than 0"),
    "interestRate": (lambda v: 0 < v <= 100, "Interest rate must be between 0 and 100"),
    "annualTaxAmount": (lambda v: v >= 0, "Annual tax amount cannot be negative"),
    "annualInsuranceAmount": (lambda v: v >= 0, "Annual insurance amount cannot be negative"),
    "downPaymentPercent": (lambda v: 0 <= v <= 100, "Down payment percentage must be between 0 and 100"),
}


def parse_number(value: Any) -> Optional[float]:
    """
    Convert a raw form or JSON value to a finite float.

    Returns None for anything that is not a finite number. Booleans are
    rejected even though they are ints in Python.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_mortgage_inputs(raw: Mapping[str, Any]) -> Tuple[Dict[str, float], Dict[str, str]]:
    """
    Validate calculator inputs.

    Args:
        raw: Mapping of camelCase field name to raw value (string, number or None)

    Returns:
        Tuple of (parsed values, errors). Errors map field name to a message;
        when it is non-empty the values must not be used for a calculation.
    """
    values = {}
    errors = {}

    for field in MORTGAGE_FIELDS:
        raw_value = raw.get(field)
        label = FIELD_LABELS[field]

        if _is_missing(raw_value):
            errors[field] = f"{label} is required"
            continue

        number = parse_number(raw_value)
        if number is None:
            errors[field] = f"{label} must be a number"
            continue

        is_valid, message = FIELD_RULES[field]
        if not is_valid(number):
            errors[field] = message
            continue

        values[field] = number

    return values, errors


def down_payment_amount(home_price: float, down_payment_percent: float) -> float:
    """Dollar amount of the down payment."""
    return home_price * down_payment_percent / 100


def monthly_principal_and_interest(principal: float, monthly_rate: float, term_months: int) -> float:
    """
    Level monthly payment that fully amortizes the principal.

    A zero rate has no interest component, so the principal is simply
    spread evenly over the term.
    """
    if monthly_rate == 0:
        return principal / term_months
    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_monthly_payment(
    home_price: float,
    interest_rate: float,
    down_payment_percent: float,
    annual_tax_amount: float,
    annual_insurance_amount: float,
    term_months: int = LOAN_TERM_MONTHS
) -> dict:
    """
    Calculate the monthly mortgage payment breakdown.

    Args:
        home_price: Purchase price of the home
        interest_rate: Annual interest rate as a percentage (6.5 for 6.5%)
        down_payment_percent: Down payment as a percentage of home price
        annual_tax_amount: Annual property tax
        annual_insurance_amount: Annual homeowners insurance
        term_months: Loan term in months (30 years by default)

    Returns:
        Dictionary with principal, down_payment_amount, monthly_rate,
        term_months, monthly_mortgage, monthly_tax, monthly_insurance
        and total_monthly

    Raises:
        OverflowError: If the inputs are too large for a finite payment
    """
    down_payment = down_payment_amount(home_price, down_payment_percent)
    principal = home_price - down_payment
    monthly_rate = interest_rate / 100 / 12

    monthly_mortgage = monthly_principal_and_interest(principal, monthly_rate, term_months)
    monthly_tax = annual_tax_amount / 12
    monthly_insurance = annual_insurance_amount / 12

    total_monthly = monthly_mortgage + monthly_tax + monthly_insurance
    if not math.isfinite(total_monthly):
        raise OverflowError(f"Monthly payment is not finite for home price {home_price}")

    return {
        "principal": principal,
        "down_payment_amount": down_payment,
        "monthly_rate": monthly_rate,
        "term_months": term_months,
        "monthly_mortgage": monthly_mortgage,
        "monthly_tax": monthly_tax,
        "monthly_insurance": monthly_insurance,
        "total_monthly": total_monthly,
    }


def calculate_from_values(values: Mapping[str, float]) -> dict:
    """Run calculate_monthly_payment on the output of validate_mortgage_inputs."""
    return calculate_monthly_payment(
        home_price=values["homePrice"],
        interest_rate=values["interestRate"],
        down_payment_percent=values["downPaymentPercent"],
        annual_tax_amount=values["annualTaxAmount"],
        annual_insurance_amount=values["annualInsuranceAmount"],
    )


def format_currency(value: float) -> str:
    """Format a dollar amount for display, e.g. 1916.9583 -> '1,916.96'."""
    return f"{value:,.2f}"
