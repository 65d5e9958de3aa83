"""
Tests for the amortization engine.

Tests the monthly payment formula, its edge cases, and input validation.
"""

import math

import pytest

from mortgage_calculator.utils.amortization import (
    calculate_from_values,
    calculate_monthly_payment,
    down_payment_amount,
    format_currency,
    monthly_principal_and_interest,
    parse_number,
    validate_mortgage_inputs,
)


VALID_INPUTS = {
    "homePrice": "300000",
    "interestRate": "6.5",
    "downPaymentPercent": "20",
    "annualTaxAmount": "3600",
    "annualInsuranceAmount": "1200",
}


class TestMonthlyPayment:
    """Test suite for the monthly payment calculation."""

    def test_reference_scenario(self):
        """Test the $300k / 20% down / 6.5% example."""
        result = calculate_monthly_payment(300000, 6.5, 20, 3600, 1200)

        assert result["principal"] == 240000
        assert result["monthly_rate"] == pytest.approx(0.0054167, abs=1e-7)
        assert result["monthly_mortgage"] == pytest.approx(1516.96, abs=0.01)
        assert result["monthly_tax"] == 300
        assert result["monthly_insurance"] == 100
        assert result["total_monthly"] == pytest.approx(1916.96, abs=0.01)

    def test_matches_amortization_formula(self):
        """Test total equals the closed-form formula plus tax and insurance."""
        home_price, rate, down, tax, insurance = 450000, 7.125, 15, 5400, 1800
        principal = home_price * (1 - down / 100)
        r = rate / 1200
        expected = principal * r * (1 + r) ** 360 / ((1 + r) ** 360 - 1) + tax / 12 + insurance / 12

        result = calculate_monthly_payment(home_price, rate, down, tax, insurance)

        assert result["total_monthly"] == pytest.approx(expected, rel=1e-12)

    def test_default_term_is_thirty_years(self):
        result = calculate_monthly_payment(300000, 6.5, 20, 0, 0)
        assert result["term_months"] == 360

    def test_full_down_payment_leaves_only_tax_and_insurance(self):
        """Test that 100% down means no mortgage component at all."""
        result = calculate_monthly_payment(300000, 6.5, 100, 3600, 1200)

        assert result["principal"] == 0
        assert result["monthly_mortgage"] == 0
        assert result["total_monthly"] == 3600 / 12 + 1200 / 12

    def test_zero_rate_is_linear(self):
        """Test that a 0% rate spreads principal evenly instead of dividing by zero."""
        result = calculate_monthly_payment(360000, 0, 0, 1200, 600)

        assert math.isfinite(result["total_monthly"])
        assert result["monthly_mortgage"] == 1000
        assert result["total_monthly"] == 1000 + 100 + 50

    def test_principal_and_interest_zero_rate(self):
        assert monthly_principal_and_interest(120000, 0, 120) == 1000

    def test_no_intermediate_rounding(self):
        """Test values are not rounded to cents before being summed."""
        result = calculate_monthly_payment(300000, 6.5, 20, 1000, 1000)
        assert result["monthly_tax"] == 1000 / 12
        assert result["total_monthly"] != round(result["total_monthly"], 2)

    def test_higher_rate_means_higher_payment(self):
        low = calculate_monthly_payment(300000, 5.0, 20, 0, 0)
        high = calculate_monthly_payment(300000, 7.0, 20, 0, 0)
        assert high["total_monthly"] > low["total_monthly"]

    def test_overflowing_payment_raises(self):
        with pytest.raises(OverflowError):
            calculate_monthly_payment(1.7e308, 100, 0, 0, 0)

    def test_calculate_from_validated_values(self):
        values, errors = validate_mortgage_inputs(VALID_INPUTS)
        assert errors == {}
        result = calculate_from_values(values)
        assert result["total_monthly"] == pytest.approx(1916.96, abs=0.01)

    def test_down_payment_amount(self):
        assert down_payment_amount(300000, 20) == 60000


class TestValidation:
    """Test suite for calculator input validation."""

    def test_valid_inputs(self):
        values, errors = validate_mortgage_inputs(VALID_INPUTS)
        assert errors == {}
        assert values == {
            "homePrice": 300000.0,
            "interestRate": 6.5,
            "downPaymentPercent": 20.0,
            "annualTaxAmount": 3600.0,
            "annualInsuranceAmount": 1200.0,
        }

    def test_numeric_json_values_accepted(self):
        values, errors = validate_mortgage_inputs({k: float(v) for k, v in VALID_INPUTS.items()})
        assert errors == {}
        assert values["homePrice"] == 300000.0

    def test_all_fields_required(self):
        values, errors = validate_mortgage_inputs({})
        assert values == {}
        assert errors == {
            "homePrice": "Home price is required",
            "interestRate": "Interest rate is required",
            "annualTaxAmount": "Annual tax amount is required",
            "annualInsuranceAmount": "Annual insurance amount is required",
            "downPaymentPercent": "Down payment percentage is required",
        }

    def test_blank_string_is_missing(self):
        _, errors = validate_mortgage_inputs({**VALID_INPUTS, "homePrice": "   "})
        assert errors == {"homePrice": "Home price is required"}

    @pytest.mark.parametrize("field,value,message", [
        ("homePrice", "0", "Home price must be greater than 0"),
        ("homePrice", "-5", "Home price must be greater than 0"),
        ("interestRate", "0", "Interest rate must be between 0 and 100"),
        ("interestRate", "100.5", "Interest rate must be between 0 and 100"),
        ("annualTaxAmount", "-1", "Annual tax amount cannot be negative"),
        ("annualInsuranceAmount", "-0.01", "Annual insurance amount cannot be negative"),
        ("downPaymentPercent", "-1", "Down payment percentage must be between 0 and 100"),
        ("downPaymentPercent", "101", "Down payment percentage must be between 0 and 100"),
    ])
    def test_out_of_range(self, field, value, message):
        """Test each range rule reports a message for its own field only."""
        values, errors = validate_mortgage_inputs({**VALID_INPUTS, field: value})
        assert errors == {field: message}
        assert field not in values

    @pytest.mark.parametrize("field,value", [
        ("interestRate", "100"),
        ("downPaymentPercent", "0"),
        ("downPaymentPercent", "100"),
        ("annualTaxAmount", "0"),
        ("annualInsuranceAmount", "0"),
    ])
    def test_boundaries_accepted(self, field, value):
        _, errors = validate_mortgage_inputs({**VALID_INPUTS, field: value})
        assert errors == {}

    def test_non_numeric_rejected(self):
        _, errors = validate_mortgage_inputs({**VALID_INPUTS, "homePrice": "lots"})
        assert errors == {"homePrice": "Home price must be a number"}

    def test_non_finite_rejected(self):
        _, errors = validate_mortgage_inputs({**VALID_INPUTS, "annualTaxAmount": "inf"})
        assert errors == {"annualTaxAmount": "Annual tax amount must be a number"}


class TestHelpers:
    """Test suite for parsing and formatting helpers."""

    def test_parse_number(self):
        assert parse_number("1,250.50") == 1250.5
        assert parse_number(7) == 7.0
        assert parse_number(" 6.5 ") == 6.5

    def test_parse_number_rejects_non_numbers(self):
        assert parse_number(True) is None
        assert parse_number("nan") is None
        assert parse_number(None) is None
        assert parse_number([1]) is None

    def test_format_currency(self):
        assert format_currency(1916.9583) == "1,916.96"
        assert format_currency(0) == "0.00"
