"""
Configuration for the Mortgage Calculator application.

Every setting is a module constant read once from the environment at import
time. Override any of them by exporting the matching MORTGAGE_CALC_* variable
before the application starts.
"""

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Database
DATABASE_URL = os.environ.get("MORTGAGE_CALC_DATABASE_URL", "sqlite:///./mortgage_calculator.db")

# Logging
LOG_LEVEL = os.environ.get("MORTGAGE_CALC_LOG_LEVEL", "INFO")
LOGS_DIR = os.environ.get(
    "MORTGAGE_CALC_LOG_DIR",
    os.path.join(os.path.dirname(BASE_DIR), "logs")
)

# Templates and static assets ship inside the package
TEMPLATES_DIR = os.path.join(BASE_DIR, "templates")
STATIC_DIR = os.path.join(BASE_DIR, "static")

# Saved properties
STORAGE_KEY = "mortgage-calculator-properties"
MAX_PROPERTIES = 3

# Loan terms
LOAN_TERM_YEARS = 30
LOAN_TERM_MONTHS = LOAN_TERM_YEARS * 12

# Interest rate lookup
RATE_SOURCE_URL = os.environ.get(
    "MORTGAGE_CALC_RATE_URL",
    "https://www.mortgagenewsdaily.com/mortgage-rates"
)
RATE_SOURCE_NAME = "Mortgage News Daily"
RATE_FETCH_TIMEOUT = float(os.environ.get("MORTGAGE_CALC_RATE_TIMEOUT", "10"))
RATE_CACHE_SECONDS = int(os.environ.get("MORTGAGE_CALC_RATE_CACHE_SECONDS", str(24 * 60 * 60)))
FALLBACK_RATE = float(os.environ.get("MORTGAGE_CALC_FALLBACK_RATE", "6.5"))
FALLBACK_SOURCE = "Fallback estimate"

# Artificial pause before showing a result, for UI feedback only
CALCULATION_DELAY_SECONDS = float(os.environ.get("MORTGAGE_CALC_CALCULATION_DELAY", "0.5"))

# Default form values
DEFAULT_DOWN_PAYMENT_PERCENT = 20.0
