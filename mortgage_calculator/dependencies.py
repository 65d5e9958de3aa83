"""
Shared FastAPI dependencies.

Routes receive the property store and rate provider through these functions
so tests can swap them with app.dependency_overrides.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from mortgage_calculator.db import get_db
from mortgage_calculator.utils.properties import DatabaseStorage, PropertyStore
from mortgage_calculator.utils.rates import CachedRateProvider, MortgageNewsDailyProvider, RateProvider

# One cached scraper per process so the rates page is hit at most once a day
default_rate_provider = CachedRateProvider(MortgageNewsDailyProvider())


def get_property_store(db: Session = Depends(get_db)) -> PropertyStore:
    return PropertyStore(DatabaseStorage(db))


def get_rate_provider() -> RateProvider:
    return default_rate_provider
