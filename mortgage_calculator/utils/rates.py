"""
Current mortgage rate lookup.

Rates are scraped, best effort, from the Mortgage News Daily rates page.
The page layout is not under our control, so parsing tries a list of known
rate elements first and then falls back to scanning the whole page text for
a plausible percentage. Anything that goes wrong yields None and callers
substitute FALLBACK_RATE.

Providers:
- MortgageNewsDailyProvider: live scrape with requests + BeautifulSoup
- StaticRateProvider: fixed rate, for fallbacks and tests
- CachedRateProvider: keeps a successful result for a day
"""

import re
import time
from datetime import date
from typing import Callable, Optional, Protocol

import requests
from bs4 import BeautifulSoup
from pydantic import BaseModel

from mortgage_calculator.config import (
    FALLBACK_RATE,
    FALLBACK_SOURCE,
    RATE_CACHE_SECONDS,
    RATE_FETCH_TIMEOUT,
    RATE_SOURCE_NAME,
    RATE_SOURCE_URL,
)
from mortgage_calculator.logging_config import get_logger

logger = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

# Checked in order; the first selector whose text holds a percentage wins
RATE_SELECTORS = [
    ".rate-30-year-fixed",
    ".mortgage-rate-30",
    ".rate-display",
    ".current-rate",
    '[data-rate="30-year"]',
    ".rate-value",
    "h1, h2, h3",
    ".rate, .rates",
]

RATE_PATTERN = re.compile(r"(\d+\.\d+)%")

# Plausible range for a 30-year fixed rate, in percent
MIN_PLAUSIBLE_RATE = 2.0
MAX_PLAUSIBLE_RATE = 15.0

FALLBACK_NOTE = f"Unable to fetch current rates from {RATE_SOURCE_NAME}"


class MortgageRateData(BaseModel):
    """Rate payload returned by /api/mortgage-rate."""
    rate: float
    date: str
    source: str
    note: Optional[str] = None


class RateProvider(Protocol):
    def fetch_rate(self) -> Optional[MortgageRateData]:
        ...


def today_iso() -> str:
    return date.today().isoformat()


def is_plausible_rate(rate: float) -> bool:
    return MIN_PLAUSIBLE_RATE <= rate <= MAX_PLAUSIBLE_RATE


def parse_rate_from_html(html: str) -> Optional[float]:
    """
    Extract the 30-year fixed rate from a rates page.

    Returns:
        The rate in percent, or None if nothing plausible was found
    """
    soup = BeautifulSoup(html, "html.parser")
    rate_text = None

    for selector in RATE_SELECTORS:
        elements = soup.select(selector)
        if not elements:
            continue
        text = "".join(el.get_text() for el in elements).strip()
        match = RATE_PATTERN.search(text)
        if match:
            rate_text = match.group(1)
            break

    # No known element matched, scan the whole page
    if rate_text is None:
        body = soup.body or soup
        for match in RATE_PATTERN.finditer(body.get_text()):
            if is_plausible_rate(float(match.group(1))):
                rate_text = match.group(1)
                break

    if rate_text is None:
        logger.warning(f"Could not find rate on {RATE_SOURCE_NAME} page")
        return None

    rate = float(rate_text)
    if not is_plausible_rate(rate):
        logger.warning(f"Invalid rate found: {rate_text}")
        return None

    return rate


class MortgageNewsDailyProvider:
    """
    Scrapes the current 30-year fixed rate from Mortgage News Daily.

    Args:
        url: Rates page URL
        session: requests session (or anything with a compatible get())
        timeout: Request timeout in seconds
    """

    def __init__(self, url: str = RATE_SOURCE_URL, session=None, timeout: float = RATE_FETCH_TIMEOUT):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_rate(self) -> Optional[MortgageRateData]:
        try:
            response = self.session.get(
                self.url,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
            rate = parse_rate_from_html(response.text)
        except requests.RequestException as e:
            logger.warning(f"{RATE_SOURCE_NAME} scraping failed: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error reading {RATE_SOURCE_NAME} page: {e}")
            return None

        if rate is None:
            return None

        logger.info(f"Fetched {rate}% from {RATE_SOURCE_NAME}")
        return MortgageRateData(rate=rate, date=today_iso(), source=RATE_SOURCE_NAME)


class StaticRateProvider:
    """Always returns the same rate."""

    def __init__(self, rate: float = FALLBACK_RATE, source: str = FALLBACK_SOURCE):
        self.rate = rate
        self.source = source

    def fetch_rate(self) -> Optional[MortgageRateData]:
        return MortgageRateData(rate=self.rate, date=today_iso(), source=self.source)


class CachedRateProvider:
    """
    Wraps another provider and reuses a successful result for ttl_seconds.

    Failed lookups are not cached, so the next call tries again.
    """

    def __init__(self, provider: RateProvider, ttl_seconds: int = RATE_CACHE_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._cached: Optional[MortgageRateData] = None
        self._fetched_at = 0.0

    def fetch_rate(self) -> Optional[MortgageRateData]:
        now = self.clock()
        if self._cached is not None and now - self._fetched_at < self.ttl_seconds:
            return self._cached

        result = self.provider.fetch_rate()
        if result is not None:
            self._cached = result
            self._fetched_at = now
        return result


def fallback_rate_data(note: Optional[str] = FALLBACK_NOTE) -> MortgageRateData:
    return MortgageRateData(rate=FALLBACK_RATE, date=today_iso(), source=FALLBACK_SOURCE, note=note)


def get_mortgage_rate(provider: RateProvider) -> MortgageRateData:
    """Current rate from the provider, or the fallback estimate when it has none."""
    rate_data = provider.fetch_rate()
    if rate_data is None:
        logger.info(f"Using fallback rate of {FALLBACK_RATE}%")
        return fallback_rate_data()
    return rate_data
