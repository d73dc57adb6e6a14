"""Base class for sport schedule source adapters."""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

import requests
from bs4 import BeautifulSoup

from processor.models import EventStatus, RawEvent, Sport
from settings import DEFAULT_DISPLAY_TIMEZONE

logger = logging.getLogger(__name__)

USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36'
)

# Formats carrying an explicit clock time
DATETIME_FORMATS = [
    '%Y-%m-%dT%H:%M:%S.%f%z',
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%dT%H:%M%z',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
]

DATE_FORMATS = [
    '%Y-%m-%d',      # ISO 8601
    '%B %d, %Y',     # Full month name
    '%b %d, %Y',     # Abbreviated month name
    '%d %B %Y',      # Day first, full month name
    '%d %b %Y',      # Day first, abbreviated month name
    '%a, %d %b %Y',  # Weekday prefix
    '%m/%d/%Y',      # US format
]


class FetchError(Exception):
    """Failure of the low-level schedule page fetch."""

    NETWORK = 'network'
    TIMEOUT = 'timeout'
    HTTP_STATUS = 'http_status'

    def __init__(self, reason: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


@dataclass
class FetchResult:
    """Outcome of a page fetch: either html or error is set."""
    html: Optional[str] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.html is not None


def select_text(element, selector: str) -> str:
    """Return the stripped text of the first match for selector, or ''."""
    match = element.select_one(selector)
    return match.get_text(strip=True) if match else ''


def select_texts(element, selector: str) -> List[str]:
    """Return the non-empty stripped texts of every match for selector."""
    texts = [match.get_text(strip=True) for match in element.select(selector)]
    return [text for text in texts if text]


def parse_event_start(date_text: str, source_timezone: str,
                      default_time: str) -> Optional[datetime]:
    """
    Parse a scraped date string into a timezone-aware start instant.

    Naive values are interpreted in source_timezone. Date-only values are
    placed at default_time.

    Args:
        date_text: Date text from the source page
        source_timezone: IANA zone the source publishes times in
        default_time: HH:MM used when the text carries no clock time

    Returns:
        Aware datetime, or None if no format matches
    """
    text = date_text.strip()
    zone = ZoneInfo(source_timezone)

    for fmt in DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=zone)
        return parsed

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        clock = datetime.strptime(default_time, '%H:%M')
        return parsed.replace(
            hour=clock.hour, minute=clock.minute, tzinfo=zone
        )

    return None


class SourceAdapter:
    """
    Fetches upcoming events for one sport.

    Subclasses declare the source URL, the block selector, the default clock
    time and zone, and implement parse_block() and fallback_events().
    fetch() never raises: any fetch or parse failure, or a page without
    qualifying events, yields the fallback list instead.
    """

    sport: Sport
    url: str
    block_selector: str
    default_time: str
    source_timezone: str

    def __init__(self, timeout: int = 30, max_retries: int = 3,
                 base_delay: float = 1,
                 display_timezone: str = DEFAULT_DISPLAY_TIMEZONE):
        """
        Initialize the adapter.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Number of fetch attempts (default: 3)
            base_delay: Initial retry backoff in seconds (default: 1)
            display_timezone: Zone fallback events are expressed in
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self.display_timezone = display_timezone

    def fetch(self, now: Optional[datetime] = None) -> List[RawEvent]:
        """
        Fetch upcoming events for this adapter's sport.

        Args:
            now: Reference instant for the future-only filter and fallback
                offsets (default: current UTC time)

        Returns:
            List of RawEvent objects, never empty for built-in adapters
        """
        now = self._aware(now)
        result = self.fetch_html(self.url_for(now))

        if not result.ok:
            logger.warning(
                f"{self.sport.value} schedule fetch failed "
                f"({result.error.reason}): {result.error}. Using fallback events"
            )
            return self.fallback_events(now)

        try:
            events = self.parse_events(result.html, now)
        except Exception as e:
            logger.warning(
                f"{self.sport.value} schedule parse failed: {e}. "
                f"Using fallback events"
            )
            return self.fallback_events(now)

        if not events:
            logger.warning(
                f"No upcoming {self.sport.value} events found on page. "
                f"Using fallback events"
            )
            return self.fallback_events(now)

        logger.info(f"Fetched {len(events)} upcoming {self.sport.value} events")
        return events

    def url_for(self, now: datetime) -> str:
        return self.url

    def fetch_html(self, url: str) -> FetchResult:
        """
        Fetch a schedule page with retry logic.

        Args:
            url: Page to fetch

        Returns:
            FetchResult holding the page body or the last FetchError
        """
        error = None

        for attempt in range(self.max_retries):
            try:
                logger.info(
                    f"Fetching {self.sport.value} schedule "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                response = requests.get(
                    url,
                    headers={'User-Agent': USER_AGENT},
                    timeout=self.timeout
                )
                response.raise_for_status()
                return FetchResult(html=response.text)

            except requests.Timeout as e:
                error = FetchError(FetchError.TIMEOUT, str(e))
            except requests.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else None
                error = FetchError(FetchError.HTTP_STATUS, str(e), status_code)
            except requests.RequestException as e:
                error = FetchError(FetchError.NETWORK, str(e))

            if attempt < self.max_retries - 1:
                # Exponential backoff
                delay = self.base_delay * (2 ** attempt)
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{self.max_retries}): "
                    f"{error}. Retrying in {delay} seconds..."
                )
                time.sleep(delay)

        logger.error(
            f"All {self.max_retries} attempts to fetch {url} failed. "
            f"Last error: {error}"
        )
        return FetchResult(error=error)

    def parse_events(self, html_content: str, now: datetime) -> List[RawEvent]:
        """
        Parse upcoming events from a schedule page.

        Args:
            html_content: Page body
            now: Reference instant; only events starting after it are kept

        Returns:
            List of RawEvent objects
        """
        soup = BeautifulSoup(html_content, 'html.parser')
        events = []

        for element in soup.select(self.block_selector):
            try:
                event = self.parse_block(element, now)
            except Exception as e:
                logger.warning(f"Failed to parse {self.sport.value} event block: {e}")
                continue
            if event:
                events.append(event)

        return events

    def parse_block(self, element, now: datetime) -> Optional[RawEvent]:
        raise NotImplementedError

    def fallback_events(self, now: datetime) -> List[RawEvent]:
        raise NotImplementedError

    def upcoming_start(self, date_text: str, now: datetime) -> Optional[datetime]:
        """
        Parse date_text and return its start in the source zone if after now.

        Returns:
            Start instant in the source zone, or None when unparseable or
            not strictly in the future
        """
        start = parse_event_start(date_text, self.source_timezone, self.default_time)
        if start is None:
            logger.debug(f"Unparseable {self.sport.value} date: {date_text}")
            return None
        if start <= now:
            return None
        return start.astimezone(ZoneInfo(self.source_timezone))

    def build_event(self, start: datetime, **fields) -> RawEvent:
        """Create a RawEvent at start, expressed in the source zone."""
        return RawEvent(
            sport=self.sport,
            date=start.strftime('%Y-%m-%d'),
            time=start.strftime('%H:%M'),
            timezone=self.source_timezone,
            status=EventStatus.UPCOMING,
            **fields
        )

    def fallback_event(self, now: datetime, days_ahead: int, clock: str,
                       **fields) -> RawEvent:
        """
        Create a synthetic event days_ahead of now, at clock in the display zone.
        """
        day = now.astimezone(ZoneInfo(self.display_timezone)) + timedelta(days=days_ahead)
        return RawEvent(
            sport=self.sport,
            date=day.strftime('%Y-%m-%d'),
            time=clock,
            timezone=self.display_timezone,
            status=EventStatus.UPCOMING,
            **fields
        )

    @staticmethod
    def _aware(now: Optional[datetime]) -> datetime:
        if now is None:
            return datetime.now(timezone.utc)
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now
