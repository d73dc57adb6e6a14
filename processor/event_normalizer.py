"""Event normalizer converting adapter output to the display time zone."""
import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from processor.models import NormalizedEvent, RawEvent
from settings import DEFAULT_DISPLAY_TIMEZONE

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'


def country_from_location(location: str) -> str:
    """Take the last comma-separated part of a location as its country."""
    return location.split(',')[-1].strip()


def event_start(event: NormalizedEvent) -> Optional[datetime]:
    """Aware start instant of an event, or None if its date or time is malformed."""
    try:
        return datetime.strptime(
            f"{event.date.strip()} {event.time.strip()}",
            f"{DATE_FORMAT} {TIME_FORMAT}"
        ).replace(tzinfo=ZoneInfo(event.timezone))
    except (ValueError, TypeError, AttributeError, ZoneInfoNotFoundError):
        return None


class EventNormalizer:
    """Normalizer for converting raw events into the display time zone."""

    def __init__(self, display_timezone: str = DEFAULT_DISPLAY_TIMEZONE):
        """
        Initialize the normalizer.

        Args:
            display_timezone: IANA zone every event is converted into
        """
        self.display_timezone = display_timezone

    def normalize_events(self, raw_events: List[RawEvent]) -> List[NormalizedEvent]:
        """
        Normalize a list of raw events.

        Args:
            raw_events: Events returned by a source adapter

        Returns:
            List of NormalizedEvent objects, one per input event
        """
        return [self.normalize(event) for event in raw_events]

    def normalize(self, event: RawEvent) -> NormalizedEvent:
        """
        Convert a raw event's date and time into the display time zone.

        A malformed date, time or zone leaves the original strings in place.

        Args:
            event: Raw event from an adapter

        Returns:
            NormalizedEvent in the display time zone
        """
        date, time = self.convert(event.date, event.time, event.timezone)

        return NormalizedEvent(
            sport=event.sport,
            name=event.name,
            date=date,
            time=time,
            timezone=self.display_timezone,
            location=event.location,
            circuit=event.circuit,
            venue=event.venue,
            country=event.country,
            teams=list(event.teams),
            status=event.status,
        )

    def convert(self, date_str: str, time_str: str, source_timezone: str) -> tuple[str, str]:
        """
        Convert a date/time pair from one zone into the display zone.

        Args:
            date_str: Date in YYYY-MM-DD format
            time_str: Time in HH:MM format
            source_timezone: IANA zone the pair is expressed in

        Returns:
            Tuple of (date, time) in the display zone, or the inputs unchanged
            when conversion fails
        """
        try:
            local = datetime.strptime(
                f"{date_str.strip()} {time_str.strip()}",
                f"{DATE_FORMAT} {TIME_FORMAT}"
            ).replace(tzinfo=ZoneInfo(source_timezone))
            converted = local.astimezone(ZoneInfo(self.display_timezone))
        except (ValueError, TypeError, AttributeError, ZoneInfoNotFoundError) as e:
            logger.warning(
                f"Date conversion failed for '{date_str} {time_str}' "
                f"({source_timezone}): {e}"
            )
            return date_str, time_str

        return converted.strftime(DATE_FORMAT), converted.strftime(TIME_FORMAT)
