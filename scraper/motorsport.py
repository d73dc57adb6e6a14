"""Source adapters for motorsport series (F1, NASCAR, Rally)."""
from datetime import datetime
from typing import List, Optional

from processor.event_normalizer import country_from_location
from processor.models import RawEvent, Sport
from scraper.base_adapter import SourceAdapter, select_text


class F1Adapter(SourceAdapter):
    """Formula 1 calendar from formula1.com."""

    sport = Sport.F1
    url = 'https://www.formula1.com/en/racing/{year}.html'
    block_selector = '.event-item, .race-item'
    default_time = '15:00'
    source_timezone = 'UTC'

    def url_for(self, now: datetime) -> str:
        return self.url.format(year=now.year)

    def parse_block(self, element, now: datetime) -> Optional[RawEvent]:
        name = select_text(element, '.event-title, .race-title')
        date_text = select_text(element, '.event-date, .race-date')
        location = select_text(element, '.event-location, .race-location')
        circuit = select_text(element, '.event-circuit, .race-circuit')

        if not (name and date_text and location):
            return None

        start = self.upcoming_start(date_text, now)
        if start is None:
            return None

        return self.build_event(
            start,
            name=name,
            location=location,
            circuit=circuit or location,
            country=country_from_location(location) or location,
        )

    def fallback_events(self, now: datetime) -> List[RawEvent]:
        return [
            self.fallback_event(
                now, 7, '15:30',
                name='Australian Grand Prix',
                location='Melbourne',
                circuit='Albert Park Circuit',
                country='Australia',
            ),
            self.fallback_event(
                now, 21, '18:00',
                name='Bahrain Grand Prix',
                location='Sakhir',
                circuit='Bahrain International Circuit',
                country='Bahrain',
            ),
        ]


class NASCARAdapter(SourceAdapter):
    """NASCAR Cup Series schedule from nascar.com."""

    sport = Sport.NASCAR
    url = 'https://www.nascar.com/schedule/'
    block_selector = '.schedule-item, .race-item'
    default_time = '19:00'
    source_timezone = 'America/New_York'

    def parse_block(self, element, now: datetime) -> Optional[RawEvent]:
        name = select_text(element, '.race-name, .event-name')
        date_text = select_text(element, '.race-date, .event-date')
        track = select_text(element, '.track-name, .venue')
        city = select_text(element, '.location, .city-state')

        if not (name and date_text and track):
            return None

        start = self.upcoming_start(date_text, now)
        if start is None:
            return None

        return self.build_event(
            start,
            name=name,
            location=track,
            venue=city or track,
            country='United States',
        )

    def fallback_events(self, now: datetime) -> List[RawEvent]:
        return [
            self.fallback_event(
                now, 3, '02:30',
                name='Daytona 500',
                location='Daytona International Speedway',
                venue='Daytona Beach, FL',
                country='United States',
            ),
        ]


class RallyAdapter(SourceAdapter):
    """World Rally Championship calendar from wrc.com."""

    sport = Sport.RALLY
    url = 'https://www.wrc.com/en/calendar/'
    block_selector = '.calendar-item, .rally-item'
    default_time = '10:00'
    source_timezone = 'Europe/London'

    def parse_block(self, element, now: datetime) -> Optional[RawEvent]:
        name = select_text(element, '.rally-name, .event-name')
        date_text = select_text(element, '.rally-date, .event-date')
        country = select_text(element, '.rally-country, .country')

        if not (name and date_text and country):
            return None

        start = self.upcoming_start(date_text, now)
        if start is None:
            return None

        return self.build_event(
            start,
            name=name,
            location=country,
            country=country,
        )

    def fallback_events(self, now: datetime) -> List[RawEvent]:
        return [
            self.fallback_event(
                now, 10, '15:30',
                name='Rally Sweden',
                location='Sweden',
                country='Sweden',
            ),
        ]
