"""Source adapters for fixtures between two teams (Cricket, Football)."""
from datetime import datetime
from typing import List, Optional

from processor.models import RawEvent, Sport
from scraper.base_adapter import SourceAdapter, select_text, select_texts


class TeamFixtureAdapter(SourceAdapter):
    """Adapter for pages listing one fixture per block with team names."""

    team_selector = '.team-name, .team'
    date_selector = '.match-date, .fixture-date'
    venue_selector = '.venue, .stadium'
    default_country: str

    def parse_block(self, element, now: datetime) -> Optional[RawEvent]:
        teams = select_texts(element, self.team_selector)
        date_text = select_text(element, self.date_selector)
        venue = select_text(element, self.venue_selector)

        if len(teams) < 2 or not date_text:
            return None

        start = self.upcoming_start(date_text, now)
        if start is None:
            return None

        return self.build_event(
            start,
            name=f"{teams[0]} vs {teams[1]}",
            location=venue or 'TBD',
            venue=venue or None,
            teams=teams[:2],
            country=self.default_country,
        )


class CricketAdapter(TeamFixtureAdapter):
    """Cricket fixtures from ESPNcricinfo."""

    sport = Sport.CRICKET
    url = 'https://www.espncricinfo.com/live-cricket-match-schedule-fixtures'
    block_selector = '.match-item, .fixture-item'
    venue_selector = '.venue, .ground'
    default_time = '14:30'
    source_timezone = 'Asia/Kolkata'
    default_country = 'India'

    def fallback_events(self, now: datetime) -> List[RawEvent]:
        return [
            self.fallback_event(
                now, 2, '14:30',
                name='India vs Australia',
                location='Wankhede Stadium',
                venue='Wankhede Stadium',
                teams=['India', 'Australia'],
                country='India',
            ),
        ]


class FootballAdapter(TeamFixtureAdapter):
    """Football fixtures from ESPN."""

    sport = Sport.FOOTBALL
    url = 'https://www.espn.com/soccer/fixtures'
    block_selector = '.fixture-item, .match-item'
    default_time = '20:00'
    source_timezone = 'Europe/London'
    default_country = 'England'

    def fallback_events(self, now: datetime) -> List[RawEvent]:
        return [
            self.fallback_event(
                now, 1, '01:30',
                name='Manchester United vs Liverpool',
                location='Old Trafford',
                venue='Old Trafford',
                teams=['Manchester United', 'Liverpool'],
                country='England',
            ),
        ]
