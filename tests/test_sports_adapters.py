"""Unit tests for sport source adapters."""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import responses
from requests.exceptions import ConnectionError, Timeout

from processor.models import EventStatus, Sport
from scraper.base_adapter import USER_AGENT, FetchError, parse_event_start
from scraper.motorsport import F1Adapter, NASCARAdapter, RallyAdapter
from scraper.registry import ADAPTERS, get_adapter, supported_sports
from scraper.team_sports import CricketAdapter, FootballAdapter

NOW = datetime(2030, 3, 1, 12, 0, tzinfo=timezone.utc)
F1_URL = 'https://www.formula1.com/en/racing/2030.html'


def page(*blocks: str) -> str:
    return f"<html><body>{''.join(blocks)}</body></html>"


class TestF1Adapter:
    """Test cases for F1Adapter."""

    @responses.activate
    def test_fetch_parses_both_class_conventions(self):
        """Test that either class-name variant is accepted for each field."""
        responses.add(
            responses.GET,
            F1_URL,
            body=page(
                """
                <div class="event-item">
                    <span class="event-title">Chinese Grand Prix</span>
                    <span class="event-date">2030-03-15</span>
                    <span class="event-location">Shanghai, China</span>
                    <span class="event-circuit">Shanghai International Circuit</span>
                </div>
                """,
                """
                <div class="race-item">
                    <span class="race-title">Saudi Arabian Grand Prix</span>
                    <span class="race-date">March 29, 2030</span>
                    <span class="race-location">Jeddah, Saudi Arabia</span>
                </div>
                """
            ),
            status=200
        )

        events = F1Adapter(max_retries=1).fetch(now=NOW)

        assert len(events) == 2
        assert events[0].sport == Sport.F1
        assert events[0].name == 'Chinese Grand Prix'
        assert events[0].date == '2030-03-15'
        assert events[0].time == '15:00'
        assert events[0].timezone == 'UTC'
        assert events[0].circuit == 'Shanghai International Circuit'
        assert events[0].country == 'China'
        assert events[0].status == EventStatus.UPCOMING

        assert events[1].name == 'Saudi Arabian Grand Prix'
        assert events[1].date == '2030-03-29'
        assert events[1].circuit == 'Jeddah, Saudi Arabia'
        assert events[1].country == 'Saudi Arabia'

    @responses.activate
    def test_date_boundary_is_strict(self):
        """Test that only events strictly after now are kept."""
        just_past = (NOW - timedelta(seconds=1)).isoformat()
        just_ahead = (NOW + timedelta(seconds=1)).isoformat()
        responses.add(
            responses.GET,
            F1_URL,
            body=page(
                f"""
                <div class="event-item">
                    <span class="event-title">Past Grand Prix</span>
                    <span class="event-date">{just_past}</span>
                    <span class="event-location">Past City</span>
                </div>
                """,
                f"""
                <div class="event-item">
                    <span class="event-title">Next Grand Prix</span>
                    <span class="event-date">{just_ahead}</span>
                    <span class="event-location">Next City</span>
                </div>
                """
            ),
            status=200
        )

        events = F1Adapter(max_retries=1).fetch(now=NOW)

        assert [event.name for event in events] == ['Next Grand Prix']
        assert events[0].date == '2030-03-01'
        assert events[0].time == '12:00'

    @responses.activate
    def test_blocks_missing_required_fields_are_skipped(self):
        """Test that blocks without name, date or location are ignored."""
        responses.add(
            responses.GET,
            F1_URL,
            body=page(
                """
                <div class="event-item">
                    <span class="event-title">No Location Grand Prix</span>
                    <span class="event-date">2030-04-01</span>
                </div>
                """,
                """
                <div class="event-item">
                    <span class="event-date">2030-04-08</span>
                    <span class="event-location">Nameless</span>
                </div>
                """,
                """
                <div class="event-item">
                    <span class="event-title">Valid Grand Prix</span>
                    <span class="event-date">2030-04-15</span>
                    <span class="event-location">Suzuka, Japan</span>
                </div>
                """
            ),
            status=200
        )

        events = F1Adapter(max_retries=1).fetch(now=NOW)

        assert [event.name for event in events] == ['Valid Grand Prix']

    @responses.activate
    def test_network_error_returns_fallback(self):
        """Test that a network failure yields the fallback events."""
        responses.add(
            responses.GET,
            F1_URL,
            body=ConnectionError("Connection refused")
        )

        events = F1Adapter(max_retries=1).fetch(now=NOW)

        assert [event.name for event in events] == [
            'Australian Grand Prix', 'Bahrain Grand Prix'
        ]
        # 2030-03-01 12:00 UTC is 17:30 in Asia/Kolkata
        assert events[0].date == '2030-03-08'
        assert events[0].time == '15:30'
        assert events[0].timezone == 'Asia/Kolkata'
        assert events[1].date == '2030-03-22'
        assert events[1].time == '18:00'

    @responses.activate
    def test_page_without_events_returns_fallback(self):
        """Test that a page with zero qualifying events yields the fallback."""
        responses.add(responses.GET, F1_URL, body=page('<p>Coming soon</p>'), status=200)

        events = F1Adapter(max_retries=1).fetch(now=NOW)

        assert len(events) == 2
        assert events[0].name == 'Australian Grand Prix'

    @responses.activate
    def test_parse_failure_returns_fallback(self):
        """Test that an unexpected parse error never escapes fetch()."""
        responses.add(responses.GET, F1_URL, body=page(), status=200)
        adapter = F1Adapter(max_retries=1)

        with patch.object(adapter, 'parse_events', side_effect=RuntimeError('boom')):
            events = adapter.fetch(now=NOW)

        assert len(events) == 2

    @responses.activate
    def test_sends_browser_user_agent(self):
        """Test that requests carry a browser-like User-Agent."""
        responses.add(responses.GET, F1_URL, body=page(), status=200)

        F1Adapter(max_retries=1).fetch(now=NOW)

        assert responses.calls[0].request.headers['User-Agent'] == USER_AGENT

    @responses.activate
    def test_fetch_retries_then_succeeds(self):
        """Test retry logic succeeds after initial failures."""
        body = page(
            """
            <div class="race-item">
                <span class="race-title">Japanese Grand Prix</span>
                <span class="race-date">2030-04-06</span>
                <span class="race-location">Suzuka, Japan</span>
            </div>
            """
        )
        responses.add(responses.GET, F1_URL, body='Server Error', status=500)
        responses.add(responses.GET, F1_URL, body='Server Error', status=500)
        responses.add(responses.GET, F1_URL, body=body, status=200)

        with patch('scraper.base_adapter.time.sleep') as mock_sleep:
            events = F1Adapter(max_retries=3).fetch(now=NOW)

        assert [event.name for event in events] == ['Japanese Grand Prix']
        assert len(responses.calls) == 3
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1, 2]


class TestFetchHtml:
    """Test cases for the low-level fetch result."""

    @responses.activate
    def test_timeout_is_reported_as_error(self):
        """Test that a timeout becomes a FetchResult error, not an exception."""
        responses.add(responses.GET, F1_URL, body=Timeout("Request timed out"))

        result = F1Adapter(max_retries=1).fetch_html(F1_URL)

        assert not result.ok
        assert result.html is None
        assert result.error.reason == FetchError.TIMEOUT

    @responses.activate
    def test_http_status_is_reported_as_error(self):
        """Test that an HTTP error carries its status code."""
        for _ in range(2):
            responses.add(responses.GET, F1_URL, body='Not Found', status=404)

        with patch('scraper.base_adapter.time.sleep'):
            result = F1Adapter(max_retries=2).fetch_html(F1_URL)

        assert result.error.reason == FetchError.HTTP_STATUS
        assert result.error.status_code == 404
        assert len(responses.calls) == 2

    @responses.activate
    def test_success(self):
        responses.add(responses.GET, F1_URL, body='<html></html>', status=200)

        result = F1Adapter(max_retries=1).fetch_html(F1_URL)

        assert result.ok
        assert result.html == '<html></html>'


class TestNASCARAdapter:
    """Test cases for NASCARAdapter."""

    @responses.activate
    def test_times_are_kept_in_eastern_time(self):
        """Test explicit and default clock times in America/New_York."""
        responses.add(
            responses.GET,
            NASCARAdapter.url,
            body=page(
                """
                <div class="schedule-item">
                    <span class="race-name">Food City 500</span>
                    <span class="race-date">2030-03-16T15:00</span>
                    <span class="track-name">Bristol Motor Speedway</span>
                    <span class="location">Bristol, TN</span>
                </div>
                """,
                """
                <div class="race-item">
                    <span class="event-name">Coca-Cola 600</span>
                    <span class="event-date">May 25, 2030</span>
                    <span class="venue">Charlotte Motor Speedway</span>
                </div>
                """
            ),
            status=200
        )

        events = NASCARAdapter(max_retries=1).fetch(now=NOW)

        assert len(events) == 2
        assert events[0].time == '15:00'
        assert events[0].timezone == 'America/New_York'
        assert events[0].location == 'Bristol Motor Speedway'
        assert events[0].venue == 'Bristol, TN'
        assert events[0].country == 'United States'

        assert events[1].date == '2030-05-25'
        assert events[1].time == '19:00'
        assert events[1].venue == 'Charlotte Motor Speedway'


class TestRallyAdapter:
    """Test cases for RallyAdapter."""

    @responses.activate
    def test_country_is_required(self):
        """Test that rally blocks need a country."""
        responses.add(
            responses.GET,
            RallyAdapter.url,
            body=page(
                """
                <div class="calendar-item">
                    <span class="rally-name">Rally Portugal</span>
                    <span class="rally-date">2030-05-15</span>
                    <span class="rally-country">Portugal</span>
                </div>
                """,
                """
                <div class="rally-item">
                    <span class="event-name">Rally Nowhere</span>
                    <span class="event-date">2030-06-01</span>
                </div>
                """
            ),
            status=200
        )

        events = RallyAdapter(max_retries=1).fetch(now=NOW)

        assert len(events) == 1
        assert events[0].name == 'Rally Portugal'
        assert events[0].location == 'Portugal'
        assert events[0].country == 'Portugal'
        assert events[0].time == '10:00'
        assert events[0].timezone == 'Europe/London'


class TestTeamFixtureAdapters:
    """Test cases for CricketAdapter and FootballAdapter."""

    @responses.activate
    def test_cricket_team_pairing(self):
        """Test that two team names form the event name."""
        responses.add(
            responses.GET,
            CricketAdapter.url,
            body=page(
                """
                <div class="match-item">
                    <span class="team-name">India</span>
                    <span class="team-name">England</span>
                    <span class="match-date">2030-03-20</span>
                    <span class="venue">Eden Gardens</span>
                </div>
                """,
                """
                <div class="fixture-item">
                    <span class="team-name">Pakistan</span>
                    <span class="match-date">2030-03-21</span>
                </div>
                """,
                """
                <div class="fixture-item">
                    <span class="team">Australia</span>
                    <span class="team">New Zealand</span>
                    <span class="fixture-date">2030-03-22</span>
                </div>
                """
            ),
            status=200
        )

        events = CricketAdapter(max_retries=1).fetch(now=NOW)

        assert [event.name for event in events] == [
            'India vs England', 'Australia vs New Zealand'
        ]
        assert events[0].teams == ['India', 'England']
        assert events[0].location == 'Eden Gardens'
        assert events[0].country == 'India'
        assert events[0].time == '14:30'
        assert events[0].timezone == 'Asia/Kolkata'
        assert events[1].location == 'TBD'

    @responses.activate
    def test_football_fixture(self):
        responses.add(
            responses.GET,
            FootballAdapter.url,
            body=page(
                """
                <div class="fixture-item">
                    <span class="team-name">Arsenal</span>
                    <span class="team-name">Chelsea</span>
                    <span class="match-date">2030-03-02</span>
                    <span class="stadium">Emirates Stadium</span>
                    <span class="league">Premier League</span>
                </div>
                """
            ),
            status=200
        )

        events = FootballAdapter(max_retries=1).fetch(now=NOW)

        assert len(events) == 1
        assert events[0].sport == Sport.FOOTBALL
        assert events[0].name == 'Arsenal vs Chelsea'
        assert events[0].location == 'Emirates Stadium'
        assert events[0].country == 'England'
        assert events[0].time == '20:00'


@pytest.mark.parametrize('adapter_class', list(ADAPTERS.values()))
@responses.activate
def test_every_adapter_falls_back_on_network_failure(adapter_class):
    """Test that every adapter returns a non-empty list when fetching fails."""
    # No registered responses: every request raises ConnectionError
    adapter = adapter_class(max_retries=1)

    events = adapter.fetch(now=NOW)

    assert events
    assert all(event.sport == adapter.sport for event in events)
    assert all(event.date > '2030-03-01' for event in events)


@pytest.mark.parametrize('adapter_class', list(ADAPTERS.values()))
def test_fallback_is_deterministic(adapter_class):
    """Test that fallback output depends only on now."""
    adapter = adapter_class()

    assert adapter.fallback_events(NOW) == adapter.fallback_events(NOW)
    assert 1 <= len(adapter.fallback_events(NOW)) <= 2


class TestParseEventStart:
    """Test cases for date parsing."""

    def test_date_only_uses_default_time(self):
        start = parse_event_start('2030-07-21', 'UTC', '15:00')

        assert start == datetime(2030, 7, 21, 15, 0, tzinfo=timezone.utc)

    def test_offset_is_respected(self):
        start = parse_event_start('2030-07-21T15:00:00+02:00', 'UTC', '10:00')

        assert start == datetime(2030, 7, 21, 13, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize('text', ['21 Jul 2030', 'July 21, 2030', '07/21/2030'])
    def test_human_formats(self, text):
        start = parse_event_start(text, 'UTC', '12:00')

        assert start.date().isoformat() == '2030-07-21'

    def test_unparseable_returns_none(self):
        assert parse_event_start('TBC', 'UTC', '12:00') is None


class TestRegistry:
    """Test cases for the sport to adapter mapping."""

    def test_supported_sports_order(self):
        assert supported_sports() == [
            Sport.F1, Sport.NASCAR, Sport.RALLY, Sport.CRICKET, Sport.FOOTBALL
        ]

    @pytest.mark.parametrize('sport,adapter_class', [
        (Sport.F1, F1Adapter),
        (Sport.NASCAR, NASCARAdapter),
        (Sport.RALLY, RallyAdapter),
        (Sport.CRICKET, CricketAdapter),
        (Sport.FOOTBALL, FootballAdapter),
    ])
    def test_get_adapter(self, sport, adapter_class):
        adapter = get_adapter(sport, timeout=5)

        assert isinstance(adapter, adapter_class)
        assert adapter.timeout == 5
