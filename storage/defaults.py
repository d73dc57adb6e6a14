"""Per-sport defaults applied to series and races created by a sync."""
from typing import Dict, List

from processor.models import Sport, WatchLink

# Series id used for each sport; also matched against lower-cased series names
SERIES_KEYS: Dict[Sport, str] = {
    Sport.F1: 'f1',
    Sport.NASCAR: 'nascar',
    Sport.RALLY: 'wrc',
    Sport.CRICKET: 'cricket',
    Sport.FOOTBALL: 'football',
}

SERIES_DEFAULTS: Dict[Sport, Dict[str, str]] = {
    Sport.F1: {'name': 'Formula 1', 'color': '#e10600', 'icon': '🏎️'},
    Sport.NASCAR: {'name': 'NASCAR', 'color': '#ffed00', 'icon': '🏁'},
    Sport.RALLY: {'name': 'WRC', 'color': '#0066cc', 'icon': '🚗'},
    Sport.CRICKET: {'name': 'Cricket', 'color': '#00a651', 'icon': '🏏'},
    Sport.FOOTBALL: {'name': 'Football', 'color': '#00471b', 'icon': '⚽'},
}

GENERIC_SERIES = {'color': '#6b7280', 'icon': '🏆'}

DEFAULT_WATCH_LINKS: Dict[Sport, List[WatchLink]] = {
    Sport.F1: [
        WatchLink(country='Global', broadcaster='F1 TV Pro', subscription=True),
        WatchLink(country='US', broadcaster='ESPN', subscription=False),
        WatchLink(country='UK', broadcaster='Sky Sports F1', subscription=True),
    ],
    Sport.NASCAR: [
        WatchLink(country='US', broadcaster='FOX/NBC', subscription=False),
        WatchLink(country='US', broadcaster='NASCAR.com', subscription=True),
    ],
    Sport.RALLY: [
        WatchLink(country='Global', broadcaster='WRC+', subscription=True),
    ],
    Sport.CRICKET: [
        WatchLink(country='India', broadcaster='Star Sports', subscription=True),
        WatchLink(country='Global', broadcaster='ESPN+', subscription=True),
    ],
    Sport.FOOTBALL: [
        WatchLink(country='Global', broadcaster='ESPN+', subscription=True),
        WatchLink(country='UK', broadcaster='BBC/ITV', subscription=False),
    ],
}


def series_key_for(sport: Sport) -> str:
    return SERIES_KEYS.get(sport, sport.value.lower())


def series_defaults_for(sport: Sport) -> Dict[str, str]:
    return SERIES_DEFAULTS.get(sport, {'name': sport.value, **GENERIC_SERIES})


def watch_links_for(sport: Sport) -> List[WatchLink]:
    """Return a fresh copy of the default watch links for a sport."""
    links = DEFAULT_WATCH_LINKS.get(
        sport, [WatchLink(country='Global', broadcaster='TBD', subscription=False)]
    )
    return [WatchLink(link.country, link.broadcaster, link.subscription) for link in links]
