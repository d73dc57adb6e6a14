"""Mapping from sport to its source adapter."""
from typing import Dict, List, Type

from processor.models import Sport
from scraper.base_adapter import SourceAdapter
from scraper.motorsport import F1Adapter, NASCARAdapter, RallyAdapter
from scraper.team_sports import CricketAdapter, FootballAdapter

ADAPTERS: Dict[Sport, Type[SourceAdapter]] = {
    Sport.F1: F1Adapter,
    Sport.NASCAR: NASCARAdapter,
    Sport.RALLY: RallyAdapter,
    Sport.CRICKET: CricketAdapter,
    Sport.FOOTBALL: FootballAdapter,
}


def supported_sports() -> List[Sport]:
    """Sports with a registered adapter, in sync order."""
    return list(ADAPTERS)


def get_adapter(sport: Sport, **kwargs) -> SourceAdapter:
    """
    Instantiate the adapter registered for a sport.

    Args:
        sport: Sport to fetch
        **kwargs: Passed to the adapter constructor (timeout, max_retries, ...)

    Returns:
        SourceAdapter instance

    Raises:
        ValueError: If no adapter is registered for the sport
    """
    try:
        adapter_class = ADAPTERS[sport]
    except KeyError:
        raise ValueError(f"No adapter registered for sport: {sport}") from None
    return adapter_class(**kwargs)
