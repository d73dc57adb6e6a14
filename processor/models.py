"""Data models for the schedule sync pipeline."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Sport(str, Enum):
    """Supported sports."""
    F1 = 'F1'
    NASCAR = 'NASCAR'
    RALLY = 'Rally'
    CRICKET = 'Cricket'
    FOOTBALL = 'Football'

    @property
    def slug(self) -> str:
        return self.value.lower()

    @classmethod
    def from_slug(cls, value: str) -> 'Sport':
        """
        Resolve a sport from its slug or display value.

        Args:
            value: Sport identifier such as "f1" or "Rally"

        Returns:
            Matching Sport

        Raises:
            ValueError: If the value names no supported sport
        """
        wanted = (value or '').strip().lower()
        for sport in cls:
            if sport.slug == wanted:
                return sport
        raise ValueError(
            f"Unsupported sport: {value}. Supported sports: "
            f"{', '.join(sport.slug for sport in cls)}"
        )


class EventStatus(str, Enum):
    UPCOMING = 'upcoming'
    LIVE = 'live'
    COMPLETED = 'completed'


class UpsertOutcome(str, Enum):
    CREATED = 'created'
    SKIPPED = 'skipped'


@dataclass
class RawEvent:
    """Event as produced by a source adapter."""
    sport: Sport
    name: str
    date: str
    time: str
    timezone: str
    location: str
    circuit: Optional[str] = None
    venue: Optional[str] = None
    country: Optional[str] = None
    teams: List[str] = field(default_factory=list)
    status: EventStatus = EventStatus.UPCOMING


@dataclass
class NormalizedEvent:
    """Event with date and time expressed in the display time zone."""
    sport: Sport
    name: str
    date: str
    time: str
    timezone: str
    location: str
    circuit: Optional[str] = None
    venue: Optional[str] = None
    country: Optional[str] = None
    teams: List[str] = field(default_factory=list)
    status: EventStatus = EventStatus.UPCOMING


@dataclass
class ScheduleSession:
    session: str
    date: str
    time: str


@dataclass
class WatchLink:
    country: str
    broadcaster: str
    subscription: bool


@dataclass
class Series:
    """Series (sport category) a race belongs to."""
    id: str
    name: str
    color: str
    icon: str
    created_at: str


@dataclass
class StoredRace:
    """Race row as persisted in the races table, with its series joined on read."""
    id: str
    name: str
    date: str
    circuit: str
    country: str
    series_id: str
    schedule: List[ScheduleSession]
    watch_links: List[WatchLink]
    track_map: Optional[str]
    created_at: str
    updated_at: str
    series: Optional[Series] = None


@dataclass
class SyncResult:
    """Result of syncing one sport."""
    sport: str
    total: int = 0
    added: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict:
        return {
            'total': self.total,
            'added': self.added,
            'skipped': self.skipped,
            'errors': self.error_count,
            'error_messages': list(self.errors),
        }


@dataclass
class SyncSummary:
    """Aggregated result of syncing every sport."""
    results: Dict[str, SyncResult] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(result.total for result in self.results.values())

    @property
    def added(self) -> int:
        return sum(result.added for result in self.results.values())

    @property
    def skipped(self) -> int:
        return sum(result.skipped for result in self.results.values())

    @property
    def errors(self) -> List[str]:
        messages = []
        for result in self.results.values():
            messages.extend(result.errors)
        return messages

    def to_dict(self) -> Dict:
        return {
            'summary': {
                'total': self.total,
                'added': self.added,
                'skipped': self.skipped,
                'errors': len(self.errors),
            },
            'details': {
                sport: result.to_dict()
                for sport, result in self.results.items()
            },
            'errors': self.errors,
        }
