"""Sync orchestrator coordinating adapters, normalizer and storage."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Union

from processor.event_normalizer import EventNormalizer, event_start
from processor.models import NormalizedEvent, Sport, SyncResult, SyncSummary
from scraper.base_adapter import SourceAdapter
from scraper.registry import get_adapter, supported_sports
from storage.dynamodb_manager import DynamoDBManager

logger = logging.getLogger(__name__)


def describe_result(sport: Sport, result: SyncResult) -> str:
    """Human-readable summary of a single-sport sync."""
    message = (
        f"{sport.value} schedule sync completed. Added {result.added} new events, "
        f"skipped {result.skipped} existing events."
    )
    if result.errors:
        message += f" {result.error_count} errors occurred."
    return message


def describe_summary(summary: SyncSummary) -> str:
    """Human-readable summary of an all-sports sync."""
    message = (
        f"All sports sync completed. Added {summary.added} new events, "
        f"skipped {summary.skipped} existing events."
    )
    if summary.errors:
        message += f" {len(summary.errors)} errors occurred."
    return message


class SyncOrchestrator:
    """Runs the fetch, normalize and upsert pipeline for one or all sports."""

    def __init__(self, storage: DynamoDBManager,
                 normalizer: Optional[EventNormalizer] = None,
                 adapter_factory: Callable[..., SourceAdapter] = get_adapter,
                 adapter_options: Optional[dict] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the orchestrator.

        Args:
            storage: Upsert engine the events are written to
            normalizer: Event normalizer (default: display zone Asia/Kolkata)
            adapter_factory: Callable returning the adapter for a sport
            adapter_options: Keyword arguments passed to adapter_factory
            clock: Returns the reference "now" (default: current UTC time)
        """
        self.storage = storage
        self.normalizer = normalizer or EventNormalizer()
        self.adapter_factory = adapter_factory
        self.adapter_options = adapter_options or {}
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def sync_one(self, sport: Union[Sport, str]) -> SyncResult:
        """
        Fetch, normalize and store the upcoming events of one sport.

        A failure escaping the adapter or the batch is recorded as a single
        sport-level error rather than raised.

        Args:
            sport: Sport or sport slug

        Returns:
            SyncResult with total, added, skipped and error messages

        Raises:
            ValueError: If the sport is not supported
        """
        sport = self._resolve_sport(sport)
        result = SyncResult(sport=sport.slug)
        logger.info(f"Starting {sport.value} schedule sync")

        try:
            events = self._fetch_normalized(sport)
            result.total = len(events)
            self.storage.upsert_events(events, result)
        except Exception as e:
            error_msg = f"{sport.value} fetch failed: {e}"
            logger.error(error_msg, exc_info=True)
            result.errors.append(error_msg)

        logger.info(
            f"{sport.value} sync completed: {result.added} added, "
            f"{result.skipped} skipped, {result.error_count} errors",
            extra={
                'sport': sport.slug,
                'total': result.total,
                'added': result.added,
                'skipped': result.skipped,
                'errors': result.error_count,
            }
        )
        return result

    def sync_all(self) -> SyncSummary:
        """
        Sync every supported sport in turn.

        Returns:
            SyncSummary with per-sport results and aggregate totals
        """
        logger.info("Starting sync for all sports")
        summary = SyncSummary()

        for sport in supported_sports():
            summary.results[sport.slug] = self.sync_one(sport)

        logger.info(
            f"All sports sync completed: {summary.added} added, "
            f"{summary.skipped} skipped, {len(summary.errors)} errors"
        )
        return summary

    def preview(self, sport: Union[Sport, str, None] = None,
                window_days: Optional[int] = None,
                limit: Optional[int] = None) -> List[NormalizedEvent]:
        """
        Fetch and normalize upcoming events without storing them.

        With no sport every supported sport is fetched; a sport whose fetch
        fails is logged and left out.

        Args:
            sport: Sport or sport slug (default: all sports)
            window_days: Keep only events starting within this many days of now
            limit: Maximum number of events to return

        Returns:
            Normalized events sorted by start
        """
        now = self.clock()
        sports = [self._resolve_sport(sport)] if sport else supported_sports()
        events = []

        for each in sports:
            try:
                events.extend(self._fetch_normalized(each, now))
            except Exception as e:
                if sport:
                    raise
                logger.error(f"{each.value} preview failed: {e}")

        if window_days is not None:
            horizon = now + timedelta(days=window_days)
            events = [
                event for event in events
                if self._starts_between(event, now, horizon)
            ]

        events.sort(key=lambda event: (event.date, event.time))
        return events[:limit] if limit else events

    def _fetch_normalized(self, sport: Sport,
                          now: Optional[datetime] = None) -> List[NormalizedEvent]:
        adapter = self.adapter_factory(sport, **self.adapter_options)
        raw_events = adapter.fetch(now=now or self.clock())
        logger.info(f"Fetched {len(raw_events)} raw {sport.value} events")
        return self.normalizer.normalize_events(raw_events)

    @staticmethod
    def _starts_between(event: NormalizedEvent, start: datetime,
                        end: datetime) -> bool:
        event_at = event_start(event)
        return event_at is not None and start <= event_at <= end

    @staticmethod
    def _resolve_sport(sport: Union[Sport, str]) -> Sport:
        if isinstance(sport, Sport):
            return sport
        return Sport.from_slug(sport)
