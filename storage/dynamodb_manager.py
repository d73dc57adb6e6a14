"""DynamoDB manager for race and series storage operations."""
import json
import logging
import uuid
from dataclasses import asdict
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Union
from zoneinfo import ZoneInfo

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from processor.event_normalizer import country_from_location
from processor.models import (
    NormalizedEvent,
    ScheduleSession,
    Series,
    Sport,
    StoredRace,
    SyncResult,
    UpsertOutcome,
    WatchLink,
)
from settings import DEFAULT_DISPLAY_TIMEZONE
from storage.defaults import series_defaults_for, series_key_for, watch_links_for
from storage.tables import RACE_ID_INDEX

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'


def natural_key(name: str, race_date: Union[str, date]) -> str:
    """
    Build the de-duplication key for a race.

    Args:
        name: Race name, compared case-insensitively
        race_date: Calendar date (date or YYYY-MM-DD string)

    Returns:
        Key of the form "<lower-cased name>#<YYYY-MM-DD>"

    Raises:
        ValueError: If race_date is not a valid calendar date
    """
    if isinstance(race_date, datetime):
        race_date = race_date.date()
    if not isinstance(race_date, date):
        race_date = datetime.strptime(race_date.strip(), '%Y-%m-%d').date()
    return f"{name.strip().lower()}#{race_date.isoformat()}"


def _is_conditional_check_failure(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code') == CONDITIONAL_CHECK_FAILED


class DynamoDBManager:
    """Manager for DynamoDB race and series operations."""

    def __init__(self, races_table_name: str = 'races',
                 series_table_name: str = 'series',
                 region_name: Optional[str] = None,
                 endpoint_url: Optional[str] = None,
                 display_timezone: str = DEFAULT_DISPLAY_TIMEZONE):
        """
        Initialize DynamoDB resource and table references.

        Args:
            races_table_name: Name of the races table
            series_table_name: Name of the series table
            region_name: AWS region (default: from the environment)
            endpoint_url: Alternative endpoint, e.g. DynamoDB Local
            display_timezone: Zone race timestamps are stored in
        """
        self.dynamodb = boto3.resource(
            'dynamodb', region_name=region_name, endpoint_url=endpoint_url
        )
        self.races_table = self.dynamodb.Table(races_table_name)
        self.series_table = self.dynamodb.Table(series_table_name)
        self.display_timezone = display_timezone
        self._series_ids: Dict[Sport, str] = {}
        logger.info(
            f"Initialized DynamoDBManager for tables: "
            f"{races_table_name}, {series_table_name}"
        )

    def exists(self, name: str, race_date: Union[str, date]) -> bool:
        """
        Check whether a race with this name exists on this calendar date.

        Args:
            name: Race name (case-insensitive)
            race_date: Calendar date

        Returns:
            True if a matching race is stored
        """
        return self._get_race_item(natural_key(name, race_date)) is not None

    def find_by_name_and_date(self, name: str,
                              race_date: Union[str, date]) -> Optional[StoredRace]:
        item = self._get_race_item(natural_key(name, race_date))
        return self._with_series(self._item_to_race(item)) if item else None

    def upsert_events(self, events: List[NormalizedEvent],
                      result: SyncResult) -> SyncResult:
        """
        Insert every event not already stored, recording counts in result.

        A failure for one event is recorded as an error and processing moves
        on to the next event.

        Args:
            events: Normalized events to store
            result: SyncResult to accumulate into

        Returns:
            The same SyncResult
        """
        for event in events:
            try:
                outcome = self.upsert(event)
            except Exception as e:
                error_msg = f"Failed to process event {event.name}: {e}"
                logger.error(error_msg)
                result.errors.append(error_msg)
                continue

            if outcome == UpsertOutcome.CREATED:
                result.added += 1
            else:
                result.skipped += 1

        return result

    def upsert(self, event: NormalizedEvent) -> UpsertOutcome:
        """
        Store an event as a new race unless it already exists.

        Args:
            event: Normalized event

        Returns:
            UpsertOutcome.CREATED if a race was written, SKIPPED otherwise

        Raises:
            ValueError: If the event date or time is malformed
            ClientError: On storage errors other than a duplicate key
        """
        key = natural_key(event.name, event.date)

        if self._get_race_item(key) is not None:
            logger.info(f"Skipping existing race: {event.name} on {event.date}")
            return UpsertOutcome.SKIPPED

        starts_at = self._race_timestamp(event)
        series_id = self.resolve_series_id(event.sport)
        schedule = [ScheduleSession(session='Race', date=event.date, time=event.time)]
        now = datetime.now(timezone.utc).isoformat()

        item = {
            'natural_key': key,
            'id': str(uuid.uuid4()),
            'name': event.name,
            'race_date': starts_at.date().isoformat(),
            'date': starts_at.isoformat(),
            'circuit': event.circuit or event.location,
            'country': event.country or country_from_location(event.location),
            'series_id': series_id,
            'schedule': json.dumps([asdict(session) for session in schedule]),
            'watch_links': json.dumps(
                [asdict(link) for link in watch_links_for(event.sport)]
            ),
            'created_at': now,
            'updated_at': now,
        }

        try:
            self._put_race(item)
        except ClientError as e:
            if _is_conditional_check_failure(e):
                logger.info(
                    f"Race {event.name} on {event.date} was stored concurrently, "
                    f"skipping"
                )
                return UpsertOutcome.SKIPPED
            raise

        logger.info(f"Added race: {event.name} on {event.date}")
        return UpsertOutcome.CREATED

    def resolve_series_id(self, sport: Sport) -> str:
        """
        Find the series for a sport, creating it with defaults if absent.

        Args:
            sport: Sport the series represents

        Returns:
            Series id
        """
        if sport in self._series_ids:
            return self._series_ids[sport]

        series_key = series_key_for(sport)
        defaults = series_defaults_for(sport)

        item = self.series_table.get_item(Key={'id': series_key}).get('Item')
        if item is None:
            item = self._find_series_by_name({series_key, defaults['name'].lower()})
        if item is None:
            item = self._create_series(series_key, defaults)

        self._series_ids[sport] = item['id']
        return item['id']

    def get_series(self, series_id: str) -> Optional[Series]:
        item = self.series_table.get_item(Key={'id': series_id}).get('Item')
        return self._item_to_series(item) if item else None

    def get_race(self, race_id: str) -> Optional[StoredRace]:
        """
        Retrieve a race by its id.

        Args:
            race_id: Race id

        Returns:
            StoredRace or None if not found
        """
        response = self.races_table.query(
            IndexName=RACE_ID_INDEX,
            KeyConditionExpression=Key('id').eq(race_id)
        )
        items = response.get('Items', [])
        return self._with_series(self._item_to_race(items[0])) if items else None

    def get_all_races(self) -> List[StoredRace]:
        """
        Retrieve all races using Scan operation, ordered by start time.

        Each race carries its series (name, color, icon) when the series
        row exists.

        Returns:
            List of StoredRace objects
        """
        logger.info("Scanning races table")

        try:
            items = self._scan_all(self.races_table)
        except ClientError as e:
            logger.error(f"Error scanning races table: {e}")
            raise

        series = {
            item['id']: self._item_to_series(item)
            for item in self._scan_all(self.series_table)
        }
        races = [self._item_to_race(item) for item in items]
        for race in races:
            race.series = series.get(race.series_id)
        races.sort(key=lambda race: datetime.fromisoformat(race.date))
        logger.info(f"Retrieved {len(races)} races from DynamoDB")
        return races

    def get_upcoming_races(self, now: Optional[datetime] = None,
                           limit: Optional[int] = None) -> List[StoredRace]:
        """
        Retrieve races starting after now, soonest first.

        Args:
            now: Reference instant (default: current UTC time)
            limit: Maximum number of races to return

        Returns:
            List of StoredRace objects
        """
        now = now or datetime.now(timezone.utc)
        upcoming = [
            race for race in self.get_all_races()
            if datetime.fromisoformat(race.date) > now
        ]
        return upcoming[:limit] if limit else upcoming

    def _with_series(self, race: StoredRace) -> StoredRace:
        if race.series_id:
            race.series = self.get_series(race.series_id)
        return race

    def _put_race(self, item: dict) -> None:
        self.races_table.put_item(
            Item=item,
            ConditionExpression='attribute_not_exists(natural_key)'
        )

    def _get_race_item(self, key: str) -> Optional[dict]:
        return self.races_table.get_item(Key={'natural_key': key}).get('Item')

    def _find_series_by_name(self, names: set) -> Optional[dict]:
        for item in self._scan_all(self.series_table):
            if item.get('name', '').lower() in names or item.get('id') in names:
                return item
        return None

    def _create_series(self, series_key: str, defaults: Dict[str, str]) -> dict:
        item = {
            'id': series_key,
            'name': defaults['name'],
            'color': defaults['color'],
            'icon': defaults['icon'],
            'created_at': datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.series_table.put_item(
                Item=item,
                ConditionExpression='attribute_not_exists(id)'
            )
        except ClientError as e:
            if not _is_conditional_check_failure(e):
                raise
            # Created by a concurrent sync
            return self.series_table.get_item(Key={'id': series_key})['Item']

        logger.info(f"Created series {series_key} ({defaults['name']})")
        return item

    @staticmethod
    def _scan_all(table) -> List[dict]:
        response = table.scan()
        items = response.get('Items', [])

        # Handle pagination
        while 'LastEvaluatedKey' in response:
            response = table.scan(ExclusiveStartKey=response['LastEvaluatedKey'])
            items.extend(response.get('Items', []))

        return items

    def _race_timestamp(self, event: NormalizedEvent) -> datetime:
        """Combine the event's date and time in the display zone."""
        return datetime.strptime(
            f"{event.date.strip()} {event.time.strip()}", '%Y-%m-%d %H:%M'
        ).replace(tzinfo=ZoneInfo(self.display_timezone))

    @staticmethod
    def _item_to_series(item: dict) -> Series:
        return Series(
            id=item['id'],
            name=item['name'],
            color=item.get('color', ''),
            icon=item.get('icon', ''),
            created_at=item.get('created_at', ''),
        )

    @staticmethod
    def _item_to_race(item: dict) -> StoredRace:
        """
        Convert DynamoDB item to StoredRace object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            StoredRace with schedule and watch links deserialized
        """
        schedule = item.get('schedule') or '[]'
        watch_links = item.get('watch_links') or '[]'
        if isinstance(schedule, str):
            schedule = json.loads(schedule)
        if isinstance(watch_links, str):
            watch_links = json.loads(watch_links)

        return StoredRace(
            id=item['id'],
            name=item['name'],
            date=item['date'],
            circuit=item.get('circuit', ''),
            country=item.get('country', ''),
            series_id=item.get('series_id', ''),
            schedule=[ScheduleSession(**session) for session in schedule],
            watch_links=[
                WatchLink(
                    country=link['country'],
                    broadcaster=link['broadcaster'],
                    subscription=bool(link['subscription'])
                )
                for link in watch_links
            ],
            track_map=item.get('track_map'),
            created_at=item.get('created_at', ''),
            updated_at=item.get('updated_at', ''),
        )
