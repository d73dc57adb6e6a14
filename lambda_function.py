"""AWS Lambda handler for on-demand and EventBridge-triggered schedule syncs."""
import json
import logging
import time
from dataclasses import asdict
from typing import Any, Dict, Optional

from logging_config import setup_logging
from orchestrator.sync_orchestrator import (
    SyncOrchestrator,
    describe_result,
    describe_summary,
)
from processor.event_normalizer import EventNormalizer
from processor.models import Sport
from settings import Settings
from storage.dynamodb_manager import DynamoDBManager

ALL_SPORTS = 'all'
ACTIONS = ('sync', 'preview', 'races', 'upcoming')
PREVIEW_WINDOW_DAYS = 7
PREVIEW_LIMIT = 10


def build_orchestrator(settings: Settings) -> SyncOrchestrator:
    """
    Wire storage, normalizer and adapters from settings.

    Args:
        settings: Runtime configuration

    Returns:
        SyncOrchestrator ready to run
    """
    storage = DynamoDBManager(
        races_table_name=settings.races_table_name,
        series_table_name=settings.series_table_name,
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url,
        display_timezone=settings.display_timezone,
    )
    return SyncOrchestrator(
        storage=storage,
        normalizer=EventNormalizer(settings.display_timezone),
        adapter_options={
            'timeout': settings.timeout_seconds,
            'max_retries': settings.max_retries,
            'display_timezone': settings.display_timezone,
        },
    )


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {'statusCode': status_code, 'body': json.dumps(body, default=str)}


def _event_value(event: Dict[str, Any], name: str) -> Any:
    """Read a parameter from API Gateway parameters, the payload or EventBridge detail."""
    path_params = event.get('pathParameters') or {}
    query_params = event.get('queryStringParameters') or {}
    detail = event.get('detail') or {}
    for source in (path_params, query_params, event, detail):
        value = source.get(name)
        if value is not None and value != '':
            return value
    return None


def _requested_target(event: Dict[str, Any]) -> str:
    target = _event_value(event, 'sport')
    return str(target if target is not None else ALL_SPORTS).strip().lower()


def _requested_limit(event: Dict[str, Any], default: Optional[int]) -> Optional[int]:
    """
    Read the optional result limit.

    Raises:
        ValueError: If the limit is not a positive integer
    """
    value = _event_value(event, 'limit')
    if value is None:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        limit = 0
    if limit < 1:
        raise ValueError(f"Invalid limit: {value}. Limit must be a positive integer")
    return limit


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for schedule syncs and schedule reads.

    Payload: {"sport": "<slug>|all", "action": "<action>", "limit": N}.

    Actions:
        sync: scrape and store one sport, or every sport (default)
        preview: scrape without storing, events of the next 7 days
            (limit default 10)
        races: every stored race with its series
        upcoming: stored races starting after now (optional limit)

    Args:
        event: API Gateway or EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and a JSON body of
        {success, data, message}
    """
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    event = event or {}
    target = _requested_target(event)
    action = str(_event_value(event, 'action') or 'sync').strip().lower()
    start_time = time.time()

    logger.info(
        "Lambda execution started",
        extra={'target': target, 'action': action, 'environment': settings.app_env}
    )

    if action not in ACTIONS:
        return _response(400, {
            'success': False,
            'error': f"Unsupported action: {action}. "
                     f"Supported actions: {', '.join(ACTIONS)}",
        })

    sport = None
    try:
        if target != ALL_SPORTS:
            sport = Sport.from_slug(target)
        limit = _requested_limit(
            event, PREVIEW_LIMIT if action == 'preview' else None
        )
    except ValueError as e:
        return _response(400, {'success': False, 'error': str(e)})

    try:
        orchestrator = build_orchestrator(settings)

        if action == 'preview':
            events = orchestrator.preview(
                sport, window_days=PREVIEW_WINDOW_DAYS, limit=limit
            )
            body = {
                'success': True,
                'data': [asdict(e) for e in events],
                'message': f"Successfully fetched {len(events)} upcoming events "
                           f"in the next {PREVIEW_WINDOW_DAYS} days",
            }
        elif action == 'races':
            races = orchestrator.storage.get_all_races()
            body = {
                'success': True,
                'data': [asdict(race) for race in races],
                'message': f"Successfully fetched {len(races)} races from database",
            }
        elif action == 'upcoming':
            races = orchestrator.storage.get_upcoming_races(limit=limit)
            body = {
                'success': True,
                'data': [asdict(race) for race in races],
                'message': f"Successfully fetched {len(races)} upcoming races "
                           f"from database",
            }
        elif sport is None:
            summary = orchestrator.sync_all()
            body = {
                'success': True,
                'data': summary.to_dict(),
                'message': describe_summary(summary),
            }
        else:
            result = orchestrator.sync_one(sport)
            body = {
                'success': True,
                'data': result.to_dict(),
                'message': describe_result(sport, result),
            }

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _response(500, {
            'success': False,
            'error': f"Failed to {action} {target} schedule",
            'message': str(e),
        })

    duration = time.time() - start_time
    logger.info(
        "Lambda execution completed successfully",
        extra={'duration_seconds': round(duration, 2), 'target': target}
    )
    return _response(200, body)
