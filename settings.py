"""Runtime configuration read from environment variables."""
import os
from dataclasses import dataclass
from typing import Optional

ACTIVE_ENVIRONMENTS = ('production', 'staging')
DEFAULT_DISPLAY_TIMEZONE = 'Asia/Kolkata'


@dataclass
class Settings:
    """Configuration shared by the Lambda handler and the scheduler process."""
    races_table_name: str = 'races'
    series_table_name: str = 'series'
    aws_region: Optional[str] = None
    dynamodb_endpoint_url: Optional[str] = None
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    max_retries: int = 3
    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE
    app_env: str = 'development'

    @property
    def is_active(self) -> bool:
        """True when scheduled syncs should be armed."""
        return self.app_env.lower() in ACTIVE_ENVIRONMENTS

    @classmethod
    def from_env(cls) -> 'Settings':
        """
        Build settings from environment variables.

        Returns:
            Settings populated from os.environ, falling back to defaults
        """
        return cls(
            races_table_name=os.environ.get('RACES_TABLE_NAME', 'races'),
            series_table_name=os.environ.get('SERIES_TABLE_NAME', 'series'),
            aws_region=os.environ.get('AWS_REGION') or None,
            dynamodb_endpoint_url=os.environ.get('DYNAMODB_ENDPOINT_URL') or None,
            log_level=os.environ.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=int(os.environ.get('TIMEOUT_SECONDS', '30')),
            max_retries=int(os.environ.get('MAX_RETRIES', '3')),
            display_timezone=os.environ.get(
                'DISPLAY_TIMEZONE', DEFAULT_DISPLAY_TIMEZONE
            ),
            app_env=os.environ.get('APP_ENV', 'development'),
        )
