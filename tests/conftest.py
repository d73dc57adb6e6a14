"""Shared fixtures for DynamoDB-backed tests."""
import boto3
import pytest
from moto import mock_aws

from storage.dynamodb_manager import DynamoDBManager
from storage.tables import create_tables

RACES_TABLE = 'test-races'
SERIES_TABLE = 'test-series'


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Keep boto3 away from real AWS accounts."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def dynamodb_tables():
    """Create mock races and series tables."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        yield create_tables(dynamodb, RACES_TABLE, SERIES_TABLE)


@pytest.fixture
def dynamodb_manager(dynamodb_tables):
    """DynamoDBManager bound to the mock tables."""
    return DynamoDBManager(
        races_table_name=RACES_TABLE,
        series_table_name=SERIES_TABLE,
        region_name='us-east-1'
    )
