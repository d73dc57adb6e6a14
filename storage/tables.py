"""DynamoDB table definitions for races and series."""
import logging

logger = logging.getLogger(__name__)

RACE_ID_INDEX = 'id-index'


def create_tables(dynamodb, races_table_name: str = 'races',
                  series_table_name: str = 'series'):
    """
    Create the races and series tables.

    The races table is keyed by natural key so a conditional put enforces at
    most one race per (name, calendar date). Races are also reachable by id
    through a global secondary index.

    Args:
        dynamodb: boto3 DynamoDB service resource
        races_table_name: Name of the races table
        series_table_name: Name of the series table

    Returns:
        Tuple of (races_table, series_table)
    """
    races_table = dynamodb.create_table(
        TableName=races_table_name,
        KeySchema=[
            {'AttributeName': 'natural_key', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'natural_key', 'AttributeType': 'S'},
            {'AttributeName': 'id', 'AttributeType': 'S'}
        ],
        GlobalSecondaryIndexes=[
            {
                'IndexName': RACE_ID_INDEX,
                'KeySchema': [
                    {'AttributeName': 'id', 'KeyType': 'HASH'}
                ],
                'Projection': {'ProjectionType': 'ALL'}
            }
        ],
        BillingMode='PAY_PER_REQUEST'
    )

    series_table = dynamodb.create_table(
        TableName=series_table_name,
        KeySchema=[
            {'AttributeName': 'id', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )

    races_table.wait_until_exists()
    series_table.wait_until_exists()
    logger.info(f"Created tables: {races_table_name}, {series_table_name}")
    return races_table, series_table
