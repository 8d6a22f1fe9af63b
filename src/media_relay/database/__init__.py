from . import postgres_connection
from .database_schema import create_schema, truncate_all_tables
from .postgres_connection import close_pool, get_pool
from .queue_operations import (
    MESSAGE_TYPE,
    count_submissions,
    insert_submission,
    take_random_submission,
)

__all__ = [
    "postgres_connection",
    "create_schema",
    "truncate_all_tables",
    "get_pool",
    "close_pool",
    "MESSAGE_TYPE",
    "count_submissions",
    "insert_submission",
    "take_random_submission",
]
