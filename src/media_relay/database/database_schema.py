import asyncpg

# Statements run one by one so the schema also applies through
# single-statement drivers (the SQLite adapter used by the tests).
SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS queue_records (
        id SERIAL PRIMARY KEY,
        type VARCHAR(50) NOT NULL,
        message JSONB NOT NULL,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_queue_records_type ON queue_records(type)",
]


async def create_schema(conn: asyncpg.Connection):
    """Create tables and indexes for the queue store"""
    try:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
    except Exception as e:
        raise RuntimeError(f"Failed to create schema: {e}") from e


async def truncate_all_tables(conn: asyncpg.Connection):
    """Remove every stored record (used by maintenance scripts and tests)"""
    await conn.execute("DELETE FROM queue_records")
