import pytest
from pytest_asyncio import is_async_test


def pytest_collection_modifyitems(items: list[pytest.Item]):
    for test in items:
        if is_async_test(test):
            # Mark async tests with session scope
            test.add_marker(pytest.mark.asyncio(loop_scope="session"), append=False)


# Load environment variables
from dotenv import load_dotenv

load_dotenv()

# Mute Logfire/Telegram logging
from media_relay.logging_setup import mute_logging_for_tests

mute_logging_for_tests()

# Mute mp for tests
from media_relay.common.mp import mute_mp_for_tests

mute_mp_for_tests()

import re

import aiosqlite

from media_relay.database import create_schema, postgres_connection
from media_relay.types import AdministratorSet

ADMIN_ID = 111
OWNER_ID = 100
STRANGER_ID = 555
CHAT_ID = -1001234567890


class _DummyTransactionContext:
    """Dummy transaction context manager for SQLite compatibility"""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass  # SQLite handles commits automatically in our execute method


class SQLiteConnectionAdapter:
    """Adapter to make aiosqlite connection compatible with asyncpg interface"""

    _dummy_transaction = _DummyTransactionContext()

    def __init__(self, sqlite_conn):
        self._conn = sqlite_conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass  # Connection is managed by the pool

    def _transform_query(self, query):
        """Transform PostgreSQL query syntax to SQLite-compatible syntax"""
        query = query.replace("NOW()", "CURRENT_TIMESTAMP")
        query = query.replace("::jsonb", "")
        query = query.replace("SERIAL PRIMARY KEY", "INTEGER PRIMARY KEY AUTOINCREMENT")
        # Convert PostgreSQL $1, $2, etc. to SQLite ? placeholders
        return re.sub(r"\$\d+", "?", query)

    async def execute(self, query, *args):
        """Execute a query (INSERT, UPDATE, DELETE)"""
        query = self._transform_query(query)
        cursor = await self._conn.execute(query, args)
        await self._conn.commit()
        # Return affected row count in PostgreSQL format (e.g., "DELETE 5")
        if cursor.rowcount is not None and cursor.rowcount >= 0:
            return f"{query.split()[0].upper()} {cursor.rowcount}"
        return None

    async def fetchrow(self, query, *args):
        query = self._transform_query(query)
        cursor = await self._conn.execute(query, args)
        row = await cursor.fetchone()
        await cursor.close()
        if not query.lstrip().upper().startswith("SELECT"):
            # INSERT ... RETURNING
            await self._conn.commit()
        return row

    async def fetchval(self, query, *args):
        row = await self.fetchrow(query, *args)
        return row[0] if row else None

    async def fetch(self, query, *args):
        query = self._transform_query(query)
        cursor = await self._conn.execute(query, args)
        rows = await cursor.fetchall()
        await cursor.close()
        return rows

    def transaction(self):
        """Return a transaction context manager (for PostgreSQL compatibility)"""
        return self._dummy_transaction

    async def close(self):
        await self._conn.close()


class SQLitePoolAdapter:
    """Adapter to make aiosqlite 'pool' compatible with asyncpg interface"""

    def __init__(self, sqlite_conn):
        self._conn = SQLiteConnectionAdapter(sqlite_conn)

    def acquire(self):
        """Return the connection (synchronous for asyncpg compatibility)"""
        return self._conn

    async def release(self, conn):
        pass

    async def close(self):
        await self._conn.close()


@pytest.fixture(scope="session")
async def test_pool():
    """In-memory SQLite database behind an asyncpg-like pool"""
    sqlite_conn = await aiosqlite.connect(":memory:")
    sqlite_conn.row_factory = aiosqlite.Row  # Enable dict-like access to rows

    pool = SQLitePoolAdapter(sqlite_conn)
    await create_schema(pool.acquire())

    try:
        yield pool
    finally:
        await pool.close()


@pytest.fixture(scope="session")
def patched_db_conn(test_pool):
    """Fixture to patch the global database pool for tests"""
    postgres_connection._pool = test_pool
    yield
    postgres_connection._pool = None


@pytest.fixture(scope="function")
async def clean_db(patched_db_conn, test_pool):
    """Ensure a clean database state before each test"""
    conn = test_pool.acquire()
    await conn.execute("DELETE FROM queue_records")
    yield test_pool


@pytest.fixture
def administrators():
    return AdministratorSet(admin_ids=frozenset({OWNER_ID, ADMIN_ID}), owner_id=OWNER_ID)
