import asyncio
import json
import logging
import random
from typing import Optional

from ..types import QueueRecord, Submission
from .postgres_connection import get_pool

logger = logging.getLogger(__name__)

# Discriminator of submission records in queue_records
MESSAGE_TYPE = "message"

# A concurrent delete from another connection makes a take retry
TAKE_ATTEMPTS = 3

# Serializes takes inside this process
_take_lock = asyncio.Lock()


def _record_from_row(row) -> QueueRecord:
    document = row["message"]
    if isinstance(document, str):
        document = json.loads(document)
    return QueueRecord(
        record_id=row["id"], submission=Submission.from_document(document)
    )


async def count_submissions() -> int:
    """Number of submissions waiting to be published"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        count = await conn.fetchval(
            """
            SELECT COUNT(*) FROM queue_records WHERE type = $1
        """,
            MESSAGE_TYPE,
        )
        return count or 0


async def insert_submission(submission: Submission) -> QueueRecord:
    """Persist an accepted submission and return it with its record id"""
    pool = await get_pool()
    async with pool.acquire() as conn:
        record_id = await conn.fetchval(
            """
            INSERT INTO queue_records (type, message, created_at)
            VALUES ($1, $2::jsonb, NOW())
            RETURNING id
        """,
            MESSAGE_TYPE,
            json.dumps(submission.to_document()),
        )

    logger.debug(f"Stored {submission.kind.value} submission as record {record_id}")
    return QueueRecord(record_id=record_id, submission=submission)


async def take_random_submission() -> Optional[QueueRecord]:
    """
    Remove and return one submission chosen uniformly at random.

    Returns None when the queue is empty. The record is selected and deleted
    in one transaction and only returned if this call actually deleted it,
    so a record is never handed out twice.
    """
    async with _take_lock:
        for attempt in range(1, TAKE_ATTEMPTS + 1):
            pool = await get_pool()
            async with pool.acquire() as conn:
                async with conn.transaction():
                    count = await conn.fetchval(
                        """
                        SELECT COUNT(*) FROM queue_records WHERE type = $1
                    """,
                        MESSAGE_TYPE,
                    )
                    if not count:
                        return None

                    row = await conn.fetchrow(
                        """
                        SELECT id, message FROM queue_records
                        WHERE type = $1
                        ORDER BY id
                        LIMIT 1 OFFSET $2
                    """,
                        MESSAGE_TYPE,
                        random.randrange(count),
                    )
                    if row is not None:
                        status = await conn.execute(
                            """
                            DELETE FROM queue_records WHERE id = $1
                        """,
                            row["id"],
                        )
                        if status == "DELETE 1":
                            return _record_from_row(row)

            logger.warning(
                f"Queue record vanished while taking it (attempt {attempt}/{TAKE_ATTEMPTS})"
            )

        return None
