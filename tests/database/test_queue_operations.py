import asyncio

import pytest

from media_relay.database import (
    count_submissions,
    insert_submission,
    take_random_submission,
)
from media_relay.database.queue_operations import MESSAGE_TYPE
from media_relay.types import CaptionProperties, Submission, SubmissionKind


def _submission(n: int) -> Submission:
    return Submission(
        kind=SubmissionKind.PHOTO,
        media_ref=f"file-{n}",
        properties=CaptionProperties(caption=f"caption {n}"),
    )


@pytest.mark.asyncio
async def test_empty_queue(clean_db):
    assert await count_submissions() == 0
    assert await take_random_submission() is None


@pytest.mark.asyncio
async def test_insert_increments_count(clean_db):
    record = await insert_submission(_submission(1))

    assert record.record_id is not None
    assert record.submission == _submission(1)
    assert await count_submissions() == 1


@pytest.mark.asyncio
async def test_insert_stores_document(clean_db):
    video = Submission(
        kind=SubmissionKind.VIDEO,
        media_ref="video-1",
        properties=CaptionProperties(
            caption="bold",
            caption_entities=[{"type": "bold", "offset": 0, "length": 4}],
        ),
    )
    record = await insert_submission(video)

    conn = clean_db.acquire()
    row = await conn.fetchrow(
        "SELECT type, message FROM queue_records WHERE id = $1", record.record_id
    )
    assert row["type"] == MESSAGE_TYPE
    assert '"kind": "video"' in row["message"]

    taken = await take_random_submission()
    assert taken.submission == video


@pytest.mark.asyncio
async def test_take_removes_record(clean_db):
    inserted = await insert_submission(_submission(1))

    taken = await take_random_submission()

    assert taken is not None
    assert taken.record_id == inserted.record_id
    assert taken.submission == inserted.submission
    assert await count_submissions() == 0
    assert await take_random_submission() is None


@pytest.mark.asyncio
async def test_take_drains_queue_without_duplicates(clean_db):
    inserted = [await insert_submission(_submission(n)) for n in range(5)]

    taken = [await take_random_submission() for _ in range(5)]

    assert sorted(record.record_id for record in taken) == sorted(
        record.record_id for record in inserted
    )
    assert await count_submissions() == 0


@pytest.mark.asyncio
async def test_concurrent_takes_never_share_a_record(clean_db):
    for n in range(4):
        await insert_submission(_submission(n))

    taken = await asyncio.gather(*(take_random_submission() for _ in range(6)))

    ids = [record.record_id for record in taken if record is not None]
    assert len(ids) == 4
    assert len(set(ids)) == 4
    assert taken.count(None) == 2


@pytest.mark.asyncio
async def test_caption_keys_survive_storage(clean_db):
    bare = Submission(kind=SubmissionKind.ANIMATION, media_ref="gif-1")
    await insert_submission(bare)

    taken = await take_random_submission()

    assert taken.submission.properties.is_empty
    assert taken.submission.properties.to_dict() == {}
