from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

import youthbook.db as db
from youthbook.db.repos import ProgramRepository, VersionedChange
from youthbook.errors import ConflictError, NotFoundError, ValidationError
from youthbook.testing.factories import create_programs


async def _stored_state(ids: list[uuid.UUID]) -> dict[uuid.UUID, tuple[int, int]]:
    async with db.SessionMaker() as verify_session:
        programs = await ProgramRepository(verify_session).get_many(ids)
        return {p.id: (p.version, p.capacity) for p in programs}


@pytest.mark.asyncio
async def test_empty_batch_is_a_no_op(db_session: AsyncSession) -> None:
    assert await ProgramRepository(db_session).submit_batch([]) == []
    assert not db_session.in_transaction()


@pytest.mark.asyncio
async def test_batch_updates_every_record_in_input_order(db_session: AsyncSession) -> None:
    programs = await create_programs(db_session, 3)
    ids = [p.id for p in programs]
    changes = [
        VersionedChange(ids[2], 1, {"capacity": 12}),
        VersionedChange(ids[0], 1, {"capacity": 10}),
        VersionedChange(ids[1], 1, {"capacity": 11}),
    ]

    updated = await ProgramRepository(db_session).submit_batch(changes)

    assert [p.id for p in updated] == [ids[2], ids[0], ids[1]]
    assert all(p.version == 2 for p in updated)
    assert await _stored_state(ids) == {
        ids[0]: (2, 10),
        ids[1]: (2, 11),
        ids[2]: (2, 12),
    }


@pytest.mark.asyncio
async def test_stale_entry_rolls_back_the_whole_batch(db_session: AsyncSession) -> None:
    programs = await create_programs(db_session, 2)
    ids = [p.id for p in programs]
    repo = ProgramRepository(db_session)
    await repo.update_versioned(ids[1], 1, {"capacity": 25})

    with pytest.raises(ConflictError) as excinfo:
        await repo.submit_batch(
            [
                VersionedChange(ids[0], 1, {"capacity": 99}),
                VersionedChange(ids[1], 1, {"capacity": 99}),
            ]
        )

    assert excinfo.value.batch_index == 1
    assert excinfo.value.record_id == ids[1]
    assert await _stored_state(ids) == {ids[0]: (1, 20), ids[1]: (2, 25)}


@pytest.mark.asyncio
async def test_missing_entry_rolls_back_the_whole_batch(db_session: AsyncSession) -> None:
    programs = await create_programs(db_session, 2)
    ids = [p.id for p in programs]
    missing = uuid.uuid4()

    with pytest.raises(NotFoundError) as excinfo:
        await ProgramRepository(db_session).submit_batch(
            [
                VersionedChange(ids[0], 1, {"capacity": 5}),
                VersionedChange(ids[1], 1, {"capacity": 6}),
                VersionedChange(missing, 1, {"capacity": 7}),
            ]
        )

    assert excinfo.value.batch_index == 2
    assert excinfo.value.record_id == missing
    assert await _stored_state(ids) == {ids[0]: (1, 20), ids[1]: (1, 20)}


@pytest.mark.asyncio
async def test_invalid_entry_rolls_back_the_whole_batch(db_session: AsyncSession) -> None:
    programs = await create_programs(db_session, 2)
    ids = [p.id for p in programs]

    with pytest.raises(ValidationError) as excinfo:
        await ProgramRepository(db_session).submit_batch(
            [
                VersionedChange(ids[0], 1, {"capacity": 5}),
                VersionedChange(ids[1], 1, {"capacity": -5}),
            ]
        )

    assert excinfo.value.batch_index == 1
    assert "capacity" in excinfo.value.errors
    assert await _stored_state(ids) == {ids[0]: (1, 20), ids[1]: (1, 20)}
