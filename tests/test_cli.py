from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from youthbook import cli
from youthbook.testing.factories import create_programs


@pytest.mark.asyncio
async def test_list_programs_prints_one_page(
    db_session: AsyncSession, capsys: pytest.CaptureFixture[str]
) -> None:
    programs = await create_programs(db_session, 3)

    await cli._list_programs(2, None, None)

    out = capsys.readouterr().out
    assert str(programs[2].id) in out
    assert str(programs[0].id) not in out
    assert "2 programs; has_more=True" in out
    assert "next cursor: " in out
