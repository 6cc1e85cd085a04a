from __future__ import annotations

import argparse
import asyncio

import youthbook.db as db
from youthbook.db.models import Base, ProgramCategory
from youthbook.errors import InvalidCursor
from youthbook.logging_config import configure_logging
from youthbook.services.catalog import browse_programs
from youthbook.settings import get_settings


async def _init_db() -> None:
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _list_programs(
    limit: int | None, cursor: str | None, category: ProgramCategory | None
) -> None:
    async with db.SessionMaker() as session:
        page = await browse_programs(session, limit=limit, cursor=cursor, category=category)

    for program in page.items:
        print(f"{program.id}  v{program.version}  {program.category}  {program.title}")
    print(f"{page.returned_count} programs; has_more={page.has_more}")
    if page.next_cursor is not None:
        print(f"next cursor: {page.next_cursor}")


def main() -> None:
    parser = argparse.ArgumentParser(prog="youthbook")
    sub = parser.add_subparsers(dest="cmd", required=True)
    settings = get_settings()

    sub.add_parser("init-db")
    listing = sub.add_parser("list-programs")
    listing.add_argument("--limit", type=int, default=settings.default_page_size)
    listing.add_argument("--cursor", default=None)
    listing.add_argument(
        "--category",
        choices=[category.value for category in ProgramCategory],
        default=None,
    )

    args = parser.parse_args()
    configure_logging(settings)

    if args.cmd == "init-db":
        asyncio.run(_init_db())
    elif args.cmd == "list-programs":
        category = ProgramCategory(args.category) if args.category else None
        try:
            asyncio.run(_list_programs(args.limit, args.cursor, category))
        except InvalidCursor:
            parser.error("invalid --cursor; omit it to start from the first page")
    else:
        raise SystemExit(2)
