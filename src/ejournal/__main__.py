# ejournal/__main__.py
# ================================================================================================
# Entry point for the ejournal CLI:
#   python -m ejournal serve
#   python -m ejournal init-db
#   python -m ejournal seed-time-slots
# ================================================================================================
from __future__ import annotations

import asyncio
from typing import Optional

import typer
from sqlalchemy import select

from ejournal.core.config import get_settings
from ejournal.db.models import LessonSlot
from ejournal.db.session import build_engine, build_sessionmaker
from ejournal.main import create_schema
from ejournal.services.time_slots import DEFAULT_SLOT_TIMES

app = typer.Typer(help="E-Journal API")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to APP_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (defaults to APP_PORT)"),
    reload: bool = typer.Option(False, help="Auto-reload on code changes"),
) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ejournal.main:create_app",
        factory=True,
        host=host or settings.APP_HOST,
        port=port or settings.APP_PORT,
        reload=reload,
        log_config=None,
    )


async def _init_db() -> None:
    engine = build_engine(get_settings())
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


async def _seed_time_slots() -> int:
    engine = build_engine(get_settings())
    added = 0
    try:
        async with build_sessionmaker(engine)() as session:
            existing = set(
                (await session.execute(select(LessonSlot.slot_number).where(LessonSlot.class_id.is_(None))))
                .scalars()
                .all()
            )
            for number, start, end in DEFAULT_SLOT_TIMES:
                if number in existing:
                    continue
                session.add(LessonSlot(class_id=None, slot_number=number, start_time=start, end_time=end))
                added += 1
            await session.commit()
    finally:
        await engine.dispose()
    return added


@app.command("init-db")
def init_db() -> None:
    """Create all tables (use alembic for upgrades of an existing database)."""
    asyncio.run(_init_db())
    typer.echo("Tables created.")


@app.command("seed-time-slots")
def seed_time_slots() -> None:
    """Insert the default lesson time slots that are missing."""
    added = asyncio.run(_seed_time_slots())
    typer.echo(f"Added {added} default time slot(s).")


if __name__ == "__main__":
    app()
