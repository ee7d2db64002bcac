"""
WayShare Backend - Seed Data Loader
====================================

What:  Loads fake/fixture data into the database from flat files.
How:   One semicolon-delimited `<table>.csv` per table, header row of column
       names. Files are read with aiofiles, cells are coerced by the column's
       SQLAlchemy type, and rows are bulk-inserted table by table in
       dependency order (profiles before members before rides ...).
Who:   Developers (`python -m wayshare.seed`) and the test-suite.

File format (fixtures/fake-data/rides.csv):
    id;start_location;end_location;start_time;end_time;is_recurring;member_id
    1;Lyon Part-Dieu;Grenoble;2024-07-01T08:00:00Z;;false;1

Cell coercion:
    ""                    → NULL
    Boolean columns       → true/false (also 1/0, yes/no)
    Integer columns       → int
    DateTime columns      → aware datetime (ISO 8601, trailing Z accepted)
    everything else       → the raw string

Missing files are skipped; a directory with no files loads nothing.
"""

import argparse
import asyncio
import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
from sqlalchemy import Boolean, DateTime, Integer, Table, func, insert, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wayshare.config import settings
from wayshare.database import async_session_factory, create_all
from wayshare.entities import ENTITIES
from wayshare.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

DELIMITER = ";"
TRUE_VALUES = {"true", "1", "yes"}
FALSE_VALUES = {"false", "0", "no"}


def coerce_cell(table: Table, column_name: str, raw: Optional[str]) -> Any:
    """
    Convert one CSV cell to the Python value for `table.c[column_name]`.

    Raises:
        ValidationError: unknown column, or a value the column type rejects
    """
    if column_name not in table.c:
        raise ValidationError(
            message=f"Unknown column '{column_name}' in {table.name}.csv",
            field=column_name,
        )
    if raw is None or raw.strip() == "":
        return None

    value = raw.strip()
    column_type = table.c[column_name].type
    try:
        if isinstance(column_type, Boolean):
            lowered = value.lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if isinstance(column_type, Integer):
            return int(value)
        if isinstance(column_type, DateTime) or isinstance(
            getattr(column_type, "impl", None), DateTime
        ):
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    except ValueError as e:
        raise ValidationError(
            message=f"Bad value for {table.name}.{column_name}: {e}",
            field=column_name,
        )
    return raw


async def read_rows(path: Path, table: Table) -> List[Dict[str, Any]]:
    """Read and coerce every data row of one seed file."""
    async with aiofiles.open(path, mode="r", encoding="utf-8", newline="") as f:
        content = await f.read()

    reader = csv.DictReader(io.StringIO(content), delimiter=DELIMITER)
    rows = []
    for row in reader:
        # DictReader files cells past the header under the None key
        if None in row:
            raise ValidationError(
                message=f"Line {reader.line_num} of {table.name}.csv has more cells than the header",
                context={"line": reader.line_num, "extra_cells": row[None]},
            )
        rows.append({name: coerce_cell(table, name, raw) for name, raw in row.items()})
    return rows


async def _reset_sequence(session: AsyncSession, table: Table) -> None:
    """After explicit-id inserts, move the PostgreSQL id sequence past MAX(id)."""
    if session.bind.dialect.name != "postgresql":
        return
    max_id = (await session.execute(select(func.max(table.c.id)))).scalar()
    if max_id is None:
        return
    await session.execute(
        text("SELECT setval(pg_get_serial_sequence(:table, 'id'), :value)"),
        {"table": table.name, "value": max_id},
    )


async def load_seed_data(session: AsyncSession, directory: Path) -> Dict[str, int]:
    """
    Insert every `<table>.csv` found in `directory`.

    Returns:
        {table name: rows inserted}, in load order. Tables without a file
        are reported with 0.

    Raises:
        ValidationError: a file names an unknown column or holds a bad value
        DatabaseError: the database rejected the rows
    """
    loaded: Dict[str, int] = {}
    for entity in ENTITIES:
        table = entity.mapper.record_class.__table__
        path = directory / f"{table.name}.csv"
        if not path.is_file():
            logger.debug("No seed file for %s", table.name)
            loaded[table.name] = 0
            continue

        rows = await read_rows(path, table)
        if rows:
            try:
                await session.execute(insert(table), rows)
                await _reset_sequence(session, table)
            except SQLAlchemyError as e:
                logger.error("Seeding %s failed: %s", table.name, e)
                raise DatabaseError(
                    message=f"Could not load seed data for {table.name}",
                    context={"table": table.name, "error_type": type(e).__name__},
                )
        loaded[table.name] = len(rows)
        logger.info("Seeded %d rows into %s", len(rows), table.name)
    return loaded


async def seed(directory: Optional[str] = None, create_tables: bool = False) -> Dict[str, int]:
    """Load seed data in one transaction, optionally creating the schema first."""
    seed_dir = Path(directory or settings.seed_data_dir)
    if create_tables:
        await create_all()
    async with async_session_factory() as session:
        async with session.begin():
            return await load_seed_data(session, seed_dir)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="python -m wayshare.seed",
        description="Load semicolon-delimited fake data into the WayShare database.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help=f"directory holding <table>.csv files (default: {settings.seed_data_dir})",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables from the ORM metadata before loading",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    loaded = asyncio.run(seed(args.directory, create_tables=args.create_tables))
    logger.info("Seed complete: %s", ", ".join(f"{t}={n}" for t, n in loaded.items()))


if __name__ == "__main__":
    main()
