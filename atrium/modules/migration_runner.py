import re
import logging
from pathlib import Path
from typing import List, Set, Tuple
from databases import Database

logger = logging.getLogger("atrium.migrations")

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"

# 001_name.sql
MIGRATION_PATTERN = re.compile(r"^(\d+)_(.+)\.sql$")


def discover_migrations(migration_dir: Path = MIGRATIONS_DIR) -> List[Tuple[int, Path]]:
    """Return (number, path) pairs sorted by migration number."""
    found = {}
    for path in sorted(migration_dir.glob("*.sql")):
        match = MIGRATION_PATTERN.match(path.name)
        if not match:
            logger.warning(f"Skipping file with unexpected name: {path.name}")
            continue
        number = int(match.group(1))
        if number in found:
            raise ValueError(f"Duplicate migration number {number:03d}: {found[number].name}, {path.name}")
        found[number] = path
    return sorted(found.items())


def split_statements(sql: str) -> List[str]:
    return [s.strip() for s in sql.split(";") if s.strip()]


async def _applied_migrations(database: Database) -> Set[int]:
    await database.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_number INTEGER PRIMARY KEY,
            filename VARCHAR(255) NOT NULL,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    rows = await database.fetch_all("SELECT migration_number FROM schema_migrations")
    return {row["migration_number"] for row in rows}


async def run_migrations(database: Database, migration_dir: Path = MIGRATIONS_DIR) -> List[str]:
    """
    Applies pending .sql files from atrium/migrations in order.
    A simple forward-only migration runner. Returns the filenames applied.
    """
    if not database.is_connected:
        await database.connect()

    migrations = discover_migrations(migration_dir)
    applied = await _applied_migrations(database)
    pending = [(n, p) for n, p in migrations if n not in applied]

    logger.info(f"Found {len(migrations)} migration files, {len(pending)} pending.")

    done = []
    for number, path in pending:
        logger.info(f"Applying migration: {path.name}")
        statements = split_statements(path.read_text(encoding="utf-8"))

        async with database.transaction():
            for stmt in statements:
                await database.execute(stmt)
            await database.execute(
                "INSERT INTO schema_migrations (migration_number, filename) VALUES (:number, :filename)",
                {"number": number, "filename": path.name},
            )
        done.append(path.name)

    logger.info("All migrations applied successfully.")
    return done
