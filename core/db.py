import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DB_SCHEMA = """
CREATE TABLE IF NOT EXISTS custom_variable_values (
    variable_id TEXT    PRIMARY KEY,
    value       TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);
"""


class CustomVariableValue(BaseModel):
    variable_id: str
    value: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: aiosqlite.Row) -> "CustomVariableValue":
        return cls(
            variable_id=row["variable_id"],
            value=row["value"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


async def init_db(db_path: str) -> None:
    """Create DB file + schema if not present."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(db_path) as db:
        await db.executescript(DB_SCHEMA)
        await db.commit()
    logger.info("Custom variable store initialised at %s", db_path)


async def set_custom_variable_value(db_path: str, variable_id: str, value: str) -> None:
    """Store *value* for *variable_id*. Last write wins; there is no locking between executions."""
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            "INSERT INTO custom_variable_values (variable_id, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(variable_id) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
            (variable_id, value, datetime.now(tz=timezone.utc).isoformat()),
        )
        await db.commit()
    logger.debug("Custom variable %s set (%d chars)", variable_id, len(value))


async def get_custom_variable_value(db_path: str, variable_id: str) -> str | None:
    """Return the stored value, or None if the variable has never been assigned."""
    async with aiosqlite.connect(db_path) as db:
        async with db.execute(
            "SELECT value FROM custom_variable_values WHERE variable_id = ?",
            (variable_id,),
        ) as cursor:
            row = await cursor.fetchone()
    return None if row is None else row[0]


async def get_all_custom_variable_values(db_path: str) -> list[CustomVariableValue]:
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        async with db.execute(
            "SELECT * FROM custom_variable_values ORDER BY variable_id ASC"
        ) as cursor:
            rows = await cursor.fetchall()
    return [CustomVariableValue.from_row(r) for r in rows]


async def clear_custom_variable_value(db_path: str, variable_id: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            "DELETE FROM custom_variable_values WHERE variable_id = ?",
            (variable_id,),
        )
        await db.commit()


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def setup_logging(log_dir: str, level: int = logging.INFO) -> None:
    """Configure rotating file + stderr logging."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_path / "shell-commands.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    root.addHandler(stream_handler)
