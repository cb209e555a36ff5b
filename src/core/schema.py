"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema, in dependency order
COLLECTIONS = [
    "families",
    "tasks",
]

TABLE_SCHEMAS: dict[str, str] = {
    "families": """CREATE TABLE IF NOT EXISTS families (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
        updated TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
        name TEXT NOT NULL,
        code TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        members TEXT NOT NULL DEFAULT '[]'
    )""",
    "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
        updated TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
        family_id INTEGER NOT NULL REFERENCES families(id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        description TEXT,
        priority TEXT NOT NULL DEFAULT 'medium' CHECK (priority IN ('low', 'medium', 'high')),
        assigned_to TEXT,
        due_date TEXT,
        completed INTEGER NOT NULL DEFAULT 0,
        completed_at TEXT,
        comments TEXT NOT NULL DEFAULT '[]'
    )""",
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_family_id ON tasks (family_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_family_completed ON tasks (family_id, completed)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist (idempotent)."""
    conn = await db_client.get_connection(db_path=db_path)

    for collection in COLLECTIONS:
        await conn.execute(TABLE_SCHEMAS[collection])
    for index in INDEXES:
        await conn.execute(index)
    await conn.commit()

    logger.info("SQLite schema initialized", extra={"collections": COLLECTIONS})
