#!/usr/bin/env python3
"""Create the SQLite schema without starting the server."""

import asyncio
import sys

from src.core.config import settings
from src.core.db_client import close_connection, init_db


async def main(db_path: str | None = None) -> None:
    await init_db(db_path=db_path)
    await close_connection(db_path=db_path)
    print(f"Schema ready at {db_path or settings.sqlite_db_path}")  # noqa: T201


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
