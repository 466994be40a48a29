from __future__ import annotations

import argparse

from planbarometro.infrastructure.config import DatabaseConfig, get_settings
from planbarometro.infrastructure.db import (
    create_database_engine,
    create_session_factory,
    session_scope,
)
from planbarometro.infrastructure.logging import get_logger
from planbarometro.utils.seed import initialise_database, seed_best_practices

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load the starter best practices.")
    parser.add_argument(
        "--sqlite-path",
        help="SQLite database path (defaults to the configured database)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Insert the starter practices even when the repository is not empty",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = get_settings().database
    if args.sqlite_path:
        config = DatabaseConfig(backend="sqlite", sqlite_path=args.sqlite_path)

    engine = create_database_engine(config)
    initialise_database(engine)
    with session_scope(create_session_factory(engine)) as session:
        inserted = seed_best_practices(session, force=args.force)

    logger.info(f"Best-practice seed finished: {inserted} inserted")
    return inserted


if __name__ == "__main__":
    main()
