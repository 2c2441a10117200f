"""Create the configured database and the tables in ``schema.sql``."""
from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# schema.sql may pin its own database; the configured one wins.
_DATABASE_DIRECTIVE = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")
# A statement is a run of quoted literals or anything but ';'.
_STATEMENT = re.compile(r"""(?:'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|`[^`]*`|[^;'"`])+""")


def split_statements(sql: str) -> Iterator[str]:
    sql = _LINE_COMMENT.sub("", _DATABASE_DIRECTIVE.sub("", sql))
    for match in _STATEMENT.finditer(sql):
        statement = match.group(0).strip()
        if statement:
            yield statement


def ensure_database_exists(config: DBConfig) -> None:
    with closing(DatabaseConnection(config).connect(with_database=False)) as conn:
        with closing(conn.cursor()) as cur:
            cur.execute(
                f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> int:
    """Run every statement of ``schema_path``; returns how many were executed."""
    config = DBConfig.from_mapping(db_config)
    ensure_database_exists(config)

    statements = list(split_statements(Path(schema_path).read_text(encoding="utf-8")))
    with closing(DatabaseConnection(config).connect()) as conn:
        with closing(conn.cursor()) as cur:
            for statement in statements:
                cur.execute(statement)
        conn.commit()

    logger.info("Applied %d schema statement(s) to %s", len(statements), config.describe())
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    with closing(DatabaseConnection(DBConfig.from_mapping(db_config)).connect()) as conn:
        with closing(conn.cursor()) as cur:
            cur.execute("SHOW TABLES")
            return [row[0] for row in cur.fetchall()]
