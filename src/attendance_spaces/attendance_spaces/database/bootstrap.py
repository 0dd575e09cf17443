"""Create the database, apply schema/seed files and provision the demo admin.

Used by `create_app()` when AUTO_INIT_DB / AUTO_SEED_DB are on, and by the
scripts in `scripts/`.
"""

from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import USER_CODE_PREFIX
from ..core.enums import Role
from ..core.exceptions import StoreError
from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_ADMIN_ID = "00000000-0000-4000-8000-000000000001"
DEMO_ADMIN_EMAIL = "admin@example.com"
DEMO_ADMIN_PASSWORD = "admin123"

# Quoted literals are matched whole so a ';' inside them never ends a statement.
_SQL_TOKEN = re.compile(r"""'(?:\\.|''|[^'\\])*'|"(?:\\.|""|[^"\\])*"|;|[^'";]+|['"]""", re.S)
_DB_DIRECTIVES = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def _open(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        connection_timeout=config.connection_timeout,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = config.database
    try:
        return mysql.connector.connect(**kwargs)
    except mysql.connector.Error as e:
        raise StoreError(f"Cannot reach {config.user}@{config.host}:{config.port}: {e}") from e


def split_sql(script: str) -> Iterator[str]:
    """Yield the statements of a schema/seed script.

    Whole-line `--` comments are dropped. CREATE DATABASE / USE lines are
    removed so the configured database name always wins.
    """

    script = _DB_DIRECTIVES.sub("", _LINE_COMMENT.sub("", script))
    current: list[str] = []
    for token in _SQL_TOKEN.findall(script):
        if token == ";":
            stmt = "".join(current).strip()
            current = []
            if stmt:
                yield stmt
        else:
            current.append(token)

    tail = "".join(current).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_settings(db_config)
    with closing(_open(config, with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    run_sql_file(db_config, Path(schema_path))


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    run_sql_file(db_config, Path(seed_path))


def run_sql_file(db_config: dict, path: Path) -> int:
    """Execute every statement of `path` on one connection. Returns the statement count.

    DDL commits implicitly in MySQL, so a failure part way leaves earlier tables in place.
    """

    config = DBConfig.from_settings(db_config)
    statements = list(split_sql(path.read_text(encoding="utf-8")))

    with closing(_open(config)) as conn:
        cur = conn.cursor()
        try:
            for stmt in statements:
                cur.execute(stmt)
            conn.commit()
        except mysql.connector.Error as e:
            conn.rollback()
            raise StoreError(f"{path.name}: {e}") from e

    logger.info("applied %s to %s (%d statements)", path.name, config.database, len(statements))
    return len(statements)


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset the password of) the demo admin account and its profile.

    Must run before seed.sql, which attaches the demo space to this account.
    """

    config = DBConfig.from_settings(db_config)
    with closing(_open(config)) as conn:
        cur = conn.cursor()
        try:
            cur.execute(
                """
                INSERT INTO accounts (id, email, password_hash, full_name)
                VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE password_hash = VALUES(password_hash)
                """,
                (DEMO_ADMIN_ID, DEMO_ADMIN_EMAIL, generate_password_hash(DEMO_ADMIN_PASSWORD), "Admin Demo"),
            )
            cur.execute(
                """
                INSERT INTO users (id, user_code, email, full_name, role)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE role = VALUES(role)
                """,
                (DEMO_ADMIN_ID, USER_CODE_PREFIX + DEMO_ADMIN_ID[:8], DEMO_ADMIN_EMAIL, "Admin Demo", Role.ADMIN.value),
            )
            conn.commit()
        except mysql.connector.Error as e:
            conn.rollback()
            raise StoreError(f"demo admin: {e}") from e
    logger.info("demo admin ready (%s)", DEMO_ADMIN_EMAIL)


def list_tables(db_config: dict) -> list[str]:
    with closing(_open(DBConfig.from_settings(db_config))) as conn:
        cur = conn.cursor()
        try:
            cur.execute("SHOW TABLES")
            return [row[0] for row in cur.fetchall()]
        except mysql.connector.Error as e:
            raise StoreError(f"SHOW TABLES: {e}") from e
