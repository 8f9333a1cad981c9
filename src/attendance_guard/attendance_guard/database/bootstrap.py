from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..core.constants import COMPANY_ALLOWLIST_SETTING_KEY
from ..core.enums import Role
from ..identities.model import Identity
from .connection import DBConfig
from .memory import InMemoryDatabase
from .mysql_base import dump_json_list

logger = logging.getLogger(__name__)

# Demo accounts; the login itself belongs to the host application.
DEMO_IDENTITIES = (
    Identity(identity_id=1, role=Role.ADMIN, full_name="Admin Demo"),
    Identity(identity_id=2, role=Role.EMPLOYEE, full_name="Employee Demo"),
    Identity(identity_id=3, role=Role.EMPLOYEE, full_name="Remote Employee Demo", allowed_networks=("10.8.0.0/24",)),
)
DEMO_COMPANY_NETWORKS = ("127.0.0.1", "::1", "192.168.1.0/24")


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        connection_timeout=target.connect_timeout,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _run_sql_file(db_config: dict, path: str | Path) -> int:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(db_config)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    database = DBConfig.from_dict(db_config).database
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_sql_file(db_config, schema_path)
    logger.info("Applied %s (%d statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_sql_file(db_config, seed_path)
    logger.info("Applied %s (%d statements)", Path(seed_path).name, count)


def ensure_demo_identities(db_config: dict) -> None:
    """Upsert the demo identities and, if unset, the company allowlist."""
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for identity in DEMO_IDENTITIES:
            cur.execute(
                """
                INSERT INTO identities(identity_id, full_name, role, allowed_networks)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), role=VALUES(role)
                """,
                (
                    identity.identity_id,
                    identity.full_name,
                    identity.role.value,
                    dump_json_list(identity.allowed_networks),
                ),
            )
        cur.execute(
            "INSERT IGNORE INTO app_settings(setting_key, setting_value) VALUES(%s,%s)",
            (COMPANY_ALLOWLIST_SETTING_KEY, dump_json_list(DEMO_COMPANY_NETWORKS)),
        )
        conn.commit()
    finally:
        conn.close()


def seed_memory_store(db: InMemoryDatabase) -> None:
    for identity in DEMO_IDENTITIES:
        db.identities[identity.identity_id] = identity
    db.settings.setdefault(COMPANY_ALLOWLIST_SETTING_KEY, DEMO_COMPANY_NETWORKS)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
