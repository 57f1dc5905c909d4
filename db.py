from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Optional

from ranges.bands import RangeTable
from ranges.config import DEFAULT_DB_PATH
from ranges.persistence import table_from_json, table_to_json
from ranges.strategies import RangeStrategy

logger = logging.getLogger(__name__)

STRATEGY_SETTING_KEY = "range_strategy"


class EntityPermission(IntEnum):
    NONE = 0
    LIMITED = 1
    OBSERVER = 2
    OWNER = 3


def db_path() -> str:
    return os.environ.get("RANGES_DB_PATH", DEFAULT_DB_PATH)


def _connect(path: Optional[str] = None) -> sqlite3.Connection:
    # New connection per call keeps things simple and avoids threading pitfalls.
    return sqlite3.connect(path or db_path())


def init_db(path: Optional[str] = None) -> None:
    with _connect(path) as con:
        con.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        con.execute(
            """
            CREATE TABLE IF NOT EXISTS entities (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                permission INTEGER NOT NULL,
                ranges_json TEXT,
                updated_at TEXT NOT NULL
            )
            """
        )
        con.commit()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_setting(key: str, path: Optional[str] = None) -> Optional[str]:
    init_db(path)
    with _connect(path) as con:
        row = con.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    return None if row is None else row[0]


def set_setting(key: str, value: str, path: Optional[str] = None) -> None:
    init_db(path)
    with _connect(path) as con:
        con.execute(
            "INSERT OR REPLACE INTO settings(key, value, updated_at) VALUES(?,?,?)",
            (key, value, _now_iso()),
        )
        con.commit()


def create_entity(
    entity_id: str,
    name: str,
    permission: int = EntityPermission.OWNER,
    path: Optional[str] = None,
) -> None:
    init_db(path)
    with _connect(path) as con:
        con.execute(
            "INSERT INTO entities(id, name, permission, ranges_json, updated_at) VALUES(?,?,?,?,?)",
            (entity_id, name, int(permission), None, _now_iso()),
        )
        con.commit()


def count_entities(path: Optional[str] = None) -> int:
    init_db(path)
    with _connect(path) as con:
        (n,) = con.execute("SELECT COUNT(*) FROM entities").fetchone()
    return int(n)


def list_entity_rows(
    min_permission: int = EntityPermission.NONE,
    path: Optional[str] = None,
) -> list[tuple[str, str, int]]:
    init_db(path)
    with _connect(path) as con:
        rows = con.execute(
            "SELECT id, name, permission FROM entities WHERE permission >= ? ORDER BY id",
            (int(min_permission),),
        ).fetchall()
    return [(r[0], r[1], int(r[2])) for r in rows]


def get_entity_ranges_json(entity_id: str, path: Optional[str] = None) -> Optional[str]:
    init_db(path)
    with _connect(path) as con:
        row = con.execute("SELECT ranges_json FROM entities WHERE id = ?", (entity_id,)).fetchone()
    return None if row is None else row[0]


def save_entity_ranges_json(entity_id: str, ranges_json: str, path: Optional[str] = None) -> bool:
    init_db(path)
    with _connect(path) as con:
        cur = con.execute(
            "UPDATE entities SET ranges_json = ?, updated_at = ? WHERE id = ?",
            (ranges_json, _now_iso(), entity_id),
        )
        con.commit()
        return cur.rowcount > 0


# --- collaborators for RangeStrategyEngine ---


class SqliteConfigurationStore:
    def __init__(self, default_strategy: str = RangeStrategy.STANDARD.value, path: Optional[str] = None):
        self.default_strategy = default_strategy
        self.path = path

    def read_strategy_setting(self) -> str:
        value = get_setting(STRATEGY_SETTING_KEY, self.path)
        return self.default_strategy if value is None else value

    def write_strategy_setting(self, strategy: str) -> None:
        set_setting(STRATEGY_SETTING_KEY, strategy, self.path)

    def ensure_strategy_setting(self) -> str:
        """Write the default strategy if none is stored yet; return the stored value."""
        value = get_setting(STRATEGY_SETTING_KEY, self.path)
        if value is None:
            value = self.default_strategy
            self.write_strategy_setting(value)
            logger.info("range strategy setting initialised to %s", value)
        return value


@dataclass
class SqliteEntityRef:
    entity_id: str
    name: str
    permission: int
    path: Optional[str] = None

    def apply_range_table(self, table: RangeTable) -> bool:
        ok = save_entity_ranges_json(self.entity_id, table_to_json(table), self.path)
        if not ok:
            logger.warning("entity %s vanished before its range table was saved", self.entity_id)
        return ok

    def range_table(self) -> Optional[RangeTable]:
        s = get_entity_ranges_json(self.entity_id, self.path)
        return None if s is None else table_from_json(s)


class SqliteEntityRepository:
    """Entities stored in SQLite. Only those at or above min_permission are updatable."""

    def __init__(self, min_permission: int = EntityPermission.OBSERVER, path: Optional[str] = None):
        self.min_permission = min_permission
        self.path = path

    def list_updatable_entities(self) -> list[SqliteEntityRef]:
        return [
            SqliteEntityRef(entity_id=eid, name=name, permission=perm, path=self.path)
            for eid, name, perm in list_entity_rows(self.min_permission, self.path)
        ]

    def list_all(self) -> list[SqliteEntityRef]:
        return [
            SqliteEntityRef(entity_id=eid, name=name, permission=perm, path=self.path)
            for eid, name, perm in list_entity_rows(EntityPermission.NONE, self.path)
        ]

    def get(self, entity_id: str) -> Optional[SqliteEntityRef]:
        for ref in self.list_all():
            if ref.entity_id == entity_id:
                return ref
        return None
