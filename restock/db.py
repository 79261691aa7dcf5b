from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import streamlit as st

from restock.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


def _connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return _connect(db_path)


def connect_memory() -> sqlite3.Connection:
    conn = _connect(":memory:")
    ensure_schema(conn)
    return conn


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Create base schema (for new installs)
    conn.executescript(SCHEMA_SQL)

    # ---- migrations for existing installs ----
    # Supplier label on orders was added after the first release
    if not _column_exists(conn, "purchase_orders", "supplier_name"):
        conn.execute("ALTER TABLE purchase_orders ADD COLUMN supplier_name TEXT NOT NULL DEFAULT '';")

    conn.commit()
    logger.debug("Schema ensured")


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = (), *, commit: bool = True) -> int:
    cur = conn.execute(sql, tuple(params))
    if commit:
        conn.commit()
    last = cur.lastrowid
    cur.close()
    return int(last or 0)


@contextmanager
def atomic(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    One commit boundary for several writes. Statements inside must use
    x(..., commit=False); any exception rolls everything back and propagates.
    """
    try:
        yield conn
    except Exception:
        conn.rollback()
        logger.exception("Transaction rolled back")
        raise
    conn.commit()
