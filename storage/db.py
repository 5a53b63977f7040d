#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import sqlite3

SCHEMA_VERSION = "1"

log = logging.getLogger(__name__)


class Database:
    def __init__(self, db_path: str = "focus_timeline.db"):
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row

    def _table_exists(self, name: str) -> bool:
        r = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (name,),
        ).fetchone()
        return bool(r)

    def init_schema(self):
        cur = self.conn.cursor()

        if not self._table_exists("app_state"):
            log.info("creating app_state table in %s", self.db_path)

        # key/value store: settings + log collection live here as JSON text
        cur.execute("""
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)
        cur.execute(
            """
            INSERT INTO app_state(key, value) VALUES('schema_version', ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (SCHEMA_VERSION,),
        )

        self.conn.commit()

    def close(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            log.debug("close failed for %s", self.db_path, exc_info=True)
