import os
import time
from typing import Any, Dict, Iterable, List

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor
from dotenv import load_dotenv

from srg_reports.engine.errors import SourceError
from .paths import get_base_dir, get_config_path


# Try multiple sensible locations for the env file so it works both when
# running from source (`src/db.env`) and from the project root.
BASE_DIR = get_base_dir()
_env_candidates = [
    os.path.join(BASE_DIR, 'db.env'),           # project_root/db.env
    os.path.join(BASE_DIR, 'src', 'db.env'),    # project_root/src/db.env
    get_config_path('.env'),
]
_env_candidates = [os.path.abspath(p) for p in _env_candidates]
ENV_PATH = next((p for p in _env_candidates if os.path.exists(p)), _env_candidates[0])
load_dotenv(ENV_PATH, override=True)
_ENV_CANDIDATES = _env_candidates

MAX_ATTEMPTS = 3


def get_db_connection():
    """
    Establishes a connection to the Moodle database with a connect timeout.
    """
    host = os.getenv("MOODLE_DB_HOST")

    if not host:
        tried = ', '.join(_ENV_CANDIDATES)
        raise ValueError(f"Database credentials not found. Checked env files: {tried}")

    return psycopg2.connect(
        host=host,
        dbname=os.getenv("MOODLE_DB_NAME", "moodle"),
        user=os.getenv("MOODLE_DB_USER"),
        password=os.getenv("MOODLE_DB_PASSWORD"),
        port=os.getenv("MOODLE_DB_PORT", "5432"),
        sslmode=os.getenv("MOODLE_DB_SSLMODE", "prefer"),
        connect_timeout=10
    )


class PostgresRecordSource:
    """
    Record source reading the Moodle tables (mdl_ prefix by default) with psycopg2.
    Serves both origin fetches and bulk join lookups.
    """

    def __init__(self, connection_factory=get_db_connection, prefix: str = None):
        self.connection_factory = connection_factory
        self.prefix = prefix if prefix is not None else os.getenv("MOODLE_DB_PREFIX", "mdl_")

    def _table(self, table: str) -> sql.Identifier:
        return sql.Identifier(f"{self.prefix}{table}")

    def build_fetch_query(self, table: str, filters: Dict[str, Iterable[Any]], columns: List[str]):
        query = sql.SQL("SELECT {cols} FROM {table}").format(
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            table=self._table(table),
        )
        params = []
        if filters:
            conditions = []
            for column, values in filters.items():
                conditions.append(sql.SQL("{col} = ANY(%s)").format(col=sql.Identifier(column)))
                params.append(list(values))
            query += sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions)
        if "id" in columns:
            query += sql.SQL(" ORDER BY {id}").format(id=sql.Identifier("id"))
        return query, params

    def build_lookup_query(self, table: str, key_column: str, columns: List[str]):
        select = [key_column] + [c for c in columns if c != key_column]
        return sql.SQL("SELECT {cols} FROM {table} WHERE {key} = ANY(%s)").format(
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in select),
            table=self._table(table),
            key=sql.Identifier(key_column),
        )

    def _execute(self, table: str, query, params) -> List[Dict[str, Any]]:
        # Retry logic for database locks
        for attempt in range(MAX_ATTEMPTS):
            conn = None
            try:
                conn = self.connection_factory()
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    cur.execute("SET statement_timeout = 15000;")
                    cur.execute(query, params)
                    rows = [dict(r) for r in cur.fetchall()]
                conn.commit()
                return rows
            except psycopg2.Error as e:
                if conn: conn.rollback()
                text = str(e).lower()
                if ("timeout" in text or "lock" in text) and attempt < MAX_ATTEMPTS - 1:
                    time.sleep(1)
                    continue
                print(f"[DB ERROR] {table}: {e}")
                raise SourceError(table, str(e).strip()) from e
            finally:
                if conn: conn.close()
        raise SourceError(table, "no attempt succeeded")

    def fetch(self, table, filters, columns):
        query, params = self.build_fetch_query(table, filters, list(columns))
        return self._execute(table, query, params)

    def fetch_by_keys(self, table, key_column, keys, columns):
        # Moodle ids are bigint; placeholder-filled keys may arrive as text
        keys = [int(k) if isinstance(k, str) and k.strip().isdigit() else k for k in keys]
        if not keys:
            return {}
        query = self.build_lookup_query(table, key_column, list(columns))
        rows = self._execute(table, query, [keys])
        return {row[key_column]: row for row in rows}
