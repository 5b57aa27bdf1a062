from typing import Any, Dict, Iterable, List, Optional, Protocol

from srg_reports.engine.errors import SourceError
from srg_reports.utils.filters import RowFilter


class RecordSource(Protocol):
    """
    Narrow interface to the raw Moodle data.
    fetch() feeds origin tables, fetch_by_keys() feeds joins.
    """

    def fetch(self, table: str, filters: Dict[str, Iterable[Any]], columns: List[str]) -> List[Dict[str, Any]]:
        ...

    def fetch_by_keys(self, table: str, key_column: str, keys: Iterable[Any], columns: List[str]) -> Dict[Any, Dict[str, Any]]:
        ...


class InMemoryRecordSource:
    """
    Record source over plain lists of dicts, keyed by raw table name.
    Used for tests and for offline runs over exported data.
    Every call is counted so callers can check that lookups are batched.
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: list(rows) for name, rows in (tables or {}).items()}
        self.fetch_calls: List[str] = []
        self.lookup_calls: List[tuple] = []

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        if table not in self.tables:
            raise SourceError(table, "table does not exist")
        return self.tables[table]

    def fetch(self, table, filters, columns):
        self.fetch_calls.append(table)
        allowed = {col: RowFilter.allowed_set(list(values)) for col, values in (filters or {}).items()}

        result = []
        for row in self._rows(table):
            if all(RowFilter.matches(row.get(col), vals) for col, vals in allowed.items()):
                result.append({col: row.get(col) for col in columns})
        return result

    def fetch_by_keys(self, table, key_column, keys, columns):
        wanted = {RowFilter.normalize(k) for k in keys}
        self.lookup_calls.append((table, len(wanted)))

        result = {}
        for row in self._rows(table):
            key = row.get(key_column)
            if RowFilter.normalize(key) in wanted and key not in result:
                result[key] = {col: row.get(col) for col in columns}
        return result
