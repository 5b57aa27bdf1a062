from typing import Any, Dict, Iterable, List, Optional, Sequence

from srg_reports.engine.settings import ReportSettings
from srg_reports.engine.table import ReportTable


class OriginCache:
    """
    Request-scoped store of origin tables, keyed by raw table name.
    One instance per reporting request; tests build a fresh one per case.
    """

    def __init__(self):
        self._tables: Dict[str, ReportTable] = {}

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._tables

    def get(self, table_name: str) -> Optional[ReportTable]:
        return self._tables.get(table_name)

    def put(self, table_name: str, table: ReportTable):
        self._tables[table_name] = table

    def clear(self):
        self._tables.clear()

    def table_names(self) -> List[str]:
        return list(self._tables)


class OriginTableLoader:
    """
    Loads raw tables through the record source, once per table name.

    A cache hit returns the stored table unconditionally: all callers of the
    same raw table within one request are expected to pass the same filters.
    """

    def __init__(self, source, cache: Optional[OriginCache] = None, settings: Optional[ReportSettings] = None, lookup=None):
        self.source = source
        self.lookup = lookup or source
        self.cache = cache if cache is not None else OriginCache()
        self.settings = settings or ReportSettings()

    def load(
        self,
        table_name: str,
        filters: Dict[str, Iterable[Any]],
        columns: Sequence[str],
        requirements: Sequence[str] = (),
    ) -> ReportTable:
        cached = self.cache.get(table_name)
        if cached is not None:
            return cached

        rows = self.source.fetch(table_name, {col: list(vals) for col, vals in filters.items()}, list(columns))
        table = ReportTable(columns, rows, lookup=self.lookup, settings=self.settings)
        for column in requirements:
            table = table.require_non_empty(column)

        self.cache.put(table_name, table)
        return table
