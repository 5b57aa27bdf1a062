from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from srg_reports.engine import joins
from srg_reports.engine.dedication import compute_dedication
from srg_reports.engine.errors import ColumnNotFoundError, ConfigurationError, DuplicateColumnError
from srg_reports.engine.settings import ReportSettings
from srg_reports.utils.filters import RowFilter
from srg_reports.utils.time_format import format_human_time

Row = Dict[str, Any]


class ReportTable:
    """
    Chainable, immutable-looking table of report rows.

    Every operation returns a new ReportTable and leaves the receiver untouched,
    so each stage of a report can be inspected on its own:

        origin.project(["id", "timecreated"]).add_dedication("Dedication").get_table()

    Required columns (see require_non_empty) travel with the table: every new
    state drops the rows that no longer carry a value for one of them.
    """

    def __init__(
        self,
        columns: Sequence[str],
        rows: Iterable[Mapping[str, Any]] = (),
        requirements: Sequence[str] = (),
        lookup=None,
        settings: Optional[ReportSettings] = None,
    ):
        self._columns: Tuple[str, ...] = tuple(columns)
        if len(set(self._columns)) != len(self._columns):
            raise DuplicateColumnError(next(c for c in self._columns if self._columns.count(c) > 1))
        self._requirements: Tuple[str, ...] = tuple(requirements)
        self.lookup = lookup
        self.settings = settings or ReportSettings()

        self._rows: Tuple[Row, ...] = tuple(
            {col: row.get(col) for col in self._columns}
            for row in rows
            if self._fulfills(row)
        )

    # --- Introspection ---
    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def requirements(self) -> List[str]:
        return list(self._requirements)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self):
        return iter(self.get_table())

    def __repr__(self) -> str:
        return f"ReportTable(columns={self.columns}, rows={len(self)})"

    def column_values(self, column: str) -> List[Any]:
        self._check(column)
        return [row[column] for row in self._rows]

    # --- Internal Helpers ---
    def _fulfills(self, row: Mapping[str, Any]) -> bool:
        return not any(RowFilter.is_empty(row.get(col)) for col in self._requirements)

    def _check(self, *columns: str):
        for column in columns:
            if column not in self._columns:
                raise ColumnNotFoundError(column, self._columns)

    def _derive(self, columns=None, rows=None, requirements=None) -> "ReportTable":
        return ReportTable(
            self._columns if columns is None else columns,
            self._rows if rows is None else rows,
            self._requirements if requirements is None else requirements,
            lookup=self.lookup,
            settings=self.settings,
        )

    def _declare(self, columns: Iterable[str], default: Any = "") -> "ReportTable":
        """Adds the missing columns with a placeholder value. Existing ones are untouched."""
        missing = [c for c in dict.fromkeys(columns) if c not in self._columns]
        if not missing:
            return self
        rows = [{**row, **{c: default for c in missing}} for row in self._rows]
        return self._derive(columns=self._columns + tuple(missing), rows=rows)

    # --- Structural Operations ---
    def project(self, columns: Sequence[str]) -> "ReportTable":
        """Sub-table restricted to columns, in the requested order."""
        self._check(*columns)
        kept = tuple(c for c in self._requirements if c in columns)
        return self._derive(columns=columns, requirements=kept)

    def rename_column(self, old: str, new: str) -> "ReportTable":
        self._check(old)
        if old == new:
            return self
        if new in self._columns:
            raise DuplicateColumnError(new)

        columns = tuple(new if c == old else c for c in self._columns)
        rows = [{(new if k == old else k): v for k, v in row.items()} for row in self._rows]
        requirements = tuple(new if c == old else c for c in self._requirements)
        return self._derive(columns=columns, rows=rows, requirements=requirements)

    def add_constant_column(self, name: str, value: Any) -> "ReportTable":
        """Same literal in every row. An existing column is overwritten in place."""
        columns = self._columns if name in self._columns else self._columns + (name,)
        rows = [{**row, name: value} for row in self._rows]
        return self._derive(columns=columns, rows=rows)

    # --- Row Filters ---
    def require_non_empty(self, column: str) -> "ReportTable":
        """Drops rows whose column is NULL or ''; the rule sticks to all later states."""
        self._check(column)
        if column in self._requirements:
            return self
        return self._derive(requirements=self._requirements + (column,))

    def constrain(self, column: str, allowed: Any) -> "ReportTable":
        """Keeps rows whose column value is allowed (a single scalar or a collection)."""
        self._check(column)
        allowed_set = RowFilter.allowed_set(allowed)
        rows = [row for row in self._rows if RowFilter.matches(row[column], allowed_set)]
        return self._derive(rows=rows)

    # --- Decorations ---
    def add_human_time(self, label: str, source_column: str = "timecreated") -> "ReportTable":
        self._check(source_column)
        fmt = self.settings.time_format
        columns = self._columns if label in self._columns else self._columns + (label,)
        rows = [{**row, label: format_human_time(row[source_column], fmt)} for row in self._rows]
        return self._derive(columns=columns, rows=rows)

    def add_dedication(self, label: str, group_by: Optional[str] = None, time_column: str = "timecreated") -> "ReportTable":
        """
        Collapses the table to one row per session, ordered by time_column.
        The session's first row carries the dedication (seconds) in label.
        With group_by, a change of that column's value also starts a new session.
        """
        self._check(time_column)
        if group_by is not None:
            self._check(group_by)

        sessions = compute_dedication(
            list(self._rows),
            min_time=self.settings.min_time,
            max_time=self.settings.max_time,
            time_column=time_column,
            group_by=group_by,
        )
        columns = self._columns if label in self._columns else self._columns + (label,)
        rows = [{**row, label: seconds} for row, seconds in sessions]
        return self._derive(columns=columns, rows=rows)

    # --- Joins ---
    def join_with_fixed_table(
        self,
        target_table: str,
        key_column: str,
        mapping: Mapping[str, str],
        target_key: str = "id",
    ) -> "ReportTable":
        """
        Copies target_table columns into this table, matching key_column against
        target_key. Destination columns not declared yet are added as ''.
        """
        self._check(key_column)
        self._require_lookup()
        table = self._declare(mapping.values())

        rows = joins.fixed_join(
            list(table._rows), self.lookup, target_table, key_column, mapping,
            target_key, self.settings.batch_size,
        )
        return table._derive(rows=rows)

    def join_with_variable_table(
        self,
        dispatch_column: str,
        key_column: str,
        mapping: Mapping[str, str],
        dispatch: Mapping[str, Optional[Mapping[str, str]]],
    ) -> "ReportTable":
        """
        Join whose target table name is each row's own dispatch_column value.
        dispatch lists the raw tables that may be joined and their column
        mapping (None = use mapping); other rows keep their placeholders.
        """
        self._check(dispatch_column, key_column)
        self._require_lookup()

        destinations = list(mapping.values())
        for table_mapping in dispatch.values():
            if table_mapping:
                destinations.extend(table_mapping.values())
        table = self._declare(destinations)

        rows = joins.variable_join(
            list(table._rows), self.lookup, dispatch_column, key_column, mapping, dispatch,
            self.settings.target_table_max_count, self.settings.batch_size,
        )
        return table._derive(rows=rows)

    def _require_lookup(self):
        if self.lookup is None:
            raise ConfigurationError("ReportTable has no lookup source to join against")

    # --- Terminal ---
    def get_table(self) -> List[Row]:
        """The finished rows, as fresh dicts in column order."""
        return [dict(row) for row in self._rows]
