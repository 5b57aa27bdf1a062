from typing import Any, Dict, List, Mapping, Optional

from srg_reports.utils.filters import RowFilter

Row = Dict[str, Any]
ColumnMapping = Mapping[str, str]


def fetch_lookup(lookup, table: str, target_key: str, keys: List[Any], columns: List[str], batch_size: int) -> Dict[Optional[str], Row]:
    """
    Bulk lookup: one fetch_by_keys() per chunk of batch_size keys, never one per row.
    The result is keyed by the normalized key value.
    """
    found: Dict[Optional[str], Row] = {}
    if not keys:
        return found

    # Target columns, deduplicated, in mapping order
    fetch_columns = list(dict.fromkeys(columns))

    for start in range(0, len(keys), batch_size):
        chunk = keys[start:start + batch_size]
        records = lookup.fetch_by_keys(table, target_key, set(chunk), fetch_columns)
        for key, record in records.items():
            found[RowFilter.normalize(key)] = record
    return found


def apply_mapping(row: Row, record: Optional[Row], mapping: ColumnMapping) -> Row:
    """Copies target_column -> destination_column. A miss (or a NULL) keeps the placeholder."""
    if record is None:
        return row
    merged = dict(row)
    for target_col, dest_col in mapping.items():
        value = record.get(target_col)
        if value is not None:
            merged[dest_col] = value
    return merged


def fixed_join(
    rows: List[Row],
    lookup,
    target_table: str,
    key_column: str,
    mapping: ColumnMapping,
    target_key: str,
    batch_size: int,
) -> List[Row]:
    keys = RowFilter.distinct_keys(row.get(key_column) for row in rows)
    found = fetch_lookup(lookup, target_table, target_key, keys, list(mapping), batch_size)

    return [
        apply_mapping(row, found.get(RowFilter.normalize(row.get(key_column))), mapping)
        for row in rows
    ]


def resolve_dispatch(
    default_mapping: ColumnMapping,
    dispatch: Mapping[str, Optional[ColumnMapping]],
) -> Dict[str, ColumnMapping]:
    """Expands the dispatch table: an entry of None means 'use the default mapping'."""
    return {
        table: (dict(default_mapping) if mapping is None else dict(mapping))
        for table, mapping in dispatch.items()
    }


def variable_join(
    rows: List[Row],
    lookup,
    dispatch_column: str,
    key_column: str,
    default_mapping: ColumnMapping,
    dispatch: Mapping[str, Optional[ColumnMapping]],
    max_targets: int,
    batch_size: int,
) -> List[Row]:
    """
    Join whose target table is read per row from dispatch_column.

    Only table names listed in the dispatch table are looked up, each with its
    own column mapping and one batched query per key chunk. Rows pointing to an
    unlisted table, or beyond the first max_targets distinct tables, keep their
    placeholder values.
    """
    mappings = resolve_dispatch(default_mapping, dispatch)

    targets = RowFilter.distinct_keys(row.get(dispatch_column) for row in rows)
    if len(targets) > max_targets:
        skipped = [str(t) for t in targets[max_targets:]]
        print(f"[REPORT] Variable join on '{dispatch_column}': {len(targets)} target tables, "
              f"only the first {max_targets} are resolved. Skipped: {', '.join(skipped)}")
        targets = targets[:max_targets]

    resolved: Dict[str, Dict[Optional[str], Row]] = {}
    for target in targets:
        table = str(target)
        if table not in mappings:
            continue
        keys = RowFilter.distinct_keys(
            row.get(key_column) for row in rows if RowFilter.normalize(row.get(dispatch_column)) == table
        )
        resolved[table] = fetch_lookup(lookup, table, "id", keys, list(mappings[table]), batch_size)

    joined = []
    for row in rows:
        table = RowFilter.normalize(row.get(dispatch_column))
        if table not in resolved:
            joined.append(row)
            continue
        record = resolved[table].get(RowFilter.normalize(row.get(key_column)))
        joined.append(apply_mapping(row, record, mappings[table]))
    return joined
