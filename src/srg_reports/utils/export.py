import csv
import os
import re
from typing import Any, Dict, List


def write_csv(rows: List[Dict[str, Any]], path: str, columns: List[str] = None) -> str:
    """
    Writes report rows to a CSV file (UTF-8 with BOM so spreadsheet tools
    pick up the encoding). Header order is the row order of the first row.
    """
    if columns is None:
        columns = list(rows[0].keys()) if rows else []

    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8-sig") as handle:
        writer = csv.DictWriter(handle, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({col: "" if row.get(col) is None else row.get(col) for col in columns})
    return path


def report_filename(report_key: str, user_id: Any, course_id: Any) -> str:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", str(report_key))
    return f"{safe}_user{user_id}_course{course_id}.csv"


def export_reports(results: Dict[str, Dict[str, Any]], output_dir: str, user_id: Any, course_id: Any) -> List[str]:
    """
    Writes one CSV per successful report result. Failed reports are skipped,
    empty ones still produce a header-only file.
    """
    written = []
    for key, result in results.items():
        if result.get("status") != "success":
            continue
        path = os.path.join(output_dir, report_filename(key, user_id, course_id))
        written.append(write_csv(result["rows"], path, result.get("columns")))
    return written
