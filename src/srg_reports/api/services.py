from typing import Any, Callable, Dict, Iterable, Optional

from srg_reports.api.client import get_course_info, get_user_id
from srg_reports.engine.errors import ConfigurationError, ReportError
from srg_reports.reports.system import ReportSystem
from srg_reports.utils.config_loader import has_moodle_api


def resolve_course(config, source, course_id: int) -> Optional[Dict[str, Any]]:
    """
    Course metadata for the constant columns (id, shortname, fullname).
    Uses the Moodle Web Service when [MOODLE] is configured, the database otherwise.
    """
    if has_moodle_api(config):
        course = get_course_info(config['MOODLE'], course_id)
        if course:
            return course
        print(f"   > Course {course_id} not available through the Web Service, falling back to the database")

    rows = source.fetch("course", {"id": [course_id]}, ["id", "shortname", "fullname"])
    if not rows:
        return None
    return rows[0]


def execute_report_task(system: ReportSystem, name) -> Dict[str, Any]:
    """
    Builds a single report in isolation.
    Wiring errors and source failures are reported as 'error', no data is still 'success'.
    """
    try:
        key = system.report_key(name)
    except ConfigurationError as e:
        return {"status": "error", "id": name, "error": str(e)}

    try:
        table = system.build_table(key)
        return {
            "status": "success",
            "id": key,
            "columns": table.columns,
            "rows": table.get_table(),
        }
    except ReportError as e:
        return {"status": "error", "id": key, "error": f"{type(e).__name__}: {e}"}


def generate_reports(
    system: ReportSystem,
    report_names: Optional[Iterable] = None,
    log_callback: Optional[Callable[[str], None]] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> Dict[str, Dict[str, Any]]:
    """Runs the requested reports (all by default) one after the other, sharing origin tables."""

    def log(msg: str):
        if log_callback:
            log_callback(msg)
        else:
            print(msg)

    requested = list(report_names) if report_names else system.available_reports()

    # A key and its numeric id name the same report
    names = []
    for name in requested:
        try:
            name = system.report_key(name)
        except ConfigurationError:
            pass  # reported as an error result by execute_report_task
        if name not in names:
            names.append(name)

    total = len(names)
    results: Dict[str, Dict[str, Any]] = {}

    for i, name in enumerate(names, 1):
        result = execute_report_task(system, name)
        key = str(result["id"])
        results[key] = result

        if result["status"] == "success":
            log(f" [{i}/{total}] OK | {key} | {len(result['rows'])} rows")
        else:
            log(f" [{i}/{total}] ERR | {key} | {result.get('error')}")

        if progress_callback:
            progress_callback(i, total)

    return results


def resolve_user(config, username: str) -> Optional[int]:
    """Moodle user id of a username, through the Web Service."""
    if not has_moodle_api(config):
        raise ConfigurationError("Resolving a username needs [MOODLE] URL and TOKEN in config.ini")
    return get_user_id(config['MOODLE'], username)
