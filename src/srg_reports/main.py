import argparse
from typing import Any, Callable, Dict, List, Optional

from srg_reports.api.services import generate_reports, resolve_course, resolve_user
from srg_reports.engine.errors import ConfigurationError
from srg_reports.engine.origin import OriginCache
from srg_reports.engine.settings import ReportSettings
from srg_reports.reports.system import ReportSystem
from srg_reports.utils.config_loader import load_config
from srg_reports.utils.db import PostgresRecordSource
from srg_reports.utils.export import export_reports
from srg_reports.utils.paths import get_output_dir


# --- MAIN RUNNER ---
def run_reports(
    user_id: int,
    course_id: int,
    report_names: Optional[List[str]] = None,
    output_dir: Optional[str] = None,
    config=None,
    source=None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    log_callback: Optional[Callable[[str], None]] = None,
) -> Optional[Dict[str, Dict[str, Any]]]:
    """
    Generates the reports of one user in one course and writes them as CSV.
    Returns the per-report results, or None when the course cannot be resolved.
    """
    def log(msg: str):
        if log_callback:
            log_callback(msg)
        else:
            print(msg)

    log("--- SRG Reports: Starting report generation ---")

    config = config or load_config()
    settings = ReportSettings.from_config(config)
    source = source or PostgresRecordSource()

    log(f" [1/3] Resolving course {course_id}...")
    course = resolve_course(config, source, course_id)
    if not course:
        log(f" [!] Error: Course {course_id} not found.")
        return None

    log(f" [2/3] Generating reports for user {user_id} in '{course.get('shortname')}'...")
    system = ReportSystem(
        source,
        user_id,
        course,
        settings=settings,
        cache=OriginCache(),
        lang=config['REPORTS'].get('lang', 'en'),
    )
    results = generate_reports(system, report_names, log_callback=log, progress_callback=progress_callback)

    target = get_output_dir(output_dir or config['REPORTS'].get('output_dir', 'reports'))
    log(f" [3/3] Writing CSV files to {target}...")
    written = export_reports(results, target, user_id, course["id"])

    failed = [k for k, r in results.items() if r["status"] != "success"]
    if failed:
        log(f"--- Finished with errors in: {', '.join(failed)} ---")
    else:
        log(f"--- Finished successfully: {len(written)} files ---")
    return results


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate Moodle activity reports for one user in one course.")
    user = parser.add_mutually_exclusive_group(required=True)
    user.add_argument("--user", type=int, help="Moodle user id")
    user.add_argument("--username", help="Moodle username, resolved through the Web Service")
    parser.add_argument("--course", type=int, required=True, help="Moodle course id")
    parser.add_argument("--report", action="append", dest="reports",
                        help="Report key or numeric id (repeatable, default: all)")
    parser.add_argument("--output-dir", default=None, help="Folder for the CSV files")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        config = load_config()
        user_id = args.user
        if user_id is None:
            user_id = resolve_user(config, args.username)
            if user_id is None:
                print(f" [!] Error: User '{args.username}' not found.")
                raise SystemExit(1)
        results = run_reports(user_id, args.course, args.reports, args.output_dir, config=config)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"[CONFIG ERROR] {e}")
        raise SystemExit(1)

    if results is None or any(r["status"] != "success" for r in results.values()):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
