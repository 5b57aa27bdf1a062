import configparser

import pytest

from srg_reports.api import services
from srg_reports.api.services import execute_report_task, generate_reports, resolve_course
from srg_reports.engine.sources import InMemoryRecordSource
from srg_reports.reports.system import ReportSystem


@pytest.fixture()
def db_only_config():
    config = configparser.ConfigParser()
    config.read_dict({"MOODLE": {"URL": "", "TOKEN": ""}})
    return config


def test_resolve_course_from_database(db_only_config, source):
    assert resolve_course(db_only_config, source, 4) == {"id": 4, "shortname": "GEO1", "fullname": "Geometry I"}
    assert resolve_course(db_only_config, source, 99) is None


def test_resolve_course_prefers_web_service(monkeypatch, source):
    config = configparser.ConfigParser()
    config.read_dict({"MOODLE": {"URL": "https://moodle.test", "TOKEN": "abc"}})
    monkeypatch.setattr(services, "get_course_info",
                        lambda moodle, course_id: {"id": course_id, "shortname": "WS", "fullname": "From WS"})

    assert resolve_course(config, source, 3)["shortname"] == "WS"
    assert source.fetch_calls == []


def test_resolve_course_falls_back_when_web_service_fails(monkeypatch, source, capsys):
    config = configparser.ConfigParser()
    config.read_dict({"MOODLE": {"URL": "https://moodle.test", "TOKEN": "abc"}})
    monkeypatch.setattr(services, "get_course_info", lambda moodle, course_id: None)

    assert resolve_course(config, source, 3)["shortname"] == "ALG1"
    assert "falling back" in capsys.readouterr().out


def test_execute_report_task_success(source, course):
    result = execute_report_task(ReportSystem(source, 5, course), 7)
    assert result["status"] == "success"
    assert result["id"] == "chatbot_history"
    assert result["columns"][:2] == ["id", "timecreated"]
    assert len(result["rows"]) == 2


def test_execute_report_task_unknown_report(source, course):
    result = execute_report_task(ReportSystem(source, 5, course), "nope")
    assert result["status"] == "error"
    assert result["id"] == "nope"


def test_failing_report_does_not_stop_the_others(tables, course):
    del tables["chatbot_history"]
    system = ReportSystem(InMemoryRecordSource(tables), 5, course)
    messages = []

    results = generate_reports(system, log_callback=messages.append)

    assert results["chatbot_history"]["status"] == "error"
    assert "SourceError" in results["chatbot_history"]["error"]
    others = [r for key, r in results.items() if key != "chatbot_history"]
    assert len(others) == 8
    assert all(r["status"] == "success" for r in others)
    assert any("ERR | chatbot_history" in m for m in messages)


def test_generate_selected_reports_with_progress(source, course):
    progress = []
    results = generate_reports(
        ReportSystem(source, 5, course),
        ["badges", "0"],
        log_callback=lambda msg: None,
        progress_callback=lambda i, total: progress.append((i, total)),
    )

    assert list(results) == ["badges", "course_dedication"]
    assert progress == [(1, 2), (2, 2)]


def test_key_and_numeric_id_run_the_report_once(source, course):
    messages = []
    results = generate_reports(ReportSystem(source, 5, course), ["badges", "6", 6], log_callback=messages.append)

    assert list(results) == ["badges"]
    assert messages == [" [1/1] OK | badges | 1 rows"]


def test_unknown_name_is_kept_as_an_error_result(source, course):
    results = generate_reports(ReportSystem(source, 5, course), ["nope", "badges"], log_callback=lambda msg: None)
    assert results["nope"]["status"] == "error"
    assert results["badges"]["status"] == "success"
