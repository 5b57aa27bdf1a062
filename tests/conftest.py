import pytest

from srg_reports.engine.origin import OriginCache
from srg_reports.engine.settings import ReportSettings
from srg_reports.engine.sources import InMemoryRecordSource
from srg_reports.engine.table import ReportTable


def _log(id, t, eventname, component, action, target, objecttable=None, objectid=None, userid=5, courseid=3):
    return {
        "id": id,
        "timecreated": t,
        "userid": userid,
        "courseid": courseid,
        "eventname": eventname,
        "component": component,
        "action": action,
        "target": target,
        "objecttable": objecttable,
        "objectid": objectid,
        "contextid": 40 + id,
        "contextlevel": 70,
        "contextinstanceid": 200 + id,
    }


def moodle_tables():
    return {
        "course": [
            {"id": 3, "shortname": "ALG1", "fullname": "Algebra I"},
            {"id": 4, "shortname": "GEO1", "fullname": "Geometry I"},
        ],
        "logstore_standard_log": [
            _log(1, 1000, "\\core\\event\\course_viewed", "core", "viewed", "course"),
            _log(2, 1030, "\\mod_page\\event\\course_module_viewed", "mod_page", "viewed", "course_module", "page", 11),
            _log(3, 1100, "\\mod_book\\event\\chapter_viewed", "mod_book", "viewed", "chapter", "book_chapters", 5),
            _log(4, 2300, "\\mod_quiz\\event\\attempt_started", "mod_quiz", "started", "attempt", "quiz_attempts", 9),
            _log(5, 2350, "\\mod_forum\\event\\discussion_viewed", "mod_forum", "viewed", "discussion", "forum_discussions", 21),
            _log(6, 2400, "\\mod_forum\\event\\post_created", "mod_forum", "created", "post", "forum_posts", 31),
            _log(7, 2500, "\\gradereport_user\\event\\grade_report_viewed", "gradereport_user", "viewed", "grade_report"),
            _log(8, 5000, "\\mod_page\\event\\course_module_viewed", "mod_page", "viewed", "course_module", "page", 12),
            _log(9, 1095, "\\mod_page\\event\\course_module_viewed", "mod_page", "viewed", "course_module", "page", 11),
            # Other user / other course / broken row
            _log(10, 1010, "\\core\\event\\course_viewed", "core", "viewed", "course", userid=6),
            _log(11, 1020, "\\core\\event\\course_viewed", "core", "viewed", "course", courseid=4),
            _log(12, None, "\\core\\event\\course_viewed", "core", "viewed", "course"),
        ],
        "page": [
            {"id": 11, "course": 3, "name": "Intro page"},
            {"id": 12, "course": 3, "name": "Syllabus"},
        ],
        "book_chapters": [
            {"id": 5, "bookid": 1, "title": "Intro"},
        ],
        "forum_discussions": [
            {"id": 21, "forum": 1, "name": "Welcome"},
        ],
        "forum_posts": [
            {"id": 31, "discussion": 21, "subject": "Re: Welcome"},
        ],
        "hvp_xapi_results": [
            {"id": 1, "user_id": 5, "content_id": 100, "interaction_type": "choice", "raw_score": 1, "max_score": 2},
            {"id": 2, "user_id": 5, "content_id": 200, "interaction_type": "fill-in", "raw_score": 3, "max_score": 3},
            {"id": 3, "user_id": 6, "content_id": 100, "interaction_type": "choice", "raw_score": 0, "max_score": 2},
        ],
        "hvp": [
            {"id": 100, "course": 3, "name": "Quiz H5P", "timecreated": 1500},
            {"id": 200, "course": 4, "name": "Other H5P", "timecreated": 1600},
        ],
        "badge_issued": [
            {"id": 1, "userid": 5, "badgeid": 7},
            {"id": 2, "userid": 5, "badgeid": 8},
            {"id": 3, "userid": 5, "badgeid": 99},
        ],
        "badge": [
            {"id": 7, "courseid": 3, "name": "X", "timecreated": 1700},
            {"id": 8, "courseid": 4, "name": "Y", "timecreated": 1800},
        ],
        "chatbot_history": [
            {"id": 1, "userid": 5, "courseid": 3, "timecreated": 3000, "speaker": "user", "message": "hi", "act": "greet"},
            {"id": 2, "userid": 5, "courseid": 3, "timecreated": 3005, "speaker": "bot", "message": "hello", "act": "greet"},
            {"id": 3, "userid": 5, "courseid": 4, "timecreated": 3010, "speaker": "user", "message": "wrong", "act": "ask"},
        ],
    }


@pytest.fixture()
def tables():
    return moodle_tables()


@pytest.fixture()
def source(tables):
    return InMemoryRecordSource(tables)


@pytest.fixture()
def cache():
    return OriginCache()


@pytest.fixture()
def course():
    return {"id": 3, "shortname": "ALG1", "fullname": "Algebra I"}


@pytest.fixture()
def settings():
    return ReportSettings()


@pytest.fixture()
def make_table(settings):
    """Builds a ReportTable from a list of dicts (columns taken from the first row)."""
    def _make(rows, columns=None, lookup=None, requirements=(), **overrides):
        table_settings = ReportSettings(**overrides) if overrides else settings
        cols = columns or list(rows[0].keys())
        return ReportTable(cols, rows, requirements=requirements, lookup=lookup, settings=table_settings)
    return _make
