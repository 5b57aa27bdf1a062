"""
Declarative report catalogue.

Every report is an origin table, a projection and a fixed list of pipeline
steps. A step is (ReportTable method name, *arguments); Label and CourseValue
markers inside the arguments are resolved when the report is built.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Label:
    """Localized column label, looked up with get_string()."""
    key: str


@dataclass(frozen=True)
class CourseValue:
    """A field of the current course (id, shortname, fullname)."""
    field: str


@dataclass(frozen=True)
class UserValue:
    """The id of the user the reports are generated for."""


USER = UserValue()

# --- Origin Tables ---
ORIGINS: Dict[str, Dict[str, Any]] = {
    "logstore_standard_log": {
        "filters": {"userid": USER, "courseid": CourseValue("id")},
        "columns": [
            "id", "timecreated", "userid", "courseid", "eventname", "component", "action",
            "target", "objecttable", "objectid", "contextid", "contextlevel", "contextinstanceid",
        ],
        "requirements": ["id", "timecreated"],
    },
    "hvp_xapi_results": {
        "filters": {"user_id": USER},
        "columns": ["id", "content_id", "interaction_type", "raw_score", "max_score"],
        "requirements": ["id", "content_id"],
    },
    "badge_issued": {
        "filters": {"userid": USER},
        "columns": ["id", "badgeid"],
        "requirements": ["id", "badgeid"],
    },
    "chatbot_history": {
        "filters": {"userid": USER, "courseid": CourseValue("id")},
        "columns": ["id", "timecreated", "speaker", "message", "act"],
        "requirements": ["id", "timecreated"],
    },
}

# --- Shared Building Blocks ---
LOG_COLUMNS = [
    "id", "timecreated", "eventname", "component", "action", "target",
    "objecttable", "objectid", "contextid", "contextlevel", "contextinstanceid",
]

MODULE_TARGETS = [
    "course_module", "course_content", "course_bin_item", "h5p", "attempt", "chapter", "question",
]
MODULE_ACTIONS = ["viewed", "failed", "started", "submitted"]

GRADE_EVENTS = [
    "\\mod_assign\\event\\grading_table_viewed",
    "\\mod_assign\\event\\grading_form_viewed",
    "\\gradereport_user\\event\\grade_report_viewed",
    "\\gradereport_overview\\event\\grade_report_viewed",
    "\\gradereport_grader\\event\\grade_report_viewed",
    "\\gradereport_outcomes\\event\\grade_report_viewed",
    "\\gradereport_singleview\\event\\grade_report_viewed",
]

# Moodle tables whose display name lives in a 'name' column
NAMED_TABLES = [
    "assign", "bigbluebuttonbn", "book", "chat", "choice", "data", "feedback", "folder",
    "forum", "glossary", "h5pactivity", "hvp", "imscp", "label", "lesson", "lti", "page",
    "question", "quiz", "resource", "scorm", "survey", "url", "wiki", "workshop",
]

OBJECT_NAME_DISPATCH: Dict[str, Optional[Dict[str, str]]] = {
    **{table: None for table in NAMED_TABLES},
    "book_chapters": {"title": "object_name"},
}

FORUM_DISPATCH: Dict[str, Optional[Dict[str, str]]] = {
    "forum": None,
    "forum_discussions": {"id": "discussionid", "name": "name"},
    "forum_posts": {"discussion": "discussionid"},
}

COURSE_COLUMNS = [
    ("add_constant_column", Label("course_shortname"), CourseValue("shortname")),
    ("add_constant_column", Label("course_fullname"), CourseValue("fullname")),
]

MODULE_FILTER = [
    ("require_non_empty", "objecttable"),
    ("require_non_empty", "objectid"),
    ("constrain", "target", MODULE_TARGETS),
    ("constrain", "action", MODULE_ACTIONS),
]

OBJECT_NAME_JOIN = [
    ("join_with_variable_table", "objecttable", "objectid", {"name": "object_name"}, OBJECT_NAME_DISPATCH),
    ("rename_column", "object_name", Label("object_name")),
]

# --- Report Catalogue ---
REPORTS: Dict[str, Dict[str, Any]] = {
    "course_log": {
        "origin": "logstore_standard_log",
        "columns": LOG_COLUMNS,
        "steps": [
            ("add_human_time", Label("time")),
            *COURSE_COLUMNS,
        ],
    },
    "course_dedication": {
        "origin": "logstore_standard_log",
        "columns": ["id", "timecreated", "courseid"],
        "steps": [
            ("add_dedication", Label("dedication")),
            ("add_human_time", Label("time")),
        ],
    },
    "course_module_log": {
        "origin": "logstore_standard_log",
        "columns": LOG_COLUMNS,
        "steps": [
            *MODULE_FILTER,
            ("add_human_time", Label("time")),
            ("add_constant_column", "object_name", ""),
            *COURSE_COLUMNS,
            *OBJECT_NAME_JOIN,
        ],
    },
    "course_module_dedication": {
        "origin": "logstore_standard_log",
        "columns": LOG_COLUMNS,
        "steps": [
            *MODULE_FILTER,
            ("add_dedication", Label("dedication"), "component"),
            ("add_human_time", Label("time")),
            ("add_constant_column", "object_name", ""),
            *COURSE_COLUMNS,
            *OBJECT_NAME_JOIN,
        ],
    },
    "grading_interest": {
        "origin": "logstore_standard_log",
        "columns": ["id", "timecreated", "eventname"],
        "steps": [
            ("constrain", "eventname", GRADE_EVENTS),
            ("add_human_time", Label("time")),
            *COURSE_COLUMNS,
            ("rename_column", "eventname", Label("eventname")),
        ],
    },
    "forum_activity": {
        "origin": "logstore_standard_log",
        "columns": ["id", "timecreated", "eventname", "component", "action", "target", "objecttable", "objectid"],
        "steps": [
            ("require_non_empty", "objecttable"),
            ("require_non_empty", "objectid"),
            ("constrain", "component", ["mod_forum"]),
            ("add_human_time", Label("time")),
            ("add_constant_column", "name", ""),
            ("add_constant_column", "discussionid", ""),
            ("join_with_variable_table", "objecttable", "objectid", {"name": "name"}, FORUM_DISPATCH),
            ("join_with_fixed_table", "forum_discussions", "discussionid", {"name": "name"}),
        ],
    },
    "hvp": {
        "origin": "hvp_xapi_results",
        "columns": ["id", "content_id", "interaction_type", "raw_score", "max_score"],
        "steps": [
            ("add_constant_column", "courseid", ""),
            ("add_constant_column", "object_name", ""),
            ("add_constant_column", "timecreated", ""),
            ("join_with_fixed_table", "hvp", "content_id",
             {"course": "courseid", "name": "object_name", "timecreated": "timecreated"}),
            ("constrain", "courseid", [CourseValue("id")]),
            ("add_human_time", Label("time")),
            *COURSE_COLUMNS,
            ("rename_column", "object_name", Label("object_name")),
        ],
    },
    "badges": {
        "origin": "badge_issued",
        "columns": ["id", "badgeid"],
        "steps": [
            ("add_constant_column", "courseid", ""),
            ("add_constant_column", "object_name", ""),
            ("add_constant_column", "timecreated", ""),
            ("join_with_fixed_table", "badge", "badgeid",
             {"courseid": "courseid", "name": "object_name", "timecreated": "timecreated"}),
            ("constrain", "courseid", [CourseValue("id")]),
            ("add_human_time", Label("time")),
            *COURSE_COLUMNS,
            ("rename_column", "object_name", Label("object_name")),
        ],
    },
    "chatbot_history": {
        "origin": "chatbot_history",
        "columns": ["id", "timecreated", "speaker", "message", "act"],
        "steps": [
            ("add_human_time", Label("time")),
            *COURSE_COLUMNS,
        ],
    },
}

# Numeric report ids, as stored by the activity settings
REPORT_IDS: Dict[int, str] = {
    0: "course_dedication",
    1: "course_module_log",
    2: "course_module_dedication",
    3: "grading_interest",
    4: "forum_activity",
    5: "hvp",
    6: "badges",
    7: "chatbot_history",
}

PIPELINE_STEPS = {
    "require_non_empty", "constrain", "add_constant_column", "rename_column", "add_human_time",
    "add_dedication", "join_with_fixed_table", "join_with_variable_table",
}
