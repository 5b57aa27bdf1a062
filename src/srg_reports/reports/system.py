from typing import Any, Dict, List, Mapping, Optional

from srg_reports.engine.errors import ConfigurationError
from srg_reports.engine.origin import OriginCache, OriginTableLoader
from srg_reports.engine.settings import ReportSettings
from srg_reports.engine.table import ReportTable
from srg_reports.reports.definitions import (
    ORIGINS,
    PIPELINE_STEPS,
    REPORT_IDS,
    REPORTS,
    CourseValue,
    Label,
    UserValue,
)
from srg_reports.utils.strings import get_string


class ReportSystem:
    """
    Builds the preset reports of one user in one course.

    Origin tables are fetched at most once per ReportSystem (through the
    OriginCache), however many reports read from them.
    """

    def __init__(
        self,
        source,
        user_id: int,
        course: Mapping[str, Any],
        settings: Optional[ReportSettings] = None,
        cache: Optional[OriginCache] = None,
        lang: str = "en",
        lookup=None,
    ):
        self.user_id = user_id
        self.course = dict(course)
        self.lang = lang
        self.settings = settings or ReportSettings()
        self.loader = OriginTableLoader(source, cache=cache, settings=self.settings, lookup=lookup)

    # --- Marker Resolution ---
    def resolve(self, value: Any) -> Any:
        """Replaces Label / CourseValue / UserValue markers, recursively."""
        if isinstance(value, Label):
            return get_string(value.key, self.lang)
        if isinstance(value, CourseValue):
            if value.field not in self.course:
                raise ConfigurationError(f"Course has no field '{value.field}'")
            return self.course[value.field]
        if isinstance(value, UserValue):
            return self.user_id
        if isinstance(value, dict):
            return {self.resolve(k): self.resolve(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.resolve(v) for v in value]
        return value

    # --- Building ---
    @staticmethod
    def report_key(name) -> str:
        """Accepts a report key or its numeric id."""
        if isinstance(name, int) or (isinstance(name, str) and name.isdigit()):
            key = REPORT_IDS.get(int(name))
            if key is None:
                raise ConfigurationError(f"Unknown report id: {name}")
            return key
        if name not in REPORTS:
            raise ConfigurationError(f"Unknown report: {name}")
        return name

    def origin_table(self, origin_name: str) -> ReportTable:
        if origin_name not in ORIGINS:
            raise ConfigurationError(f"Unknown origin table: {origin_name}")
        origin = ORIGINS[origin_name]
        filters = {col: [self.resolve(value)] for col, value in origin["filters"].items()}
        return self.loader.load(origin_name, filters, origin["columns"], origin["requirements"])

    def build_table(self, name) -> ReportTable:
        """Applies the report's steps in order and returns the final ReportTable."""
        definition = REPORTS[self.report_key(name)]
        table = self.origin_table(definition["origin"]).project(definition["columns"])

        for step in definition["steps"]:
            operation, args = step[0], self.resolve(step[1:])
            if operation not in PIPELINE_STEPS:
                raise ConfigurationError(f"Unknown pipeline step: {operation}")
            table = getattr(table, operation)(*args)
        return table

    def get_report(self, name) -> List[Dict[str, Any]]:
        return self.build_table(name).get_table()

    @staticmethod
    def available_reports() -> List[str]:
        return list(REPORTS)

    # --- Named Reports ---
    def get_course_log(self):
        return self.get_report("course_log")

    def get_course_dedication(self):
        return self.get_report("course_dedication")

    def get_course_module_log(self):
        return self.get_report("course_module_log")

    def get_course_module_dedication(self):
        return self.get_report("course_module_dedication")

    def get_grading_interest(self):
        return self.get_report("grading_interest")

    def get_forum_activity(self):
        return self.get_report("forum_activity")

    def get_hvp(self):
        return self.get_report("hvp")

    def get_badges(self):
        return self.get_report("badges")

    def get_chatbot_history(self):
        return self.get_report("chatbot_history")
