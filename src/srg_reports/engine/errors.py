class ReportError(Exception):
    """Base class for every failure raised while building a report."""


class ConfigurationError(ReportError):
    """
    A report definition is wired wrong: it references a column, a report,
    a step or a marker that does not exist at the point of use.
    Fatal to the single report being generated.
    """


class ColumnNotFoundError(ConfigurationError):
    def __init__(self, column: str, available=None):
        self.column = column
        self.available = list(available or [])
        message = f"Column '{column}' does not exist"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class DuplicateColumnError(ConfigurationError):
    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Column '{column}' already exists")


class SourceError(ReportError):
    """The record source could not deliver rows (driver error, missing table)."""

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"Source '{table}' failed: {reason}")
