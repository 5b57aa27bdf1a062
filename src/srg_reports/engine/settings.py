import configparser
from dataclasses import dataclass

from srg_reports.engine.errors import ConfigurationError

# --- Default Thresholds (seconds / counts) ---
DEDICATION_MIN_TIME = 60
DEDICATION_MAX_TIME = 900
TARGET_TABLE_MAX_COUNT = 100
BATCH_SIZE = 100000
TIME_FORMAT = "%d.%m.%Y %H:%M:%S"


@dataclass(frozen=True)
class ReportSettings:
    """
    Tunables shared by every report table of one request.

    - min_time: floor for the dedication of a session (a lone event never yields 0).
    - max_time: gap at which a new session starts.
    - target_table_max_count: distinct tables probed by a variable join.
    - batch_size: rows per dedication pass and keys per lookup query.
    """
    min_time: int = DEDICATION_MIN_TIME
    max_time: int = DEDICATION_MAX_TIME
    target_table_max_count: int = TARGET_TABLE_MAX_COUNT
    batch_size: int = BATCH_SIZE
    time_format: str = TIME_FORMAT

    def __post_init__(self):
        if self.min_time < 0:
            raise ValueError("min_time must not be negative")
        if self.max_time <= 0:
            raise ValueError("max_time must be positive")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.target_table_max_count <= 0:
            raise ValueError("target_table_max_count must be positive")

    @classmethod
    def from_config(cls, config) -> "ReportSettings":
        """Builds the settings from the [REPORTS] section of config.ini."""
        if "REPORTS" not in config:
            return cls()
        section = config["REPORTS"]
        try:
            time_format = section.get("time_format", fallback=TIME_FORMAT)
        except configparser.InterpolationError as e:
            raise ConfigurationError(
                f"Invalid time_format in [REPORTS]: '%' must be written as '%%' in config.ini ({e.message})"
            ) from e
        return cls(
            min_time=section.getint("dedication_min_time", fallback=DEDICATION_MIN_TIME),
            max_time=section.getint("dedication_max_time", fallback=DEDICATION_MAX_TIME),
            target_table_max_count=section.getint("target_table_max_count", fallback=TARGET_TABLE_MAX_COUNT),
            batch_size=section.getint("batch_size", fallback=BATCH_SIZE),
            time_format=time_format,
        )
