import os
import sys


def get_base_dir():
    """
    Returns the base directory of the application.

    - If running as a frozen bundle, returns the folder containing the executable.
    - Otherwise returns the project root (three levels up from src/srg_reports/utils).
    - SRG_BASE_DIR overrides both, e.g. for an installed package.
    """
    override = os.getenv("SRG_BASE_DIR")
    if override:
        return os.path.abspath(override)
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def get_config_path(filename: str) -> str:
    """Returns the absolute path for an external configuration file."""
    return os.path.join(get_base_dir(), filename)


def get_output_dir(configured: str) -> str:
    """Relative output folders are resolved against the base directory."""
    if os.path.isabs(configured):
        return configured
    return os.path.join(get_base_dir(), configured)
