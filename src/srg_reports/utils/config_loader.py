import configparser
import os

from srg_reports.utils.paths import get_config_path

REPORT_DEFAULTS = {
    'dedication_min_time': '60',
    'dedication_max_time': '900',
    'target_table_max_count': '100',
    'batch_size': '100000',
    'time_format': '%%d.%%m.%%Y %%H:%%M:%%S',
    'lang': 'en',
    'output_dir': 'reports',
}


def load_config(config_path: str = None):
    """
    Loads the configuration from the 'config.ini' file.
    The default location is the application base dir (see utils.paths).

    Returns:
        ConfigParser: the configuration sections, [REPORTS] always present.
    """
    config_path = config_path or get_config_path('config.ini')

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found at: {config_path}")

    config = configparser.ConfigParser()
    config.read(config_path, encoding='utf-8')

    # Inject defaults so callers never break on a missing section or key
    if 'REPORTS' not in config:
        config['REPORTS'] = {}
    for key, value in REPORT_DEFAULTS.items():
        if key not in config['REPORTS']:
            config['REPORTS'][key] = value

    print(f"Configuration loaded successfully from: {config_path}")
    return config


def has_moodle_api(config) -> bool:
    """True when the Moodle Web Service can be used for course metadata."""
    return 'MOODLE' in config and bool(config['MOODLE'].get('URL')) and bool(config['MOODLE'].get('TOKEN'))
