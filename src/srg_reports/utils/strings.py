from typing import Dict

# --- Column & Report Labels ---
STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "time": "Time",
        "dedication": "Dedication",
        "course_shortname": "Course Shortname",
        "course_fullname": "Course Fullname",
        "object_name": "Object Name",
        "eventname": "Eventname",
        # Report titles
        "course_log": "Course Log",
        "course_dedication": "Course Dedication",
        "course_module_log": "Course Module Log",
        "course_module_dedication": "Course Module Dedication",
        "grading_interest": "Grading Interest",
        "forum_activity": "Forum Activity",
        "hvp": "H5P Activity",
        "badges": "Badges",
        "chatbot_history": "Chatbot History",
    },
    "es": {
        "time": "Hora",
        "dedication": "Dedicación",
        "course_shortname": "Nombre corto del curso",
        "course_fullname": "Nombre completo del curso",
        "object_name": "Nombre del objeto",
        "eventname": "Evento",
        "course_log": "Registro del curso",
        "course_dedication": "Dedicación al curso",
        "course_module_log": "Registro de actividades",
        "course_module_dedication": "Dedicación por actividad",
        "grading_interest": "Consulta de calificaciones",
        "forum_activity": "Actividad en foros",
        "hvp": "Actividad H5P",
        "badges": "Insignias",
        "chatbot_history": "Historial del chatbot",
    },
}

DEFAULT_LANG = "en"


def get_string(key: str, lang: str = DEFAULT_LANG) -> str:
    """Label lookup: requested language, then English, then the key itself."""
    table = STRINGS.get(lang, {})
    if key in table:
        return table[key]
    return STRINGS[DEFAULT_LANG].get(key, key)
