import json
from typing import Any, Dict, Optional

import requests


def call_moodle_api(moodle_config, function_name, **kwargs):
    """
    Generic wrapper for Moodle Web Services.
    Handles parameter formatting, including list/array conversion for batch requests.
    """
    url = f"{moodle_config['URL'].rstrip('/')}/webservice/rest/server.php"

    # Base parameters required by Moodle
    params = {
        "wstoken": moodle_config['TOKEN'],
        "wsfunction": function_name,
        "moodlewsrestformat": "json"
    }

    for key, value in kwargs.items():
        if isinstance(value, list):
            # Moodle API expects arrays like: values[0]=1, values[1]=2
            for i, item in enumerate(value):
                params[f"{key}[{i}]"] = item
        else:
            params[key] = value

    try:
        response = requests.post(url, data=params, timeout=60)
        response.raise_for_status()

        data = response.json()

        # Check for Moodle-level exceptions
        if isinstance(data, dict) and 'exception' in data:
            print(f"[API ERROR] {function_name}: {data.get('message')}")
            return None

        return data

    except requests.exceptions.RequestException as e:
        print(f"[NETWORK ERROR] {function_name}: {e}")
        return None
    except json.JSONDecodeError:
        print(f"[DATA ERROR] {function_name}: Invalid JSON response")
        return None


def get_course_info(moodle_config, course_id: int) -> Optional[Dict[str, Any]]:
    """
    Retrieves id, shortname and fullname of one course.
    """
    data = call_moodle_api(moodle_config, "core_course_get_courses_by_field", field="id", value=course_id)
    if not data or not isinstance(data, dict):
        return None

    courses = data.get('courses', [])
    if not courses:
        return None

    course = courses[0]
    return {
        "id": course["id"],
        "shortname": course.get("shortname", ""),
        "fullname": course.get("fullname", ""),
    }


def get_user_id(moodle_config, username: str) -> Optional[int]:
    """Resolves a Moodle username to its user id."""
    data = call_moodle_api(moodle_config, "core_user_get_users_by_field", field="username", values=[username])
    if not data or not isinstance(data, list):
        return None
    return data[0].get("id")
