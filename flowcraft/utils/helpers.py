# flowcraft/utils/helpers.py

import json
import re
import textwrap
from typing import Any, Optional

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def dedent_and_strip(text: str) -> str:
    """
    Cleans up multiline strings by removing indentation and stripping.
    """
    return textwrap.dedent(text).strip()


def extract_json_object(text: str) -> Optional[Any]:
    """
    Pull the outermost {...} block out of model output and parse it.
    Returns None when there is no parseable object.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def truncate(text: str, limit: int = 100) -> str:
    t = text or ""
    return t if len(t) <= limit else t[:limit] + "..."
