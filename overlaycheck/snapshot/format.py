import math
from typing import Any

INDENT = "  "


def format_snapshot(value: Any, depth: int = 0) -> str:
    """Render a snapshot value the way it is shown in failure diffs.

    Multi-line strings keep their real newlines so a source excerpt reads like
    the code frame in the overlay, and a NaN count prints as ``NaN``.
    """
    pad = INDENT * depth
    inner = INDENT * (depth + 1)

    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = ["{"]
        for key, item in value.items():
            lines.append(f'{inner}"{key}": {format_snapshot(item, depth + 1)},')
        lines.append(pad + "}")
        return "\n".join(lines)

    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        lines = ["["]
        for item in value:
            lines.append(f"{inner}{format_snapshot(item, depth + 1)},")
        lines.append(pad + "]")
        return "\n".join(lines)

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isnan(value):
        return "NaN"
    if isinstance(value, (int, float)):
        return repr(value)
    return f'"{value}"'
