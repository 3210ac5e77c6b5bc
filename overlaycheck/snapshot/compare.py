import difflib
import logging
import math
from typing import Any

from overlaycheck.schema.overlay import OverlayRecord
from overlaycheck.schema.result import MatchResult
from overlaycheck.snapshot.format import format_snapshot

logger = logging.getLogger(__name__)


def snapshots_equal(left: Any, right: Any) -> bool:
    # NaN is the "count not defined" marker and must match itself
    if isinstance(left, float) and isinstance(right, float):
        if math.isnan(left) and math.isnan(right):
            return True

    if isinstance(left, dict) and isinstance(right, dict):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(snapshots_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(snapshots_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right

    return left == right


def differing_fields(expected: Any, actual: Any) -> list[str]:
    if not (isinstance(expected, dict) and isinstance(actual, dict)):
        return []
    keys = list(actual.keys()) + [key for key in expected if key not in actual]
    return [
        key
        for key in keys
        if key not in expected
        or key not in actual
        or not snapshots_equal(expected[key], actual[key])
    ]


def render_diff(expected: Any, actual: Any) -> str:
    diff = difflib.unified_diff(
        format_snapshot(expected).splitlines(),
        format_snapshot(actual).splitlines(),
        fromfile="Expected",
        tofile="Received",
        lineterm="",
    )
    return "\n".join(diff)


def to_snapshot_value(value: Any) -> Any:
    if isinstance(value, OverlayRecord):
        return value.to_snapshot()
    return value


def compare_snapshot(
    actual: Any, expected: Any, location: str | None = None
) -> MatchResult:
    expected = to_snapshot_value(expected)

    if snapshots_equal(expected, actual):
        return MatchResult(
            passed=True, actual=actual, expected=expected, location=location
        )

    fields = differing_fields(expected, actual)
    logger.debug(f"Snapshot mismatch at {location}, differing fields: {fields}")
    return MatchResult(
        passed=False,
        actual=actual,
        expected=expected,
        location=location,
        fields=fields,
        diff=render_diff(expected, actual),
    )
