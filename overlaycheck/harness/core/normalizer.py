import logging
import math
import re
from typing import Any, Awaitable, Callable

from overlaycheck.exceptions import ExtractionNotFound
from overlaycheck.harness.core.accessor import OverlayAccessor
from overlaycheck.schema.overlay import ABSENCE_SENTINEL, OverlayRecord

logger = logging.getLogger(__name__)


def _normalize_source(source: str | None) -> str | None:
    if source is None or source == ABSENCE_SENTINEL:
        return source
    lines = source.replace("\r\n", "\n").split("\n")
    text = "\n".join(line.rstrip() for line in lines).strip("\n")
    return text or None


def _normalize_stack(stack: list[str] | str) -> tuple[str, ...] | str:
    if isinstance(stack, str):
        return stack
    frames = (" ".join(frame.split()) for frame in stack)
    return tuple(frame for frame in frames if frame)


def _normalize_count(count: Any) -> int | float | str:
    if count == ABSENCE_SENTINEL:
        return count
    if count is None:
        return math.nan
    if isinstance(count, bool):
        return int(count)
    if isinstance(count, (int, float)):
        if isinstance(count, float) and math.isnan(count):
            return count
        return int(count)

    # pagination reads like "1/3"; the total is the last number
    numbers = re.findall(r"\d+", str(count))
    if not numbers:
        return math.nan
    return int(numbers[-1])


def _normalize_title(title: str | None) -> str | None:
    if title is None or title == ABSENCE_SENTINEL:
        return title
    return title.strip() or None


def normalize_overlay(
    description: str,
    source: str | None,
    stack: list[str] | str,
    count: Any = None,
    title: str | None = None,
) -> OverlayRecord:
    return OverlayRecord(
        description=(
            description if description == ABSENCE_SENTINEL else description.strip()
        ),
        source=_normalize_source(source),
        stack=_normalize_stack(stack),
        count=_normalize_count(count),
        title=_normalize_title(title),
    )


async def _isolated(
    name: str, extraction: Callable[[], Awaitable[Any]], absent: Any = ABSENCE_SENTINEL
) -> Any:
    """Run one field extraction so its failure cannot cost the other fields.

    ``absent`` replaces a region that is simply not rendered; any other
    failure becomes the absence sentinel.
    """
    try:
        return await extraction()
    except ExtractionNotFound as e:
        logger.debug(f"Overlay {name} not rendered: {e}")
        return absent
    except Exception as e:
        logger.debug(f"Could not extract overlay {name}: {e}")
        return ABSENCE_SENTINEL


async def capture_overlay_record(accessor: OverlayAccessor) -> OverlayRecord:
    description = await _isolated("description", accessor.extract_description)
    source = await _isolated("source", accessor.extract_source)
    stack = await _isolated("stack", accessor.extract_stack)
    count = await _isolated("count", accessor.extract_count, absent=None)
    title = await _isolated("title", accessor.extract_title, absent=None)

    record = normalize_overlay(description, source, stack, count, title)
    logger.debug(f"Captured overlay record {record.model_dump_json()}")
    return record
