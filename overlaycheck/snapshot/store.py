import asyncio
import inspect
import json
import logging
from pathlib import Path
from typing import Any, ClassVar

import aiofiles
from pydantic import BaseModel, ConfigDict, Field

from overlaycheck.schema.overlay import MISSING
from overlaycheck.schema.result import MatchResult
from overlaycheck.snapshot.compare import compare_snapshot
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class SnapshotLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_file: Path
    call_site: str
    build_mode: str = Field(default_factory=lambda: settings.BUILD_MODE)

    @property
    def key(self) -> str:
        return f"{self.call_site} [{self.build_mode}]"

    def __str__(self) -> str:
        return f"{self.test_file.name}::{self.key}"

    @classmethod
    def from_caller(cls) -> "SnapshotLocation":
        """Locate the first frame outside this package, i.e. the test body."""
        for frame_info in inspect.stack(context=0)[1:]:
            filename = Path(frame_info.filename).resolve()
            if PACKAGE_DIR in filename.parents:
                continue
            return cls(
                test_file=filename,
                call_site=f"{frame_info.function}:{frame_info.lineno}",
            )
        raise RuntimeError("Could not determine the calling test file")


class SnapshotStore:
    """Expected overlay snapshots kept in a JSON file beside the test source.

    Entries are keyed by call site and build mode. A location is written at
    most once per run, so a later call at the same site compares against the
    first recorded value instead of overwriting it.
    """

    _stores: ClassVar[dict[Path, "SnapshotStore"]] = {}

    def __init__(self, path: Path, update: bool | None = None, ci: bool | None = None):
        self.path = Path(path)
        self._update = update
        self._ci = ci
        self._entries: dict[str, Any] | None = None
        self._written: set[str] = set()
        self._lock = asyncio.Lock()

    @classmethod
    def for_test_file(cls, test_file: Path) -> "SnapshotStore":
        test_file = Path(test_file)
        path = (
            test_file.parent / settings.SNAPSHOT_DIR_NAME / f"{test_file.stem}.json"
        ).resolve()
        if path not in cls._stores:
            cls._stores[path] = cls(path)
        return cls._stores[path]

    @property
    def update(self) -> bool:
        return settings.UPDATE_SNAPSHOTS if self._update is None else self._update

    @property
    def ci(self) -> bool:
        return settings.CI if self._ci is None else self._ci

    async def load(self) -> dict[str, Any]:
        if self._entries is not None:
            return self._entries

        if not self.path.exists():
            self._entries = {}
            return self._entries

        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            content = await f.read()
        self._entries = json.loads(content) if content.strip() else {}
        logger.debug(f"Loaded {len(self._entries)} overlay snapshots from {self.path}")
        return self._entries

    async def lookup(self, location: SnapshotLocation) -> Any:
        entries = await self.load()
        return entries.get(location.key, MISSING)

    async def record(self, location: SnapshotLocation, actual: Any):
        entries = {**await self.load(), location.key: actual}

        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(entries, indent=2, ensure_ascii=False)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(content + "\n")

        # only a saved snapshot is visible to later lookups
        self._entries = entries
        self._written.add(location.key)
        logger.info(f"Wrote overlay snapshot {location}")

    async def compare_or_record(
        self, actual: Any, location: SnapshotLocation
    ) -> MatchResult:
        async with self._lock:
            stored = await self.lookup(location)

            if stored is MISSING:
                if self.ci and not self.update:
                    logger.error(f"Missing overlay snapshot {location} in CI")
                    return MatchResult(
                        passed=False,
                        actual=actual,
                        location=str(location),
                        missing=True,
                    )
                await self.record(location, actual)
                return MatchResult(
                    passed=True,
                    actual=actual,
                    expected=actual,
                    location=str(location),
                    recorded=True,
                )

            result = compare_snapshot(actual, stored, location=str(location))
            if (
                not result.passed
                and self.update
                and location.key not in self._written
            ):
                await self.record(location, actual)
                return result.model_copy(update={"passed": True, "updated": True})
            return result
