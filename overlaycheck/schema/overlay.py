import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ABSENCE_SENTINEL = "<empty>"


class _Missing:
    """Marks an expectation argument that was not passed at all."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    # pydantic deep-copies field defaults; identity checks need the singleton
    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING: Any = _Missing()


class PresenceOutcome(str, Enum):
    VISIBLE = "visible"
    NOT_FOUND = "not_found"
    OPENED = "opened"
    NOT_OPENABLE = "not_openable"


NOT_FOUND_LITERALS: dict[PresenceOutcome, str] = {
    PresenceOutcome.NOT_FOUND: "<no redbox found>",
    PresenceOutcome.NOT_OPENABLE: "<no redbox to open>",
}


class OverlayRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    source: str | None = None
    stack: tuple[str, ...] | str = Field(default_factory=tuple)
    count: int | float | str = math.nan
    title: str | None = None

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "source": self.source,
            "stack": (
                self.stack if isinstance(self.stack, str) else list(self.stack)
            ),
            "count": self.count,
            "title": self.title,
        }


class ExpectedVariants(BaseModel):
    """One expected snapshot per build mode; only the active mode is compared."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    webpack: Any = MISSING
    turbopack: Any = MISSING

    def select(self, build_mode: str) -> Any:
        if build_mode not in ("webpack", "turbopack"):
            raise ValueError(f"Unknown build mode {build_mode!r}")
        return getattr(self, build_mode)
