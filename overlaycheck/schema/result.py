from typing import Any

from pydantic import BaseModel, Field


class MatchResult(BaseModel):
    passed: bool
    actual: Any = None
    expected: Any = None
    location: str | None = None
    fields: list[str] = Field(default_factory=list)
    diff: str | None = None
    recorded: bool = False
    updated: bool = False
    missing: bool = False

    @property
    def should_abort(self) -> bool:
        return not self.passed

    @property
    def message(self) -> str:
        if self.passed:
            return "Overlay snapshot matched"
        where = f" at {self.location}" if self.location else ""
        if self.missing:
            return (
                f"New overlay snapshot{where} was not written. "
                "Recording new snapshots is disabled in CI; "
                "pass --update-overlay-snapshots to write it."
            )
        header = f"Overlay snapshot mismatch{where}"
        if self.fields:
            header += f" (differing fields: {', '.join(self.fields)})"
        return f"{header}\n\n{self.diff}" if self.diff else header


class StepOutcome(BaseModel):
    name: str
    result: MatchResult | None = None
    skipped: bool = False
    error: str | None = None


class TestOutcome(BaseModel):
    __test__ = False

    steps: list[StepOutcome] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(
            not step.skipped
            and step.error is None
            and (step.result is None or step.result.passed)
            for step in self.steps
        )

    @property
    def failed_step(self) -> StepOutcome | None:
        for step in self.steps:
            if step.error is not None or (
                step.result is not None and not step.result.passed
            ):
                return step
        return None

    @property
    def skipped_steps(self) -> list[str]:
        return [step.name for step in self.steps if step.skipped]
