import logging
import traceback
from typing import Awaitable, Callable

from overlaycheck.exceptions import SnapshotMismatch, SnapshotMissing
from overlaycheck.schema.result import MatchResult, StepOutcome, TestOutcome

logger = logging.getLogger(__name__)

Step = Callable[[], Awaitable[MatchResult | None]]


def raise_for_result(result: MatchResult) -> MatchResult:
    if result.passed:
        return result
    if result.missing:
        raise SnapshotMissing(result.message, location=result.location or "")
    raise SnapshotMismatch(result.message, diff=result.diff or "", fields=result.fields)


class ScenarioRunner:
    """Runs the steps of one error scenario in order.

    After a failed overlay match the remaining steps are skipped, since they
    would act on a page that is not in the expected state.
    """

    def __init__(self, name: str, abort_on_mismatch: bool = True):
        self.name = name
        self.abort_on_mismatch = abort_on_mismatch
        self.steps: list[tuple[str, Step]] = []

    def add_step(self, name: str, step: Step) -> "ScenarioRunner":
        self.steps.append((name, step))
        return self

    async def run(self) -> TestOutcome:
        outcome = TestOutcome()
        aborted = False

        for name, step in self.steps:
            if aborted:
                outcome.steps.append(StepOutcome(name=name, skipped=True))
                continue

            logger.debug(f"---------Running step {name} of {self.name}---------")
            try:
                result = await step()
            except AssertionError as e:
                logger.error(f"Step {name} of {self.name} failed: {e}")
                outcome.steps.append(StepOutcome(name=name, error=str(e)))
                aborted = True
                continue
            except Exception as e:
                logger.error(f"Error running step {name}: {traceback.format_exc()}")
                outcome.steps.append(StepOutcome(name=name, error=f"{type(e).__name__}: {e}"))
                aborted = True
                continue

            outcome.steps.append(StepOutcome(name=name, result=result))
            if result is not None and result.should_abort and self.abort_on_mismatch:
                logger.error(f"Step {name} of {self.name} failed: {result.message}")
                aborted = True

        return outcome

    async def run_or_raise(self) -> TestOutcome:
        outcome = await self.run()
        failed = outcome.failed_step
        if failed is None:
            return outcome
        if failed.result is not None:
            raise_for_result(failed.result)
        raise AssertionError(f"Step {failed.name} of {self.name} failed: {failed.error}")
