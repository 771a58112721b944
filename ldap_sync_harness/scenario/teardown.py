"""Best-effort teardown stack.

Destructors are pushed as the scenario plans its resources and run in
reverse order. A failing step never stops the remaining ones; failures are
collected into a :class:`CleanupReport`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ldap_sync_harness.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CleanupFailure:
    step: str
    error: Exception

    def to_dict(self) -> dict[str, str]:
        return {"step": self.step, "type": type(self.error).__name__, "message": str(self.error)}


@dataclass
class CleanupReport:
    attempted: list[str] = field(default_factory=list)
    failures: list[CleanupFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def failed_steps(self) -> list[str]:
        return [f.step for f in self.failures]

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": list(self.attempted),
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass(frozen=True)
class _Step:
    name: str
    func: Callable[..., Any]
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


class Teardown:
    """LIFO stack of named cleanup callables."""

    def __init__(self) -> None:
        self._steps: list[_Step] = []

    def __len__(self) -> int:
        return len(self._steps)

    def push(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._steps.append(_Step(name, func, args, kwargs))

    def run(self) -> CleanupReport:
        """Run and drain every step, newest first."""
        report = CleanupReport()
        while self._steps:
            step = self._steps.pop()
            report.attempted.append(step.name)
            try:
                step.func(*step.args, **step.kwargs)
            except Exception as exc:
                logger.warning(
                    "Cleanup step failed",
                    event="harness.teardown.step_failed",
                    step=step.name,
                    exc_info=True,
                )
                report.failures.append(CleanupFailure(step.name, exc))
            else:
                logger.debug("Cleanup step done", event="harness.teardown.step_done", step=step.name)

        if report.failures:
            logger.warning(
                "Cleanup finished with errors",
                event="harness.teardown.report",
                attempted=report.attempted,
                failed=report.failed_steps(),
            )
        else:
            logger.info("Cleanup finished", event="harness.teardown.report", attempted=report.attempted)
        return report
