"""Scenario orchestration and teardown."""

from .orchestrator import DeployPermissionScenario, ScenarioResult
from .teardown import CleanupFailure, CleanupReport, Teardown

__all__ = [
    "DeployPermissionScenario",
    "ScenarioResult",
    "CleanupFailure",
    "CleanupReport",
    "Teardown",
]
