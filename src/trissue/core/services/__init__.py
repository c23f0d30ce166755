from __future__ import annotations

from .reconciler import Reconciler
from .plan_executor import PlanExecutor
from .sync_orchestrator import SyncOrchestrator

__all__ = [
    "Reconciler",
    "PlanExecutor",
    "SyncOrchestrator",
]
