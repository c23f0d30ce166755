from __future__ import annotations

from ..domain.models import RunOutcome
from ..ports import RunOutputPort
from ..services import SyncOrchestrator


class SyncUseCase:
    """Use case for reconciling the tracker with a scan report.

    Thin layer over SyncOrchestrator that publishes the run outputs once the
    run has completed. Nothing is published for a malformed report or an
    aborted run.
    """

    def __init__(
        self,
        *,
        orchestrator: SyncOrchestrator,
        outputs: RunOutputPort,
    ) -> None:
        self._orchestrator = orchestrator
        self._outputs = outputs

    def execute(self) -> RunOutcome:
        outcome = self._orchestrator.sync()
        if outcome.report_error is None:
            self._outputs.publish(outcome.to_outputs())
        return outcome
