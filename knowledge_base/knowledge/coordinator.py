import threading

from knowledge_base.knowledge.models import OperationResult
from knowledge_base.knowledge.rebuilder import KnowledgeBaseRebuilder
from knowledge_base.logging.logger import Log


class RebuildCoordinator:
    """Single-flight guard around the rebuilder.

    Rebuilds never overlap. Every trigger takes a generation number; a
    trigger that waited behind a running rebuild reuses the result of any
    rebuild that started after it was requested, so a burst of triggers
    collapses into one follow-up rebuild that re-reads metadata.
    """

    def __init__(self, rebuilder: KnowledgeBaseRebuilder) -> None:
        self._rebuilder = rebuilder
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._requested = 0
        self._completed = 0
        self._last_result: OperationResult | None = None

    def run(self) -> OperationResult:
        with self._state_lock:
            self._requested += 1
            generation = self._requested

        with self._run_lock:
            with self._state_lock:
                if self._completed >= generation and self._last_result is not None:
                    Log.debug(f"Rebuild request {generation} served by a newer rebuild")
                    return self._last_result
                started_at = self._requested

            result = self._rebuilder.rebuild()

            with self._state_lock:
                self._completed = started_at
                self._last_result = result
            return result

    def close(self) -> None:
        self._rebuilder.close()
