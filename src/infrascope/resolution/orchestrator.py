"""Resolution orchestrator: the interface the display layer talks to."""

import asyncio
from typing import Callable, List, Optional
import structlog

from infrascope.clients.gateway import CloudGateway
from infrascope.config.settings import ResolutionSettings
from infrascope.core.exceptions import ConfigurationException
from infrascope.models.resolution import ResolutionState
from .context import CredentialCache, ResolutionContext
from .pipeline import ResolutionPipeline

logger = structlog.get_logger(__name__)

StateListener = Callable[[ResolutionState], None]


class ResolutionOrchestrator:
    """Owns the current state and the single in-flight resolution.

    Each refresh bumps the generation and cancels the previous run.
    Snapshots from any older generation are dropped, so the state always
    belongs to the most recent refresh.
    """

    def __init__(self, gateway: CloudGateway, settings: Optional[ResolutionSettings] = None):
        self.context = ResolutionContext(
            gateway=gateway,
            settings=settings or ResolutionSettings(),
            credentials=CredentialCache(gateway)
        )
        self.pipeline = ResolutionPipeline(self.context, self._publish)
        self._generation = 0
        self._state = ResolutionState.idle()
        self._task: Optional[asyncio.Task] = None
        self._last_context: Optional[str] = None
        self._listeners: List[StateListener] = []
        self.logger = logger.bind(component="orchestrator")

    @property
    def generation(self) -> int:
        return self._generation

    def get_state(self) -> ResolutionState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for every published snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh(self, cluster_context: str, clear_credentials: bool = False) -> asyncio.Task:
        """Start a new resolution, superseding any run still in flight."""
        self._generation += 1
        generation = self._generation
        self.context.generation = generation
        self._last_context = cluster_context

        if self._task is not None and not self._task.done():
            self.logger.info("Cancelling superseded resolution", generation=generation - 1)
            self._task.cancel()

        self.logger.info("Starting resolution", generation=generation, context=cluster_context)
        self._task = asyncio.get_running_loop().create_task(
            self.pipeline.run(cluster_context, generation, clear_credentials=clear_credentials)
        )
        return self._task

    async def resolve(self, cluster_context: str, clear_credentials: bool = False) -> ResolutionState:
        """Refresh and wait for the terminal state."""
        return await self.refresh(cluster_context, clear_credentials=clear_credentials)

    async def retry_with_cleared_credentials(self, cluster_context: Optional[str] = None) -> asyncio.Task:
        """Clear cached credentials, then refresh the last (or given) context."""
        target = cluster_context or self._last_context
        if not target:
            raise ConfigurationException("No cluster context to retry")

        await self.context.credentials.invalidate(reason="user retry")
        return self.refresh(target, clear_credentials=True)

    def restart_application(self) -> None:
        self.context.gateway.restart_application_process()

    def _publish(self, state: ResolutionState) -> None:
        if state.generation != self._generation:
            self.logger.debug(
                "Dropping stale snapshot",
                generation=state.generation,
                current=self._generation,
                status=state.status.value
            )
            return

        self._state = state
        if state.is_terminal:
            self.logger.info("Resolution finished", **state.summary())

        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                self.logger.error("State listener failed", error=str(e))
