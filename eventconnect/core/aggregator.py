"""Fan-out loading of independent sources into one atomically published snapshot."""

import asyncio
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

import structlog

from eventconnect.core.defaulting import SourceFailure, SourceQuery, SourceResult, fetch_with_default

logger = structlog.get_logger(__name__)

S = TypeVar("S")


class CycleState(str, Enum):
    """Lifecycle of a load cycle."""

    LOADING = "loading"
    READY = "ready"
    READY_WITH_ERRORS = "ready_with_errors"
    SUPERSEDED = "superseded"


class LoadCycle:
    """One fan-out load attempt, identified by its generation."""

    def __init__(self, generation: int, source_names: Sequence[str]):
        self.generation = generation
        self.source_names = list(source_names)
        self.state = CycleState.LOADING
        self.results: Dict[str, SourceResult] = {}
        self.failures: List[SourceFailure] = []
        self.snapshot: Optional[Any] = None
        self.started_at = datetime.now()
        self.finished_at: Optional[datetime] = None

    @property
    def expected(self) -> int:
        return len(self.source_names)

    @property
    def completed(self) -> int:
        """Number of sources that have resolved, successfully or not."""
        return len(self.results)

    @property
    def errors(self) -> List[str]:
        """Human-readable failure reasons, in completion order."""
        return [str(failure) for failure in self.failures]

    @property
    def is_done(self) -> bool:
        return self.state is not CycleState.LOADING

    def record(self, result: SourceResult) -> None:
        self.results[result.name] = result
        if result.failure is not None:
            self.failures.append(result.failure)

    def values(self) -> Dict[str, Any]:
        return {name: result.value for name, result in self.results.items()}


class CycleHandle:
    """Handle on a started cycle."""

    def __init__(self, cycle: LoadCycle, task: "asyncio.Task[LoadCycle]"):
        self.cycle = cycle
        self._task = task

    @property
    def generation(self) -> int:
        return self.cycle.generation

    async def wait(self) -> LoadCycle:
        """Wait for the cycle to finish; a superseded cycle is returned as such."""
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled() and self.cycle.state is CycleState.SUPERSEDED:
                return self.cycle
            raise


class FanOutAggregator(Generic[S]):
    """Runs load cycles over a fixed set of sources and publishes completed snapshots.

    Only the newest cycle may publish. Starting a cycle supersedes the one in
    flight; its late results are discarded.
    """

    def __init__(
        self,
        build_snapshot: Callable[[Dict[str, Any], LoadCycle], S],
        timeout: Optional[float] = None,
        on_publish: Optional[Callable[[S, LoadCycle], None]] = None,
        cancel_superseded: bool = True,
    ):
        """Initialize the aggregator.

        Args:
            build_snapshot: Builds the snapshot from ``{source name: value}``
            timeout: Default per-source timeout in seconds
            on_publish: Called with each published snapshot
            cancel_superseded: Cancel the in-flight cycle's task when a new one starts
        """
        self.build_snapshot = build_snapshot
        self.timeout = timeout
        self.on_publish = on_publish
        self.cancel_superseded = cancel_superseded

        self._generation = 0
        self._current: Optional[LoadCycle] = None
        self._task: Optional[asyncio.Task] = None
        self._snapshot: Optional[S] = None
        self.logger = logger.bind(component="fan_out_aggregator")

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current_cycle(self) -> Optional[LoadCycle]:
        return self._current

    @property
    def snapshot(self) -> Optional[S]:
        """Last published snapshot; never a partial one."""
        return self._snapshot

    def start_cycle(self, sources: Sequence[SourceQuery]) -> CycleHandle:
        """Start a new generation over ``sources``, superseding any cycle in flight."""
        names = [source.name for source in sources]
        if len(set(names)) != len(names):
            raise ValueError(f"Source names must be unique: {names}")

        previous, previous_task = self._current, self._task
        if previous is not None and not previous.is_done:
            previous.state = CycleState.SUPERSEDED
            self.logger.info("Cycle superseded", generation=previous.generation)
            if self.cancel_superseded and previous_task is not None:
                previous_task.cancel()

        self._generation += 1
        cycle = LoadCycle(self._generation, names)
        self._current = cycle
        self._task = asyncio.ensure_future(self._run(cycle, list(sources)))

        self.logger.info("Cycle started", generation=cycle.generation, sources=names)
        return CycleHandle(cycle, self._task)

    async def load(self, sources: Sequence[SourceQuery]) -> LoadCycle:
        """Start a cycle and wait for it."""
        return await self.start_cycle(sources).wait()

    async def _run_source(self, cycle: LoadCycle, source: SourceQuery) -> SourceResult:
        result = await fetch_with_default(source, timeout=self.timeout)
        if cycle.generation != self._generation:
            self.logger.debug(
                "Discarding stale source result",
                source=source.name,
                generation=cycle.generation,
                current_generation=self._generation,
            )
            return result
        cycle.record(result)
        return result

    async def _run(self, cycle: LoadCycle, sources: List[SourceQuery]) -> LoadCycle:
        await asyncio.gather(*(self._run_source(cycle, source) for source in sources))

        if cycle.generation != self._generation:
            cycle.state = CycleState.SUPERSEDED
            self.logger.info(
                "Discarding stale cycle",
                generation=cycle.generation,
                current_generation=self._generation,
            )
            return cycle

        snapshot = self.build_snapshot(cycle.values(), cycle)
        cycle.snapshot = snapshot
        cycle.finished_at = datetime.now()
        cycle.state = CycleState.READY_WITH_ERRORS if cycle.failures else CycleState.READY
        self._snapshot = snapshot

        self.logger.info(
            "Cycle ready",
            generation=cycle.generation,
            state=cycle.state.value,
            failed_sources=len(cycle.failures),
        )
        if self.on_publish is not None:
            self.on_publish(snapshot, cycle)
        return cycle
