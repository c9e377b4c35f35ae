"""Concurrent fan-out search across all enabled sources.

Flow:
    1. Resolve the eligible sources (enabled + category match) from the registry
    2. Start one task per source; every task ends in exactly one outcome
    3. Stream outcomes in completion order while accumulating records
    4. A new query supersedes the running session: its tasks are cancelled,
       its records discarded and its outcome stream closed
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Collection, Iterable

import structlog

from torrentscout.domain.entities import (
    Category,
    Err,
    Ok,
    SessionState,
    SourceDescriptor,
    SourceOutcome,
    TaskState,
    TorrentRecord,
)
from torrentscout.domain.ports import FetchPort, SourceRegistryPort
from torrentscout.domain.sources import (
    SearchLimitReachedError,
    SearchSource,
    SearchSourceError,
)

log = structlog.get_logger(__name__)


def _source_error(info: SourceDescriptor, exc: Exception) -> SearchSourceError:
    error = SearchSourceError(
        f"{info.name}: {exc}" if str(exc) else f"{info.name}: {type(exc).__name__}",
        source_name=info.name,
        source_url=info.url,
    )
    error.__cause__ = exc
    return error


class SearchSession:
    """One query fanned out to a fixed set of sources.

    States: ``IDLE -> FANNING_OUT -> DRAINING -> IDLE``.  ``FANNING_OUT``
    while any source is still running, ``DRAINING`` once every source has
    finished but outcomes are still waiting to be consumed.
    """

    def __init__(
        self,
        query: str,
        category: Category,
        sources: Iterable[SearchSource],
        fetch: FetchPort,
        *,
        max_results: int | None = None,
    ) -> None:
        self.query = query
        self.category = category
        self._sources = list(sources)
        self._fetch = fetch
        self._max_results = max_results

        self._lock = asyncio.Lock()
        self._queue: asyncio.Queue[SourceOutcome | None] = asyncio.Queue()
        self._records: list[TorrentRecord] = []
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._task_states: dict[str, TaskState] = {}
        self._state = SessionState.IDLE
        self._started = False
        self._superseded = False
        self._delivered = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def superseded(self) -> bool:
        return self._superseded

    @property
    def closed(self) -> bool:
        """Whether every task of this session has finished."""
        return all(task.done() for task in self._tasks.values())

    @property
    def results(self) -> list[TorrentRecord]:
        """Snapshot of the records accumulated so far."""
        return list(self._records)

    @property
    def task_states(self) -> dict[str, TaskState]:
        return dict(self._task_states)

    @property
    def source_ids(self) -> list[str]:
        return [source.info.id for source in self._sources]

    def __len__(self) -> int:
        return len(self._sources)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn one task per source.  Must be called from a running loop."""
        if self._started:
            raise RuntimeError("Search session already started")
        self._started = True

        if not self._sources:
            log.info("search_session_empty", query=self.query, category=self.category.value)
            return

        self._state = SessionState.FANNING_OUT
        for source in self._sources:
            source_id = source.info.id
            self._task_states[source_id] = TaskState.RUNNING
            self._tasks[source_id] = asyncio.create_task(
                self._run(source), name=f"search:{source_id}"
            )

        log.info(
            "search_session_started",
            query=self.query,
            category=self.category.value,
            sources=len(self._sources),
        )

    def cancel(self) -> None:
        """Supersede this session: cancel tasks, drop records, end the stream."""
        if self._superseded:
            return
        self._superseded = True

        cancelled = 0
        for source_id, task in self._tasks.items():
            if self._task_states.get(source_id) is TaskState.RUNNING:
                self._task_states[source_id] = TaskState.CANCELLED
            if not task.done():
                task.cancel()
                cancelled += 1

        self._records.clear()
        self._state = SessionState.IDLE
        self._queue.put_nowait(None)
        log.info("search_session_superseded", query=self.query, cancelled=cancelled)

    async def wait_closed(self) -> None:
        """Wait until every task of this session has finished."""
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)

    # ------------------------------------------------------------------
    # Outcome stream
    # ------------------------------------------------------------------

    async def outcomes(self) -> AsyncIterator[SourceOutcome]:
        """Yield one outcome per source in completion order.

        Ends early, without further outcomes, when the session is superseded.
        """
        while not self._superseded and self._delivered < len(self._sources):
            outcome = await self._queue.get()
            if outcome is None or self._superseded:
                return
            self._delivered += 1
            if self._delivered == len(self._sources):
                self._state = SessionState.IDLE
            yield outcome

    def __aiter__(self) -> AsyncIterator[SourceOutcome]:
        return self.outcomes()

    # ------------------------------------------------------------------
    # Per-source task
    # ------------------------------------------------------------------

    async def _run(self, source: SearchSource) -> None:
        info = source.info
        try:
            records = await source.search(self.query, self.category, self._fetch)
        except asyncio.CancelledError:
            if self._task_states.get(info.id) is TaskState.RUNNING:
                self._task_states[info.id] = TaskState.CANCELLED
            log.debug("search_source_cancelled", source=info.id)
            raise
        except Exception as exc:
            log.warning(
                "search_source_failed",
                source=info.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            await self._complete(Err(info, _source_error(info, exc)))
            return

        log.debug("search_source_done", source=info.id, result_count=len(records))
        await self._complete(Ok(info, list(records)))

    async def _complete(self, outcome: SourceOutcome) -> None:
        source_id = outcome.source.id
        async with self._lock:
            if self._superseded:
                return
            if self._task_states.get(source_id) is not TaskState.RUNNING:
                return

            if isinstance(outcome, Ok):
                self._task_states[source_id] = TaskState.COMPLETED_OK
                if self._max_results is not None:
                    room = max(self._max_results - len(self._records), 0)
                    outcome = Ok(outcome.source, outcome.records[:room])
                self._records.extend(outcome.records)
            else:
                self._task_states[source_id] = TaskState.COMPLETED_ERR
            self._queue.put_nowait(outcome)

            if (
                self._max_results is not None
                and len(self._records) >= self._max_results
            ):
                self._stop_at_limit()

            if TaskState.RUNNING not in self._task_states.values():
                self._state = SessionState.DRAINING
                log.info(
                    "search_session_drained",
                    query=self.query,
                    results=len(self._records),
                )

    def _stop_at_limit(self) -> None:
        """Cancel still-running sources; each reports ``SearchLimitReachedError``."""
        stopped = 0
        for source in self._sources:
            source_id = source.info.id
            if self._task_states.get(source_id) is not TaskState.RUNNING:
                continue
            self._task_states[source_id] = TaskState.CANCELLED
            self._tasks[source_id].cancel()
            self._queue.put_nowait(
                Err(
                    source.info,
                    SearchLimitReachedError(
                        f"Result limit of {self._max_results} reached"
                    ),
                )
            )
            stopped += 1
        if stopped:
            log.info(
                "search_limit_reached",
                query=self.query,
                max_results=self._max_results,
                cancelled=stopped,
            )


class TorrentSearchEngine:
    """Runs searches; at most one session is live at a time.

    Starting a new search supersedes the previous session.
    """

    def __init__(
        self,
        registry: SourceRegistryPort,
        fetch: FetchPort,
        *,
        max_results: int | None = None,
    ) -> None:
        if max_results is not None and max_results < 1:
            raise ValueError("max_results must be >= 1")
        self._registry = registry
        self._fetch = fetch
        self._max_results = max_results
        self._session: SearchSession | None = None
        self._retired: set[SearchSession] = set()

    @property
    def current_session(self) -> SearchSession | None:
        return self._session

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return SessionState.IDLE
        return self._session.state

    @property
    def results(self) -> list[TorrentRecord]:
        if self._session is None:
            return []
        return self._session.results

    def start(
        self,
        query: str,
        category: Category = Category.ALL,
        enabled_ids: Collection[str] | None = None,
    ) -> SearchSession:
        if not query.strip():
            raise ValueError("Search query must not be empty")

        self._supersede()

        ids = (
            self._registry.default_enabled_ids()
            if enabled_ids is None
            else set(enabled_ids)
        )
        sources = self._registry.eligible(ids, category)
        session = SearchSession(
            query,
            category,
            sources,
            self._fetch,
            max_results=self._max_results,
        )
        session.start()
        self._session = session
        return session

    async def search(
        self,
        query: str,
        category: Category = Category.ALL,
        enabled_ids: Collection[str] | None = None,
    ) -> AsyncIterator[SourceOutcome]:
        """``start()`` and stream the new session's outcomes."""
        session = self.start(query, category, enabled_ids)
        async for outcome in session.outcomes():
            yield outcome

    async def aclose(self) -> None:
        """Cancel the live session and wait for every task to finish."""
        self._supersede()
        retired, self._retired = self._retired, set()
        for session in retired:
            await session.wait_closed()

    def _supersede(self) -> None:
        self._retired = {s for s in self._retired if not s.closed}
        if self._session is None:
            return
        self._session.cancel()
        self._retired.add(self._session)
        self._session = None
