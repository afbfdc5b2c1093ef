from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import OrderedDict
from typing import Callable, Optional

from .lookup import ApplicantLookupService
from .schemas import ApplicantProfile, SearchFilters


logger = logging.getLogger(__name__)


class SearchStatus:
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class SessionNotFound(KeyError):
    pass


class SessionBusy(RuntimeError):
    pass


class SearchSession:
    """Browser-session state for one enrollment user's searches.

    Only the newest search may write state. Starting a search cancels whatever
    lookup is still running, and every result is checked against the
    generation it was started under before it is applied.
    """

    def __init__(self, service: ApplicantLookupService, session_id: str | None = None) -> None:
        self.id = session_id or str(uuid.uuid4())
        self.service = service
        self.status = SearchStatus.IDLE
        self.applicants: list[ApplicantProfile] = []
        self.error: Optional[str] = None
        self.query: Optional[str] = None
        self.filters: Optional[SearchFilters] = None
        self.no_more_results = False
        self.is_fetching_more = False
        self.generation = 0
        self._task: asyncio.Task | None = None

    @property
    def can_find_more(self) -> bool:
        return (
            self.status == SearchStatus.SUCCESS
            and bool(self.query)
            and not self.no_more_results
            and not self.is_fetching_more
        )

    async def search(self, query: str, filters: SearchFilters) -> bool:
        """Run a fresh search. Returns False if a newer search superseded it."""
        self.generation += 1
        gen = self.generation
        self._cancel_inflight()

        self.status = SearchStatus.LOADING
        self.applicants = []
        self.error = None
        self.no_more_results = False
        self.is_fetching_more = False
        self.query = query
        self.filters = filters

        task = asyncio.create_task(self.service.lookup(query, filters))
        if not await self._wait(task, gen):
            return False

        exc = task.exception()
        if exc is not None:
            self.status = SearchStatus.ERROR
            self.error = str(exc) or "An unknown error occurred."
            return True

        results = task.result()
        self.applicants = results
        if not results:
            self.no_more_results = True
        self.status = SearchStatus.SUCCESS
        return True

    async def find_more(self) -> bool:
        """Fetch more applicants, excluding every source already on screen."""
        if not self.can_find_more:
            raise SessionBusy("find more is only available after a successful search with results pending")
        gen = self.generation
        self.is_fetching_more = True
        self.error = None
        exclude = [a.primary_source_url for a in self.applicants]

        task = asyncio.create_task(self.service.lookup(self.query or "", self.filters or SearchFilters(), exclude))
        if not await self._wait(task, gen):
            return False

        self.is_fetching_more = False
        exc = task.exception()
        if exc is not None:
            self.error = str(exc) or "An unknown error occurred while fetching more results."
            return True

        new_results = task.result()
        if new_results:
            self.applicants = [*self.applicants, *new_results]
        else:
            self.no_more_results = True
        return True

    async def _wait(self, task: asyncio.Task, gen: int) -> bool:
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Caller went away; nothing else is waiting on this lookup.
            task.cancel()
            if gen == self.generation:
                self._task = None
                self.status = SearchStatus.ERROR if self.status == SearchStatus.LOADING else self.status
                self.is_fetching_more = False
                self.error = "Search was cancelled."
            raise
        if gen != self.generation or task.cancelled():
            if not task.cancelled():
                task.exception()  # mark retrieved
            logger.info("Discarding superseded lookup for session %s", self.id)
            return False
        self._task = None
        return True

    def _cancel_inflight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


class SessionStore:
    """In-memory sessions, evicted after ``ttl_seconds`` idle or beyond ``max_sessions``.

    Idle sessions are reaped on every access; past the cap the least recently
    used session goes first. An evicted session's in-flight lookup is cancelled.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 1800,
        max_sessions: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[SearchSession, float]] = OrderedDict()

    def create(self, service: ApplicantLookupService) -> SearchSession:
        self._evict()
        session = SearchSession(service)
        self._sessions[session.id] = (session, self._clock())
        while len(self._sessions) > self.max_sessions:
            self._drop(next(iter(self._sessions)))
        return session

    def get(self, session_id: str) -> SearchSession:
        self._evict()
        item = self._sessions.get(session_id)
        if item is None:
            raise SessionNotFound(session_id)
        session = item[0]
        self._sessions[session_id] = (session, self._clock())
        self._sessions.move_to_end(session_id)
        return session

    def remove(self, session_id: str) -> None:
        if session_id not in self._sessions:
            raise SessionNotFound(session_id)
        self._drop(session_id)

    def _evict(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        while self._sessions:
            oldest_id, (_, last_seen) = next(iter(self._sessions.items()))
            if last_seen > cutoff:
                break
            logger.info("Evicting idle session %s", oldest_id)
            self._drop(oldest_id)

    def _drop(self, session_id: str) -> None:
        session, _ = self._sessions.pop(session_id)
        session._cancel_inflight()

    def __len__(self) -> int:
        return len(self._sessions)
