"""Load policy for phishing news digests.

The orchestrator turns a selection (today, latest or a specific day) into a
sequence of state transitions, combining the in-memory cache with network
fetches. Its public coroutines never raise for API failures: the outcome is
always a ``LoadOutcome`` and the published ``DigestViewState``.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime

from src.phishing_news.cache import DigestCache
from src.phishing_news.client import PhishingNewsClient
from src.phishing_news.config import PhishingNewsConfig, get_phishing_news_settings
from src.phishing_news.dates import to_digest_date, utc_today
from src.phishing_news.exceptions import DigestNotFoundError, PhishingNewsError
from src.phishing_news.listing import DigestListFetcher
from src.phishing_news.models import Digest
from src.phishing_news.state import (
    DatesLoaded,
    DigestEvent,
    DigestViewState,
    LoadFailed,
    LoadOutcome,
    LoadStarted,
    LoadSucceeded,
    Selection,
    SelectionKind,
    TodayNotPublished,
    transition,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[DigestViewState], None]


@dataclass
class LoadToken:
    """Identifies one load cycle; setting ``cancel_event`` supersedes it."""

    generation: int
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


class DigestOrchestrator:
    """Resolves digest selections into view states.

    Only the most recently started cycle may change the observable state. A
    result arriving for an older cycle is dropped, although a successfully
    fetched digest is still cached under its date.
    """

    def __init__(
        self,
        client: PhishingNewsClient | None = None,
        cache: DigestCache | None = None,
        settings: PhishingNewsConfig | None = None,
        list_fetcher: DigestListFetcher | None = None,
        today: Callable[[], str] = utc_today,
    ) -> None:
        """Initialise the orchestrator.

        :param client: Digest API client. If not provided, creates one from env.
        :param cache: Digest cache. If not provided, starts with an empty one.
        :param settings: Client settings. If not provided, loads from env.
        :param list_fetcher: Picker date fetcher. If not provided, creates one on the client.
        :param today: Returns today's digest date; UTC by default.
        """
        self._settings = settings or get_phishing_news_settings()
        self._owns_client = client is None
        self._client = client or PhishingNewsClient(settings=self._settings)
        self._cache = cache if cache is not None else DigestCache()
        self._list_fetcher = list_fetcher or DigestListFetcher(
            self._client, limit=self._settings.list_limit
        )
        self._today = today

        self._state = DigestViewState()
        self._listeners: list[StateListener] = []
        self._generation = 0
        self._current: LoadToken | None = None
        self._list_task: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> DigestViewState:
        """The current observable state."""
        return self._state

    @property
    def cache(self) -> DigestCache:
        return self._cache

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback invoked with every new state.

        :param listener: Callable receiving the new DigestViewState.
        :returns: A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Selection hooks

    async def select_today(self) -> LoadOutcome:
        """Load today's digest, showing the cached copy first if there is one."""
        return await self._load(Selection.today())

    async def select_latest(self) -> LoadOutcome:
        """Load the most recently published digest."""
        return await self._load(Selection.latest())

    async def select_date(self, day: date | datetime | str) -> LoadOutcome:
        """Load the digest for a specific day, serving it from cache when possible.

        :param day: The day to show, normalised to UTC.
        :raises ValueError: If the day is not a valid date.
        """
        return await self._load(Selection.specific(to_digest_date(day)))

    async def show_latest_instead(self) -> LoadOutcome:
        """Fallback offered while today's digest is still pending."""
        return await self.select_latest()

    async def refresh(self) -> LoadOutcome:
        """Reload the current selection from the network.

        With no selection yet this loads today's digest.
        """
        selection = self._state.selection or Selection.today()
        return await self._load(selection, force=True)

    # Load cycle

    async def _load(self, selection: Selection, *, force: bool = False) -> LoadOutcome:
        token = self._begin_cycle(selection)
        if self._list_task is None:
            self._schedule_list_refresh()

        if selection.kind is SelectionKind.TODAY:
            return await self._load_today(token, selection)
        if selection.kind is SelectionKind.LATEST:
            return await self._load_latest(token, selection)
        return await self._load_specific(token, selection, force=force)

    async def _load_today(self, token: LoadToken, selection: Selection) -> LoadOutcome:
        today = self._today()
        cached = self._cache.get(today)
        if cached is not None:
            logger.debug(f"Showing cached digest for {today} while refreshing")
        self._publish(LoadStarted(selection, cached))

        try:
            digest = await asyncio.to_thread(self._client.get_today, cancel_event=token.cancel_event)
        except DigestNotFoundError:
            logger.info(f"Digest for {today} not published yet")
            return self._finish(token, await self._today_pending(token, today))
        except PhishingNewsError as e:
            return self._finish(token, self._failure(e, self._today_fallback(today)))

        self._cache.put(digest)
        return self._finish(token, LoadSucceeded(digest))

    async def _load_latest(self, token: LoadToken, selection: Selection) -> LoadOutcome:
        self._publish(LoadStarted(selection))

        try:
            digest = await asyncio.to_thread(
                self._client.get_latest, cancel_event=token.cancel_event
            )
        except PhishingNewsError as e:
            return self._finish(token, self._failure(e, self._state.last_shown))

        # Cached under the digest's own date, which is not necessarily today
        self._cache.put(digest)
        return self._finish(token, LoadSucceeded(digest))

    async def _load_specific(
        self,
        token: LoadToken,
        selection: Selection,
        *,
        force: bool,
    ) -> LoadOutcome:
        day = selection.day
        assert day is not None
        cached = self._cache.get(day)
        if cached is not None and not force:
            # No fetch, so the loading phase is never published
            logger.debug(f"Serving digest for {day} from cache")
            started = transition(self._state, LoadStarted(selection, cached))
            return self._finish(token, LoadSucceeded(cached), start=started)

        self._publish(LoadStarted(selection, cached))

        try:
            digest = await asyncio.to_thread(
                self._client.get_digest, day, cancel_event=token.cancel_event
            )
        except PhishingNewsError as e:
            return self._finish(token, self._failure(e, self._cache.get(day)))

        self._cache.put(digest)
        return self._finish(token, LoadSucceeded(digest))

    async def _today_pending(self, token: LoadToken, today: str) -> DigestEvent:
        """Event for an unpublished today: keep what is on screen, else show the latest digest.

        :param token: Token of the running today cycle.
        :param today: Today's digest date.
        :returns: TodayNotPublished, or LoadFailed if the latest digest cannot be fetched either.
        """
        fallback = self._today_fallback(today)
        if fallback is not None or token.cancelled:
            return TodayNotPublished(fallback=fallback)

        try:
            latest = await asyncio.to_thread(self._client.get_latest, cancel_event=token.cancel_event)
        except PhishingNewsError as e:
            logger.warning(f"Latest digest unavailable while {today} is pending ({e.kind}): {e}")
            return LoadFailed(e, today_pending=True)

        logger.info(f"Showing latest digest ({latest.date}) until {today} is published")
        self._cache.put(latest)
        return TodayNotPublished(fallback=latest)

    def _today_fallback(self, today: str) -> Digest | None:
        """Today's cached digest, else whatever was last shown successfully."""
        cached = self._cache.get(today)
        return cached if cached is not None else self._state.last_shown

    @staticmethod
    def _failure(error: PhishingNewsError, fallback: Digest | None) -> LoadFailed:
        if fallback is not None:
            logger.info(f"Load failed ({error.kind}), showing cached digest for {fallback.date}")
        else:
            logger.warning(f"Load failed ({error.kind}) with no cached fallback: {error}")
        return LoadFailed(error, fallback)

    def _begin_cycle(self, selection: Selection) -> LoadToken:
        if self._current is not None:
            self._current.cancel_event.set()
        self._generation += 1
        self._current = LoadToken(self._generation)
        logger.debug(f"Starting load cycle {self._generation} for {selection}")
        return self._current

    def _finish(
        self,
        token: LoadToken,
        event: DigestEvent,
        start: DigestViewState | None = None,
    ) -> LoadOutcome:
        next_state = transition(self._state if start is None else start, event)
        if token is not self._current or token.cancelled:
            logger.debug(f"Discarding result of superseded load cycle {token.generation}")
            return LoadOutcome.from_state(next_state, applied=False)

        self._set_state(next_state)
        if isinstance(event, LoadSucceeded) and event.digest.date not in next_state.available_dates:
            self._schedule_list_refresh()
        return LoadOutcome.from_state(next_state)

    def _publish(self, event: DigestEvent) -> None:
        self._set_state(transition(self._state, event))

    def _set_state(self, state: DigestViewState) -> None:
        if state == self._state:
            return
        self._state = state
        logger.debug(
            f"Digest state: phase={state.phase}, selection={state.selection}, "
            f"stale={state.is_stale}, today_pending={state.today_pending}"
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Digest state listener failed")

    # Picker dates

    def _schedule_list_refresh(self) -> None:
        if self._list_task is not None and not self._list_task.done():
            return
        task = asyncio.create_task(self._refresh_available_dates())
        self._list_task = task
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    async def _refresh_available_dates(self) -> None:
        dates = await self._list_fetcher.fetch_dates()
        if dates is None:
            return
        # Days already loaded this session stay selectable even if the listing omits them
        self._publish(DatesLoaded((*dates, *self._cache.dates())))

    async def load_available_dates(self) -> tuple[str, ...]:
        """Fetch the picker dates now instead of in the background.

        :returns: Known digest dates, newest first (unchanged if the listing fails).
        """
        await self._refresh_available_dates()
        return self._state.available_dates

    def _on_background_done(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background digest listing failed", exc_info=task.exception())

    async def aclose(self) -> None:
        """Stop background work and release the client if this orchestrator created it."""
        if self._current is not None:
            self._current.cancel_event.set()
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        if self._owns_client:
            self._client.close()
