"""Digest view state machine.

The observable state is an immutable ``DigestViewState``; every change goes
through ``transition(state, event)``, which has no side effects. The
orchestrator decides which event to emit, this module decides what the
resulting state looks like.
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum

from src.phishing_news.dates import to_digest_date
from src.phishing_news.exceptions import ErrorKind, PhishingNewsError
from src.phishing_news.models import Digest


class SelectionKind(StrEnum):
    """Which digest the caller asked for."""

    TODAY = "today"
    LATEST = "latest"
    SPECIFIC = "specific"


@dataclass(frozen=True)
class Selection:
    """The caller's current intent; ``day`` is set only for SPECIFIC."""

    kind: SelectionKind
    day: str | None = None

    def __post_init__(self) -> None:
        if self.kind is SelectionKind.SPECIFIC:
            if self.day is None:
                raise ValueError("A specific selection requires a day")
            object.__setattr__(self, "day", to_digest_date(self.day))
        elif self.day is not None:
            raise ValueError(f"{self.kind} selection does not take a day")

    @classmethod
    def today(cls) -> "Selection":
        return cls(SelectionKind.TODAY)

    @classmethod
    def latest(cls) -> "Selection":
        return cls(SelectionKind.LATEST)

    @classmethod
    def specific(cls, day: str) -> "Selection":
        return cls(SelectionKind.SPECIFIC, day)

    def __str__(self) -> str:
        return f"{self.kind}:{self.day}" if self.day else str(self.kind)


class LoadPhase(StrEnum):
    """Phase of the current load cycle."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    STALE_SUCCESS = "stale_success"
    TODAY_PENDING = "today_pending"
    FAILED = "failed"


@dataclass(frozen=True)
class DigestViewState:
    """Everything a view needs to render the digest screen."""

    selection: Selection | None = None
    phase: LoadPhase = LoadPhase.IDLE
    digest: Digest | None = None
    is_stale: bool = False
    today_pending: bool = False
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    available_dates: tuple[str, ...] = ()
    last_shown: Digest | None = None

    @property
    def is_loading(self) -> bool:
        return self.phase is LoadPhase.LOADING


# Events


@dataclass(frozen=True)
class LoadStarted:
    """A load cycle began; ``cached`` is shown immediately if present."""

    selection: Selection
    cached: Digest | None = None


@dataclass(frozen=True)
class LoadSucceeded:
    digest: Digest


@dataclass(frozen=True)
class TodayNotPublished:
    """Today's digest does not exist upstream yet."""

    fallback: Digest | None = None


@dataclass(frozen=True)
class LoadFailed:
    """A fetch failed; ``fallback`` is the cached digest to show instead, if any.

    ``today_pending`` marks a failure while today's digest is known to be unpublished.
    """

    error: PhishingNewsError
    fallback: Digest | None = None
    today_pending: bool = False


@dataclass(frozen=True)
class DatesLoaded:
    dates: tuple[str, ...] = field(default_factory=tuple)


DigestEvent = LoadStarted | LoadSucceeded | TodayNotPublished | LoadFailed | DatesLoaded


def transition(state: DigestViewState, event: DigestEvent) -> DigestViewState:
    """Compute the state that follows an event.

    :param state: Current state.
    :param event: Event to apply.
    :returns: The new state.
    :raises TypeError: If the event type is unknown.
    """
    if isinstance(event, LoadStarted):
        # Keep the previous screen while loading unless a cached digest is available
        return replace(
            state,
            selection=event.selection,
            phase=LoadPhase.LOADING,
            digest=event.cached if event.cached is not None else state.digest,
            is_stale=False,
            error_message=None,
            error_kind=None,
        )

    if isinstance(event, LoadSucceeded):
        return replace(
            state,
            phase=LoadPhase.SUCCESS,
            digest=event.digest,
            is_stale=False,
            today_pending=False,
            error_message=None,
            error_kind=None,
            last_shown=event.digest,
        )

    if isinstance(event, TodayNotPublished):
        return replace(
            state,
            phase=LoadPhase.TODAY_PENDING,
            digest=event.fallback,
            is_stale=False,
            today_pending=True,
            error_message=None,
            error_kind=None,
            last_shown=event.fallback if event.fallback is not None else state.last_shown,
        )

    if isinstance(event, LoadFailed):
        if event.fallback is not None:
            # Error stays out of the user-facing message; only the stale flag is shown
            return replace(
                state,
                phase=LoadPhase.STALE_SUCCESS,
                digest=event.fallback,
                is_stale=True,
                error_message=None,
                error_kind=event.error.kind,
            )
        return replace(
            state,
            phase=LoadPhase.FAILED,
            digest=None,
            is_stale=False,
            today_pending=state.today_pending or event.today_pending,
            error_message=event.error.message,
            error_kind=event.error.kind,
        )

    if isinstance(event, DatesLoaded):
        return replace(state, available_dates=tuple(sorted(set(event.dates), reverse=True)))

    raise TypeError(f"Unknown digest event: {type(event).__name__}")


@dataclass(frozen=True)
class LoadOutcome:
    """Result of one load cycle as returned to the caller.

    ``applied`` is False when the cycle was superseded by a newer selection and
    its result was dropped instead of being published.
    """

    digest: Digest | None
    is_stale: bool = False
    today_pending: bool = False
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    applied: bool = True

    @classmethod
    def from_state(cls, state: DigestViewState, *, applied: bool = True) -> "LoadOutcome":
        return cls(
            digest=state.digest,
            is_stale=state.is_stale,
            today_pending=state.today_pending,
            error_kind=state.error_kind,
            error_message=state.error_message,
            applied=applied,
        )
