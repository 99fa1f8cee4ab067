"""
Position tracking state machine.

PositionTracker owns at most one live provider subscription and exposes
the current tracking state:

    Idle --start--> Requesting --fix--> Tracking
      ^                 |                  |
      |               error              error
      |                 v                  v
      +------stop---- Failed <-------------+

start() is valid from any state (a live subscription is cancelled first),
stop() from any state. Failures are never retried automatically.

Everything runs on the caller's thread; provider callbacks are applied one
at a time, last write wins.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from geo import GeoCoordinate
from location_provider import (
    LocationProvider,
    LocationProviderError,
    PositionError,
    PositionErrorCode,
    PositionEvent,
    PositionFix,
    SubscriptionHandle,
    TrackingOptions,
)

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Closed set of tracking failures."""
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self]


ERROR_MESSAGES = {
    ErrorKind.PERMISSION_DENIED: "Location access permission was denied.",
    ErrorKind.POSITION_UNAVAILABLE: "Location information is unavailable.",
    ErrorKind.TIMEOUT: "The location request timed out.",
    ErrorKind.UNKNOWN: "An unknown error occurred.",
}


def classify_error(code: int) -> ErrorKind:
    """Map a provider error code to an ErrorKind, falling back to UNKNOWN."""
    return {
        PositionErrorCode.PERMISSION_DENIED: ErrorKind.PERMISSION_DENIED,
        PositionErrorCode.POSITION_UNAVAILABLE: ErrorKind.POSITION_UNAVAILABLE,
        PositionErrorCode.TIMEOUT: ErrorKind.TIMEOUT,
    }.get(code, ErrorKind.UNKNOWN)


# =============================================================================
# States
# =============================================================================

@dataclass(frozen=True)
class Idle:
    """Not tracking; owns no subscription."""


@dataclass(frozen=True)
class Requesting:
    """Subscription requested, no fix received yet."""


@dataclass(frozen=True)
class Tracking:
    """Subscription live with at least one fix.

    Attributes:
        position: Most recent reported coordinate
        accuracy: Most recent reported accuracy in meters, or None
    """
    position: GeoCoordinate
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class Failed:
    """Subscription ended in error; owns no subscription."""
    reason: ErrorKind


TrackingState = Union[Idle, Requesting, Tracking, Failed]


# =============================================================================
# Transitions
# =============================================================================

@dataclass(frozen=True)
class StartRequested:
    pass


@dataclass(frozen=True)
class StopRequested:
    pass


TrackerEvent = Union[StartRequested, StopRequested, PositionFix, PositionError]


def transition(state: TrackingState, event: TrackerEvent) -> TrackingState:
    """Return the state that follows `state` after `event`.

    Fixes and errors replace whatever state came before them; the tracker
    decides whether an event still belongs to the live session.
    """
    if isinstance(event, StartRequested):
        return Requesting()
    if isinstance(event, StopRequested):
        return Idle()
    if isinstance(event, PositionFix):
        return Tracking(position=event.coordinate, accuracy=event.accuracy)
    if isinstance(event, PositionError):
        return Failed(reason=classify_error(event.code))
    raise TypeError(f"Unsupported tracker event: {event!r}")


StateListener = Callable[[TrackingState], None]


class PositionTracker:
    """Tracks the device position through a LocationProvider.

    Args:
        provider: Source of position fixes
        options: Request options, passed to the provider unmodified
    """

    def __init__(self, provider: LocationProvider, options: Optional[TrackingOptions] = None):
        self._provider = provider
        self._options = options if options is not None else TrackingOptions()
        self._state: TrackingState = Idle()
        self._subscription: Optional[SubscriptionHandle] = None
        self._one_shot: Optional[SubscriptionHandle] = None
        # Callbacks carry the session they were issued for; older sessions are ignored
        self._session = 0
        self._position: Optional[GeoCoordinate] = None
        self._accuracy: Optional[float] = None
        self._error: Optional[ErrorKind] = None
        self._error_message: Optional[str] = None
        self._listeners: List[StateListener] = []
        self._disposed = False

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def options(self) -> TrackingOptions:
        return self._options

    @property
    def position(self) -> Optional[GeoCoordinate]:
        """Last known position; kept after failures and stop()."""
        return self._position

    @property
    def accuracy(self) -> Optional[float]:
        return self._accuracy

    @property
    def error(self) -> Optional[ErrorKind]:
        """Kind of the most recent failure, cleared by start() or a new fix."""
        return self._error

    @property
    def error_message(self) -> Optional[str]:
        """Provider's description of the last failure, else the ErrorKind message."""
        if self._error is None:
            return None
        return self._error_message or self._error.message

    @property
    def is_tracking(self) -> bool:
        return isinstance(self._state, (Requesting, Tracking))

    @property
    def has_subscription(self) -> bool:
        return self._subscription is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add_listener(self, listener: StateListener) -> None:
        """Register a callable invoked with the new state after each change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        """Begin tracking: one-shot request plus continuous subscription.

        Any live subscription is cancelled first. Returns immediately;
        results arrive through provider callbacks.

        Raises:
            RuntimeError: If the tracker has been disposed
        """
        if self._disposed:
            raise RuntimeError("PositionTracker has been disposed")

        self._release()
        session = self._session
        self._error = None
        self._error_message = None
        self._apply(StartRequested())
        logger.info("Position tracking started")

        def on_event(event: PositionEvent) -> None:
            self._handle_event(session, event)

        def on_one_shot(event: PositionEvent) -> None:
            if session == self._session:
                self._one_shot = None
            self._handle_event(session, event)

        try:
            one_shot = self._provider.request_once(self._options, on_one_shot)
            if session != self._session:
                return  # one-shot failed synchronously
            self._one_shot = one_shot
            handle = self._provider.subscribe(self._options, on_event)
        except LocationProviderError as e:
            logger.warning(f"Location provider refused request: {e}")
            self._handle_event(session, PositionError(e.code, e.message))
            return

        if session == self._session:
            self._subscription = handle
        else:
            # The session ended during subscribe(); do not keep the handle
            self._provider.cancel(handle)

    def stop(self) -> None:
        """Stop tracking and release the subscription. No-op when idle."""
        had_subscription = self._subscription is not None
        self._release()
        self._apply(StopRequested())
        if had_subscription:
            logger.info("Position tracking stopped")

    def dispose(self) -> None:
        """Release the subscription and detach listeners; the tracker cannot restart."""
        if self._disposed:
            return
        self._release()
        self._state = Idle()
        self._listeners.clear()
        self._disposed = True
        logger.debug("PositionTracker disposed")

    def __enter__(self) -> "PositionTracker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def _release(self) -> None:
        """Cancel the held request and subscription (if any) and end the current session."""
        self._session += 1
        if self._one_shot is not None:
            handle, self._one_shot = self._one_shot, None
            self._provider.cancel(handle)
        if self._subscription is not None:
            handle, self._subscription = self._subscription, None
            self._provider.cancel(handle)

    def _handle_event(self, session: int, event: PositionEvent) -> None:
        if session != self._session:
            logger.debug(f"Dropping event from ended session {session}: {event!r}")
            return

        if isinstance(event, PositionError):
            kind = classify_error(event.code)
            logger.warning(f"Position tracking failed ({kind.value}): {event.message or kind.message}")
            self._error = kind
            self._error_message = event.message or None
            self._release()
        else:
            logger.debug(f"Position fix {event.coordinate.latitude:.6f}, "
                         f"{event.coordinate.longitude:.6f} ±{event.accuracy}")
            self._position = event.coordinate
            self._accuracy = event.accuracy
            self._error = None
            self._error_message = None

        self._apply(event)

    def _apply(self, event: TrackerEvent) -> None:
        new_state = transition(self._state, event)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
