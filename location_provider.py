"""
Location provider abstraction.

A location provider is the platform capability that produces position
fixes: a one-shot request plus a continuous, cancellable subscription.
Both deliver a tagged event (PositionFix or PositionError) through a single
callback so the tracker observes them as one stream.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from constants import DEFAULT_HIGH_ACCURACY, DEFAULT_TIMEOUT_MS, DEFAULT_MAX_CACHED_AGE_MS
from geo import GeoCoordinate


class PositionErrorCode(IntEnum):
    """Provider error codes (W3C Geolocation numbering)."""
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


class TrackingOptions(BaseModel):
    """Request options handed to the provider unmodified."""
    model_config = ConfigDict(frozen=True)

    high_accuracy_preferred: bool = Field(default=DEFAULT_HIGH_ACCURACY,
                                          description="Ask for the most precise fix available")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=0,
                            description="Provider-side timeout per fix")
    max_cached_age_ms: int = Field(default=DEFAULT_MAX_CACHED_AGE_MS, ge=0,
                                   description="Oldest cached fix the provider may return")


@dataclass(frozen=True)
class PositionFix:
    """A successful position update.

    Attributes:
        coordinate: Reported position
        accuracy: Confidence radius in meters, or None if not reported
    """
    coordinate: GeoCoordinate
    accuracy: Optional[float] = None

    def __post_init__(self):
        if self.accuracy is not None and self.accuracy < 0:
            raise ValueError(f"accuracy must be >= 0, got {self.accuracy}")


@dataclass(frozen=True)
class PositionError:
    """A failed position update carrying a provider-specific code."""
    code: int
    message: str = ""


PositionEvent = Union[PositionFix, PositionError]
EventCallback = Callable[[PositionEvent], None]


@dataclass(frozen=True)
class SubscriptionHandle:
    """Opaque token for a pending one-shot request or a live subscription."""
    id: int


class LocationProviderError(Exception):
    """Raised synchronously when a provider cannot issue a request at all."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"location provider error {code}")
        self.code = code
        self.message = message


class LocationProvider(ABC):
    """
    Abstract source of position fixes.

    Subclasses must implement:
        - request_once(options, callback): deliver exactly one event later
        - subscribe(options, callback): stream events until cancelled
        - cancel(handle): drop a pending request or stop a subscription;
          idempotent

    Callbacks may arrive in any order relative to each other. After
    cancel() returns, the cancelled request must not deliver again.
    """

    @abstractmethod
    def request_once(self, options: TrackingOptions, callback: EventCallback) -> SubscriptionHandle:
        pass

    @abstractmethod
    def subscribe(self, options: TrackingOptions, callback: EventCallback) -> SubscriptionHandle:
        pass

    @abstractmethod
    def cancel(self, handle: SubscriptionHandle) -> None:
        pass
