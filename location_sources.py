"""
Concrete location providers and track loading.

SimulatedLocationProvider is an in-process provider driven by explicit
pushes, used for replaying recorded tracks and for tests. load_gpx_track
reads GPX 1.0/1.1 track points into position fixes.
"""

import itertools
import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from geo import GeoCoordinate
from location_provider import (
    EventCallback,
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


class SimulatedLocationProvider(LocationProvider):
    """Provider whose events are pushed by the caller.

    One-shot requests stay pending until the next push or until cancelled;
    subscriptions receive every push until cancelled. Delivery is
    synchronous, on the caller's thread.

    Args:
        available: If False, every request raises LocationProviderError,
            mimicking a platform without location services.
    """

    def __init__(self, available: bool = True):
        self.available = available
        self.requested_options: List[TrackingOptions] = []
        self._ids = itertools.count(1)
        self._pending_once: Dict[int, EventCallback] = {}
        self._watchers: Dict[int, EventCallback] = {}

    @property
    def active_subscriptions(self) -> int:
        return len(self._watchers)

    @property
    def pending_requests(self) -> int:
        return len(self._pending_once)

    def _check_available(self) -> None:
        if not self.available:
            raise LocationProviderError(PositionErrorCode.POSITION_UNAVAILABLE,
                                        "Location services are not supported on this platform")

    def request_once(self, options: TrackingOptions, callback: EventCallback) -> SubscriptionHandle:
        self._check_available()
        self.requested_options.append(options)
        handle = SubscriptionHandle(next(self._ids))
        self._pending_once[handle.id] = callback
        return handle

    def subscribe(self, options: TrackingOptions, callback: EventCallback) -> SubscriptionHandle:
        self._check_available()
        self.requested_options.append(options)
        handle = SubscriptionHandle(next(self._ids))
        self._watchers[handle.id] = callback
        logger.debug(f"Subscription {handle.id} opened")
        return handle

    def cancel(self, handle: SubscriptionHandle) -> None:
        if self._watchers.pop(handle.id, None) is not None:
            logger.debug(f"Subscription {handle.id} cancelled")
        elif self._pending_once.pop(handle.id, None) is not None:
            logger.debug(f"One-shot request {handle.id} cancelled")

    def push(self, event: PositionEvent) -> None:
        """Deliver an event to pending one-shot requests, then to subscribers."""
        once, self._pending_once = self._pending_once, {}
        for callback in once.values():
            callback(event)

        # A callback may cancel other subscriptions; re-check before each delivery
        for handle_id in list(self._watchers):
            callback = self._watchers.get(handle_id)
            if callback is not None:
                callback(event)

    def push_fix(self, latitude: float, longitude: float,
                 accuracy: Optional[float] = None) -> None:
        self.push(PositionFix(GeoCoordinate(latitude=latitude, longitude=longitude), accuracy))

    def push_error(self, code: int, message: str = "") -> None:
        self.push(PositionError(code, message))


def _local_name(tag: str) -> str:
    """Strip an XML namespace: '{ns}trkpt' -> 'trkpt'."""
    return tag.rsplit("}", 1)[-1]


def load_gpx_track(path: str, accuracy: Optional[float] = None) -> List[PositionFix]:
    """
    Read all track points of a GPX file in document order.

    Args:
        path: Path to a GPX file
        accuracy: Accuracy in meters attached to every fix (GPX has none)

    Returns:
        List of PositionFix, one per <trkpt>

    Raises:
        ET.ParseError: If the file is not well-formed XML
        ValueError: If a track point has missing or invalid lat/lon
    """
    tree = ET.parse(path)
    fixes = []
    for element in tree.getroot().iter():
        if _local_name(element.tag) != "trkpt":
            continue
        try:
            lat = float(element.attrib["lat"])
            lon = float(element.attrib["lon"])
        except KeyError as e:
            raise ValueError(f"Track point missing attribute {e} in {path}") from e
        fixes.append(PositionFix(GeoCoordinate(latitude=lat, longitude=lon), accuracy))

    logger.info(f"Loaded {len(fixes)} track points from {path}")
    return fixes
