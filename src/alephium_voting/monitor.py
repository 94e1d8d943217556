"""Periodic network status polling for alephium-voting library."""

import logging
import math
import threading
from typing import Callable, List, Optional

from .constants import DEFAULT_POLL_INTERVAL
from .exceptions import GatewayError
from .gateway import LedgerGateway
from .types import NetworkType

logger = logging.getLogger(__name__)

StatusCallback = Callable[[NetworkType], None]


class NetworkStatusMonitor:
    """
    Polls the node's network identity in a background thread.

    The status starts as UNKNOWN, becomes whatever get_network_type() returns
    after each successful probe, and UNREACHABLE after a failed one.
    Subscribers are notified on changes only.
    """

    def __init__(self, gateway: LedgerGateway, interval: float = DEFAULT_POLL_INTERVAL):
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"Poll interval must be a positive finite number, got {interval}")
        self.gateway = gateway
        self.interval = interval
        self._status = NetworkType.UNKNOWN
        self._subscribers: List[StatusCallback] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def status(self) -> NetworkType:
        """Latest known network status."""
        return self._status

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, callback: StatusCallback) -> Callable[[], None]:
        """
        Register a callback invoked with the new status whenever it changes.

        Args:
            callback: Function taking the new NetworkType

        Returns:
            Function removing the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def poll_once(self) -> NetworkType:
        """Probe the node once and update the status."""
        try:
            status = self.gateway.get_network_type()
        except GatewayError as e:
            logger.debug("Network probe failed: %s", e)
            status = NetworkType.UNREACHABLE
        self._set_status(status)
        return status

    def _set_status(self, status: NetworkType) -> None:
        with self._lock:
            changed = status is not self._status
            self._status = status
            subscribers = list(self._subscribers)
        if not changed:
            return
        logger.info("Network status changed to %s", status.label)
        for callback in subscribers:
            try:
                callback(status)
            except Exception:
                logger.exception("Network status subscriber %r failed", callback)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("Network probe failed unexpectedly")
                self._set_status(NetworkType.UNREACHABLE)
            stop_event.wait(self.interval)

    def start(self) -> None:
        """
        Start polling in a daemon thread.

        Raises:
            RuntimeError: If the monitor is already running
        """
        if self.running:
            raise RuntimeError("Network status monitor is already running")
        # A thread left running by a timed-out stop() keeps its own, already set, event
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name="network-status-monitor",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop polling and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "NetworkStatusMonitor":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
