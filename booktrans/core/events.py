"""
Job snapshot broadcasting.

Observers subscribe once and receive the current job snapshot (or None when
idle) immediately, then every snapshot the controller publishes afterwards.
"""

import threading
from typing import Callable, List, Optional

from booktrans.core.models import Job
from booktrans.utils.unified_logger import error, LogType

JobListener = Callable[[Optional[Job]], None]


class Notifier:
    """Registry of snapshot listeners."""

    def __init__(self):
        """Initialize notifier with no listeners and no job."""
        self._listeners: List[JobListener] = []
        self._current: Optional[Job] = None
        self._lock = threading.RLock()
        self._history: List[Optional[Job]] = []
        self._record_history = False

    def subscribe(self, callback: JobListener) -> Callable[[], None]:
        """Register a listener and replay the current snapshot to it.

        Args:
            callback: Function receiving a Job snapshot or None

        Returns:
            Function that removes the listener again
        """
        with self._lock:
            self._deliver(callback, self._current)
            self._listeners.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: JobListener) -> None:
        """Remove a previously registered listener."""
        with self._lock:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass  # already removed

    def publish(self, snapshot: Optional[Job]) -> None:
        """Store snapshot as current and push it to every listener.

        Args:
            snapshot: Job copy, or None once the controller is idle again
        """
        with self._lock:
            self._current = snapshot
            if self._record_history:
                self._history.append(snapshot)
            listeners = list(self._listeners)
            for listener in listeners:
                self._deliver(listener, snapshot)

    def _deliver(self, listener: JobListener, snapshot: Optional[Job]) -> None:
        try:
            listener(snapshot)
        except Exception as e:
            # A broken observer must not stop the job
            error(f"Job listener failed: {e}", LogType.ERROR_DETAIL, {'details': repr(e)})

    def enable_history(self) -> None:
        """Enable snapshot history recording."""
        self._record_history = True

    def disable_history(self) -> None:
        """Disable snapshot history recording."""
        self._record_history = False

    def get_history(self) -> List[Optional[Job]]:
        """Get recorded snapshots in publication order."""
        with self._lock:
            return list(self._history)

    def clear_history(self) -> None:
        """Clear snapshot history."""
        with self._lock:
            self._history.clear()
