"""
Cooperative cancellation shared between the control thread and a signal
handler (or any other thread). Long-running loops poll `is_cancelled`
at well-defined points; nothing is ever interrupted mid-operation.
"""
import threading


class CancellationToken:
    """Thread-safe stop flag. Pass `token.is_cancelled` wherever a stopped_flag is expected."""

    def __init__(self):
        self._cancelled = False
        self._lock = threading.RLock()  # re-entrant: signal handlers run on the polling thread

    def cancel(self) -> None:
        """Requests cancellation. Safe to call repeatedly."""
        with self._lock:
            self._cancelled = True

    def is_cancelled(self) -> bool:
        """Returns True once cancellation has been requested."""
        with self._lock:
            return self._cancelled

    def __call__(self) -> bool:
        return self.is_cancelled()

    def __repr__(self):
        return f"<CancellationToken cancelled={self.is_cancelled()}>"
