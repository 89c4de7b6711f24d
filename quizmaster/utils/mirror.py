"""
Best-effort side-channel writes

Persistence mirrors the live quiz state but is never its source of truth:
a failed write is logged and reported as a warning, and control returns to
the caller as if the write had succeeded.

All writes run on one worker thread, so they reach the store in the order
they were issued (session row before its attempts).
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

# Shared by every writer; one worker keeps the global write order
mirror_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mirror")


@dataclass
class MirrorResult:
    """Outcome of one best-effort write"""
    ok: bool
    value: Any = None
    warning: Optional[str] = None


class MirrorWriter:
    """Runs store writes on the mirror thread and records failures instead of raising them"""

    def __init__(
        self,
        sink: Optional[logging.Logger] = None,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.sink = sink or logger
        self.executor = executor or mirror_executor
        self.failures = 0
        self._lock = threading.Lock()
        self._pending: List[Future] = []
        self._warnings: List[str] = []

    def dispatch(self, description: str, write: Callable[..., Any], *args, **kwargs) -> MirrorResult:
        """
        Execute `write(*args, **kwargs)` and wait for it

        Used where the caller needs the written value (a new row id).

        Args:
            description: Human readable name of the write, used in warnings
            write: Store operation to run

        Returns:
            MirrorResult with the write's return value, or a warning message
        """
        future = self.executor.submit(write, *args, **kwargs)
        try:
            value = future.result()
        except Exception as e:
            warning = self._failed(description, e)
            return MirrorResult(ok=False, warning=warning)

        return MirrorResult(ok=True, value=value)

    def submit(self, description: str, write: Callable[..., Any], *args, **kwargs) -> Future:
        """
        Queue `write(*args, **kwargs)` and return immediately

        A failure is logged on the mirror thread and handed out by the next
        `drain_warnings` call.
        """
        def _run() -> Any:
            try:
                return write(*args, **kwargs)
            except Exception as e:
                warning = self._failed(description, e)
                with self._lock:
                    self._warnings.append(warning)
                return None

        future = self.executor.submit(_run)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every queued write of this writer has finished"""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]

    def drain_warnings(self) -> List[str]:
        """Warnings from background writes that failed since the last call"""
        with self._lock:
            warnings, self._warnings = self._warnings, []
        return warnings

    def _failed(self, description: str, error: BaseException) -> str:
        warning = f"Could not save {description}: {str(error)}"
        with self._lock:
            self.failures += 1
        self.sink.warning(warning)
        return warning
