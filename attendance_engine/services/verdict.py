"""Verifier verdicts and the bounded-time runner the orchestrator uses."""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from attendance_engine.utils.errors import AdapterTimeout, VerifierUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    """Result of one verification channel."""
    matched: bool
    confidence: float
    distance: Optional[float] = None
    message: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class VerifierRunner:
    """Runs adapter calls on a worker pool with a hard timeout.

    The adapter deadline starts when a worker picks the call up, so time
    spent queued behind other requests never counts against the adapter.
    A call still queued after ``queue_timeout_seconds`` is withdrawn and
    raises ``VerifierUnavailable``. A call that overruns once started raises
    ``AdapterTimeout``; the worker thread is abandoned, never retried.
    """

    def __init__(self, timeout_seconds: float, max_workers: int = 16,
                 queue_timeout_seconds: Optional[float] = None):
        self.timeout_seconds = timeout_seconds
        self.max_workers = max_workers
        self.queue_timeout_seconds = timeout_seconds if queue_timeout_seconds is None else queue_timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='verifier')

    def run(self, channel: str, fn: Callable[..., Verdict], *args, **kwargs) -> Verdict:
        started = threading.Event()

        def call():
            started.set()
            return fn(*args, **kwargs)

        future = self._executor.submit(call)

        # cancel() only succeeds while the call is still queued
        if not started.wait(self.queue_timeout_seconds) and future.cancel():
            logger.error(
                'Verifier pool saturated: channel=%s workers=%d queued for %.2fs',
                channel, self.max_workers, self.queue_timeout_seconds
            )
            raise VerifierUnavailable(details={'channel': channel})

        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            logger.warning(
                'Verifier adapter timeout: channel=%s timeout=%.2fs (adapter unhealthy, not a mismatch)',
                channel, self.timeout_seconds
            )
            raise AdapterTimeout(details={'channel': channel})

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
