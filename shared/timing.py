"""
External time recorder hook.

Applications can register a callback that receives (operation name, elapsed
seconds) after each logical client operation, e.g. to feed a metrics system.
When no recorder is registered, timing is a no-op.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

TimeRecorder = Callable[[str, float], None]

_recorder_lock = threading.Lock()
_recorder: Optional[TimeRecorder] = None


def set_time_recorder(recorder: Optional[TimeRecorder]) -> None:
    """Install (or with None, remove) the process-wide time recorder"""
    global _recorder
    with _recorder_lock:
        _recorder = recorder


def get_time_recorder() -> Optional[TimeRecorder]:
    with _recorder_lock:
        return _recorder


@contextmanager
def time_spent(operation: str) -> Iterator[None]:
    """
    Report the time spent in the wrapped block to the recorder.

    The recorder is called on success and on error alike.

    Usage:
        with time_spent("get_sdc"):
            ...
    """
    start = time.monotonic()
    try:
        yield
    finally:
        recorder = get_time_recorder()
        if recorder is not None:
            recorder(operation, time.monotonic() - start)
