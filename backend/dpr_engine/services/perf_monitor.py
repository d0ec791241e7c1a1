"""Call timing for the engine entry points (predict, run_simulation, ...)."""
import functools
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger("dpr-engine.perf")

DEFAULT_SLOW_MS = 500.0


def timed(func: Optional[Callable] = None, *, slow_ms: float = DEFAULT_SLOW_MS):
    """
    Log how long the wrapped call took.

    DEBUG for every call, WARNING once a call runs past ``slow_ms``. Usable
    bare or configured::

        @timed
        def run_simulation(...): ...

        @timed(slow_ms=2000)
        def run_comprehensive_analysis(...): ...
    """
    def decorate(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
                level = logging.WARNING if elapsed_ms > slow_ms else logging.DEBUG
                logger.log(
                    level,
                    f"{fn.__qualname__} took {elapsed_ms:.2f} ms",
                    extra={"function": fn.__qualname__, "duration_ms": elapsed_ms},
                )
        return wrapper

    if func is not None:
        return decorate(func)
    return decorate
