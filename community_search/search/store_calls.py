"""
Run blocking content-store calls on the worker pool with a time budget.
"""

import asyncio
from concurrent.futures import Executor
from typing import Any, Callable
import logging

from community_search.common.outcome import Outcome
from .errors import ConfigurationError, StoreTimeoutError, UpstreamQueryError

logger = logging.getLogger("search")


async def call_store(
    executor: Executor,
    func: Callable[..., Any],
    *args,
    timeout: float,
    source: str,
    default: Any = None,
    propagate_configuration: bool = True
) -> Outcome:
    """
    Call ``func(*args)`` on ``executor`` and wrap the result in an Outcome.

    Timeouts and query failures come back as degraded outcomes carrying
    ``default``. A ConfigurationError is re-raised unless
    ``propagate_configuration`` is False, in which case it degrades too.

    Args:
        executor: Worker pool for the blocking call
        func: Store method
        timeout: Seconds before the call is abandoned
        source: Label used in logs and on the outcome
        default: Value carried by a degraded outcome

    Returns:
        Outcome with status ok or degraded
    """
    loop = asyncio.get_running_loop()

    try:
        value = await asyncio.wait_for(
            loop.run_in_executor(executor, lambda: func(*args)),
            timeout=timeout
        )
        return Outcome.ok(value, source)

    except ConfigurationError as e:
        if propagate_configuration:
            raise
        logger.warning(f"{source}: store unavailable, degrading: {e}")
        return Outcome.degraded(default, str(e), source)

    except asyncio.TimeoutError:
        error = StoreTimeoutError(f"{source} timed out after {timeout}s")
        logger.warning(f"{source}: {error.message}")
        return Outcome.degraded(default, error.message, source)

    except UpstreamQueryError as e:
        logger.warning(f"{source}: store query failed, degrading: {e}")
        return Outcome.degraded(default, str(e), source)

    except Exception as e:
        logger.error(f"{source}: unexpected store error: {e}", exc_info=True)
        return Outcome.degraded(default, str(e), source)
