import time
from functools import wraps
from typing import Callable, Dict, Any, Optional

from loguru import logger

from medspa_seeder.config.settings import OverpassSettings
from medspa_seeder.utils.errors import EndpointExhausted, TransportFailure


def log_action(fn):
    """
    Decorator for logging:
      - INFO at start/end (with elapsed time)
      - DEBUG of the action name and the context keys
      - a short result hint for sequences
    """

    @wraps(fn)
    def wrapped(self, *args, **kwargs):
        agent = getattr(self, "name", fn.__qualname__)
        action = args[0] if args and isinstance(args[0], str) else fn.__name__

        logger.info(f"{agent}.{action}")

        ctx = kwargs.get("context") or (args[1] if len(args) > 1 else None)
        if isinstance(ctx, dict):
            logger.debug(f"{agent}.{action} context_keys={list(ctx.keys())}")

        start = time.time()
        result = fn(self, *args, **kwargs)
        elapsed = time.time() - start

        hint = ""
        if isinstance(result, (list, tuple)):
            hint = f" (count={len(result)})"

        logger.info(f"{agent}.{action}: in {elapsed:.2f}s{hint}")
        return result

    return wrapped


def with_retry(
    fn: Callable[..., Dict[str, Any]],
    settings: Optional[OverpassSettings] = None,
):
    """
    Decorator that calls fn(endpoint, *args, **kwargs) against each configured
    endpoint in order, retrying `TransportFailure` up to `max_attempts` times
    per endpoint with a linear backoff (`base_delay * attempt`).

    Raises `EndpointExhausted` with the last failure once every endpoint is spent.
    """
    settings = settings or OverpassSettings()

    @wraps(fn)
    def wrapped(*args, **kwargs):
        last_error: Optional[TransportFailure] = None
        endpoints = list(settings.endpoints)

        for position, endpoint in enumerate(endpoints, start=1):
            for attempt in range(1, settings.max_attempts + 1):
                try:
                    logger.info(f"Overpass -> {endpoint} (attempt {attempt})")
                    return fn(endpoint, *args, **kwargs)
                except TransportFailure as e:
                    last_error = e
                    logger.warning(
                        f"Overpass failed ({endpoint}) attempt {attempt}: {e}"
                    )
                final = position == len(endpoints) and attempt == settings.max_attempts
                if not final:
                    time.sleep(settings.base_delay * attempt)

        raise EndpointExhausted(
            f"All {len(endpoints)} Overpass endpoints failed after "
            f"{settings.max_attempts} attempts each: {last_error}",
            last_error=last_error,
        ) from last_error

    return wrapped
