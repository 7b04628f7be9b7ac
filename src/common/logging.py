import logging
import time
from functools import wraps
from typing import Callable

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Sets up a logger with a standard format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger

def set_level(level: str):
    """
    Applies a textual level (DEBUG, INFO, ...) to every control logger.
    """
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("src."):
            logging.getLogger(name).setLevel(numeric)

def log_execution_time(logger: logging.Logger, slow_ms: float = 100.0):
    """
    Decorator that times a call in milliseconds.

    Durations are logged at DEBUG; a call slower than `slow_ms` is logged at
    WARNING so an overrunning scheduler tick shows up at the default level.
    Failures are logged with their duration and re-raised.
    """
    def decorator(func: Callable):
        name = func.__qualname__

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed_ms = (time.monotonic() - start) * 1000
                logger.error(f"{name} failed after {elapsed_ms:.1f}ms: {e}", exc_info=True)
                raise
            elapsed_ms = (time.monotonic() - start) * 1000
            if elapsed_ms > slow_ms:
                logger.warning(f"{name} took {elapsed_ms:.1f}ms (over {slow_ms:.0f}ms)")
            else:
                logger.debug(f"{name} took {elapsed_ms:.1f}ms")
            return result
        return wrapper
    return decorator
