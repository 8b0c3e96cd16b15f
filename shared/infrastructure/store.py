"""Helpers around the relational store: locking, error translation, read retries."""

from __future__ import annotations

import functools
import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from django.conf import settings  # type: ignore
from django.db import InterfaceError, OperationalError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_ERRORS = (OperationalError, InterfaceError)


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise driver level failures (timeouts, lost connections) as StoreUnavailable."""
    try:
        yield
    except STORE_ERRORS as exc:
        logger.error(f"Store call failed: {exc}", exc_info=True)
        raise StoreUnavailable() from exc


def retry_read(func: Callable[..., T]) -> Callable[..., T]:
    """
    Retry a read-only callable on StoreUnavailable.

    Only pure reads are decorated; writes are never retried because a
    timed-out write may still have committed.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        attempts = max(1, getattr(settings, "BOOKING_READ_RETRIES", 3))
        delay = getattr(settings, "BOOKING_READ_RETRY_DELAY", 0.1)
        for attempt in range(1, attempts + 1):
            try:
                with translate_store_errors():
                    return func(*args, **kwargs)
            except StoreUnavailable:
                if attempt == attempts:
                    raise
                logger.warning(f"{func.__name__}: store unavailable, retry {attempt}/{attempts - 1}")
                time.sleep(delay * attempt)
        raise StoreUnavailable()  # pragma: no cover

    return wrapper
