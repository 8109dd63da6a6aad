from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from fuel_procurement.core.config import get_settings
from fuel_procurement.core.errors import PersistenceUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (OperationalError, PoolTimeoutError)


def run_read(
    db: Session,
    fn: Callable[[], T],
    *,
    op: str,
    attempts: Optional[int] = None,
    delay_seconds: Optional[float] = None,
) -> T:
    """
    Runs a read-only unit of work, retrying transient persistence failures.

    Only reads go through here. Mutations are never retried; the caller
    has to resubmit explicitly.
    """
    settings = get_settings()
    attempts = attempts or settings.read_retry_attempts
    delay = settings.read_retry_delay_seconds if delay_seconds is None else delay_seconds

    last_exc: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except TRANSIENT_ERRORS as exc:
            last_exc = exc
            db.rollback()
            logger.warning(
                "read %s failed (attempt %s/%s): %s", op, attempt, attempts, exc.__class__.__name__
            )
            if attempt < attempts:
                time.sleep(delay * attempt)

    logger.error("read %s gave up after %s attempts", op, attempts)
    raise PersistenceUnavailableError(f"Storage unavailable while running {op}.") from last_exc
