from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import PersistenceUnavailableError

logger = logging.getLogger(__name__)


def commit(db: Session, *, op: str) -> None:
    """
    Commits the unit of work or rolls it back.

    IntegrityError is re-raised so the caller can map the violated
    constraint to a domain error. Transient failures become
    PersistenceUnavailableError; mutations are not retried here.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except (OperationalError, PoolTimeoutError) as exc:
        db.rollback()
        logger.error("commit %s failed: %s", op, exc.__class__.__name__)
        raise PersistenceUnavailableError(f"Storage unavailable while running {op}.") from exc
    except SQLAlchemyError:
        db.rollback()
        raise
