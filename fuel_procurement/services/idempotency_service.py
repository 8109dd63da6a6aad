from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import ConflictError
from fuel_procurement.core.hashing import canonical_hash, json_safe
from fuel_procurement.db.tx import commit
from fuel_procurement.models.idempotency_key import IdempotencyKeyRecord

logger = logging.getLogger(__name__)


class IdempotencyService:
    def get_existing(
        self,
        db: Session,
        *,
        user_id: uuid.UUID,
        endpoint_key: str,
        idem_key: str,
    ) -> Optional[IdempotencyKeyRecord]:
        return db.execute(
            select(IdempotencyKeyRecord).where(
                IdempotencyKeyRecord.user_id == user_id,
                IdempotencyKeyRecord.endpoint_key == endpoint_key,
                IdempotencyKeyRecord.idem_key == idem_key,
            )
        ).scalar_one_or_none()

    def reserve_or_replay(
        self,
        db: Session,
        *,
        user_id: uuid.UUID,
        endpoint_key: str,
        idem_key: str,
        request_payload: Dict[str, Any],
    ) -> Tuple[Optional[Dict[str, Any]], Optional[int], str]:
        """
        Returns (replay_json, replay_status_code, request_hash).
        If a record exists:
          - same request hash => replay the stored response
          - different hash => ConflictError
        """
        req_hash = canonical_hash(request_payload)
        existing = self.get_existing(
            db, user_id=user_id, endpoint_key=endpoint_key, idem_key=idem_key
        )
        if not existing:
            return None, None, req_hash

        if existing.request_hash != req_hash:
            raise ConflictError(
                "Idempotency-Key reuse with a different payload is not allowed.",
                code="idempotency_key_reused",
            )
        return existing.response_json, int(existing.response_status), req_hash

    def store_response(
        self,
        db: Session,
        *,
        user_id: uuid.UUID,
        endpoint_key: str,
        idem_key: str,
        request_hash: str,
        response_json: Dict[str, Any],
        response_status: int,
    ) -> None:
        if self.get_existing(db, user_id=user_id, endpoint_key=endpoint_key, idem_key=idem_key):
            # already stored (or replayed). Do not overwrite.
            return

        db.add(
            IdempotencyKeyRecord(
                user_id=user_id,
                endpoint_key=endpoint_key,
                idem_key=idem_key,
                request_hash=request_hash,
                response_status=response_status,
                response_json=json_safe(response_json),
            )
        )
        try:
            commit(db, op="idempotency.store")
        except IntegrityError:
            # a concurrent request with the same key stored first
            logger.info("idempotency record for %s already stored", endpoint_key)
