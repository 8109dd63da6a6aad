from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from enum import Enum
from typing import Any, Dict
from uuid import UUID
from datetime import date, datetime


def json_safe(value: Any) -> Any:
    """
    Convert a payload into a JSON-safe structure.
    Decimals become strings to preserve precision.
    """
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


def canonical_dumps(obj: Dict[str, Any]) -> str:
    # Deterministic JSON string: sorted keys, no whitespace
    return json.dumps(
        json_safe(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def canonical_hash(payload: Dict[str, Any]) -> str:
    """
    SHA-256 of canonical JSON representation.
    Same logical payload always yields the same digest.
    """
    return sha256_hex(canonical_dumps(payload))
