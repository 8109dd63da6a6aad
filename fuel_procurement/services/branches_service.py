from __future__ import annotations

import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import ConflictError, NotFoundError, ValidationError
from fuel_procurement.core.retry import run_read
from fuel_procurement.db.tx import commit
from fuel_procurement.models.branch import Branch
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.audit_service import AuditAction, AuditService


class BranchService:
    def __init__(self):
        self.audit = AuditService()

    def create(self, db: Session, *, actor: Principal, name: str, location: str = "") -> Branch:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Branch name is required.")

        existing = db.execute(select(Branch).where(Branch.name == name)).scalar_one_or_none()
        if existing:
            raise ConflictError(f"Branch '{name}' already exists.")

        row = Branch(id=uuid.uuid4(), name=name, location=(location or "").strip())
        db.add(row)
        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.BRANCH_CREATED,
            entity="branch",
            entity_id=row.id,
            details={"name": row.name, "location": row.location},
        )
        try:
            commit(db, op="branch.create")
        except IntegrityError:
            raise ConflictError(f"Branch '{name}' already exists.")
        db.refresh(row)
        return row

    def get(self, db: Session, branch_id: uuid.UUID) -> Branch:
        row = db.get(Branch, branch_id)
        if not row:
            raise NotFoundError("Branch not found.")
        return row

    def list(self, db: Session) -> List[Branch]:
        return run_read(
            db,
            lambda: list(db.execute(select(Branch).order_by(Branch.name.asc())).scalars().all()),
            op="branch.list",
        )
