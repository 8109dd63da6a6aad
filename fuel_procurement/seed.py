import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from fuel_procurement.core.security import create_access_token
from fuel_procurement.db.session import SessionLocal
from fuel_procurement.models.branch import Branch
from fuel_procurement.models.enums import FuelType, UserRole
from fuel_procurement.models.fuel_budget import FuelBudget
from fuel_procurement.models.user import SupplierProfile, User


def token_for(user: User) -> str:
    claims = {"role": user.role, "display_name": user.display_name}
    if user.branch_id:
        claims["branch_id"] = str(user.branch_id)
    return create_access_token(str(user.id), claims)


def _user(db: Session, *, username: str, role: UserRole, display_name: str, branch_id=None) -> User:
    existing = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if existing:
        return existing
    user = User(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@example.com",
        display_name=display_name,
        role=role.value,
        branch_id=branch_id,
    )
    db.add(user)
    return user


def seed():
    db: Session = SessionLocal()
    now = datetime.now(timezone.utc)

    branch = db.execute(select(Branch).where(Branch.name == "Main Street")).scalar_one_or_none()
    if not branch:
        branch = Branch(id=uuid.uuid4(), name="Main Street", location="Downtown")
        db.add(branch)

    users = [
        _user(db, username="admin", role=UserRole.ADMIN, display_name="Procurement Admin"),
        _user(
            db,
            username="manager",
            role=UserRole.BRANCH_MANAGER,
            display_name="Main Street Manager",
            branch_id=branch.id,
        ),
    ]
    for n, price in ((1, "1150.00"), (2, "1180.00")):
        supplier = _user(db, username=f"supplier{n}", role=UserRole.SUPPLIER, display_name=f"Supplier {n}")
        if supplier.profile is None:
            supplier.profile = SupplierProfile(
                contact_details=f"+1-555-010{n}",
                certification="ISO 9001",
                performance_history="",
                price_per_liter=Decimal(price),
            )
        users.append(supplier)

    for fuel_type, amount in ((FuelType.Petrol, "2000000"), (FuelType.Diesel, "1500000")):
        exists = db.execute(
            select(FuelBudget).where(FuelBudget.fuel_type == fuel_type.value)
        ).scalar_one_or_none()
        if not exists:
            db.add(FuelBudget(fuel_type=fuel_type.value, budget=Decimal(amount), updated_at=now))

    db.commit()

    for user in users:
        print(f"{user.role:<15} {user.username:<10} {token_for(user)}")

    db.close()


if __name__ == "__main__":
    seed()
