"""
Seed the database with one user per role, a few organizations, and orders
covering every status so each hub stage has something to show.

Run from the backend/ directory:
    python scripts/seed_orders.py
"""
import asyncio
import os
import sys
from datetime import date, datetime, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from database import async_session, init_db
from db_models import Organization, User
from domain.enums import OrderStatus, UserRole
from services import order_service, user_service

ORGANIZATIONS = ["Lincoln High Wrestling", "Eastside Rugby Club", "Summit Volleyball"]

# (order name, status, extra fields, age in days)
ORDERS = [
    ("Spring singlets", OrderStatus.NEW, {}, 2),
    ("Stale warmups", OrderStatus.NEW, {}, 21),
    ("Travel hoodies", OrderStatus.WAITING_SIZES, {}, 5),
    ("Practice tees", OrderStatus.WAITING_SIZES, {"sizes_validated": True}, 6),
    ("Fan shirts", OrderStatus.DESIGN_CREATED, {"design_approved": True}, 8),
    ("Team polos", OrderStatus.SIZES_VALIDATED, {"sizes_validated": True}, 9),
    ("Game jerseys", OrderStatus.INVOICED, {"invoice_url": "https://invoices.example/1001"}, 12),
    ("Rush shorts", OrderStatus.PRODUCTION, {"priority": "high"}, 15),
    ("Coach jackets", OrderStatus.SHIPPED, {"tracking_number": "1Z999AA10123456784"}, 30),
    ("Banquet shirts", OrderStatus.COMPLETED, {"deposit_received": True}, 60),
    ("Cancelled caps", OrderStatus.CANCELLED, {}, 40),
]


async def seed():
    await init_db()
    async with async_session() as db:
        users = {}
        for role in UserRole:
            users[role.value] = await user_service.ensure_test_user(db, role=role.value)

        existing = await db.execute(select(Organization))
        orgs = list(existing.scalars().all())
        if not orgs:
            orgs = [Organization(name=name) for name in ORGANIZATIONS]
            db.add_all(orgs)
            await db.flush()

        salesperson: User = users[UserRole.SALES.value]
        now = datetime.utcnow()
        for i, (name, status, extra, age_days) in enumerate(ORDERS):
            order = await order_service.create_order(
                db,
                fields={
                    "order_name": name,
                    "status": status,
                    "org_id": orgs[i % len(orgs)].id,
                    "salesperson_id": salesperson.id,
                    "est_delivery": date.today() + timedelta(days=21 - age_days),
                    **extra,
                },
            )
            order.created_at = now - timedelta(days=age_days)

        await db.commit()
    print(f"Seeded {len(ORDERS)} orders across {len(ORGANIZATIONS)} organizations")


if __name__ == "__main__":
    asyncio.run(seed())
