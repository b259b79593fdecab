"""
Seed script: one company with a driver linked under two ids, plus a few
deliveries for today. Prints bearer tokens for local testing.
Run from the project root: python -m scripts.seed
"""
import asyncio
import sys
import os
from datetime import datetime, timedelta

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from delivery_api.database import AsyncSessionLocal
from delivery_api.models.company import Company
from delivery_api.models.user import User
from delivery_api.models.driver import Driver, Vehicle
from delivery_api.models.delivery import Delivery
from delivery_api.models.route import Route, RouteDelivery
from delivery_api.services.auth_service import create_access_token

# ---------- Fixed ids ----------

COMPANY_ID = 1

USER_ADMIN_ID = 1
USER_SUPERVISOR_ID = 2
USER_DRIVER_ANA_ID = 16
USER_DRIVER_DAVI_ID = 17

DRIVER_ANA_ID = 101
DRIVER_DAVI_ID = 102

VEHICLE_ID = 1
ROUTE_ID = 1


async def seed():
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Company).where(Company.id == COMPANY_ID))
        if result.scalar_one_or_none():
            print("Seed data already exists. Skipping.")
            return

        db.add(Company(id=COMPANY_ID, name="ID Transportes", cnpj="12345678000190"))
        await db.flush()

        # --- Users ---
        db.add_all([
            User(id=USER_ADMIN_ID, company_id=COMPANY_ID, username="admin",
                 email="admin@idtransportes.com.br", full_name="Carla Admin", user_type="ADMIN"),
            User(id=USER_SUPERVISOR_ID, company_id=COMPANY_ID, username="supervisor",
                 full_name="Bruno Supervisor", user_type="SUPERVISOR"),
            User(id=USER_DRIVER_ANA_ID, company_id=COMPANY_ID, username="ana",
                 full_name="Ana Motorista", user_type="DRIVER"),
            User(id=USER_DRIVER_DAVI_ID, company_id=COMPANY_ID, username="davi",
                 full_name="Davi Motorista", user_type="DRIVER"),
        ])
        await db.flush()

        # --- Drivers and fleet ---
        db.add_all([
            Driver(id=DRIVER_ANA_ID, user_id=USER_DRIVER_ANA_ID, company_id=COMPANY_ID,
                   cnh="01234567890", phone_number="+55 11 90000-0016"),
            Driver(id=DRIVER_DAVI_ID, user_id=USER_DRIVER_DAVI_ID, company_id=COMPANY_ID,
                   cnh="09876543210", phone_number="+55 11 90000-0017"),
            Vehicle(id=VEHICLE_ID, company_id=COMPANY_ID, plate="ABC1D23", model="Fiorino"),
        ])
        await db.flush()

        # --- Deliveries: driver_id deliberately mixes both id spaces ---
        now = datetime.utcnow()
        db.add_all([
            Delivery(id=5, company_id=COMPANY_ID, driver_id=DRIVER_ANA_ID, nf_number="000005",
                     client_name_extracted="Mercado Bom Preco", status="IN_TRANSIT",
                     created_by_user_id=USER_SUPERVISOR_ID, created_at=now),
            Delivery(id=6, company_id=COMPANY_ID, driver_id=DRIVER_DAVI_ID, nf_number="000006",
                     client_name_extracted="Farmacia Central", status="PENDING",
                     created_by_user_id=USER_SUPERVISOR_ID, created_at=now),
            Delivery(id=7, company_id=COMPANY_ID, driver_id=USER_DRIVER_ANA_ID, nf_number="000007",
                     client_name_extracted="Padaria Sao Jorge", status="PENDING",
                     created_by_user_id=USER_DRIVER_ANA_ID, created_at=now),
            Delivery(id=8, company_id=COMPANY_ID, driver_id=DRIVER_ANA_ID, nf_number="000008",
                     client_name_extracted="Loja Estrela", status="PENDING",
                     created_by_user_id=USER_SUPERVISOR_ID, created_at=now - timedelta(days=1)),
        ])
        await db.flush()

        db.add(Route(id=ROUTE_ID, company_id=COMPANY_ID, driver_id=DRIVER_ANA_ID,
                     vehicle_id=VEHICLE_ID, route_date=now.date()))
        await db.flush()
        db.add_all([
            RouteDelivery(route_id=ROUTE_ID, delivery_note_id=5, sequence=1),
            RouteDelivery(route_id=ROUTE_ID, delivery_note_id=7, sequence=2),
        ])

        await db.commit()
        print("Seed data inserted successfully!")
        print("  Companies: 1")
        print("  Users: 4 (admin, supervisor, 2 drivers)")
        print("  Deliveries: 4")
        print()
        for label, user_id, role, name in [
            ("admin", USER_ADMIN_ID, "ADMIN", "Carla Admin"),
            ("driver ana", USER_DRIVER_ANA_ID, "DRIVER", "Ana Motorista"),
        ]:
            token = create_access_token(user_id, COMPANY_ID, role, full_name=name)
            print(f"  {label}: Bearer {token}")


if __name__ == "__main__":
    asyncio.run(seed())
