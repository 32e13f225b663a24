"""
Shared fixtures for the API tests.

Each test gets a fresh app wired to an in-memory Mongo database, plus helpers
to seed users, vehicles and services through the same data access functions
the routes use.
"""

import asyncio
import unittest

from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from bodyshop.core.config import Settings
from bodyshop.main import create_app
from bodyshop.models import bookings as booking_model
from bodyshop.models import services as service_model
from bodyshop.models import user as user_model
from bodyshop.models import vehicles as vehicle_model
from bodyshop.utils.auth_utils import create_access_token
from bodyshop.utils.hash_utils import hash_password


def run(coro):
    return asyncio.run(coro)


class ApiTestCase(unittest.TestCase):
    """Base class: self.client, self.db and seeding helpers."""

    def setUp(self):
        self.settings = Settings(
            JWT_SECRET_KEY="test-secret",
            ADMIN_EMAIL="owner@bodyshop.com",
            ADMIN_PASSWORD="owner-password",
            ENVIRONMENT="test",
            LOG_LEVEL="WARNING",
        )
        self.db = AsyncMongoMockClient()["bodyshop_test"]
        self.app = create_app(self.settings, database=self.db)
        self.client = TestClient(self.app)

    # -----------------------------
    # Seeding
    # -----------------------------
    def make_user(self, email: str, role: str = "client", password: str = "password123") -> dict:
        user_id = run(user_model.create_user(self.db, {
            "email": email,
            "password": hash_password(password),
            "first_name": email.split("@")[0].title(),
            "last_name": "Tester",
            "role": role,
        }))
        token = create_access_token(
            {"id": user_id, "email": email, "role": role}, self.app.state.jwt_config
        )
        return {"id": user_id, "email": email, "role": role, "token": token}

    def auth(self, user: dict) -> dict:
        return {"Authorization": f"Bearer {user['token']}"}

    def make_vehicle(self, owner: dict, plate: str = "AB12 CDE") -> dict:
        return run(vehicle_model.create_vehicle(self.db, {
            "user_id": owner["id"],
            "make": "Ford",
            "model": "Focus",
            "year": 2018,
            "color": "Blue",
            "license_plate": plate,
        }))

    def make_service(self, name: str, duration_minutes: int, price: float, **extra) -> dict:
        return run(service_model.create_service(self.db, {
            "name": name,
            "description": None,
            "duration_minutes": duration_minutes,
            "price": price,
            "category_id": None,
            "is_active": True,
            **extra,
        }))

    def get_booking(self, booking_id: int) -> dict:
        return run(booking_model.get_booking(self.db, booking_id))

    def set_status(self, booking_id: int, status: str):
        run(booking_model.update_booking(self.db, booking_id, {"status": status}))

    def book(self, user: dict, vehicle: dict, services, date="2030-05-06", time="09:00", **extra):
        return self.client.post(
            "/api/bookings",
            json={
                "vehicle_id": vehicle["id"],
                "service_ids": [s["id"] for s in services],
                "scheduled_date": date,
                "scheduled_time": time,
                **extra,
            },
            headers=self.auth(user),
        )
