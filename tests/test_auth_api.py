from datetime import timedelta

from bodyshop.utils.auth_utils import create_access_token, create_refresh_token
from tests.helpers import ApiTestCase


class TestAuth(ApiTestCase):

    def register(self, email="jane@example.com", password="password123", **extra):
        payload = {"email": email, "password": password, "first_name": "Jane", "last_name": "Doe", **extra}
        return self.client.post("/api/auth/register", json=payload)

    def login(self, email="jane@example.com", password="password123"):
        return self.client.post("/api/auth/login", json={"email": email, "password": password})

    def test_register_and_login(self):
        response = self.register(phone="07700 900123")
        self.assertEqual(response.status_code, 201)
        self.assertIn("user_id", response.json())

        tokens = self.login().json()
        self.assertEqual(tokens["role"], "client")
        self.assertEqual(tokens["token_type"], "bearer")

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["email"], "jane@example.com")
        self.assertEqual(me.json()["phone"], "07700 900123")
        self.assertNotIn("password", me.json())

    def test_duplicate_email(self):
        self.register()
        response = self.register()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "User already exists")

    def test_short_password_is_rejected(self):
        response = self.register(password="short")
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.json()["fields"])

    def test_password_longer_than_72_bytes_is_rejected(self):
        # 40 characters, 80 bytes once encoded
        response = self.register(password="é" * 40)
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.json()["fields"])

        self.assertEqual(self.register(password="é" * 36).status_code, 201)

    def test_wrong_password(self):
        self.register()
        self.assertEqual(self.login(password="wrong-password").status_code, 401)
        self.assertEqual(self.login(email="nobody@example.com").status_code, 401)

    def test_configured_owner_becomes_admin(self):
        self.register(email="owner@bodyshop.com", password="owner-password")
        self.assertEqual(self.login("owner@bodyshop.com", "owner-password").json()["role"], "admin")

    def test_owner_email_with_other_password_is_a_client(self):
        self.register(email="owner@bodyshop.com", password="not-the-password")
        self.assertEqual(self.login("owner@bodyshop.com", "not-the-password").json()["role"], "client")

    def test_refresh_issues_new_pair(self):
        self.register()
        tokens = self.login().json()

        response = self.client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        self.assertEqual(response.status_code, 200)
        self.assertIn("access_token", response.json())

    def test_refresh_rejects_access_token(self):
        self.register()
        tokens = self.login().json()
        response = self.client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
        self.assertEqual(response.status_code, 401)

    def test_refresh_token_is_not_an_access_token(self):
        user = self.make_user("jane@example.com")
        token = create_refresh_token({"id": user["id"], "email": user["email"], "role": "client"}, self.app.state.jwt_config)
        response = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)

    def test_invalid_and_expired_tokens(self):
        self.assertEqual(
            self.client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code, 401
        )

        expired = create_access_token(
            {"id": 1, "email": "a@b.com", "role": "client"},
            self.app.state.jwt_config,
            expires_delta=timedelta(minutes=-5),
        )
        response = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Token has expired")

    def test_missing_token(self):
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)


class TestRoleManagement(ApiTestCase):

    def test_admin_promotes_client(self):
        admin = self.make_user("admin@bodyshop.com", role="admin")
        client = self.make_user("mike@example.com")

        response = self.client.patch(
            f"/api/auth/users/{client['id']}/role", json={"role": "staff"}, headers=self.auth(admin)
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "staff")

        # the new role shows up on the next refresh
        refresh = create_refresh_token(
            {"id": client["id"], "email": client["email"], "role": "client"}, self.app.state.jwt_config
        )
        tokens = self.client.post("/api/auth/refresh", json={"refresh_token": refresh}).json()
        self.assertEqual(tokens["role"], "staff")

    def test_only_admins_change_roles(self):
        staff = self.make_user("staff@bodyshop.com", role="staff")
        client = self.make_user("mike@example.com")
        response = self.client.patch(
            f"/api/auth/users/{client['id']}/role", json={"role": "admin"}, headers=self.auth(staff)
        )
        self.assertEqual(response.status_code, 403)

    def test_unknown_role_and_user(self):
        admin = self.make_user("admin@bodyshop.com", role="admin")
        self.assertEqual(
            self.client.patch("/api/auth/users/99/role", json={"role": "staff"}, headers=self.auth(admin)).status_code,
            404,
        )
        self.assertEqual(
            self.client.patch(f"/api/auth/users/{admin['id']}/role", json={"role": "owner"}, headers=self.auth(admin)).status_code,
            400,
        )

    def test_role_change_is_audited(self):
        admin = self.make_user("admin@bodyshop.com", role="admin")
        client = self.make_user("mike@example.com")
        self.client.patch(f"/api/auth/users/{client['id']}/role", json={"role": "staff"}, headers=self.auth(admin))

        logs = self.client.get("/api/audit-logs?table_name=users", headers=self.auth(admin)).json()
        self.assertEqual(logs["pagination"]["total"], 1)
        entry = logs["audit_logs"][0]
        self.assertEqual(entry["record_id"], client["id"])
        self.assertEqual(entry["old_values"], {"role": "client"})
        self.assertEqual(entry["new_values"], {"role": "staff"})

    def test_audit_log_is_admin_only(self):
        staff = self.make_user("staff@bodyshop.com", role="staff")
        self.assertEqual(self.client.get("/api/audit-logs", headers=self.auth(staff)).status_code, 403)
