from tests.helpers import ApiTestCase


class TestServices(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self.make_user("admin@bodyshop.com", role="admin")
        self.client_user = self.make_user("client@example.com")

    def test_public_listing_hides_inactive(self):
        self.make_service("Dent repair", 30, 120.0, category_id=1)
        self.make_service("Paint", 45, 250.0, category_id=2)
        self.make_service("Retired", 30, 10.0, is_active=False)

        body = self.client.get("/api/services").json()
        self.assertEqual(body["pagination"]["total"], 2)
        self.assertNotIn("Retired", [s["name"] for s in body["services"]])

        paint_only = self.client.get("/api/services?category_id=2").json()["services"]
        self.assertEqual([s["name"] for s in paint_only], ["Paint"])

    def test_get_service(self):
        service = self.make_service("Dent repair", 30, 120.0)
        response = self.client.get(f"/api/services/{service['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["duration_minutes"], 30)
        self.assertEqual(self.client.get("/api/services/999").status_code, 404)

    def test_admin_creates_service(self):
        payload = {"name": "Bumper refit", "duration_minutes": 90, "price": 180.0}

        self.assertEqual(
            self.client.post("/api/services", json=payload, headers=self.auth(self.client_user)).status_code, 403
        )
        response = self.client.post("/api/services", json=payload, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["is_active"])

    def test_duration_must_be_positive(self):
        response = self.client.post(
            "/api/services",
            json={"name": "Nothing", "duration_minutes": 0, "price": 1.0},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 400)

    def test_update_service(self):
        service = self.make_service("Dent repair", 30, 120.0)
        response = self.client.put(
            f"/api/services/{service['id']}", json={"price": 135.0}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["price"], 135.0)
        self.assertEqual(response.json()["duration_minutes"], 30)

    def test_delete_blocked_once_booked(self):
        service = self.make_service("Dent repair", 30, 120.0)
        vehicle = self.make_vehicle(self.client_user)
        self.book(self.client_user, vehicle, [service])

        response = self.client.delete(f"/api/services/{service['id']}", headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 409)

        unused = self.make_service("Polish", 60, 80.0)
        self.assertEqual(
            self.client.delete(f"/api/services/{unused['id']}", headers=self.auth(self.admin)).status_code, 200
        )


class TestCategories(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self.make_user("admin@bodyshop.com", role="admin")
        self.staff = self.make_user("staff@bodyshop.com", role="staff")

    def create_category(self, name="Paintwork", description="Spraying and colour matching"):
        return self.client.post(
            "/api/services/categories",
            json={"name": name, "description": description},
            headers=self.auth(self.admin),
        )

    def test_create_and_list(self):
        response = self.create_category()
        self.assertEqual(response.status_code, 201)
        self.create_category("Bodywork", "Dents, panels and frames")

        categories = self.client.get("/api/services/categories").json()["categories"]
        self.assertEqual([c["name"] for c in categories], ["Bodywork", "Paintwork"])

    def test_only_admin_manages_categories(self):
        response = self.client.post(
            "/api/services/categories",
            json={"name": "Paintwork", "description": "Spraying and colour matching"},
            headers=self.auth(self.staff),
        )
        self.assertEqual(response.status_code, 403)

    def test_validation_and_duplicates(self):
        self.assertEqual(self.create_category(name="P").status_code, 400)
        self.assertEqual(self.create_category(description="short").status_code, 400)

        self.create_category()
        self.assertEqual(self.create_category().status_code, 409)

    def test_update(self):
        category = self.create_category().json()["category"]
        path = f"/api/services/categories/{category['id']}"

        response = self.client.put(path, json={"name": "Paint & finish"}, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["category"]["name"], "Paint & finish")
        self.assertEqual(response.json()["category"]["description"], "Spraying and colour matching")

        self.assertEqual(self.client.put(path, json={}, headers=self.auth(self.admin)).status_code, 400)
        self.assertEqual(
            self.client.put("/api/services/categories/99", json={"name": "Other"}, headers=self.auth(self.admin)).status_code,
            404,
        )

    def test_delete_blocked_while_services_use_it(self):
        category = self.create_category().json()["category"]
        service = self.make_service("Panel respray", 45, 250.0, category_id=category["id"])
        path = f"/api/services/categories/{category['id']}"

        self.assertEqual(self.client.delete(path, headers=self.auth(self.admin)).status_code, 409)

        self.client.delete(f"/api/services/{service['id']}", headers=self.auth(self.admin))
        self.assertEqual(self.client.delete(path, headers=self.auth(self.admin)).status_code, 200)
        self.assertEqual(self.client.get("/api/services/categories").json()["categories"], [])

    def test_service_needs_existing_category(self):
        payload = {"name": "Bumper refit", "duration_minutes": 90, "price": 180.0, "category_id": 42}
        response = self.client.post("/api/services", json=payload, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 404)

        category = self.create_category().json()["category"]
        payload["category_id"] = category["id"]
        response = self.client.post("/api/services", json=payload, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["category_id"], category["id"])
