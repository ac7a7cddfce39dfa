"""Tests for the /api/admin user management routes."""

PASSWORD = "correct horse battery"


class TestListUsers:
    def test_admin_lists_users(self, client, admin_headers, sign_up):
        sign_up(email="carol@example.com", display_name="Carol")

        response = client.get("/api/admin/users", headers=admin_headers)

        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["data"]}
        assert emails == {"admin@example.com", "carol@example.com"}

    def test_standard_user_forbidden(self, client, auth_headers):
        response = client.get("/api/admin/users", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"

    def test_unauthenticated(self, client):
        assert client.get("/api/admin/users").status_code == 401


class TestProvisionUser:
    def test_provision_with_generated_password(self, client, admin_headers):
        response = client.post(
            "/api/admin/users",
            headers=admin_headers,
            json={"email": "hire@example.com", "displayName": "New Hire"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["email"] == "hire@example.com"
        assert data["initialPassword"]

        signin = client.post(
            "/api/auth/signin", json={"email": "hire@example.com", "password": data["initialPassword"]}
        )
        assert signin.status_code == 200

    def test_provision_with_role_label(self, client, admin_headers):
        response = client.post(
            "/api/admin/users",
            headers=admin_headers,
            json={"email": "lead@example.com", "displayName": "Lead", "role": "admin", "password": PASSWORD},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["role"] == "admin"
        assert "initialPassword" not in data

    def test_provision_duplicate(self, client, admin_headers):
        response = client.post(
            "/api/admin/users",
            headers=admin_headers,
            json={"email": "admin@example.com", "displayName": "Again"},
        )
        assert response.status_code == 400

    def test_standard_user_forbidden(self, client, auth_headers):
        response = client.post(
            "/api/admin/users",
            headers=auth_headers,
            json={"email": "sneaky@example.com", "displayName": "Sneaky"},
        )
        assert response.status_code == 403


class TestSetRole:
    def test_promote(self, client, admin_headers, sign_up):
        user, _ = sign_up(email="carol@example.com", display_name="Carol")

        response = client.put(
            f"/api/admin/users/{user['id']}/role", headers=admin_headers, json={"role": "Administrator"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "admin"

    def test_invalid_role(self, client, admin_headers, sign_up):
        user, _ = sign_up(email="carol@example.com", display_name="Carol")
        response = client.put(
            f"/api/admin/users/{user['id']}/role", headers=admin_headers, json={"role": "owner"}
        )
        assert response.status_code == 400

    def test_unknown_user(self, client, admin_headers):
        response = client.put(
            "/api/admin/users/00000000-0000-0000-0000-00000000ffff/role",
            headers=admin_headers,
            json={"role": "user"},
        )
        assert response.status_code == 404

    def test_cannot_demote_self(self, client, sign_up):
        admin, token = sign_up(email="admin@example.com", display_name="Admin")
        response = client.put(
            f"/api/admin/users/{admin['id']}/role",
            headers={"Authorization": f"Bearer {token}"},
            json={"role": "user"},
        )
        assert response.status_code == 400


class TestSetActive:
    def test_deactivate_blocks_user(self, client, admin_headers, sign_up):
        user, token = sign_up(email="carol@example.com", display_name="Carol")

        response = client.put(
            f"/api/admin/users/{user['id']}/active", headers=admin_headers, json={"active": False}
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["isActive"] is False
        assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
        signin = client.post("/api/auth/signin", json={"email": "carol@example.com", "password": PASSWORD})
        assert signin.status_code == 401

    def test_reactivate(self, client, admin_headers, sign_up):
        user, _ = sign_up(email="carol@example.com", display_name="Carol")
        client.put(f"/api/admin/users/{user['id']}/active", headers=admin_headers, json={"active": False})

        response = client.put(
            f"/api/admin/users/{user['id']}/active", headers=admin_headers, json={"active": True}
        )

        assert response.status_code == 200
        signin = client.post("/api/auth/signin", json={"email": "carol@example.com", "password": PASSWORD})
        assert signin.status_code == 200


class TestStatistics:
    def test_admin_dashboard(self, client, admin_headers, auth_headers):
        client.post("/api/contacts", headers=auth_headers, json={"firstName": "Ada", "lastName": "Lovelace"})
        client.post(
            "/api/deals",
            headers=auth_headers,
            json={"dealName": "Engines", "stage": "Order Won", "dealValue": 42000},
        )
        client.post("/api/deals", headers=auth_headers, json={"dealName": "Pipeline", "dealValue": 1000})
        client.post(
            "/api/activities",
            headers=auth_headers,
            json={"activityType": "Call", "dateTime": "2025-03-10T09:30:00Z", "outcomeDisposition": "Voicemail"},
        )

        response = client.get("/api/admin/statistics", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["summary"] == {
            "totalUsers": 2,
            "totalContacts": 1,
            "totalAccounts": 0,
            "totalLeads": 0,
            "totalDeals": 2,
            "totalActivities": 1,
            "wonDeals": 1,
            "totalDealValue": 42000,
        }
        [activity] = data["recentActivities"]
        assert activity["activityType"] == "Call"
        assert activity["outcome"] == "Voicemail"
        assert {u["email"] for u in data["userStats"]} == {"admin@example.com", "bob@example.com"}
        assert {"id", "name", "role", "joinedAt"} <= set(data["userStats"][0])

    def test_standard_user_forbidden(self, client, auth_headers):
        response = client.get("/api/admin/statistics", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"

    def test_unauthenticated(self, client):
        assert client.get("/api/admin/statistics").status_code == 401
