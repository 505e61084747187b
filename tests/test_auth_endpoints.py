"""
API tests for registration and login.

Tests the authentication endpoints end to end on an in-memory database,
including the error envelope produced by the exception handlers.
"""

from fastapi import status

from conftest import STRONG_PASSWORD


def admin_payload(**overrides):
    payload = {
        "role": "admin",
        "username": "newadmin",
        "email": "newadmin@example.com",
        "password": STRONG_PASSWORD,
        "wallet_address": "NewAdminWa11et",
    }
    payload.update(overrides)
    return payload


def voter_payload(**overrides):
    payload = {
        "role": "voter",
        "username": "newvoter",
        "email": "newvoter@example.com",
        "password": STRONG_PASSWORD,
        "wallet_address": "NewVoterWa11et",
        "national_id": "1234567890",
        "issue_date": "2019-03-14",
    }
    payload.update(overrides)
    return payload


class TestRegistrationEndpoint:
    """POST /api/v1/auth/register"""

    def test_register_admin(self, client):
        response = client.post("/api/v1/auth/register", json=admin_payload())

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["role"] == "admin"
        assert data["user"]["email"] == "newadmin@example.com"
        assert data["user"]["voter_id"] is None
        assert "hashed_password" not in data["user"]

    def test_register_voter(self, client):
        response = client.post("/api/v1/auth/register", json=voter_payload())

        assert response.status_code == status.HTTP_201_CREATED
        user = response.json()["user"]
        assert user["role"] == "voter"
        assert user["voter_id"].startswith("VID-")
        assert user["is_eligible"] is True
        assert "national_id" not in user

    def test_register_duplicate_email(self, client, voter):
        response = client.post("/api/v1/auth/register", json=admin_payload(email=voter.email))

        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["error_code"] == "DUPLICATE_RESOURCE"
        assert body["message"] == "Email is already registered"
        assert body["path"] == "/api/v1/auth/register"
        assert body["timestamp"]
        assert body["request_id"]

    def test_register_weak_password(self, client):
        response = client.post("/api/v1/auth/register", json=admin_payload(password="password"))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert response.json()["field"] == "password"

    def test_register_invalid_email(self, client):
        response = client.post("/api/v1/auth/register", json=admin_payload(email="invalid-email"))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["errors"]

    def test_register_voter_missing_national_id(self, client):
        payload = voter_payload()
        del payload["national_id"]

        response = client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_unknown_role(self, client):
        response = client.post("/api/v1/auth/register", json=admin_payload(role="superuser"))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestLoginEndpoint:
    """POST /api/v1/auth/login and /api/v1/auth/token"""

    def test_admin_login(self, client, admin):
        response = client.post("/api/v1/auth/login", json={
            "role": "admin", "email": admin.email, "password": STRONG_PASSWORD
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["id"] == admin.id

    def test_admin_login_wrong_password(self, client, admin):
        response = client.post("/api/v1/auth/login", json={
            "role": "admin", "email": admin.email, "password": "Wr0ngPass!"
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Invalid credentials"
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"

    def test_voter_login(self, client, voter):
        response = client.post("/api/v1/auth/login", json={
            "role": "voter", "voter_id": voter.voter_id, "national_id": "1000000001", "issue_date": "2020-05-17"
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["voter_id"] == voter.voter_id

    def test_voter_login_wrong_issue_date(self, client, voter):
        response = client.post("/api/v1/auth/login", json={
            "role": "voter", "voter_id": voter.voter_id, "national_id": "1000000001", "issue_date": "2020-05-18"
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Invalid credentials"

    def test_login_token_is_usable(self, client, voter):
        response = client.post("/api/v1/auth/login", json={
            "role": "voter", "voter_id": voter.voter_id, "national_id": "1000000001", "issue_date": "2020-05-17"
        })
        token = response.json()["access_token"]

        profile = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert profile.status_code == status.HTTP_200_OK
        assert profile.json()["voter_id"] == voter.voter_id

    def test_oauth2_token_form(self, client, admin):
        response = client.post("/api/v1/auth/token", data={"username": admin.email, "password": STRONG_PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["token_type"] == "bearer"

    def test_oauth2_token_form_bad_password(self, client, admin):
        response = client.post("/api/v1/auth/token", data={"username": admin.email, "password": "nope"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
