"""HTTP tests for registration, login and profile."""

import pytest
from fastapi.testclient import TestClient

from food_ordering.main import create_app
from food_ordering.security.identity import Role

from tests.conftest import USER_PASSWORD, auth_header, make_settings


class TestRegister:
    def test_valid_registration(self, client, registration):
        response = client.post("/api/auth/register", json=registration)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["token"]
        assert body["user"]["username"] == "john_doe"
        assert body["user"]["fullName"] == "John Doe"
        assert body["user"]["role"] == "user"
        assert body["user"]["isAdmin"] is False
        assert "password" not in body["user"]
        assert "passwordDigest" not in body["user"]

    def test_token_identifies_new_user(self, client, app, registration):
        token = client.post("/api/auth/register", json=registration).json()["token"]
        identity = app.state.token_service.verify(token)
        assert identity.username == "john_doe"
        assert identity.role == Role.USER

    def test_invalid_email(self, client, registration):
        registration["email"] = "invalid-email"
        response = client.post("/api/auth/register", json=registration)
        assert response.status_code == 400
        assert response.json() == {"errors": ["Invalid email format"]}

    def test_all_errors_reported(self, client):
        response = client.post("/api/auth/register", json={"username": "bad name", "password": "123"})
        assert response.status_code == 400
        assert response.json()["errors"] == [
            "Email is required",
            "FullName is required",
            "Phone is required",
            "Address is required",
            "Password must be at least 6 characters long",
            "Password cannot be only numbers",
            "Username contains invalid characters and can only contain "
            "letters, numbers, and underscores",
        ]

    def test_admin_flag_in_body_is_ignored(self, client, registration):
        registration["isAdmin"] = True
        registration["role"] = "admin"
        response = client.post("/api/auth/register", json=registration)
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "user"

    def test_duplicate_username(self, client, registration):
        client.post("/api/auth/register", json=registration)
        registration["email"] = "other@example.com"
        response = client.post("/api/auth/register", json=registration)
        assert response.status_code == 400
        assert response.json() == {"message": "Username already taken"}

    def test_duplicate_email(self, client, registration):
        client.post("/api/auth/register", json=registration)
        registration["username"] = "john_two"
        registration["email"] = "JOHN@example.com"
        response = client.post("/api/auth/register", json=registration)
        assert response.status_code == 400
        assert response.json() == {"message": "Email already registered"}

    def test_script_is_stripped_before_storage(self, client, registration):
        registration["fullName"] = "John <script>alert(1)</script>Doe"
        response = client.post("/api/auth/register", json=registration)
        assert response.status_code == 201
        assert response.json()["user"]["fullName"] == "John Doe"

    def test_lenient_mode(self, registration):
        del registration["phone"]
        del registration["address"]
        app = create_app(make_settings(registration_mode="lenient"))
        with TestClient(app) as client:
            response = client.post("/api/auth/register", json=registration)
        assert response.status_code == 201

    def test_non_object_body(self, client):
        response = client.post("/api/auth/register", json=["john_doe"])
        assert response.status_code == 400
        assert response.json() == {"errors": ["Request body must be a JSON object"]}

    def test_malformed_json(self, client):
        response = client.post(
            "/api/auth/register",
            content=b'{"username": ',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "errors" in response.json()


class TestLogin:
    def test_login_success(self, client, registration, user_token):
        response = client.post(
            "/api/auth/login",
            json={"username": "john_doe", "password": USER_PASSWORD},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"]["email"] == "john@example.com"
        assert body["token"]

    def test_wrong_password(self, client, user_token):
        response = client.post("/api/auth/login", json={"username": "john_doe", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid username or password"}

    def test_unknown_user_looks_like_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid username or password"}

    def test_missing_fields(self, client):
        response = client.post("/api/auth/login", json={})
        assert response.status_code == 400
        assert response.json() == {"errors": ["Username is required", "Password is required"]}

    def test_sixth_attempt_is_rate_limited(self, client):
        credentials = {"username": "ghost", "password": "wrong-password"}
        statuses = [client.post("/api/auth/login", json=credentials).status_code for _ in range(5)]
        assert statuses == [401] * 5

        response = client.post("/api/auth/login", json=credentials)
        assert response.status_code == 429
        assert response.json() == {"error": "Too many login attempts, please try again later."}
        assert int(response.headers["retry-after"]) > 0
        assert response.headers["x-frame-options"] == "DENY"

    def test_limit_counts_successful_logins_too(self, client, user_token):
        credentials = {"username": "john_doe", "password": USER_PASSWORD}
        for _ in range(5):
            assert client.post("/api/auth/login", json=credentials).status_code == 200
        assert client.post("/api/auth/login", json=credentials).status_code == 429

    def test_register_is_not_login_limited(self, client, registration):
        for i in range(7):
            registration.update(username=f"user_{i}", email=f"user{i}@example.com")
            assert client.post("/api/auth/register", json=registration).status_code == 201


class TestProfile:
    def test_get_profile(self, client, user_token):
        response = client.get("/api/auth/profile", headers=auth_header(user_token))
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "john_doe"

    def test_missing_token(self, client):
        response = client.get("/api/auth/profile")
        assert response.status_code == 401
        assert response.json() == {"error": "Access token required"}

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Token abc"])
    def test_non_bearer_authorization_counts_as_missing(self, client, header):
        response = client.get("/api/auth/profile", headers={"Authorization": header})
        assert response.status_code == 401
        assert response.json() == {"error": "Access token required"}

    def test_lowercase_scheme_is_accepted(self, client, user_token):
        response = client.get(
            "/api/auth/profile", headers={"Authorization": f"bearer {user_token}"}
        )
        assert response.status_code == 200

    def test_token_for_deleted_user(self, client, app):
        token = app.state.token_service.issue(999, "ghost", Role.USER)
        response = client.get("/api/auth/profile", headers=auth_header(token))
        assert response.status_code == 403
        assert response.json() == {"error": "Invalid or expired token"}

    def test_update_profile(self, client, user_token):
        response = client.put(
            "/api/auth/profile",
            headers=auth_header(user_token),
            json={"fullName": "Johnny Doe", "phone": "+15550001111", "email": "x@evil.test"},
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["fullName"] == "Johnny Doe"
        assert user["phone"] == "+15550001111"
        assert user["address"] == "123 Main St"
        assert user["email"] == "john@example.com"

    def test_update_profile_validation(self, client, user_token):
        response = client.put(
            "/api/auth/profile",
            headers=auth_header(user_token),
            json={"fullName": "", "phone": "abc"},
        )
        assert response.status_code == 400
        assert response.json() == {
            "errors": ["FullName is required", "Invalid phone number format"]
        }
