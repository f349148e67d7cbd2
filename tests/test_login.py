"""
Tests for the POST /api/login endpoint.

Tests cover:
- Every pre-created account logs in
- Wrong password / unknown user (401)
- Malformed bodies treated as failed logins (401)
"""

import pytest

from message_board.auth import USERS, CredentialStore


class TestLoginSuccess:
    """Test login with valid credentials."""

    def test_login_success(self, client):
        """Test the documented account logs in."""
        response = client.post("/api/login", json={"username": "User A", "password": "Pwd&1234"})

        assert response.status_code == 200
        assert response.text == "Login Successful"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.parametrize("username,password", sorted(USERS.items()))
    def test_all_registered_users(self, client, username, password):
        """Test every registered account logs in with its own password."""
        response = client.post("/api/login", json={"username": username, "password": password})

        assert response.status_code == 200


class TestLoginFailure:
    """Test login with invalid credentials."""

    def test_wrong_password(self, client):
        """Test wrong password returns 401 with rejection text."""
        response = client.post("/api/login", json={"username": "User A", "password": "wrong"})

        assert response.status_code == 401
        assert response.text == "Invalid credentials"

    def test_unknown_user(self, client):
        response = client.post("/api/login", json={"username": "User C", "password": "Pwd&1234"})

        assert response.status_code == 401

    def test_username_is_case_sensitive(self, client):
        response = client.post("/api/login", json={"username": "user a", "password": "Pwd&1234"})

        assert response.status_code == 401

    def test_password_is_case_sensitive(self, client):
        response = client.post("/api/login", json={"username": "User A", "password": "pwd&1234"})

        assert response.status_code == 401

    def test_password_is_not_trimmed(self, client):
        response = client.post("/api/login", json={"username": "User A", "password": " Pwd&1234 "})

        assert response.status_code == 401


class TestLoginMalformed:
    """Malformed input is a failed verification, never a 4xx of another kind."""

    def test_missing_password(self, client):
        response = client.post("/api/login", json={"username": "User A"})

        assert response.status_code == 401

    def test_missing_username(self, client):
        response = client.post("/api/login", json={"password": "Pwd&1234"})

        assert response.status_code == 401

    def test_empty_object(self, client):
        response = client.post("/api/login", json={})

        assert response.status_code == 401

    def test_invalid_json(self, client):
        response = client.post(
            "/api/login",
            content="not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 401

    def test_non_string_fields(self, client):
        response = client.post("/api/login", json={"username": 1, "password": 2})

        assert response.status_code == 401

    def test_body_is_a_list(self, client):
        response = client.post("/api/login", json=["User A", "Pwd&1234"])

        assert response.status_code == 401

    def test_deeply_nested_json(self, client):
        """Nesting past the decoder's recursion limit is a failed login, not a crash."""
        response = client.post(
            "/api/login",
            content="[" * 100000,
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 401
        assert response.text == "Invalid credentials"


class TestCredentialStore:
    """Unit tests for the credential lookup."""

    def test_verify_match(self):
        assert CredentialStore().verify("Administrator", "Pwd&1234") is True

    def test_verify_mismatch(self):
        assert CredentialStore().verify("Administrator", "Pwd&12345") is False

    def test_verify_none(self):
        store = CredentialStore()
        assert store.verify(None, "Pwd&1234") is False
        assert store.verify("User B", None) is False

    def test_verify_non_ascii_password(self):
        assert CredentialStore().verify("User B", "Pwd&1234é") is False

    def test_custom_table(self):
        store = CredentialStore({"alice": "secret"})
        assert store.verify("alice", "secret") is True
        assert store.verify("User A", "Pwd&1234") is False

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            USERS["intruder"] = "x"
