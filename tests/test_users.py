# =============================================================================
# tests/test_users.py - Registration and user resource routes
# =============================================================================

import uuid

import pytest

from taskboard.models import Task, User


def _stored_user(app, email):
    with app.state.database.session() as db:
        return db.query(User).filter(User.email == email).first()


class TestRegistration:
    def test_register_success(self, client, app):
        response = client.post(
            "/users/register",
            json={"name": "Test User", "email": "test@example.com", "password": "password123"},
        )

        assert response.status_code == 201
        assert response.json() == {"message": "User registered successfully"}

        user = _stored_user(app, "test@example.com")
        assert user.name == "Test User"

    def test_password_is_stored_hashed(self, client, app):
        client.post("/users/register", json={"name": "A", "email": "a@x.com", "password": "password123"})

        user = _stored_user(app, "a@x.com")
        assert user.hashed_password != "password123"
        assert user.hashed_password.startswith("$2")

    def test_email_is_stored_lowercased(self, client, app):
        client.post("/users/register", json={"name": "A", "email": " A@X.com ", "password": "password123"})
        assert _stored_user(app, "a@x.com") is not None

    def test_duplicate_email_different_case(self, client):
        client.post("/users/register", json={"name": "A", "email": "a@x.com", "password": "password123"})
        response = client.post("/users/register", json={"name": "B", "email": "A@X.com", "password": "password123"})

        assert response.status_code == 409
        assert response.json()["error"] == "Email already registered"

    def test_extra_fields_are_ignored(self, client, app):
        response = client.post(
            "/users/register",
            json={"name": "A", "email": "a@x.com", "password": "password123", "extraField": "unexpected"},
        )

        assert response.status_code == 201
        assert not hasattr(_stored_user(app, "a@x.com"), "extraField")

    @pytest.mark.parametrize(
        "payload, error",
        [
            ({"name": "A", "email": "invalidemail", "password": "password123"}, "Invalid email format"),
            ({"name": "A", "email": "a@x.com", "password": "short"}, "Password must be at least 8 characters"),
            ({"name": "A", "email": "a@x.com"}, "All fields are required"),
            ({"name": "", "email": "a@x.com", "password": "password123"}, "All fields are required"),
            ({"name": "A", "email": 42, "password": "password123"}, "Invalid input format"),
        ],
    )
    def test_invalid_registration(self, client, payload, error):
        response = client.post("/users/register", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == error

    def test_missing_body_reports_missing_fields(self, client):
        response = client.post("/users/register")

        assert response.status_code == 400
        assert response.json()["error"] == "All fields are required"


class TestReadUsers:
    def test_get_user_excludes_password(self, client, alice):
        _, user = alice
        response = client.get(f"/users/{user['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Alice"
        assert body["email"] == "alice@x.com"
        assert "password" not in body
        assert "hashedPassword" not in body

    def test_get_missing_user(self, client):
        response = client.get(f"/users/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_get_malformed_id(self, client):
        response = client.get("/users/not-an-id")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid user ID"

    def test_list_sorted_by_name(self, client, register_and_login):
        register_and_login("User Two", "two@x.com", "password123")
        register_and_login("User One", "one@x.com", "password123")

        response = client.get("/users")

        assert response.status_code == 200
        body = response.json()
        assert [user["name"] for user in body] == ["User One", "User Two"]
        assert all("hashedPassword" not in user for user in body)

    def test_list_empty(self, client):
        response = client.get("/users")

        assert response.status_code == 200
        assert response.json() == []


class TestUpdateUser:
    def test_update_name(self, client, alice):
        headers, user = alice
        response = client.put(f"/users/{user['id']}", json={"name": "Updated Name"}, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User updated successfully"
        assert body["user"] == {"id": user["id"], "name": "Updated Name", "email": "alice@x.com"}

    def test_update_name_and_email(self, client, alice):
        headers, user = alice
        response = client.put(
            f"/users/{user['id']}",
            json={"name": "Updated Name", "email": "  Updated@Example.com"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "updated@example.com"

    def test_update_password_rehashes(self, client, app, alice):
        headers, user = alice
        before = _stored_user(app, "alice@x.com").hashed_password

        response = client.put(f"/users/{user['id']}", json={"password": "newpassword456"}, headers=headers)

        assert response.status_code == 200
        after = _stored_user(app, "alice@x.com").hashed_password
        assert after not in (before, "newpassword456")
        login = client.post("/auth/login", json={"email": "alice@x.com", "password": "newpassword456"})
        assert login.status_code == 200

    @pytest.mark.parametrize(
        "payload, error",
        [
            ({}, "No fields provided for update"),
            ({"unknown": "x"}, "No fields provided for update"),
            ({"name": ""}, "Name must be at least 1 character"),
            ({"name": "   "}, "Name must be at least 1 character"),
            ({"email": "invalidemail"}, "Invalid email format"),
            ({"password": "short"}, "Password must be at least 8 characters"),
        ],
    )
    def test_invalid_update(self, client, alice, payload, error):
        headers, user = alice
        response = client.put(f"/users/{user['id']}", json=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == error

    def test_invalid_id(self, client, alice):
        headers, _ = alice
        response = client.put("/users/invalidId", json={"name": "Updated Name"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid user ID"

    def test_missing_user(self, client, alice):
        headers, _ = alice
        response = client.put(f"/users/{uuid.uuid4()}", json={"name": "Updated Name"}, headers=headers)

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_duplicate_email(self, client, alice, bob):
        headers, user = alice
        response = client.put(f"/users/{user['id']}", json={"email": "BOB@x.com"}, headers=headers)

        assert response.status_code == 409
        assert response.json()["error"] == "Email already registered"

    def test_keeping_own_email_is_not_a_conflict(self, client, alice):
        headers, user = alice
        response = client.put(f"/users/{user['id']}", json={"email": "Alice@X.com"}, headers=headers)
        assert response.status_code == 200

    def test_requires_token(self, client, alice):
        _, user = alice
        response = client.put(f"/users/{user['id']}", json={"name": "Mallory"})
        assert response.status_code == 401

    def test_cannot_update_other_user(self, client, alice, bob):
        _, alice_user = alice
        bob_headers, _ = bob
        response = client.put(f"/users/{alice_user['id']}", json={"name": "Mallory"}, headers=bob_headers)

        assert response.status_code == 403
        assert client.get(f"/users/{alice_user['id']}").json()["name"] == "Alice"


class TestDeleteUser:
    def test_delete_user_cascades_tasks(self, client, app, alice):
        headers, user = alice
        client.post("/task", json={"title": "Orphan me"}, headers=headers)

        response = client.delete(f"/users/{user['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully"}
        assert client.get(f"/users/{user['id']}").status_code == 404
        with app.state.database.session() as db:
            assert db.query(Task).filter(Task.user_id == user["id"]).count() == 0

    def test_delete_missing_user(self, client, alice):
        headers, _ = alice
        response = client.delete(f"/users/{uuid.uuid4()}", headers=headers)

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_cannot_delete_other_user(self, client, alice, bob):
        _, alice_user = alice
        bob_headers, _ = bob
        response = client.delete(f"/users/{alice_user['id']}", headers=bob_headers)

        assert response.status_code == 403
        assert client.get(f"/users/{alice_user['id']}").status_code == 200
